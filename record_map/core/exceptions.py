"""record_map exception hierarchy.

Per-field load failures are raised inside a single property load and
collected by the loader; callers only ever see the aggregate
FieldMismatchError.
"""

from __future__ import annotations

from typing import Any


class RecordMapError(Exception):
    """Base exception for all record_map errors."""


# --- Codec ---


class CodecError(RecordMapError):
    """Base for codec construction errors."""


class CodecBuildError(CodecError):
    """Raised when a destination type declares an unusable field layout."""

    def __init__(self, struct_type: type, detail: str) -> None:
        self.struct_type = struct_type
        super().__init__(f"Cannot build codec for {struct_type.__name__}: {detail}")


# --- Load ---


class LoadError(RecordMapError):
    """Base for load errors.

    The message of a per-field subclass is the human-readable reason that
    ends up in FieldMismatchError.reason.
    """

    reason: str = ""

    def __init__(self, reason: str | None = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class FieldNotFoundError(LoadError):
    """The property name (or a dot-path segment) has no codec entry."""

    reason = "no such struct field"


class FieldNotSettableError(LoadError):
    """The resolved field cannot be written to."""

    reason = "cannot set struct field"


class MultiValueRequiresSliceError(LoadError):
    """A second value arrived for a field that is not a list."""

    reason = "multiple-valued property requires a slice field type"


class TypeMismatchError(LoadError):
    """The dynamic value kind does not fit the field's declared type."""

    def __init__(self, value_type: str, field_type: str) -> None:
        self.value_type = value_type
        self.field_type = field_type
        super().__init__(f"type mismatch: {value_type} versus {field_type}")


class FieldOverflowError(LoadError):
    """A numeric value does not fit the field's declared width."""

    def __init__(self, value: Any, field_type: str) -> None:
        self.value = value
        self.field_type = field_type
        super().__init__(f"value {value!r} overflows struct field of type {field_type}")


class UnsupportedFieldError(LoadError):
    """A nested record targets a field that has no declared shape."""

    reason = "unsupported struct field: value is unaddressable"


class KeyParseError(LoadError):
    """A wire key could not be turned into a valid Key."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"invalid key: {detail}")


class FieldMismatchError(LoadError):
    """Raised after a load pass in which at least one property failed.

    The destination has still been populated with every property that could
    be loaded; only the last failing field is named.
    """

    def __init__(self, struct_type: type, field_name: str, reason: str) -> None:
        self.struct_type = struct_type
        self.field_name = field_name
        super().__init__(
            f'record_map: cannot load field "{field_name}" into a '
            f'"{struct_type.__name__}": {reason}'
        )
        self.reason = reason


# --- Save ---


class SaveError(RecordMapError):
    """Raised when a value cannot be turned into a wire value."""

    def __init__(self, field_name: str, detail: str) -> None:
        self.field_name = field_name
        super().__init__(f"Cannot save field '{field_name}': {detail}")


# --- Mapping ---


class MappingError(RecordMapError):
    """Base for mapper front-end errors."""


class RecordMismatchError(MappingError):
    """Raised by RecordMapper when a record does not fit the target class.

    ``partial`` holds the best-effort populated instance.
    """

    def __init__(self, target_class: str, detail: str, partial: Any = None) -> None:
        self.target_class = target_class
        self.partial = partial
        super().__init__(f"Cannot map to {target_class}: {detail}")
