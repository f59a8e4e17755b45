"""Assignment of one dynamic value to one statically typed field."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Callable

from record_map.core.enums import Kind
from record_map.core.exceptions import (
    FieldOverflowError,
    KeyParseError,
    TypeMismatchError,
    UnsupportedFieldError,
)
from record_map.core.types import GeoPoint, InvalidKey, Key, PropertyList, value_type_name
from record_map.mapping.fieldtype import FieldType, new_struct, zero_value

# Loads a nested record into a structure instance
NestedLoader = Callable[[Any, PropertyList], None]


def _mismatch(value: Any, ft: FieldType) -> TypeMismatchError:
    return TypeMismatchError(value_type_name(value), ft.name)


def coerce(value: Any, ft: FieldType, current: Any, load_nested: NestedLoader) -> Any:
    """Return the value to store in a field of type ``ft``.

    ``current`` is what the field holds now; it is returned unchanged for
    ``None`` values and loaded into for nested records.

    Raises:
        TypeMismatchError: The value kind does not fit the field.
        FieldOverflowError: The number does not fit the field's width.
        UnsupportedFieldError: A nested record targets a field without a
            declared shape.
        KeyParseError: The value is a key that failed to parse.
        FieldMismatchError: A nested record failed to load.
    """
    if isinstance(value, InvalidKey):
        raise KeyParseError(value.detail)

    kind = ft.kind
    if value is None and kind is not Kind.STRUCT:
        return current

    if kind is Kind.INT:
        # bool is an int subclass but a different wire kind
        if isinstance(value, bool) or not isinstance(value, int):
            raise _mismatch(value, ft)
        if not ft.int_min <= value <= ft.int_max:
            raise FieldOverflowError(value, ft.name)
        return value

    if kind is Kind.FLOAT:
        if not isinstance(value, float):
            raise _mismatch(value, ft)
        if math.isfinite(value) and abs(value) > ft.float_max:
            raise FieldOverflowError(value, ft.name)
        return value

    if kind is Kind.BOOL:
        if not isinstance(value, bool):
            raise _mismatch(value, ft)
        return value

    if kind is Kind.STRING:
        if not isinstance(value, str):
            raise _mismatch(value, ft)
        return value

    if kind is Kind.BYTES:
        if not isinstance(value, bytes):
            raise _mismatch(value, ft)
        return value

    if kind is Kind.TIME:
        if not isinstance(value, datetime):
            raise _mismatch(value, ft)
        return value

    if kind is Kind.GEO_POINT:
        if not isinstance(value, GeoPoint):
            raise _mismatch(value, ft)
        return value

    if kind is Kind.KEY:
        if not isinstance(value, Key):
            raise _mismatch(value, ft)
        return value

    if kind is Kind.POINTER:
        elem = ft.elem
        if elem is None:
            raise _mismatch(value, ft)
        if elem.kind is Kind.KEY:
            if not isinstance(value, Key):
                raise _mismatch(value, ft)
            return value
        return coerce(value, elem, zero_value(elem), load_nested)

    if kind is Kind.STRUCT:
        if ft.struct is None or not isinstance(value, PropertyList):
            raise _mismatch(value, ft)
        target = current if isinstance(current, ft.struct) else new_struct(ft.struct)
        load_nested(target, value)
        return target

    if kind is Kind.OPAQUE and isinstance(value, PropertyList):
        raise UnsupportedFieldError()

    raise _mismatch(value, ft)
