"""Static field types of destination classes.

Supports dataclasses and Pydantic models. Field types are read from the
class annotations once, at codec build time; loading only consults the
resulting FieldType objects.
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache, partial
from typing import Annotated, Any, Callable, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ValidationError

from record_map.core.enums import Kind
from record_map.core.exceptions import FieldNotSettableError
from record_map.core.types import ZERO_TIME, FloatWidth, GeoPoint, IntWidth, Key


def is_pydantic_model(cls: Any) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and get_origin(cls) is None and issubclass(cls, BaseModel)


def is_struct_type(cls: Any) -> bool:
    """True for classes the engine can map field by field."""
    if cls in (datetime, GeoPoint, Key):
        return False
    if is_pydantic_model(cls):
        return True
    return isinstance(cls, type) and get_origin(cls) is None and dataclasses.is_dataclass(cls)


@dataclass(frozen=True)
class FieldType:
    """Resolved static type of one destination field."""

    kind: Kind
    name: str
    bits: int = 64
    elem: FieldType | None = None  # pointee or list element
    struct: type | None = None

    @property
    def int_min(self) -> int:
        return IntWidth(self.bits).min

    @property
    def int_max(self) -> int:
        return IntWidth(self.bits).max

    @property
    def float_max(self) -> float:
        return FloatWidth(self.bits).max

    def struct_type(self) -> type | None:
        """The structure class reached through pointers and lists, if any."""
        ft: FieldType | None = self
        while ft is not None:
            if ft.kind is Kind.STRUCT:
                return ft.struct
            if ft.kind not in (Kind.POINTER, Kind.SLICE):
                return None
            ft = ft.elem
        return None


_SCALARS: dict[Any, tuple[Kind, str]] = {
    bool: (Kind.BOOL, "bool"),
    str: (Kind.STRING, "str"),
    bytes: (Kind.BYTES, "bytes"),
    datetime: (Kind.TIME, "datetime"),
    GeoPoint: (Kind.GEO_POINT, "GeoPoint"),
    Key: (Kind.KEY, "Key"),
}


def analyze(annotation: Any) -> FieldType:
    """Resolve a type annotation into a FieldType."""
    origin = get_origin(annotation)

    if origin is Annotated:
        base, *extras = get_args(annotation)
        ft = analyze(base)
        for extra in extras:
            if isinstance(extra, IntWidth) and ft.kind is Kind.INT:
                return FieldType(Kind.INT, f"int{extra.bits}", bits=extra.bits)
            if isinstance(extra, FloatWidth) and ft.kind is Kind.FLOAT:
                return FieldType(Kind.FLOAT, f"float{extra.bits}", bits=extra.bits)
        return ft

    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            return FieldType(Kind.OPAQUE, str(annotation))
        elem = analyze(args[0])
        return FieldType(Kind.POINTER, f"{elem.name} | None", elem=elem)

    if origin is list:
        args = get_args(annotation)
        if not args:
            return FieldType(Kind.OPAQUE, "list")
        elem = analyze(args[0])
        return FieldType(Kind.SLICE, f"list[{elem.name}]", elem=elem)

    if annotation in _SCALARS:
        kind, name = _SCALARS[annotation]
        return FieldType(kind, name)
    if annotation is int:
        return FieldType(Kind.INT, "int")
    if annotation is float:
        return FieldType(Kind.FLOAT, "float")
    if is_struct_type(annotation):
        return FieldType(Kind.STRUCT, annotation.__name__, struct=annotation)

    return FieldType(Kind.OPAQUE, getattr(annotation, "__name__", str(annotation)))


def declared_fields(cls: type, tag_key: str) -> list[tuple[str, Any, str | None]]:
    """List ``(attribute, annotation, tag)`` for a class, in declaration order."""
    if is_pydantic_model(cls):
        result = []
        for name, info in cls.model_fields.items():
            annotation = info.annotation
            # Pydantic moves Annotated metadata off the annotation
            widths = [m for m in info.metadata if isinstance(m, (IntWidth, FloatWidth))]
            if widths:
                annotation = Annotated[(annotation, *widths)]
            extra = info.json_schema_extra
            tag = extra.get(tag_key) if isinstance(extra, dict) else None
            result.append((name, annotation, tag))
        return result

    hints = get_type_hints(cls, include_extras=True)
    return [
        (f.name, hints.get(f.name, f.type), f.metadata.get(tag_key))
        for f in dataclasses.fields(cls)
    ]


# --- Zero values and assignment ---


def zero_value(ft: FieldType) -> Any:
    """The value a field of this type holds before anything is loaded."""
    kind = ft.kind
    if kind is Kind.INT:
        return 0
    if kind is Kind.FLOAT:
        return 0.0
    if kind is Kind.BOOL:
        return False
    if kind is Kind.STRING:
        return ""
    if kind is Kind.BYTES:
        return b""
    if kind is Kind.TIME:
        return ZERO_TIME
    if kind is Kind.GEO_POINT:
        return GeoPoint()
    if kind is Kind.SLICE:
        return []
    if kind is Kind.STRUCT and ft.struct is not None:
        return new_struct(ft.struct)
    return None


@lru_cache(maxsize=None)
def _zero_plan(cls: type) -> tuple[tuple[str, Callable[[], Any]], ...]:
    """Per-class ``(attribute, factory)`` pairs used by new_struct."""
    plan: list[tuple[str, Callable[[], Any]]] = []
    if is_pydantic_model(cls):
        for name, info in cls.model_fields.items():
            if info.is_required():
                plan.append((name, partial(zero_value, analyze(info.annotation))))
            else:
                plan.append((name, partial(info.get_default, call_default_factory=True)))
        return tuple(plan)

    hints = get_type_hints(cls, include_extras=True)
    for f in dataclasses.fields(cls):
        if f.default is not dataclasses.MISSING:
            plan.append((f.name, partial(_same, f.default)))
        elif f.default_factory is not dataclasses.MISSING:
            plan.append((f.name, f.default_factory))
        else:
            plan.append((f.name, partial(zero_value, analyze(hints.get(f.name, f.type)))))
    return tuple(plan)


def _same(value: Any) -> Any:
    return value


def new_struct(cls: type) -> Any:
    """Create an instance without calling ``__init__``.

    Fields take their declared default when they have one, else the zero
    value of their type.
    """
    values = {name: make() for name, make in _zero_plan(cls)}
    if is_pydantic_model(cls):
        return cls.model_construct(**values)
    instance = cls.__new__(cls)
    for name, value in values.items():
        object.__setattr__(instance, name, value)
    return instance


def set_field(owner: Any, attr: str, value: Any) -> None:
    """Assign a field, going around frozen dataclasses and models.

    Raises:
        FieldNotSettableError: If the owner refuses the assignment.
    """
    if is_pydantic_model(type(owner)) and owner.model_config.get("frozen"):
        object.__setattr__(owner, attr, value)
        return
    try:
        setattr(owner, attr, value)
    except dataclasses.FrozenInstanceError:
        object.__setattr__(owner, attr, value)
    except (AttributeError, TypeError, ValidationError) as e:
        raise FieldNotSettableError(f"cannot set struct field: {e}") from e
