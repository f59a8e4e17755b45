"""Save direction - the mirror of the loader.

Nested structures are saved as nested records, lists as repeated values
and ``None`` pointers as null.
"""

from __future__ import annotations

from typing import Any

from record_map.core.config import LoaderConfig
from record_map.core.convert import KEY_PROPERTY, properties_to_entity
from record_map.core.enums import Kind
from record_map.core.exceptions import SaveError
from record_map.core.types import Key, Property, PropertyList
from record_map.core.wire import Entity
from record_map.mapping.codec import get_codec
from record_map.mapping.fieldtype import FieldType
from record_map.mapping.protocol import PropertyLoadSaver


def _to_dynamic(name: str, value: Any, ft: FieldType, config: LoaderConfig | None) -> Any:
    if value is None:
        return None
    kind = ft.kind
    if kind is Kind.STRUCT:
        return PropertyList(save_struct(value, config))
    if kind is Kind.POINTER and ft.elem is not None:
        return _to_dynamic(name, value, ft.elem, config)
    if kind is Kind.SLICE and ft.elem is not None:
        if ft.elem.kind is Kind.SLICE:
            raise SaveError(name, "nested arrays are not supported")
        return [_to_dynamic(name, item, ft.elem, config) for item in value]
    return value


def save_struct(src: Any, config: LoaderConfig | None = None) -> list[Property]:
    """Turn a dataclass or Pydantic model instance into properties.

    Raises:
        CodecBuildError: If ``src`` is not a mappable instance.
        SaveError: For list-of-list fields.
    """
    if isinstance(src, PropertyLoadSaver):
        return list(src.save())
    codec = get_codec(type(src), config)
    return [
        Property(
            name=descriptor.name,
            value=_to_dynamic(
                descriptor.name, getattr(src, descriptor.attr), descriptor.field_type, config
            ),
            no_index=descriptor.no_index,
        )
        for descriptor in codec.fields
    ]


def save_entity(key: Key | None, src: Any, config: LoaderConfig | None = None) -> Entity:
    """Turn an instance into a wire record with the given key.

    Raises:
        SaveError: If a value has no wire form.
    """
    properties = [p for p in save_struct(src, config) if p.name != KEY_PROPERTY]
    return properties_to_entity(properties, key)
