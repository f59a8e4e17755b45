"""Property loader.

Loads an ordered property list into a destination instance in a single
pass. A property that cannot be loaded does not stop the pass: the
failure is remembered and the remaining properties are still loaded, so a
destination can be a narrower view of a richer record. One
FieldMismatchError naming the last failing property is raised at the end.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from record_map.core.config import DEFAULT_CONFIG, LoaderConfig
from record_map.core.convert import KEY_PROPERTY, convert_key, entity_to_properties
from record_map.core.enums import Kind
from record_map.core.exceptions import FieldMismatchError, LoadError, MultiValueRequiresSliceError
from record_map.core.types import Property, PropertyList
from record_map.core.wire import Entity
from record_map.mapping.codec import Codec, get_codec
from record_map.mapping.coerce import coerce
from record_map.mapping.fieldtype import new_struct, set_field, zero_value
from record_map.mapping.protocol import PropertyLoadSaver
from record_map.mapping.resolve import resolve_target

logger = logging.getLogger(__name__)


@dataclass
class _Failure:
    name: str
    error: LoadError


class PropertyLoader:
    """Per-call loader state.

    Tracks the next list index for every repeated property name. A new
    loader is used for every load call, including nested records.
    """

    def __init__(self, config: LoaderConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        self._cursors: dict[str, int] = {}

    def load(self, codec: Codec, dst: Any, prop: Property, seen: set[str]) -> None:
        """Load one property, expanding repeated values.

        Raises:
            LoadError: If the property, or one of its values, cannot be loaded.
        """
        value = prop.value
        if isinstance(value, list) and not isinstance(value, PropertyList):
            for element in value:
                self._load_one(codec, dst, dataclasses.replace(prop, value=element), seen)
            return
        self._load_one(codec, dst, prop, seen)

    def _load_one(self, codec: Codec, dst: Any, prop: Property, seen: set[str]) -> None:
        if prop.name == KEY_PROPERTY and codec.resolve(KEY_PROPERTY) is None:
            return

        target = resolve_target(codec, dst, prop.name, self._cursors)
        owner = target.owner
        descriptor = target.descriptor
        ft = descriptor.field_type

        if ft.kind is Kind.SLICE:
            items = getattr(owner, descriptor.attr)
            if items is None:
                items = []
                set_field(owner, descriptor.attr, items)
            index = self._cursors.get(target.cursor, 0)
            self._cursors[target.cursor] = index + 1
            while len(items) <= index:
                items.append(zero_value(ft.elem))
            seen.add(prop.name)
            try:
                items[index] = coerce(prop.value, ft.elem, items[index], self._load_nested)
            except LoadError:
                set_field(owner, descriptor.attr, [])
                raise
            return

        if prop.name in seen and not target.via_slice:
            # A second value with nowhere to go: clear the first one too
            set_field(owner, descriptor.attr, zero_value(ft))
            raise MultiValueRequiresSliceError()
        seen.add(prop.name)

        current = getattr(owner, descriptor.attr)
        if (
            ft.kind is Kind.STRUCT
            and isinstance(prop.value, PropertyList)
            and not isinstance(current, ft.struct)  # type: ignore[arg-type]
        ):
            # Allocate first so a failing nested load leaves partial data behind
            current = new_struct(ft.struct)  # type: ignore[arg-type]
            set_field(owner, descriptor.attr, current)
        set_field(owner, descriptor.attr, coerce(prop.value, ft, current, self._load_nested))

    def _load_nested(self, dst: Any, properties: PropertyList) -> None:
        load_struct(dst, properties, self._config)


def _load(codec: Codec, dst: Any, properties: list[Property], config: LoaderConfig) -> None:
    loader = PropertyLoader(config)
    seen: set[str] = set()
    failure: _Failure | None = None
    for p in properties:
        try:
            loader.load(codec, dst, p, seen)
        except LoadError as e:
            logger.debug(
                "Cannot load property %r into %s: %s", p.name, type(dst).__name__, e
            )
            failure = _Failure(p.name, e)
    if failure is not None:
        raise FieldMismatchError(type(dst), failure.name, str(failure.error)) from failure.error


def load_struct(
    dst: Any,
    properties: list[Property],
    config: LoaderConfig | None = None,
) -> None:
    """Load properties into a dataclass or Pydantic model instance.

    Every property that fits is loaded even when others fail.

    Raises:
        CodecBuildError: If ``dst`` is not a mappable instance.
        FieldMismatchError: If any property could not be loaded.
    """
    config = config or DEFAULT_CONFIG
    codec = get_codec(type(dst), config)
    _load(codec, dst, properties, config)


def load_entity(dst: Any, entity: Entity, config: LoaderConfig | None = None) -> None:
    """Load a wire record into ``dst``.

    The record's key is loaded into a ``__key__`` field when ``dst`` has
    one. PropertyLoadSaver destinations load themselves.
    """
    config = config or DEFAULT_CONFIG
    properties = entity_to_properties(entity, config)
    if isinstance(dst, PropertyLoadSaver):
        dst.load(properties)
        return
    codec = get_codec(type(dst), config)
    if entity.key is not None and codec.resolve(KEY_PROPERTY) is not None:
        properties.append(Property(KEY_PROPERTY, convert_key(entity.key, config)))
    _load(codec, dst, properties, config)
