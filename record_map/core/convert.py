"""Conversion between wire values and dynamic values.

value_to_dynamic never fails: an unparsable key becomes an InvalidKey
marker (strict_keys) or None (legacy behaviour), and the loader decides
what to do with it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from record_map.core.config import DEFAULT_CONFIG, LoaderConfig
from record_map.core.exceptions import KeyParseError, SaveError
from record_map.core.types import GeoPoint, InvalidKey, Key, Property, PropertyList
from record_map.core.wire import (
    ArrayValue,
    Entity,
    LatLng,
    PartitionId,
    PathElement,
    Timestamp,
    Value,
    WireKey,
)

logger = logging.getLogger(__name__)

KEY_PROPERTY = "__key__"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# --- Keys ---


def key_from_wire(wire: WireKey) -> Key:
    """Build a Key from its wire form.

    Raises:
        KeyParseError: If the path is empty or the resulting key is invalid.
    """
    if not wire.path:
        raise KeyParseError("key has no path elements")
    namespace = wire.partition_id.namespace_id
    key: Key | None = None
    for element in wire.path:
        key = Key(
            kind=element.kind,
            id=element.id or 0,
            name=element.name or "",
            parent=key,
            namespace=namespace,
        )
    if key is None or not key.valid():
        raise KeyParseError(f"key {key} is not valid")
    return key


def key_to_wire(key: Key) -> WireKey:
    path = []
    for k in key.path():
        if k.name:
            path.append(PathElement(kind=k.kind, name=k.name))
        elif k.id:
            path.append(PathElement(kind=k.kind, id=k.id))
        else:
            path.append(PathElement(kind=k.kind))
    return WireKey(partition_id=PartitionId(namespace_id=key.namespace), path=path)


# --- Timestamps ---


def timestamp_to_datetime(ts: Timestamp) -> datetime:
    # Sub-microsecond precision is truncated
    return _EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1000)


def datetime_to_timestamp(dt: datetime) -> Timestamp:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    return Timestamp(
        seconds=delta.days * 86400 + delta.seconds,
        nanos=delta.microseconds * 1000,
    )


# --- Load direction ---


def convert_key(wire: WireKey, config: LoaderConfig) -> Key | InvalidKey | None:
    """Parse a wire key, deferring or dropping a parse failure per config."""
    try:
        return key_from_wire(wire)
    except KeyParseError as e:
        if config.strict_keys:
            return InvalidKey(e.detail)
        logger.warning("Dropping unparsable key value: %s", e.detail)
        return None


def value_to_dynamic(value: Value, config: LoaderConfig | None = None) -> Any:
    """Map one wire value onto the dynamic value model."""
    config = config or DEFAULT_CONFIG
    kind = value.kind
    case = getattr(value, kind)
    # A case set to an explicit JSON null is a null value
    if case is None:
        return None
    if kind == "timestamp_value":
        return timestamp_to_datetime(case)
    if kind == "key_value":
        return convert_key(case, config)
    if kind == "geo_point_value":
        return GeoPoint(lat=case.latitude, lng=case.longitude)
    if kind == "entity_value":
        nested = PropertyList(entity_to_properties(case, config))
        # A nested record's own key is exposed as its __key__ property
        if case.key is not None:
            nested.append(Property(KEY_PROPERTY, convert_key(case.key, config)))
        return nested
    if kind == "array_value":
        return [value_to_dynamic(v, config) for v in case.values]
    return case


def entity_to_properties(entity: Entity, config: LoaderConfig | None = None) -> list[Property]:
    """Convert a record's values into an ordered property list."""
    return [
        Property(
            name=name,
            value=value_to_dynamic(val, config),
            no_index=val.exclude_from_indexes,
        )
        for name, val in entity.properties.items()
    ]


# --- Save direction ---


def dynamic_to_value(name: str, v: Any, no_index: bool = False) -> Value:
    """Map one dynamic value onto its wire form.

    Raises:
        SaveError: For values outside the dynamic value model.
    """
    if v is None:
        return Value(null_value=None, exclude_from_indexes=no_index)
    if isinstance(v, bool):
        return Value(boolean_value=v, exclude_from_indexes=no_index)
    if isinstance(v, int):
        return Value(integer_value=v, exclude_from_indexes=no_index)
    if isinstance(v, float):
        return Value(double_value=v, exclude_from_indexes=no_index)
    if isinstance(v, str):
        return Value(string_value=v, exclude_from_indexes=no_index)
    if isinstance(v, bytes):
        return Value(blob_value=v, exclude_from_indexes=no_index)
    if isinstance(v, datetime):
        return Value(timestamp_value=datetime_to_timestamp(v), exclude_from_indexes=no_index)
    if isinstance(v, Key):
        return Value(key_value=key_to_wire(v), exclude_from_indexes=no_index)
    if isinstance(v, GeoPoint):
        if not v.valid():
            raise SaveError(name, f"invalid GeoPoint {v}")
        return Value(
            geo_point_value=LatLng(latitude=v.lat, longitude=v.lng),
            exclude_from_indexes=no_index,
        )
    if isinstance(v, PropertyList):
        return Value(entity_value=properties_to_entity(v), exclude_from_indexes=no_index)
    if isinstance(v, list):
        values = []
        for item in v:
            if isinstance(item, list) and not isinstance(item, PropertyList):
                raise SaveError(name, "nested arrays are not supported")
            values.append(dynamic_to_value(name, item, no_index))
        return Value(array_value=ArrayValue(values=values))
    raise SaveError(name, f"unsupported value type {type(v).__name__}")


def properties_to_entity(props: list[Property], key: Key | None = None) -> Entity:
    """Build a wire record from properties.

    A ``__key__`` property becomes the record's key.
    """
    values: dict[str, Value] = {}
    for p in props:
        if p.name == KEY_PROPERTY:
            if isinstance(p.value, Key):
                key = p.value
            continue
        if p.name in values:
            raise SaveError(p.name, "duplicate property name")
        values[p.name] = dynamic_to_value(p.name, p.value, p.no_index)
    return Entity(key=key_to_wire(key) if key is not None else None, properties=values)
