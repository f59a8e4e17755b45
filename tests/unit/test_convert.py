"""Unit tests for wire models and wire/dynamic value conversion."""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from record_map.core.config import LoaderConfig
from record_map.core.convert import (
    KEY_PROPERTY,
    datetime_to_timestamp,
    dynamic_to_value,
    entity_to_properties,
    key_from_wire,
    key_to_wire,
    properties_to_entity,
    timestamp_to_datetime,
    value_to_dynamic,
)
from record_map.core.exceptions import KeyParseError, SaveError
from record_map.core.types import GeoPoint, InvalidKey, Key, Property, PropertyList
from record_map.core.wire import (
    MAX_SECONDS,
    MIN_SECONDS,
    Entity,
    PathElement,
    Timestamp,
    Value,
    WireKey,
)

# --- Wire documents ---

USER_DOC = {
    "key": {
        "partitionId": {"projectId": "demo", "namespaceId": "ns"},
        "path": [{"kind": "User", "id": "42"}],
    },
    "properties": {
        "name": {"stringValue": "Ann"},
        "age": {"integerValue": "30"},
        "active": {"booleanValue": True},
        "score": {"doubleValue": 9.5},
        "photo": {"blobValue": base64.b64encode(b"\x00\xff").decode()},
        "joined": {"timestampValue": {"seconds": 86400, "nanos": 5000}},
        "home": {"geoPointValue": {"latitude": 1.5, "longitude": 2.5}},
        "tags": {"arrayValue": {"values": [{"stringValue": "a"}, {"stringValue": "b"}]}},
        "nothing": {"nullValue": "NULL_VALUE"},
        "bio": {"stringValue": "long text", "excludeFromIndexes": True},
    },
}


class TestWireModels:
    def test_parse_rest_document(self) -> None:
        entity = Entity.model_validate(USER_DOC)
        assert entity.key is not None
        assert entity.key.partition_id.namespace_id == "ns"
        assert entity.key.path[0].id == 42
        assert entity.properties["age"].integer_value == 30
        assert entity.properties["photo"].blob_value == b"\x00\xff"
        assert entity.properties["bio"].exclude_from_indexes is True

    def test_value_kind(self) -> None:
        entity = Entity.model_validate(USER_DOC)
        assert entity.properties["name"].kind == "string_value"
        assert entity.properties["nothing"].kind == "null_value"
        assert entity.properties["tags"].kind == "array_value"

    def test_empty_value_is_null(self) -> None:
        assert Value().kind == "null_value"

    def test_more_than_one_case_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Value(boolean_value=True, integer_value=1)

    def test_nanos_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Timestamp(seconds=0, nanos=1_000_000_000)

    def test_seconds_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Timestamp(seconds=-70_000_000_000)
        with pytest.raises(ValidationError):
            Timestamp(seconds=MAX_SECONDS + 1)

    def test_out_of_range_timestamp_in_record(self) -> None:
        doc = {"properties": {"at": {"timestampValue": {"seconds": "-70000000000"}}}}
        with pytest.raises(ValidationError):
            Entity.model_validate(doc)

    def test_snake_case_names_accepted(self) -> None:
        value = Value.model_validate({"string_value": "x"})
        assert value.string_value == "x"

    def test_json_round_trip(self) -> None:
        entity = Entity.model_validate(USER_DOC)
        dumped = entity.model_dump_json(by_alias=True, exclude_unset=True)
        assert '"stringValue"' in dumped
        again = Entity.model_validate_json(dumped)
        assert entity_to_properties(again) == entity_to_properties(entity)


class TestKeys:
    def test_key_from_wire(self) -> None:
        wire = WireKey(
            path=[PathElement(kind="User", name="ann"), PathElement(kind="Post", id=3)]
        )
        key = key_from_wire(wire)
        assert key == Key("Post", id=3, parent=Key("User", name="ann"))

    def test_empty_path(self) -> None:
        with pytest.raises(KeyParseError, match="no path elements"):
            key_from_wire(WireKey())

    def test_invalid_key(self) -> None:
        wire = WireKey(path=[PathElement(kind="User", id=1, name="ann")])
        with pytest.raises(KeyParseError) as exc_info:
            key_from_wire(wire)
        assert str(exc_info.value).startswith("invalid key: ")

    def test_key_wire_round_trip(self) -> None:
        key = Key("Post", id=3, parent=Key("User", name="ann", namespace="ns"), namespace="ns")
        assert key_from_wire(key_to_wire(key)) == key


class TestTimestamps:
    def test_epoch_offset(self) -> None:
        ts = Timestamp(seconds=86400, nanos=5000)
        assert timestamp_to_datetime(ts) == datetime(1970, 1, 2, 0, 0, 0, 5, tzinfo=timezone.utc)

    def test_round_trip(self) -> None:
        dt = datetime(2021, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)
        assert timestamp_to_datetime(datetime_to_timestamp(dt)) == dt

    def test_naive_datetime_is_utc(self) -> None:
        ts = datetime_to_timestamp(datetime(1970, 1, 1, 0, 1))
        assert ts.seconds == 60
        assert ts.nanos == 0

    def test_extremes(self) -> None:
        assert timestamp_to_datetime(Timestamp(seconds=MIN_SECONDS)) == datetime(
            1, 1, 1, tzinfo=timezone.utc
        )
        assert timestamp_to_datetime(Timestamp(seconds=MAX_SECONDS)) == datetime(
            9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc
        )


class TestValueToDynamic:
    def test_scalars(self) -> None:
        props = {p.name: p for p in entity_to_properties(Entity.model_validate(USER_DOC))}
        assert props["name"].value == "Ann"
        assert props["age"].value == 30
        assert props["active"].value is True
        assert props["score"].value == 9.5
        assert props["photo"].value == b"\x00\xff"
        assert props["home"].value == GeoPoint(1.5, 2.5)
        assert props["tags"].value == ["a", "b"]
        assert props["nothing"].value is None
        assert props["bio"].no_index is True

    def test_properties_keep_record_order(self) -> None:
        names = [p.name for p in entity_to_properties(Entity.model_validate(USER_DOC))]
        assert names == list(USER_DOC["properties"])

    def test_nested_record_becomes_property_list(self) -> None:
        value = Value(entity_value=Entity(properties={"I": Value(integer_value=1)}))
        nested = value_to_dynamic(value)
        assert isinstance(nested, PropertyList)
        assert nested == [Property("I", 1)]

    def test_nested_record_key_is_exposed(self) -> None:
        inner = Entity(
            key=WireKey(path=[PathElement(kind="Child", id=7)]),
            properties={"name": Value(string_value="c")},
        )
        nested = value_to_dynamic(Value(entity_value=inner))
        assert nested[-1] == Property(KEY_PROPERTY, Key("Child", id=7))

    def test_bad_key_strict(self, strict_config: LoaderConfig) -> None:
        value = Value(key_value=WireKey(path=[PathElement(kind="User", id=1, name="x")]))
        result = value_to_dynamic(value, strict_config)
        assert isinstance(result, InvalidKey)

    def test_bad_key_lenient(
        self, lenient_config: LoaderConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        value = Value(key_value=WireKey())
        with caplog.at_level(logging.WARNING, logger="record_map.core.convert"):
            result = value_to_dynamic(value, lenient_config)
        assert result is None
        assert "Dropping unparsable key value" in caplog.text

    def test_case_set_to_null(self) -> None:
        for case in ("timestampValue", "keyValue", "entityValue", "arrayValue", "stringValue"):
            value = Value.model_validate({case: None})
            assert value_to_dynamic(value) is None


class TestDynamicToValue:
    def test_scalars(self) -> None:
        assert dynamic_to_value("a", None).kind == "null_value"
        assert dynamic_to_value("a", True).boolean_value is True
        assert dynamic_to_value("a", 5).integer_value == 5
        assert dynamic_to_value("a", b"x").blob_value == b"x"

    def test_bool_is_not_integer(self) -> None:
        assert dynamic_to_value("a", False).kind == "boolean_value"

    def test_no_index(self) -> None:
        assert dynamic_to_value("a", "x", no_index=True).exclude_from_indexes is True

    def test_invalid_geo_point(self) -> None:
        with pytest.raises(SaveError, match="invalid GeoPoint"):
            dynamic_to_value("where", GeoPoint(100, 0))

    def test_nested_arrays(self) -> None:
        with pytest.raises(SaveError, match="nested arrays"):
            dynamic_to_value("grid", [[1, 2], [3]])

    def test_unsupported_type(self) -> None:
        with pytest.raises(SaveError) as exc_info:
            dynamic_to_value("blob", object())
        assert exc_info.value.field_name == "blob"


class TestPropertiesToEntity:
    def test_key_property_becomes_record_key(self) -> None:
        entity = properties_to_entity(
            [Property("name", "c"), Property(KEY_PROPERTY, Key("Child", id=7))]
        )
        assert entity.key is not None
        assert entity.key.path[0].kind == "Child"
        assert KEY_PROPERTY not in entity.properties

    def test_explicit_key(self) -> None:
        entity = properties_to_entity([Property("a", 1)], Key("K", name="k"))
        assert entity.key is not None
        assert entity.key.path[0].name == "k"

    def test_duplicate_names(self) -> None:
        with pytest.raises(SaveError, match="duplicate"):
            properties_to_entity([Property("a", 1), Property("a", 2)])

    def test_make_entity_fixture(self, make_entity) -> None:
        entity = make_entity({"tags": ["a", "b"]}, key=Key("T", id=1))
        assert entity.properties["tags"].kind == "array_value"
