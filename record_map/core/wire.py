"""Wire-level record models.

Pydantic models for records as the storage service hands them over. Field
names are snake_case; the camelCase JSON form used by the REST transport is
accepted through aliases.
"""

from __future__ import annotations

import base64
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for all wire models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartitionId(WireModel):
    project_id: str = ""
    namespace_id: str = ""


class PathElement(WireModel):
    kind: str = ""
    id: int | None = None
    name: str | None = None


class WireKey(WireModel):
    """A record key: partition plus ancestor path, root first."""

    partition_id: PartitionId = Field(default_factory=PartitionId)
    path: list[PathElement] = Field(default_factory=list)


# Seconds of 0001-01-01T00:00:00Z and 9999-12-31T23:59:59Z
MIN_SECONDS = -62_135_596_800
MAX_SECONDS = 253_402_300_799


class Timestamp(WireModel):
    seconds: int = Field(default=0, ge=MIN_SECONDS, le=MAX_SECONDS)
    nanos: int = Field(default=0, ge=0, lt=1_000_000_000)


class LatLng(WireModel):
    latitude: float = 0.0
    longitude: float = 0.0


class ArrayValue(WireModel):
    values: list[Value] = Field(default_factory=list)


# The one-of cases of Value, in declaration order.
VALUE_KINDS = (
    "null_value",
    "boolean_value",
    "integer_value",
    "double_value",
    "timestamp_value",
    "key_value",
    "string_value",
    "blob_value",
    "geo_point_value",
    "entity_value",
    "array_value",
)


class Value(WireModel):
    """A tagged value: exactly one of the ``*_value`` fields is set.

    A Value with no case set is treated as null.
    """

    null_value: None = None
    boolean_value: bool | None = None
    integer_value: int | None = None
    double_value: float | None = None
    timestamp_value: Timestamp | None = None
    key_value: WireKey | None = None
    string_value: str | None = None
    blob_value: bytes | None = None
    geo_point_value: LatLng | None = None
    entity_value: Entity | None = None
    array_value: ArrayValue | None = None
    exclude_from_indexes: bool = False

    @field_validator("null_value", mode="before")
    @classmethod
    def _decode_null(cls, v: Any) -> Any:
        # REST spells the null case as the enum name
        return None if v == "NULL_VALUE" else v

    @field_validator("blob_value", mode="before")
    @classmethod
    def _decode_blob(cls, v: Any) -> Any:
        # JSON transports carry blobs base64-encoded
        if isinstance(v, str):
            return base64.b64decode(v)
        return v

    @field_serializer("blob_value", when_used="json")
    def _encode_blob(self, v: bytes | None) -> str | None:
        return base64.b64encode(v).decode("ascii") if v is not None else None

    @model_validator(mode="after")
    def _check_one_of(self) -> Value:
        active = [name for name in VALUE_KINDS if name in self.model_fields_set]
        if len(active) > 1:
            raise ValueError(f"Value sets more than one case: {active}")
        return self

    @property
    def kind(self) -> str:
        """Name of the active case."""
        for name in VALUE_KINDS:
            if name in self.model_fields_set:
                return name
        return "null_value"


class Entity(WireModel):
    """A record: optional identity key plus named values."""

    key: WireKey | None = None
    properties: dict[str, Value] = Field(default_factory=dict)


ArrayValue.model_rebuild()
Value.model_rebuild()
