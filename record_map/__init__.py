"""record_map - load generic records into statically typed objects."""

from __future__ import annotations

from record_map.core.config import LoaderConfig
from record_map.core.enums import Kind
from record_map.core.exceptions import (
    CodecBuildError,
    CodecError,
    FieldMismatchError,
    FieldNotFoundError,
    FieldNotSettableError,
    FieldOverflowError,
    KeyParseError,
    LoadError,
    MappingError,
    MultiValueRequiresSliceError,
    RecordMapError,
    RecordMismatchError,
    SaveError,
    TypeMismatchError,
    UnsupportedFieldError,
)
from record_map.core.types import (
    GeoPoint,
    Key,
    Property,
    PropertyList,
    float32,
    float64,
    int8,
    int16,
    int32,
    int64,
)
from record_map.core.wire import Entity, Value
from record_map.mapping.codec import get_codec, prop
from record_map.mapping.loader import load_entity, load_struct
from record_map.mapping.model import RecordMapper
from record_map.mapping.protocol import PropertyLoadSaver
from record_map.mapping.saver import save_entity, save_struct

__all__ = [
    # Config
    "LoaderConfig",
    # Values
    "Property",
    "PropertyList",
    "Key",
    "GeoPoint",
    "int8",
    "int16",
    "int32",
    "int64",
    "float32",
    "float64",
    # Wire
    "Entity",
    "Value",
    # Mapping
    "prop",
    "get_codec",
    "load_struct",
    "load_entity",
    "save_struct",
    "save_entity",
    "RecordMapper",
    "PropertyLoadSaver",
    # Enums
    "Kind",
    # Exceptions
    "RecordMapError",
    "CodecError",
    "CodecBuildError",
    "LoadError",
    "FieldNotFoundError",
    "FieldNotSettableError",
    "MultiValueRequiresSliceError",
    "TypeMismatchError",
    "FieldOverflowError",
    "UnsupportedFieldError",
    "KeyParseError",
    "FieldMismatchError",
    "SaveError",
    "MappingError",
    "RecordMismatchError",
]
