"""Static field kind enumeration."""

from __future__ import annotations

from enum import Enum


class Kind(Enum):
    """Static kinds a destination field can be declared as."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    BYTES = "bytes"
    TIME = "time"
    GEO_POINT = "geo_point"
    KEY = "key"
    POINTER = "pointer"
    STRUCT = "struct"
    SLICE = "slice"
    OPAQUE = "opaque"
