"""Value types shared by the load and save directions.

The dynamic value carried by a Property is one of:
``None``, ``bool``, ``int``, ``float``, ``str``, ``bytes``, ``datetime``,
``Key``, ``GeoPoint``, ``PropertyList`` (a nested record) or a plain
``list`` of dynamic values (a repeated property).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair."""

    lat: float = 0.0
    lng: float = 0.0

    def valid(self) -> bool:
        return -90 <= self.lat <= 90 and -180 <= self.lng <= 180


@dataclass(frozen=True)
class Key:
    """Identity of a record, optionally nested under a parent key.

    A key is complete when it carries either a numeric ``id`` or a string
    ``name``, never both.
    """

    kind: str
    id: int = 0
    name: str = ""
    parent: Key | None = None
    namespace: str = ""

    def incomplete(self) -> bool:
        return self.name == "" and self.id == 0

    def valid(self) -> bool:
        """Check the key and all of its ancestors."""
        k: Key | None = self
        while k is not None:
            if k.kind == "":
                return False
            if k.name != "" and k.id != 0:
                return False
            if k.parent is not None:
                if k.parent.incomplete():
                    return False
                if k.parent.namespace != k.namespace:
                    return False
            k = k.parent
        return True

    def path(self) -> list[Key]:
        """Ancestors first, this key last."""
        chain: list[Key] = []
        k: Key | None = self
        while k is not None:
            chain.append(k)
            k = k.parent
        chain.reverse()
        return chain

    def __str__(self) -> str:
        parts = []
        for k in self.path():
            parts.append(f"{k.kind},{k.name if k.name else k.id}")
        return "/" + "/".join(parts)


@dataclass(frozen=True)
class InvalidKey:
    """Stands in for a key that could not be parsed from the wire."""

    detail: str


@dataclass(frozen=True)
class Property:
    """One named value of a record."""

    name: str
    value: Any = None
    no_index: bool = False


class PropertyList(list):  # type: ignore[type-arg]
    """A nested record: an ordered list of Property."""


# --- Sized numeric declarations ---


@dataclass(frozen=True)
class IntWidth:
    """Bit width marker for integer fields."""

    bits: int

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1))

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1


@dataclass(frozen=True)
class FloatWidth:
    """Bit width marker for floating point fields."""

    bits: int

    @property
    def max(self) -> float:
        if self.bits == 32:
            return 3.4028234663852886e38
        return sys.float_info.max


int8 = Annotated[int, IntWidth(8)]
int16 = Annotated[int, IntWidth(16)]
int32 = Annotated[int, IntWidth(32)]
int64 = Annotated[int, IntWidth(64)]
float32 = Annotated[float, FloatWidth(32)]
float64 = Annotated[float, FloatWidth(64)]


def value_type_name(value: Any) -> str:
    """Name of a dynamic value's logical type, for diagnostics."""
    if value is None:
        return "empty"
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "str"
    if isinstance(value, bytes):
        return "bytes"
    if isinstance(value, datetime):
        return "datetime"
    if isinstance(value, Key):
        return "Key"
    if isinstance(value, GeoPoint):
        return "GeoPoint"
    if isinstance(value, PropertyList):
        return "PropertyList"
    if isinstance(value, list):
        return "list"
    return type(value).__name__
