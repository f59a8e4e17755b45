"""Mapper and property load/save protocols.

Destinations implementing PropertyLoadSaver take over their own loading and
saving; the generic engine is bypassed for them. Mappers convert whole
records into target objects.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from record_map.core.types import Property

T = TypeVar("T")


@runtime_checkable
class PropertyLoadSaver(Protocol):
    """A destination that converts itself from and to properties."""

    def load(self, properties: list[Property]) -> None:
        """Populate self from properties."""
        ...

    def save(self) -> list[Property]:
        """Return self as properties."""
        ...


class Mapper(Protocol[T]):
    """Base mapper protocol."""

    def map_one(self, record: Any) -> T:
        """Map a single record to a target object."""
        ...

    def map_many(self, records: list[Any]) -> list[T]:
        """Map multiple records to a list of target objects."""
        ...
