"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from record_map.core.config import LoaderConfig
from record_map.core.convert import properties_to_entity
from record_map.core.types import Key, Property
from record_map.core.wire import Entity


@pytest.fixture
def strict_config() -> LoaderConfig:
    """Default configuration: bad keys are field errors."""
    return LoaderConfig()


@pytest.fixture
def lenient_config() -> LoaderConfig:
    """Configuration that drops unparsable keys with a warning."""
    return LoaderConfig(strict_keys=False)


@pytest.fixture
def make_entity():
    """Helper to build a wire record from plain Python values.

    Usage:
        make_entity({"name": "Ann", "tags": ["a", "b"]}, key=Key("User", id=1))
    """

    def _make(values: dict[str, Any], key: Key | None = None) -> Entity:
        return properties_to_entity([Property(n, v) for n, v in values.items()], key)

    return _make
