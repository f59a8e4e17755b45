"""Loader configuration.

LoaderConfig is a Pydantic model for type-safe configuration. Every public
entry point accepts an optional config; DEFAULT_CONFIG is used otherwise.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoaderConfig(BaseModel):
    """Configuration for loading and saving records."""

    model_config = ConfigDict(frozen=True)

    # Field metadata key holding the tag string, e.g. field(metadata={"record": "II"})
    tag_key: str = Field(default="record", min_length=1)
    # Surface unparsable wire keys as field errors instead of loading None
    strict_keys: bool = True


DEFAULT_CONFIG = LoaderConfig()
