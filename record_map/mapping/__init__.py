"""Mapping layer - load records into typed objects and save them back."""

from __future__ import annotations

from record_map.mapping.codec import Codec, FieldDescriptor, get_codec, prop
from record_map.mapping.loader import PropertyLoader, load_entity, load_struct
from record_map.mapping.model import RecordMapper
from record_map.mapping.protocol import Mapper, PropertyLoadSaver
from record_map.mapping.saver import save_entity, save_struct

__all__ = [
    "RecordMapper",
    "Mapper",
    "PropertyLoadSaver",
    "PropertyLoader",
    "Codec",
    "FieldDescriptor",
    "get_codec",
    "prop",
    "load_struct",
    "load_entity",
    "save_struct",
    "save_entity",
]
