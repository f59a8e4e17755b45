"""Codecs - per-class property name to field lookup tables.

A codec is built once per (class, tag key), on first use, and is read-only
from then on. Fields are declared with an optional tag string::

    @dataclass
    class Profile:
        id: int = prop("ID")
        notes: str = prop(noindex=True)
        audit: Audit = prop(embed=True)
        cache: str = prop(ignore=True)

The tag string has the form ``"name,option,option"``; ``"-"`` ignores the
field. Options: ``noindex``, ``embed``.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from record_map.core.config import DEFAULT_CONFIG, LoaderConfig
from record_map.core.enums import Kind
from record_map.core.exceptions import CodecBuildError
from record_map.mapping.fieldtype import FieldType, analyze, declared_fields, is_struct_type

logger = logging.getLogger(__name__)

TAG_OPTIONS = frozenset({"noindex", "embed"})


def prop(
    name: str = "",
    *,
    noindex: bool = False,
    embed: bool = False,
    ignore: bool = False,
    tag_key: str = DEFAULT_CONFIG.tag_key,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field with a record tag.

    Extra keyword arguments go to ``dataclasses.field``.
    """
    if ignore:
        tag = "-"
    else:
        options = [opt for opt, on in (("noindex", noindex), ("embed", embed)) if on]
        tag = ",".join([name, *options])
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[tag_key] = tag
    return dataclasses.field(metadata=metadata, **kwargs)


def parse_tag(cls: type, attr: str, tag: str | None) -> tuple[str, frozenset[str]]:
    """Split a tag into ``(name, options)``.

    Raises:
        CodecBuildError: On unknown options.
    """
    if not tag:
        return "", frozenset()
    name, *options = [part.strip() for part in tag.split(",")]
    unknown = set(options) - TAG_OPTIONS - {""}
    if unknown:
        raise CodecBuildError(cls, f"field '{attr}' has unknown tag options {sorted(unknown)}")
    return name, frozenset(o for o in options if o)


@dataclass(frozen=True)
class FieldDescriptor:
    """How to reach one field of a destination class."""

    name: str  # property name
    attr: str  # attribute name on the instance
    index: int  # position among the declared fields
    field_type: FieldType
    codec: Codec | None = None  # set for fields holding structures
    embedded: bool = False
    no_index: bool = False


class Codec:
    """Property name lookup for one destination class.

    ``promoted`` maps names declared inside embedded fields to the embedded
    field they are reached through.
    """

    def __init__(self, struct_type: type) -> None:
        self.struct_type = struct_type
        self.fields: tuple[FieldDescriptor, ...] = ()
        self.by_name: Mapping[str, FieldDescriptor] = MappingProxyType({})
        self.promoted: Mapping[str, FieldDescriptor] = MappingProxyType({})
        self.anonymous: tuple[FieldDescriptor, ...] = ()

    def resolve(self, name: str) -> FieldDescriptor | None:
        """Look up a property name; ``""`` yields the first embedded field."""
        if name == "":
            return self.anonymous[0] if self.anonymous else None
        return self.by_name.get(name)

    def __repr__(self) -> str:
        return f"Codec({self.struct_type.__name__}, fields={list(self.by_name)})"


@dataclass
class _Registry:
    codecs: dict[tuple[type, str], Codec] = field(default_factory=dict)
    building: dict[tuple[type, str], Codec] = field(default_factory=dict)
    # Finished during the current outermost build, not yet published
    pending: dict[tuple[type, str], Codec] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)


_registry = _Registry()


def get_codec(struct_type: type, config: LoaderConfig | None = None) -> Codec:
    """Return the codec for a class, building it on first use.

    Codecs built for nested classes are published together with the
    outermost one, so readers that skip the lock only see complete codecs.

    Raises:
        CodecBuildError: If the class is not a dataclass or Pydantic model,
            or declares conflicting property names.
    """
    tag_key = (config or DEFAULT_CONFIG).tag_key
    cache_key = (struct_type, tag_key)
    codec = _registry.codecs.get(cache_key)
    if codec is not None:
        return codec

    with _registry.lock:
        codec = _registry.codecs.get(cache_key)
        if codec is not None:
            return codec
        # Classes reached again during a build get the unpublished codec
        codec = _registry.building.get(cache_key)
        if codec is None:
            codec = _registry.pending.get(cache_key)
        if codec is not None:
            return codec
        if not is_struct_type(struct_type):
            raise CodecBuildError(struct_type, "not a dataclass or Pydantic model")

        outermost = not _registry.building
        codec = Codec(struct_type)
        _registry.building[cache_key] = codec
        try:
            _build(codec, tag_key, config)
        except Exception:
            # Codecs built along the way may point at the failed one
            if outermost:
                _registry.pending.clear()
            raise
        finally:
            del _registry.building[cache_key]
        _registry.pending[cache_key] = codec
        logger.debug("Built %r", codec)
        if outermost:
            _registry.codecs.update(_registry.pending)
            _registry.pending.clear()
        return codec


def _build(codec: Codec, tag_key: str, config: LoaderConfig | None) -> None:
    cls = codec.struct_type
    fields: list[FieldDescriptor] = []
    by_name: dict[str, FieldDescriptor] = {}
    anonymous: list[FieldDescriptor] = []

    try:
        declared = declared_fields(cls, tag_key)
    except NameError as e:
        raise CodecBuildError(cls, f"unresolved annotation: {e}") from e

    for index, (attr, annotation, tag) in enumerate(declared):
        if attr.startswith("_"):
            continue
        name, options = parse_tag(cls, attr, tag)
        if name == "-":
            continue

        field_type = analyze(annotation)
        struct = field_type.struct_type()
        embedded = "embed" in options
        if embedded and (
            struct is None or field_type.kind not in (Kind.STRUCT, Kind.POINTER)
        ):
            raise CodecBuildError(cls, f"embedded field '{attr}' must hold a structure")

        public = name or attr
        if public in by_name:
            raise CodecBuildError(cls, f"duplicate property name '{public}'")

        descriptor = FieldDescriptor(
            name=public,
            attr=attr,
            index=index,
            field_type=field_type,
            codec=get_codec(struct, config) if struct is not None else None,
            embedded=embedded and not name,
            no_index="noindex" in options,
        )
        fields.append(descriptor)
        by_name[public] = descriptor
        if descriptor.embedded:
            anonymous.append(descriptor)

    codec.fields = tuple(fields)
    codec.by_name = MappingProxyType(by_name)
    codec.anonymous = tuple(anonymous)
    codec.promoted = MappingProxyType(_promote(codec))


def _promote(codec: Codec) -> dict[str, FieldDescriptor]:
    """Flatten names of embedded fields into the enclosing class.

    Direct fields shadow promoted ones; the same name promoted from two
    embedded fields is ambiguous and rejected.
    """
    promoted: dict[str, FieldDescriptor] = {}
    for descriptor in codec.anonymous:
        inner = descriptor.codec
        if inner is None:
            raise CodecBuildError(
                codec.struct_type, f"embedded field '{descriptor.attr}' must hold a structure"
            )
        if inner is codec or any(inner is c for c in _registry.building.values()):
            raise CodecBuildError(
                codec.struct_type, f"embedded field '{descriptor.attr}' forms a cycle"
            )
        for name in (*inner.by_name, *inner.promoted):
            if name in codec.by_name:
                continue
            other = promoted.get(name)
            if other is not None and other is not descriptor:
                raise CodecBuildError(
                    codec.struct_type,
                    f"property '{name}' is ambiguous between embedded fields "
                    f"'{other.attr}' and '{descriptor.attr}'",
                )
            promoted[name] = descriptor
    return promoted
