"""Property name resolution.

Names are looked up directly in the codec first. Names without a direct
entry are treated as legacy flattened paths such as ``"A.B.C"`` and
resolved segment by segment, descending through nested structures and
through embedded fields (whose names are promoted into the enclosing
class).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from record_map.core.enums import Kind
from record_map.core.exceptions import FieldNotFoundError, FieldNotSettableError
from record_map.mapping.codec import Codec, FieldDescriptor
from record_map.mapping.fieldtype import new_struct, set_field


@dataclass(frozen=True)
class Target:
    """A resolved field: the instance holding it and its descriptor."""

    owner: Any
    descriptor: FieldDescriptor
    # Key of the list cursor for this field; it names the list elements
    # the path went through, so each element repeats independently
    cursor: str
    # The path ran through a list of structures, so repeats are expected
    via_slice: bool = False


def resolve_target(
    codec: Codec,
    dst: Any,
    name: str,
    cursors: dict[str, int],
) -> Target:
    """Find the field a property name refers to.

    Intermediate structures are allocated as needed. ``cursors`` holds the
    next list index per cursor key. A path through a list of structures
    takes the next element of that list for every value, and the fields
    below it get cursors of their own, scoped to that element.

    Raises:
        FieldNotFoundError: If a segment does not resolve.
        FieldNotSettableError: If an intermediate field cannot be written.
    """
    descriptor = codec.resolve(name)
    if descriptor is not None:
        return Target(dst, descriptor, name)

    owner = dst
    scope = name
    segments = name.split(".")
    i = 0
    descriptor = None
    while i < len(segments):
        if descriptor is not None:
            if descriptor.codec is None:
                raise FieldNotFoundError()
            owner, scope = _descend(owner, descriptor, scope, cursors)
            codec = descriptor.codec

        segment = segments[i]
        found = codec.resolve(segment)
        if found is None:
            # Try again inside the embedded field, without consuming the segment
            found = codec.promoted.get(segment) or codec.resolve("")
            if found is None:
                raise FieldNotFoundError()
            descriptor = found
            continue
        descriptor = found
        i += 1

    if descriptor is None:
        raise FieldNotFoundError()
    return Target(owner, descriptor, scope, via_slice=scope != name)


def _descend(owner: Any, descriptor: FieldDescriptor, scope: str, cursors: dict[str, int]) -> tuple[Any, str]:
    """Step into the structure held by a field, allocating it if missing.

    Returns the structure and the cursor scope below it.
    """
    try:
        current = getattr(owner, descriptor.attr)
    except AttributeError as e:
        raise FieldNotSettableError() from e

    if descriptor.field_type.kind is Kind.SLICE:
        if current is None:
            current = []
            set_field(owner, descriptor.attr, current)
        index = cursors.get(scope, 0)
        cursors[scope] = index + 1
        while len(current) <= index:
            current.append(None)
        element = current[index]
        if element is None:
            element = new_struct(descriptor.codec.struct_type)  # type: ignore[union-attr]
            current[index] = element
        return element, f"{scope}[{index}]"

    if current is None:
        current = new_struct(descriptor.codec.struct_type)  # type: ignore[union-attr]
        set_field(owner, descriptor.attr, current)
    return current, scope
