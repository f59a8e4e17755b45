"""Record-to-model mapper.

Supports dataclasses and Pydantic models. Records are accepted as wire
Entity objects or as their JSON dict form.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from record_map.core.config import DEFAULT_CONFIG, LoaderConfig
from record_map.core.exceptions import FieldMismatchError, RecordMismatchError
from record_map.core.wire import Entity
from record_map.mapping.codec import get_codec
from record_map.mapping.fieldtype import new_struct
from record_map.mapping.loader import load_entity

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RecordMapper(Generic[T]):
    """Record-to-model mapper.

    In strict mode (the default) a record that does not fully fit raises
    RecordMismatchError carrying the partially populated instance. With
    ``strict=False`` the partial instance is returned and the mismatch is
    logged.

    Args:
        target_class: The dataclass or Pydantic model to populate.
        config: Optional loader configuration.
        strict: Raise on field mismatches instead of returning partial results.
    """

    def __init__(
        self,
        target_class: type[T],
        config: LoaderConfig | None = None,
        *,
        strict: bool = True,
    ) -> None:
        self._target_class = target_class
        self._config = config or DEFAULT_CONFIG
        self._strict = strict
        # Build eagerly so declaration errors surface at construction
        get_codec(target_class, self._config)

    def map_one(self, record: Entity | dict[str, Any]) -> T:
        """Map a single record to a target_class instance."""
        entity = record if isinstance(record, Entity) else Entity.model_validate(record)
        instance: T = new_struct(self._target_class)
        try:
            load_entity(instance, entity, self._config)
        except FieldMismatchError as e:
            if self._strict:
                raise RecordMismatchError(
                    self._target_class.__name__, str(e), partial=instance
                ) from e
            logger.info("Partial load of %s: %s", self._target_class.__name__, e)
        return instance

    def map_many(self, records: list[Entity | dict[str, Any]]) -> list[T]:
        """Map all records via map_one."""
        return [self.map_one(record) for record in records]
