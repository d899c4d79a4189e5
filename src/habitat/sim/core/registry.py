from __future__ import annotations

import sys
from typing import Dict, Iterator, List

from ...exceptions import ConfigurationError, InvariantViolation
from .entities import Entity, EntityKind


class EntityRegistry:
    """Issues entity ids and keeps the authoritative ``id -> entity`` store.

    Ids increase strictly and are never handed out twice in a run, even though
    the grid cells they occupied get recycled.
    """

    def __init__(self, max_id: int = sys.maxsize) -> None:
        self._next_id = 0
        self._max_id = max_id
        self._entities: Dict[int, Entity] = {}
        self._counts: Dict[EntityKind, int] = {kind: 0 for kind in EntityKind}

    def next_id(self) -> int:
        entity_id = self._next_id
        if entity_id > self._max_id:
            raise ConfigurationError(f"Entity id space exhausted after {self._max_id}")
        self._next_id += 1
        return entity_id

    @property
    def issued(self) -> int:
        return self._next_id

    def register(self, entity: Entity) -> None:
        if entity.id >= self._next_id:
            raise InvariantViolation(f"Entity id {entity.id} was not issued by this registry")
        if entity.id in self._entities:
            raise InvariantViolation(f"Entity id {entity.id} is already registered")
        self._entities[entity.id] = entity
        self._counts[entity.kind] += 1

    def unregister(self, entity_id: int) -> Entity:
        try:
            entity = self._entities.pop(entity_id)
        except KeyError:
            raise InvariantViolation(f"Entity id {entity_id} is not registered") from None
        self._counts[entity.kind] -= 1
        return entity

    def count(self, kind: EntityKind) -> int:
        return self._counts[kind]

    def get(self, entity_id: int) -> Entity | None:
        return self._entities.get(entity_id)

    def ids(self) -> List[int]:
        return sorted(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        for entity_id in self.ids():
            yield self._entities[entity_id]

    def reset(self) -> None:
        self._next_id = 0
        self._entities.clear()
        self._counts = {kind: 0 for kind in EntityKind}
