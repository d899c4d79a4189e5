from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from ...exceptions import InvariantViolation
from ..utils.grid import area_offsets, step_offsets
from .entities import Entity, Position


class OccupancyGrid:
    """Sparse, bounded ``Position -> Entity`` mapping with at most one occupant per cell."""

    def __init__(self, width: int, height: int, neighborhood: str) -> None:
        self._width = width
        self._height = height
        self._neighborhood = neighborhood
        self._cells: Dict[Position, Entity] = {}
        self._area_cache: Dict[int, List[Tuple[int, int]]] = {}

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def neighborhood(self) -> str:
        return self._neighborhood

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.x < self._width and 0 <= position.y < self._height

    def get(self, position: Position) -> Entity | None:
        return self._cells.get(position)

    def is_vacant(self, position: Position) -> bool:
        return self.in_bounds(position) and position not in self._cells

    def insert(self, position: Position, entity: Entity) -> None:
        if not self.in_bounds(position):
            raise InvariantViolation(f"{position} is outside the {self._width}x{self._height} grid")
        occupant = self._cells.get(position)
        if occupant is not None:
            raise InvariantViolation(
                f"Cannot place {entity.kind.value} {entity.id} at {position}: "
                f"occupied by {occupant.kind.value} {occupant.id}"
            )
        self._cells[position] = entity

    def remove(self, position: Position) -> Entity:
        try:
            return self._cells.pop(position)
        except KeyError:
            raise InvariantViolation(f"No entity to remove at {position}") from None

    def clear(self) -> None:
        self._cells.clear()

    def items(self) -> Iterator[Tuple[Position, Entity]]:
        return iter(self._cells.items())

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, position: object) -> bool:
        return position in self._cells

    def adjacent(self, position: Position) -> List[Position]:
        """In-bounds neighbours of ``position`` in the fixed step order."""
        result = []
        for dx, dy in step_offsets(self._neighborhood):
            candidate = Position(position.x + dx, position.y + dy)
            if self.in_bounds(candidate):
                result.append(candidate)
        return result

    def area(self, position: Position, radius: int) -> List[Position]:
        """In-bounds cells within ``radius`` of ``position``, nearest first, origin excluded."""
        offsets = self._area_cache.get(radius)
        if offsets is None:
            offsets = area_offsets(radius, self._neighborhood)
            self._area_cache[radius] = offsets
        result = []
        for dx, dy in offsets:
            candidate = Position(position.x + dx, position.y + dy)
            if self.in_bounds(candidate):
                result.append(candidate)
        return result
