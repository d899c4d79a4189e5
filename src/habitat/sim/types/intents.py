from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from ...exceptions import InvariantViolation
from ..core.entities import Entity, Position, Tree


@dataclass(slots=True)
class Move:
    entity_id: int
    origin: Position
    destination: Position


@dataclass(slots=True)
class Placement:
    entity: Entity
    position: Position


@dataclass(slots=True)
class Removal:
    entity_id: int
    position: Position


@dataclass
class TickIntents:
    """Everything a tick wants to change, collected before anything is applied.

    Systems read the grid as it stood at the start of the tick and record their
    decisions here. ``claimed`` maps every cell some intent will occupy after
    the commit to the id that reserved it; the first claimant wins.
    """

    claimed: Dict[Position, int] = field(default_factory=dict)
    eaten: Set[int] = field(default_factory=set)
    dead: Set[int] = field(default_factory=set)
    moves: List[Move] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)
    removals: List[Removal] = field(default_factory=list)
    births: int = 0
    sprouts: int = 0

    def is_claimed(self, position: Position) -> bool:
        return position in self.claimed

    def claim(self, position: Position, entity_id: int) -> None:
        holder = self.claimed.get(position)
        if holder is not None:
            raise InvariantViolation(f"{position} already claimed by {holder}, not available to {entity_id}")
        self.claimed[position] = entity_id

    def move(self, entity_id: int, origin: Position, destination: Position) -> None:
        self.claim(destination, entity_id)
        self.moves.append(Move(entity_id, origin, destination))

    def place(self, entity: Entity, position: Position) -> None:
        self.claim(position, entity.id)
        self.placements.append(Placement(entity, position))
        if isinstance(entity, Tree):
            self.sprouts += 1
        else:
            self.births += 1

    def eat(self, tree: Tree, position: Position) -> None:
        self.eaten.add(tree.id)
        self.removals.append(Removal(tree.id, position))

    def kill(self, entity_id: int, position: Position) -> None:
        if entity_id in self.dead:
            return
        self.dead.add(entity_id)
        self.removals.append(Removal(entity_id, position))

    @property
    def deaths(self) -> int:
        return len(self.dead)
