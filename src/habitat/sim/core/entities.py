from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Union


class EntityKind(str, Enum):
    TREE = "tree"
    ANIMAL = "animal"


class Position(NamedTuple):
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(slots=True)
class AnimalTraits:
    speed: float = 0.9
    sense_radius: float = 4.0
    reproduction_threshold: float = 60.0
    wander: float = 0.05

    def copy(self) -> "AnimalTraits":
        return AnimalTraits(
            speed=self.speed,
            sense_radius=self.sense_radius,
            reproduction_threshold=self.reproduction_threshold,
            wander=self.wander,
        )


@dataclass(slots=True)
class Tree:
    id: int
    age: int = 0
    growth_stage: int = 0
    kind: EntityKind = field(default=EntityKind.TREE, init=False)

    def is_mature(self, maturity_stage: int) -> bool:
        return self.growth_stage >= maturity_stage


@dataclass(slots=True)
class Animal:
    id: int
    energy: float
    age: int = 0
    generation: int = 0
    traits: AnimalTraits = field(default_factory=AnimalTraits)
    alive: bool = True
    kind: EntityKind = field(default=EntityKind.ANIMAL, init=False)


Entity = Union[Tree, Animal]


class Occupant(NamedTuple):
    """What a front-end needs to draw one cell: where, what kind, and which id."""

    position: Position
    kind: EntityKind
    id: int
