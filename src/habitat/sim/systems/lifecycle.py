from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..core.entities import Animal, Entity, EntityKind
from ..types.intents import TickIntents

if TYPE_CHECKING:
    from ..core.world import World


def age_entities(world: World, roster: List[Entity], intents: TickIntents) -> None:
    max_age = world._config.animal.max_age
    for entity in roster:
        entity.age += 1
        if entity.kind is EntityKind.ANIMAL and entity.age > max_age:
            kill_animal(world, entity, intents)


def kill_animal(world: World, animal: Animal, intents: TickIntents) -> None:
    animal.alive = False
    intents.kill(animal.id, world._locations[animal.id])


def apply_death(world: World, animal: Animal, intents: TickIntents) -> bool:
    if animal.alive and animal.energy <= 0:
        kill_animal(world, animal, intents)
    return not animal.alive
