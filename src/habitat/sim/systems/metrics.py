from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.entities import EntityKind
from ..types.intents import TickIntents
from ..types.metrics import TickMetrics
from ..utils.numeric import mean

if TYPE_CHECKING:
    from ..core.world import World


def create_metrics(world: World, tick: int, intents: TickIntents | None, duration_ms: float) -> TickMetrics:
    trees = 0
    animals = 0
    energy_sum = 0.0
    age_sum = 0.0
    speed_sum = 0.0
    sense_sum = 0.0
    threshold_sum = 0.0
    max_generation = 0
    for entity in world._registry:
        if entity.kind is EntityKind.TREE:
            trees += 1
            continue
        animals += 1
        energy_sum += entity.energy
        age_sum += entity.age
        speed_sum += entity.traits.speed
        sense_sum += entity.traits.sense_radius
        threshold_sum += entity.traits.reproduction_threshold
        max_generation = max(max_generation, entity.generation)

    return TickMetrics(
        tick=tick,
        trees=trees,
        animals=animals,
        births=0 if intents is None else intents.births,
        sprouts=0 if intents is None else intents.sprouts,
        deaths=0 if intents is None else intents.deaths,
        trees_eaten=0 if intents is None else len(intents.eaten),
        average_energy=mean(energy_sum, animals),
        average_age=mean(age_sum, animals),
        average_speed=mean(speed_sum, animals),
        average_sense_radius=mean(sense_sum, animals),
        average_reproduction_threshold=mean(threshold_sum, animals),
        max_generation=max_generation,
        tick_duration_ms=duration_ms,
    )
