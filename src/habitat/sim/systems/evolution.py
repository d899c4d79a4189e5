from __future__ import annotations

from ..core.config import AnimalConfig, EvolutionConfig
from ..core.entities import AnimalTraits
from ..core.rng import DeterministicRng
from ..utils.numeric import clamp_value


def default_traits(animal: AnimalConfig) -> AnimalTraits:
    return AnimalTraits(
        speed=animal.speed,
        sense_radius=animal.sense_radius,
        reproduction_threshold=animal.reproduction_threshold,
        wander=animal.wander,
    )


def clamp_traits(evolution: EvolutionConfig, traits: AnimalTraits) -> AnimalTraits:
    clamp = evolution.clamp
    traits.speed = clamp_value(traits.speed, clamp.speed[0], clamp.speed[1])
    traits.sense_radius = clamp_value(traits.sense_radius, clamp.sense_radius[0], clamp.sense_radius[1])
    traits.reproduction_threshold = clamp_value(
        traits.reproduction_threshold, clamp.reproduction_threshold[0], clamp.reproduction_threshold[1]
    )
    traits.wander = clamp_value(traits.wander, clamp.wander[0], clamp.wander[1])
    return traits


def mutate_traits(evolution: EvolutionConfig, rng: DeterministicRng, parent: AnimalTraits) -> AnimalTraits:
    """Copy ``parent`` and nudge every trait independently.

    Each perturbation is uniform in ``[-strength, strength]`` scaled by the
    trait's weight, so a child never strays further than that from its parent
    before clamping.
    """
    mutated = parent.copy()
    strength = evolution.mutation_strength
    if not evolution.enabled or strength <= 0.0:
        return clamp_traits(evolution, mutated)
    mutated.speed += rng.next_range(-strength, strength) * evolution.speed_mutation_weight
    mutated.sense_radius += rng.next_range(-strength, strength) * evolution.sense_radius_mutation_weight
    mutated.reproduction_threshold += (
        rng.next_range(-strength, strength) * evolution.reproduction_threshold_mutation_weight
    )
    mutated.wander += rng.next_range(-strength, strength) * evolution.wander_mutation_weight
    return clamp_traits(evolution, mutated)


def seed_traits(animal: AnimalConfig, evolution: EvolutionConfig, rng: DeterministicRng) -> AnimalTraits:
    return mutate_traits(evolution, rng, default_traits(animal))
