from __future__ import annotations

import statistics

import pytest

from habitat.sim.core.config import AnimalConfig, EvolutionConfig
from habitat.sim.core.entities import AnimalTraits
from habitat.sim.core.rng import DeterministicRng
from habitat.sim.systems.evolution import clamp_traits, default_traits, mutate_traits, seed_traits

_TRAITS = ("speed", "sense_radius", "reproduction_threshold", "wander")


def _parent() -> AnimalTraits:
    return AnimalTraits(speed=0.5, sense_radius=5.0, reproduction_threshold=70.0, wander=0.2)


def test_offspring_traits_vary_but_stay_close_to_parent():
    evolution = EvolutionConfig()
    rng = DeterministicRng(5)
    parent = _parent()

    children = [mutate_traits(evolution, rng, parent) for _ in range(300)]

    limits = {
        "speed": evolution.mutation_strength * evolution.speed_mutation_weight,
        "sense_radius": evolution.mutation_strength * evolution.sense_radius_mutation_weight,
        "reproduction_threshold": evolution.mutation_strength * evolution.reproduction_threshold_mutation_weight,
        "wander": evolution.mutation_strength * evolution.wander_mutation_weight,
    }
    for name in _TRAITS:
        values = [getattr(child, name) for child in children]
        assert statistics.pvariance(values) > 0.0, name
        deviation = max(abs(value - getattr(parent, name)) for value in values)
        assert deviation <= limits[name] + 1e-9, name


def test_mutation_leaves_parent_untouched():
    parent = _parent()
    mutate_traits(EvolutionConfig(), DeterministicRng(1), parent)

    assert parent == _parent()


def test_disabled_evolution_copies_traits():
    parent = _parent()
    child = mutate_traits(EvolutionConfig(enabled=False), DeterministicRng(1), parent)

    assert child == parent
    assert child is not parent


def test_clamp_traits_pulls_values_into_range():
    evolution = EvolutionConfig()
    traits = clamp_traits(
        evolution, AnimalTraits(speed=3.0, sense_radius=-1.0, reproduction_threshold=500.0, wander=-0.5)
    )

    assert traits.speed == evolution.clamp.speed[1]
    assert traits.sense_radius == evolution.clamp.sense_radius[0]
    assert traits.reproduction_threshold == evolution.clamp.reproduction_threshold[1]
    assert traits.wander == evolution.clamp.wander[0]


def test_seed_traits_jitter_around_configured_defaults():
    animal = AnimalConfig()
    evolution = EvolutionConfig()
    base = default_traits(animal)
    seeded = seed_traits(animal, evolution, DeterministicRng(3))

    assert seeded.sense_radius == pytest.approx(base.sense_radius, abs=0.5 + 1e-9)
    assert seeded.reproduction_threshold == pytest.approx(base.reproduction_threshold, abs=2.0 + 1e-9)


def test_same_seed_gives_same_mutations():
    parent = _parent()
    rng_a = DeterministicRng(8)
    rng_b = DeterministicRng(8)

    a = [mutate_traits(EvolutionConfig(), rng_a, parent) for _ in range(3)]
    b = [mutate_traits(EvolutionConfig(), rng_b, parent) for _ in range(3)]

    assert a == b
