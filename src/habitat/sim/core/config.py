from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import yaml

from ...exceptions import ConfigurationError

NEIGHBORHOODS = ("moore", "von_neumann")


@dataclass
class TreeConfig:
    maturity_stage: int = 8
    spawn_chance: float = 0.05
    spawn_radius: int = 2
    max_population: Optional[int] = 20_000


@dataclass
class AnimalConfig:
    initial_energy: float = 40.0
    max_energy: float = 100.0
    feeding_yield: float = 20.0
    metabolism_cost: float = 1.0
    reproduction_cost: float = 10.0
    max_age: int = 400
    max_population: Optional[int] = 5_000
    # Default trait values for the seed population.
    speed: float = 0.9
    sense_radius: float = 4.0
    reproduction_threshold: float = 60.0
    wander: float = 0.05


@dataclass
class EvolutionClampConfig:
    speed: tuple[float, float] = (0.1, 1.0)
    sense_radius: tuple[float, float] = (1.0, 10.0)
    reproduction_threshold: tuple[float, float] = (50.0, 95.0)
    wander: tuple[float, float] = (0.0, 0.5)


@dataclass
class EvolutionConfig:
    enabled: bool = True
    mutation_strength: float = 0.05
    speed_mutation_weight: float = 1.0
    sense_radius_mutation_weight: float = 10.0
    reproduction_threshold_mutation_weight: float = 40.0
    wander_mutation_weight: float = 0.5
    clamp: EvolutionClampConfig = field(default_factory=EvolutionClampConfig)


@dataclass
class SimulationConfig:
    width: int = 1024
    height: int = 768
    seed: int = 42
    initial_trees: int = 4_000
    initial_animals: int = 600
    neighborhood: str = "moore"
    config_version: str = "v1"
    tree: TreeConfig = field(default_factory=TreeConfig)
    animal: AnimalConfig = field(default_factory=AnimalConfig)
    evolution: EvolutionConfig = field(default_factory=EvolutionConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def scaled_to(self, width: int, height: int) -> "SimulationConfig":
        """Copy with new bounds and the seed populations scaled by the change in area."""
        area = self.width * self.height
        ratio = width * height / area if area > 0 else 0.0
        return replace(
            self,
            width=width,
            height=height,
            initial_trees=int(round(self.initial_trees * ratio)),
            initial_animals=int(round(self.initial_animals * ratio)),
        )

    def validate(self) -> "SimulationConfig":
        """Raise :class:`ConfigurationError` for values the engine cannot honour."""
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"World bounds must be positive, got {self.width}x{self.height}")
        if self.initial_trees < 0 or self.initial_animals < 0:
            raise ConfigurationError("Initial population sizes must be non-negative")
        if self.initial_trees + self.initial_animals > self.width * self.height:
            raise ConfigurationError(
                f"Seed population of {self.initial_trees + self.initial_animals} does not fit "
                f"on a {self.width}x{self.height} grid"
            )
        if self.neighborhood not in NEIGHBORHOODS:
            raise ConfigurationError(f"Unknown neighborhood: {self.neighborhood}")

        tree = self.tree
        if tree.maturity_stage < 0:
            raise ConfigurationError("tree.maturity_stage must be non-negative")
        if tree.spawn_radius < 1:
            raise ConfigurationError("tree.spawn_radius must be at least 1")
        _check_probability("tree.spawn_chance", tree.spawn_chance)
        _check_cap("tree.max_population", tree.max_population)

        animal = self.animal
        if animal.max_energy <= 0:
            raise ConfigurationError("animal.max_energy must be positive")
        if not 0 < animal.initial_energy <= animal.max_energy:
            raise ConfigurationError("animal.initial_energy must be in (0, max_energy]")
        for name in ("feeding_yield", "metabolism_cost", "reproduction_cost"):
            if getattr(animal, name) < 0:
                raise ConfigurationError(f"animal.{name} must be non-negative")
        if animal.max_age <= 0:
            raise ConfigurationError("animal.max_age must be positive")
        _check_cap("animal.max_population", animal.max_population)
        _check_probability("animal.speed", animal.speed)
        _check_probability("animal.wander", animal.wander)

        evolution = self.evolution
        if evolution.mutation_strength < 0:
            raise ConfigurationError("evolution.mutation_strength must be non-negative")
        clamp = evolution.clamp
        for name in ("speed", "sense_radius", "reproduction_threshold", "wander"):
            low, high = getattr(clamp, name)
            if low > high:
                raise ConfigurationError(f"evolution.clamp.{name} is inverted: ({low}, {high})")
        if clamp.speed[0] < 0 or clamp.speed[1] > 1 or clamp.wander[0] < 0 or clamp.wander[1] > 1:
            raise ConfigurationError("speed and wander clamps must stay within [0, 1]")
        if clamp.reproduction_threshold[0] <= animal.reproduction_cost:
            raise ConfigurationError(
                "evolution.clamp.reproduction_threshold must start above animal.reproduction_cost"
            )
        return self


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}")


def _check_cap(name: str, value: Optional[int]) -> None:
    if value is not None and value < 0:
        raise ConfigurationError(f"{name} must be non-negative or null")


def load_config(raw: dict) -> SimulationConfig:
    default_clamp = EvolutionClampConfig()
    clamp_raw = (raw.get("evolution") or {}).get("clamp") or {}

    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return default

    try:
        tree = TreeConfig(**(raw.get("tree") or {}))
        animal = AnimalConfig(**(raw.get("animal") or {}))
        clamp = EvolutionClampConfig(
            speed=_pair(clamp_raw.get("speed"), default_clamp.speed),
            sense_radius=_pair(clamp_raw.get("sense_radius"), default_clamp.sense_radius),
            reproduction_threshold=_pair(
                clamp_raw.get("reproduction_threshold"), default_clamp.reproduction_threshold
            ),
            wander=_pair(clamp_raw.get("wander"), default_clamp.wander),
        )
        evolution_values = {k: v for k, v in (raw.get("evolution") or {}).items() if k != "clamp"}
        evolution = EvolutionConfig(clamp=clamp, **evolution_values)
        sim_values = {k: v for k, v in raw.items() if k not in {"tree", "animal", "evolution"}}
        config = SimulationConfig(tree=tree, animal=animal, evolution=evolution, **sim_values)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
    return config.validate()
