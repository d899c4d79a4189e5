from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    trees: int
    animals: int
    births: int
    sprouts: int
    deaths: int
    trees_eaten: int
    average_energy: float
    average_age: float
    average_speed: float
    average_sense_radius: float
    average_reproduction_threshold: float
    max_generation: int
    tick_duration_ms: float = 0.0
