from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "trees",
    "animals",
    "births",
    "deaths",
    "avg_energy",
    "avg_age",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "trees",
    "animals",
    "births",
    "sprouts",
    "deaths",
    "trees_eaten",
    "avg_energy",
    "avg_age",
    "avg_speed",
    "avg_sense_radius",
    "avg_reproduction_threshold",
    "max_generation",
    "tick_ms",
    "births_per_animal",
    "deaths_per_animal",
    "trees_per_animal",
    "occupancy",
    "tick_ms_per_entity",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.trees,
        metrics.animals,
        metrics.births,
        metrics.deaths,
        f"{metrics.average_energy:.4f}",
        f"{metrics.average_age:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    animals = metrics.animals
    entities = metrics.trees + animals
    if animals <= 0:
        births_per_animal = 0.0
        deaths_per_animal = 0.0
        trees_per_animal = 0.0
    else:
        births_per_animal = metrics.births / animals
        deaths_per_animal = metrics.deaths / animals
        trees_per_animal = metrics.trees / animals
    occupancy = entities / (world.width * world.height)
    tick_ms_per_entity = 0.0 if entities <= 0 else tick_ms / entities

    return [
        metrics.tick,
        metrics.trees,
        animals,
        metrics.births,
        metrics.sprouts,
        metrics.deaths,
        metrics.trees_eaten,
        f"{metrics.average_energy:.4f}",
        f"{metrics.average_age:.4f}",
        f"{metrics.average_speed:.4f}",
        f"{metrics.average_sense_radius:.4f}",
        f"{metrics.average_reproduction_threshold:.4f}",
        metrics.max_generation,
        f"{tick_ms:.3f}",
        f"{births_per_animal:.4f}",
        f"{deaths_per_animal:.4f}",
        f"{trees_per_animal:.4f}",
        f"{occupancy:.6f}",
        f"{tick_ms_per_entity:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def _correlation(xs: list[float], ys: list[float]) -> float:
    if len(xs) != len(ys) or len(xs) < 2:
        return 0.0
    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)
    num = 0.0
    denom_x = 0.0
    denom_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        num += dx * dy
        denom_x += dx * dx
        denom_y += dy * dy
    denom = math.sqrt(denom_x * denom_y)
    if denom == 0.0:
        return 0.0
    return float(num / denom)


def build_config(
    config_path: Optional[Path] = None,
    seed: Optional[int] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> SimulationConfig:
    if config_path:
        config = SimulationConfig.from_yaml(config_path)
        if width is not None:
            config.width = width
        if height is not None:
            config.height = height
    else:
        # Default seed populations follow the grid area.
        config = SimulationConfig()
        config = config.scaled_to(
            width if width is not None else config.width,
            height if height is not None else config.height,
        )
    if seed is not None:
        config.seed = seed
    return config.validate()


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config: Optional[SimulationConfig] = None,
) -> World:
    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config = replace(config, seed=seed)
    world = World(config)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    tree_series: list[int] = []
    animal_series: list[int] = []
    generation_series: list[int] = []
    max_animals = (-1, -1)
    extinct_at: Optional[int] = None

    try:
        for _ in range(steps):
            world.update()
            metrics = world.metrics
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            if summary_path:
                tick_ms_series.append(tick_ms)
                tree_series.append(metrics.trees)
                animal_series.append(metrics.animals)
                generation_series.append(metrics.max_generation)
                if metrics.animals > max_animals[0]:
                    max_animals = (metrics.animals, metrics.tick)
            if extinct_at is None and metrics.animals == 0:
                extinct_at = metrics.tick
                logger.info("Animals went extinct at tick %d", metrics.tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        population_series = [float(t + a) for t, a in zip(tree_series, animal_series)]
        summary = {
            "steps": steps,
            "seed": config.seed,
            "width": config.width,
            "height": config.height,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "trees": _summary_stats([float(v) for v in tree_series]),
            "animals": _summary_stats([float(v) for v in animal_series]),
            "max_generation": max(generation_series, default=0),
            "extinct_at": extinct_at,
            "correlations": {
                "tick_ms_vs_population": _correlation(tick_ms_series, population_series),
                "trees_vs_animals": _correlation(
                    [float(v) for v in tree_series], [float(v) for v in animal_series]
                ),
            },
            "peaks": {
                "animals": {"value": max_animals[0], "tick": max_animals[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "trees": _summary_stats([float(v) for v in tree_series[tail_slice]]),
                "animals": _summary_stats([float(v) for v in animal_series[tail_slice]]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless simulated-evolution run")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = build_config(args.config, args.seed, args.width, args.height)
    world = run_headless(
        args.steps,
        None,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
    )
    final = world.metrics
    if final is not None:
        logger.info(
            "Finished %d ticks: %d trees, %d animals, max generation %d",
            final.tick,
            final.trees,
            final.animals,
            final.max_generation,
        )


if __name__ == "__main__":
    main()
