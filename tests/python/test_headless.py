import csv
import json

import pytest

from habitat.app.headless import build_config, run_headless
from habitat.sim.core.config import SimulationConfig, TreeConfig


def _small_config() -> SimulationConfig:
    return SimulationConfig(
        width=30,
        height=30,
        initial_trees=120,
        initial_animals=30,
        tree=TreeConfig(maturity_stage=3, spawn_chance=0.1),
    )


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_basic_log_header(tmp_path):
    log_path = tmp_path / "basic.csv"
    run_headless(
        steps=2,
        seed=1,
        log_path=log_path,
        deterministic_log=True,
        log_format="basic",
        config=_small_config(),
    )
    rows = _read_csv(log_path)
    assert len(rows) == 3
    assert rows[0] == ["tick", "trees", "animals", "births", "deaths", "avg_energy", "avg_age", "tick_ms"]
    assert [row[0] for row in rows[1:]] == ["1", "2"]


def test_headless_detailed_log_header_and_ratios(tmp_path):
    log_path = tmp_path / "detailed.csv"
    world = run_headless(
        steps=3,
        seed=2,
        log_path=log_path,
        deterministic_log=True,
        log_format="detailed",
        config=_small_config(),
    )
    rows = _read_csv(log_path)
    assert len(rows) == 4
    header = rows[0]
    assert header == [
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

    idx = {name: i for i, name in enumerate(header)}
    last_row = rows[-1]
    trees = int(last_row[idx["trees"]])
    animals = int(last_row[idx["animals"]])
    births = int(last_row[idx["births"]])

    expected_births = 0.0 if animals == 0 else births / animals
    expected_trees = 0.0 if animals == 0 else trees / animals

    assert trees == world.tree_count
    assert animals == world.animal_count
    assert float(last_row[idx["births_per_animal"]]) == pytest.approx(expected_births, abs=1e-4)
    assert float(last_row[idx["trees_per_animal"]]) == pytest.approx(expected_trees, abs=1e-4)
    assert float(last_row[idx["occupancy"]]) == pytest.approx((trees + animals) / 900, abs=1e-6)
    assert float(last_row[idx["tick_ms"]]) == 0.0


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    run_headless(
        steps=4,
        seed=3,
        log_path=None,
        deterministic_log=True,
        log_format="basic",
        summary_path=summary_path,
        summary_window=2,
        config=_small_config(),
    )
    payload = json.loads(summary_path.read_text())
    assert payload["steps"] == 4
    assert payload["seed"] == 3
    assert payload["width"] == 30
    assert payload["log_format"] == "basic"
    assert payload["tick_ms"]["max"] == 0.0
    assert "trees" in payload
    assert "animals" in payload
    assert "trees_vs_animals" in payload["correlations"]
    assert payload["peaks"]["animals"]["tick"] >= 1
    assert payload["tail_window"]["window"] == 2


def test_deterministic_logs_match_for_same_seed(tmp_path):
    first = tmp_path / "first.csv"
    second = tmp_path / "second.csv"
    run_headless(steps=25, seed=9, log_path=first, deterministic_log=True, config=_small_config())
    run_headless(steps=25, seed=9, log_path=second, deterministic_log=True, config=_small_config())

    assert first.read_text() == second.read_text()


def test_unknown_log_format_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        run_headless(steps=1, seed=1, log_path=tmp_path / "x.csv", log_format="verbose", config=_small_config())


def test_build_config_applies_overrides(tmp_path):
    config_path = tmp_path / "sim.yaml"
    config_path.write_text("initial_trees: 10\ninitial_animals: 5\nanimal:\n  feeding_yield: 12\n")

    config = build_config(config_path, seed=5, width=20, height=15)

    assert (config.width, config.height, config.seed) == (20, 15, 5)
    assert config.initial_trees == 10
    assert config.animal.feeding_yield == 12


def test_build_config_scales_default_population_to_small_grids():
    config = build_config(width=12, height=8)

    assert (config.width, config.height) == (12, 8)
    assert config.initial_trees + config.initial_animals <= 96


def test_seed_override_leaves_caller_config_untouched():
    config = _small_config()

    world = run_headless(steps=1, seed=77, log_path=None, config=config)

    assert world.config.seed == 77
    assert config.seed == 42
