from __future__ import annotations

import pytest

from habitat.exceptions import ConfigurationError
from habitat.sim.core.config import SimulationConfig, TreeConfig, load_config


def test_defaults_are_valid():
    config = SimulationConfig().validate()

    assert config.width == 1024
    assert config.height == 768
    assert config.neighborhood == "moore"


def test_from_yaml_reads_nested_sections(tmp_path):
    path = tmp_path / "world.yaml"
    path.write_text(
        "\n".join(
            [
                "width: 40",
                "height: 30",
                "seed: 9",
                "initial_trees: 12",
                "initial_animals: 4",
                "neighborhood: von_neumann",
                "tree:",
                "  spawn_chance: 0.5",
                "  max_population: null",
                "animal:",
                "  feeding_yield: 12.5",
                "evolution:",
                "  mutation_strength: 0.1",
                "  clamp:",
                "    speed: [0.2, 0.8]",
            ]
        )
    )

    config = SimulationConfig.from_yaml(path)

    assert (config.width, config.height, config.seed) == (40, 30, 9)
    assert config.neighborhood == "von_neumann"
    assert config.tree.spawn_chance == 0.5
    assert config.tree.max_population is None
    assert config.animal.feeding_yield == 12.5
    assert config.evolution.mutation_strength == 0.1
    assert config.evolution.clamp.speed == (0.2, 0.8)
    assert config.evolution.clamp.wander == (0.0, 0.5)


def test_empty_yaml_yields_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert SimulationConfig.from_yaml(path) == SimulationConfig()


def test_null_sections_fall_back_to_defaults(tmp_path):
    path = tmp_path / "nulls.yaml"
    path.write_text("tree:\nanimal:\nevolution:\n")

    assert SimulationConfig.from_yaml(path) == SimulationConfig()
    assert load_config({"evolution": {"clamp": None}}).evolution.clamp == SimulationConfig().evolution.clamp


def test_scaled_to_keeps_density_and_leaves_original_alone():
    base = SimulationConfig()
    small = base.scaled_to(512, 384)

    assert (small.width, small.height) == (512, 384)
    assert small.initial_trees == 1_000
    assert small.initial_animals == 150
    assert (base.width, base.initial_trees) == (1024, 4_000)
    assert base.scaled_to(1, 1).validate().initial_trees == 0


def test_unknown_keys_are_configuration_errors():
    with pytest.raises(ConfigurationError):
        load_config({"tree": {"leaf_colour": "green"}})


@pytest.mark.parametrize(
    "config",
    [
        SimulationConfig(width=0),
        SimulationConfig(height=-3),
        SimulationConfig(width=2, height=2, initial_trees=3, initial_animals=2),
        SimulationConfig(neighborhood="hex"),
        SimulationConfig(tree=TreeConfig(spawn_chance=1.5)),
        SimulationConfig(tree=TreeConfig(spawn_radius=0)),
    ],
)
def test_invalid_values_are_rejected(config):
    with pytest.raises(ConfigurationError):
        config.validate()


def test_inverted_clamp_is_rejected():
    with pytest.raises(ConfigurationError):
        load_config({"evolution": {"clamp": {"sense_radius": [5.0, 2.0]}}})


def test_threshold_clamp_must_exceed_reproduction_cost():
    with pytest.raises(ConfigurationError):
        load_config({"animal": {"reproduction_cost": 60.0}})


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        SimulationConfig(width=-1).validate()
