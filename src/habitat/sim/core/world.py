from __future__ import annotations

import copy
import logging
from dataclasses import replace
from time import perf_counter
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ...exceptions import ConfigurationError
from ..systems import animals, commit, evolution, lifecycle, trees
from ..systems import metrics as metrics_system
from ..types.intents import TickIntents
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from .config import SimulationConfig
from .entities import Animal, AnimalTraits, Entity, EntityKind, Occupant, Position, Tree
from .registry import EntityRegistry
from .rng import DeterministicRng, derive_stream_seed
from .spatial_grid import OccupancyGrid

logger = logging.getLogger(__name__)

_TRAIT_RNG_SALT = 0x7BADCA11C0FFEE01


def new_world(
    width: int,
    height: int,
    seed: Optional[int] = None,
    config: Optional[SimulationConfig] = None,
) -> "World":
    """Build a seeded world of ``width`` x ``height`` cells.

    ``config`` supplies everything except the bounds (and the seed, when one is
    given) and is never modified. Without one, the default seed populations are
    scaled to the grid area. Raises :class:`ConfigurationError` for non-positive
    bounds.
    """
    if config is None:
        config = SimulationConfig().scaled_to(width, height)
    else:
        config = replace(config, width=width, height=height)
    if seed is not None:
        config = replace(config, seed=seed)
    return World(config)


class World:
    """Bounded grid of trees and animals advanced one tick at a time by :meth:`update`.

    The world is the only owner of entity state. Readers iterate it through
    :meth:`entities`, :meth:`occupants` or :meth:`snapshot` between ticks.
    """

    def __init__(self, config: SimulationConfig):
        self._config = copy.deepcopy(config).validate()
        config = self._config
        self._rng = DeterministicRng(config.seed)
        self._trait_rng = DeterministicRng(derive_stream_seed(config.seed, _TRAIT_RNG_SALT))
        self._grid = OccupancyGrid(config.width, config.height, config.neighborhood)
        self._registry = EntityRegistry()
        self._locations: Dict[int, Position] = {}
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()
        logger.info(
            "Created %dx%d world (seed=%d) with %d trees and %d animals",
            config.width,
            config.height,
            config.seed,
            config.initial_trees,
            config.initial_animals,
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def tree_count(self) -> int:
        return self._registry.count(EntityKind.TREE)

    @property
    def animal_count(self) -> int:
        return self._registry.count(EntityKind.ANIMAL)

    def reset(self) -> None:
        self._grid.clear()
        self._registry.reset()
        self._locations.clear()
        self._rng.reset()
        self._trait_rng.reset()
        self._tick = 0
        self._metrics = None
        self._bootstrap_population()
        logger.info("World reset to seed %d", self._config.seed)

    def update(self) -> None:
        """Advance exactly one tick: aging, trees, animals, then a single commit pass."""
        start = perf_counter()
        roster: List[Entity] = list(self._registry)
        intents = TickIntents()

        lifecycle.age_entities(self, roster, intents)
        trees.grow_and_spawn(self, roster, intents)
        animals.behave(self, roster, intents)
        commit.apply_intents(self, intents)

        self._tick += 1
        elapsed_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self, self._tick, intents, elapsed_ms)
        logger.debug(
            "tick %d: %d births, %d sprouts, %d deaths, %d trees eaten",
            self._tick,
            intents.births,
            intents.sprouts,
            intents.deaths,
            len(intents.eaten),
        )

    def entities(self) -> Iterator[Tuple[Position, Entity]]:
        """Yield ``(position, entity)`` pairs in ascending id order.

        The set of pairs is fixed when iteration starts; calling again starts a
        fresh pass.
        """
        pairs = [(self._locations[entity.id], entity) for entity in self._registry]
        yield from pairs

    def occupants(self) -> List[Occupant]:
        return [Occupant(position, entity.kind, entity.id) for position, entity in self.entities()]

    def entity_at(self, position: Position) -> Entity | None:
        return self._grid.get(Position(*position))

    def position_of(self, entity_id: int) -> Position | None:
        return self._locations.get(entity_id)

    def get(self, entity_id: int) -> Entity | None:
        return self._registry.get(entity_id)

    def spawn_tree(self, position: Position, growth_stage: int = 0, age: int = 0) -> Tree:
        """Place a tree between ticks; raises ``InvariantViolation`` on an occupied or out-of-bounds cell."""
        tree = Tree(id=self._registry.next_id(), age=age, growth_stage=growth_stage)
        self._place(Position(*position), tree)
        return tree

    def spawn_animal(
        self,
        position: Position,
        energy: Optional[float] = None,
        traits: Optional[AnimalTraits] = None,
        age: int = 0,
    ) -> Animal:
        animal_config = self._config.animal
        energy = animal_config.initial_energy if energy is None else energy
        if not 0 < energy <= animal_config.max_energy:
            raise ConfigurationError(f"Animal energy must be in (0, {animal_config.max_energy}], got {energy}")
        animal = Animal(
            id=self._registry.next_id(),
            energy=energy,
            age=age,
            traits=(
                evolution.clamp_traits(self._config.evolution, traits.copy())
                if traits is not None
                else evolution.default_traits(animal_config)
            ),
        )
        self._place(Position(*position), animal)
        return animal

    def snapshot(self) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(self, self._tick, None, 0.0)
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            entities=[self._entity_snapshot(position, entity) for position, entity in self.entities()],
            world=SnapshotWorld(width=self.width, height=self.height),
            metadata=SnapshotMetadata(
                seed=self._config.seed,
                neighborhood=self._config.neighborhood,
                config_version=self._config.config_version,
            ),
        )

    def _place(self, position: Position, entity: Entity) -> None:
        self._grid.insert(position, entity)
        self._registry.register(entity)
        self._locations[entity.id] = position

    def _bootstrap_population(self) -> None:
        config = self._config
        total = config.initial_trees + config.initial_animals
        cells = self._rng.sample_indices(config.width * config.height, total)
        for index, cell in enumerate(cells):
            position = Position(cell % config.width, cell // config.width)
            if index < config.initial_trees:
                entity: Entity = Tree(
                    id=self._registry.next_id(),
                    growth_stage=self._rng.next_int(config.tree.maturity_stage + 1),
                )
            else:
                entity = Animal(
                    id=self._registry.next_id(),
                    energy=config.animal.initial_energy,
                    traits=evolution.seed_traits(config.animal, config.evolution, self._trait_rng),
                )
            self._place(position, entity)

    @staticmethod
    def _entity_snapshot(position: Position, entity: Entity) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": entity.id,
            "kind": entity.kind.value,
            "x": position.x,
            "y": position.y,
            "age": entity.age,
        }
        if isinstance(entity, Tree):
            payload["growth_stage"] = entity.growth_stage
        else:
            payload["energy"] = entity.energy
            payload["generation"] = entity.generation
            payload["trait_speed"] = entity.traits.speed
            payload["trait_sense_radius"] = entity.traits.sense_radius
            payload["trait_reproduction_threshold"] = entity.traits.reproduction_threshold
            payload["trait_wander"] = entity.traits.wander
        return payload
