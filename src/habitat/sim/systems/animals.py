from __future__ import annotations

import math
from typing import TYPE_CHECKING, List

from ..core.entities import Animal, Entity, EntityKind, Position
from ..types.intents import TickIntents
from ..utils.grid import distance, steps_toward
from . import evolution
from .lifecycle import apply_death

if TYPE_CHECKING:
    from ..core.world import World


def behave(world: World, roster: List[Entity], intents: TickIntents) -> None:
    """Sense, move, feed, pay metabolism, reproduce and die, one animal at a time.

    ``roster`` is in ascending id order, so the lower id always gets first pick
    of any contested cell.
    """
    for animal in roster:
        if animal.kind is not EntityKind.ANIMAL or not animal.alive:
            continue
        origin = world._locations[animal.id]
        destination = choose_destination(world, animal, origin, intents)
        if destination != origin:
            intents.move(animal.id, origin, destination)
            feed(world, animal, destination, intents)
        animal.energy -= world._config.animal.metabolism_cost
        reproduce(world, animal, destination, intents)
        apply_death(world, animal, intents)


def sense_food(world: World, animal: Animal, origin: Position, intents: TickIntents) -> Position | None:
    """Return the cell of the nearest uneaten tree, breaking distance ties by lowest tree id."""
    radius = int(math.floor(animal.traits.sense_radius))
    if radius < 1:
        return None
    grid = world._grid
    neighborhood = grid.neighborhood
    best: Position | None = None
    best_key: tuple[int, int] | None = None
    for cell in grid.area(origin, radius):
        occupant = grid.get(cell)
        if occupant is None or occupant.kind is not EntityKind.TREE or occupant.id in intents.eaten:
            continue
        key = (distance(origin, cell, neighborhood), occupant.id)
        if best_key is None or key < best_key:
            best = cell
            best_key = key
    return best


def is_enterable(world: World, cell: Position, intents: TickIntents) -> bool:
    grid = world._grid
    if not grid.in_bounds(cell) or intents.is_claimed(cell):
        return False
    occupant = grid.get(cell)
    if occupant is None:
        return True
    return occupant.kind is EntityKind.TREE and occupant.id not in intents.eaten


def choose_destination(world: World, animal: Animal, origin: Position, intents: TickIntents) -> Position:
    rng = world._rng
    traits = animal.traits
    if not rng.chance(traits.speed):
        return origin

    food = sense_food(world, animal, origin, intents)
    if food is not None and not rng.chance(traits.wander):
        for dx, dy in steps_toward(origin, food, world._grid.neighborhood):
            step = origin.offset(dx, dy)
            if is_enterable(world, step, intents):
                return step
        return origin

    options = [cell for cell in world._grid.adjacent(origin) if is_enterable(world, cell, intents)]
    step = rng.sample_choice(options)
    return origin if step is None else step


def feed(world: World, animal: Animal, destination: Position, intents: TickIntents) -> None:
    occupant = world._grid.get(destination)
    if occupant is None or occupant.kind is not EntityKind.TREE:
        return
    intents.eat(occupant, destination)
    animal_config = world._config.animal
    animal.energy = min(animal_config.max_energy, animal.energy + animal_config.feeding_yield)


def reproduce(world: World, animal: Animal, position: Position, intents: TickIntents) -> Animal | None:
    animal_config = world._config.animal
    if animal.energy < animal.traits.reproduction_threshold:
        return None
    if animal.energy - animal_config.reproduction_cost <= 0:
        return None
    cap = animal_config.max_population
    if cap is not None and world.animal_count + intents.births >= cap:
        return None
    grid = world._grid
    sites = [cell for cell in grid.adjacent(position) if cell not in grid and not intents.is_claimed(cell)]
    site = world._rng.sample_choice(sites)
    if site is None:
        return None

    animal.energy -= animal_config.reproduction_cost
    child_energy = animal.energy * 0.5
    animal.energy -= child_energy
    child = Animal(
        id=world._registry.next_id(),
        energy=child_energy,
        generation=animal.generation + 1,
        traits=evolution.mutate_traits(world._config.evolution, world._trait_rng, animal.traits),
    )
    intents.place(child, site)
    return child
