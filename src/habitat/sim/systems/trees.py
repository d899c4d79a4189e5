from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..core.entities import Entity, EntityKind, Position, Tree
from ..types.intents import TickIntents

if TYPE_CHECKING:
    from ..core.world import World


def grow_and_spawn(world: World, roster: List[Entity], intents: TickIntents) -> None:
    tree_config = world._config.tree
    maturity = tree_config.maturity_stage
    cap = tree_config.max_population
    tree_count = world.tree_count

    for tree in roster:
        if tree.kind is not EntityKind.TREE:
            continue
        if tree.growth_stage < maturity:
            tree.growth_stage += 1
        if not tree.is_mature(maturity):
            continue
        if cap is not None and tree_count + intents.sprouts >= cap:
            continue
        if not world._rng.chance(tree_config.spawn_chance):
            continue
        site = _pick_vacant_site(world, world._locations[tree.id], tree_config.spawn_radius, intents)
        if site is None:
            continue
        intents.place(Tree(id=world._registry.next_id()), site)


def _pick_vacant_site(world: World, origin: Position, radius: int, intents: TickIntents) -> Position | None:
    grid = world._grid
    candidates = [
        cell for cell in grid.area(origin, radius) if cell not in grid and not intents.is_claimed(cell)
    ]
    return world._rng.sample_choice(candidates)
