from __future__ import annotations

from typing import TYPE_CHECKING, List

from ...exceptions import InvariantViolation
from ..core.entities import Entity
from ..types.intents import TickIntents

if TYPE_CHECKING:
    from ..core.world import World


def apply_intents(world: World, intents: TickIntents) -> None:
    """Apply one tick's intents to the grid in a single pass.

    Removals go first, then every mover leaves its origin before any mover
    arrives, then newborn animals and sprouted trees are inserted in id order.
    Any collision raises :class:`InvariantViolation`.
    """
    grid = world._grid
    registry = world._registry
    locations = world._locations

    for removal in sorted(intents.removals, key=lambda r: r.entity_id):
        removed = grid.remove(removal.position)
        if removed.id != removal.entity_id:
            raise InvariantViolation(
                f"Expected entity {removal.entity_id} at {removal.position}, found {removed.id}"
            )
        registry.unregister(removal.entity_id)
        del locations[removal.entity_id]

    movers: List[tuple[Entity, int]] = []
    for index, move in enumerate(intents.moves):
        if move.entity_id in intents.dead:
            continue
        movers.append((grid.remove(move.origin), index))
    for entity, index in movers:
        destination = intents.moves[index].destination
        grid.insert(destination, entity)
        locations[entity.id] = destination

    for placement in sorted(intents.placements, key=lambda p: p.entity.id):
        grid.insert(placement.position, placement.entity)
        registry.register(placement.entity)
        locations[placement.entity.id] = placement.position
