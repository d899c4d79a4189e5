from __future__ import annotations

from typing import List, Tuple

from ..core.entities import Position

MOORE = "moore"
VON_NEUMANN = "von_neumann"

# Fixed orders keep random choices reproducible for a given seed.
_MOORE_STEPS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)
_VON_NEUMANN_STEPS: Tuple[Tuple[int, int], ...] = ((0, -1), (-1, 0), (1, 0), (0, 1))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def chebyshev(a: Position, b: Position) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))


def manhattan(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def distance(a: Position, b: Position, neighborhood: str) -> int:
    if neighborhood == VON_NEUMANN:
        return manhattan(a, b)
    return chebyshev(a, b)


def step_offsets(neighborhood: str) -> Tuple[Tuple[int, int], ...]:
    if neighborhood == VON_NEUMANN:
        return _VON_NEUMANN_STEPS
    return _MOORE_STEPS


def area_offsets(radius: int, neighborhood: str) -> List[Tuple[int, int]]:
    """Offsets within ``radius`` (origin excluded), nearest rings first."""
    offsets = []
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if dx == 0 and dy == 0:
                continue
            if neighborhood == VON_NEUMANN and abs(dx) + abs(dy) > radius:
                continue
            offsets.append((dx, dy))
    if neighborhood == VON_NEUMANN:
        offsets.sort(key=lambda o: abs(o[0]) + abs(o[1]))
    else:
        offsets.sort(key=lambda o: max(abs(o[0]), abs(o[1])))
    return offsets


def steps_toward(origin: Position, target: Position, neighborhood: str) -> List[Tuple[int, int]]:
    """Candidate single steps from ``origin`` toward ``target`` in priority order.

    Moore tries the diagonal first, then the x axis, then the y axis. Von
    Neumann takes the x axis first when both axes still need closing.
    """
    dx = _sign(target.x - origin.x)
    dy = _sign(target.y - origin.y)
    steps: List[Tuple[int, int]] = []
    if neighborhood != VON_NEUMANN and dx and dy:
        steps.append((dx, dy))
    if dx:
        steps.append((dx, 0))
    if dy:
        steps.append((0, dy))
    return steps
