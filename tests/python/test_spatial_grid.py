from __future__ import annotations

import pytest

from habitat.exceptions import InvariantViolation
from habitat.sim.core.entities import Animal, Position, Tree
from habitat.sim.core.spatial_grid import OccupancyGrid
from habitat.sim.utils.grid import chebyshev, manhattan, steps_toward


def test_insert_keeps_cells_injective_and_bounded():
    grid = OccupancyGrid(5, 4, "moore")
    grid.insert(Position(1, 1), Tree(id=0))

    with pytest.raises(InvariantViolation):
        grid.insert(Position(1, 1), Animal(id=1, energy=1.0))
    with pytest.raises(InvariantViolation):
        grid.insert(Position(5, 0), Tree(id=2))
    with pytest.raises(InvariantViolation):
        grid.insert(Position(0, -1), Tree(id=3))

    assert len(grid) == 1
    assert grid.get(Position(1, 1)).id == 0


def test_remove_missing_cell_raises():
    grid = OccupancyGrid(3, 3, "moore")

    with pytest.raises(InvariantViolation):
        grid.remove(Position(0, 0))


def test_vacancy_accounts_for_bounds():
    grid = OccupancyGrid(3, 3, "moore")
    grid.insert(Position(2, 2), Tree(id=0))

    assert grid.is_vacant(Position(0, 0))
    assert not grid.is_vacant(Position(2, 2))
    assert not grid.is_vacant(Position(3, 0))


def test_adjacent_cells_depend_on_neighborhood():
    moore = OccupancyGrid(10, 10, "moore")
    von_neumann = OccupancyGrid(10, 10, "von_neumann")

    assert len(moore.adjacent(Position(5, 5))) == 8
    assert len(von_neumann.adjacent(Position(5, 5))) == 4
    assert sorted(moore.adjacent(Position(0, 0))) == [Position(0, 1), Position(1, 0), Position(1, 1)]
    assert sorted(von_neumann.adjacent(Position(0, 0))) == [Position(0, 1), Position(1, 0)]


def test_area_is_clipped_and_nearest_first():
    grid = OccupancyGrid(10, 10, "moore")
    center = Position(5, 5)
    cells = grid.area(center, 2)

    assert len(cells) == 24
    assert center not in cells
    distances = [chebyshev(center, cell) for cell in cells]
    assert distances == sorted(distances)
    assert len(grid.area(Position(0, 0), 2)) == 8


def test_von_neumann_area_is_a_diamond():
    grid = OccupancyGrid(10, 10, "von_neumann")
    center = Position(5, 5)
    cells = grid.area(center, 2)

    assert len(cells) == 12
    assert all(manhattan(center, cell) <= 2 for cell in cells)


def test_steps_toward_prefers_diagonal_then_x_axis():
    origin = Position(5, 5)

    assert steps_toward(origin, Position(7, 8), "moore") == [(1, 1), (1, 0), (0, 1)]
    assert steps_toward(origin, Position(7, 8), "von_neumann") == [(1, 0), (0, 1)]
    assert steps_toward(origin, Position(5, 2), "moore") == [(0, -1)]
    assert steps_toward(origin, origin, "moore") == []
