"""Tests for nearest-center grid partitioning."""

import pytest

from worldforge.errors import InvalidInput
from worldforge.geography import (
    SeedPoint,
    cells_by_seed,
    format_coordinates,
    grid_cells,
    parse_coordinates,
    partition,
)


def make_seeds() -> list[SeedPoint]:
    return [
        SeedPoint(id="north", center_x=0, center_y=-8),
        SeedPoint(id="east", center_x=9, center_y=2),
        SeedPoint(id="south-west", center_x=-7, center_y=7),
        SeedPoint(id="heart", center_x=1, center_y=1),
    ]


def test_partition_is_total_and_disjoint():
    radius = 6
    assignment = partition(make_seeds(), radius)

    expected = {(x, y) for x in range(-radius, radius + 1) for y in range(-radius, radius + 1)}
    assert set(assignment) == expected
    assert len(assignment) == (2 * radius + 1) ** 2

    grouped = cells_by_seed(assignment, [seed.id for seed in make_seeds()])
    all_cells = [cell for cells in grouped.values() for cell in cells]
    assert len(all_cells) == len(set(all_cells)) == len(expected)


def test_partition_is_deterministic():
    first = partition(make_seeds(), 13)
    second = partition(make_seeds(), 13)

    assert list(first.items()) == list(second.items())


def test_tie_goes_to_earlier_seed():
    seeds = [
        SeedPoint(id="west", center_x=-5, center_y=0),
        SeedPoint(id="east", center_x=5, center_y=0),
    ]

    assignment = partition(seeds, 13)
    assert assignment[(0, 0)] == "west"

    reversed_assignment = partition(list(reversed(seeds)), 13)
    assert reversed_assignment[(0, 0)] == "east"


def test_cell_goes_to_nearest_center():
    seeds = [
        SeedPoint(id="a", center_x=-3, center_y=0),
        SeedPoint(id="b", center_x=3, center_y=0),
    ]

    assignment = partition(seeds, 4)

    assert assignment[(-4, 2)] == "a"
    assert assignment[(4, -2)] == "b"


def test_seed_outside_grid_still_partitions():
    seeds = [
        SeedPoint(id="far", center_x=100, center_y=100),
        SeedPoint(id="near", center_x=0, center_y=0),
    ]

    assignment = partition(seeds, 2)

    assert set(assignment.values()) == {"near"}
    grouped = cells_by_seed(assignment, ["far", "near"])
    assert grouped["far"] == []
    assert len(grouped["near"]) == 25


def test_single_seed_owns_everything():
    assignment = partition([SeedPoint(id="only", center_x=0, center_y=0)], 1)

    assert len(assignment) == 9
    assert set(assignment.values()) == {"only"}


@pytest.mark.parametrize("radius", [0, -3])
def test_partition_rejects_small_radius(radius):
    with pytest.raises(InvalidInput):
        partition(make_seeds(), radius)


def test_partition_rejects_empty_seeds():
    with pytest.raises(InvalidInput):
        partition([], 5)


def test_grid_cells_scan_order():
    cells = list(grid_cells(1))

    assert cells[0] == (-1, -1)
    assert cells[1] == (-1, 0)
    assert cells[-1] == (1, 1)


def test_cells_by_seed_formats_coordinates():
    seeds = [SeedPoint(id="only", center_x=0, center_y=0)]
    grouped = cells_by_seed(partition(seeds, 1), ["only"])

    assert grouped["only"][0] == "-1--1"
    assert "0-0" in grouped["only"]


def test_coordinate_helpers():
    assert format_coordinates(-3, 12) == "-3-12"
    assert parse_coordinates("-3-12") == (-3, 12)
    assert parse_coordinates("0-0") == (0, 0)
    assert parse_coordinates("4--7") == (4, -7)

    with pytest.raises(InvalidInput):
        parse_coordinates("north")
