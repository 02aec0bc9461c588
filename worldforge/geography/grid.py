"""Nearest-center partitioning of the bounded generation grid.

The map is a square of integer cells spanning ``-radius..radius`` on both axes
(side length ``2 * radius + 1``). Sectors are not stored as polygons; each cell
is simply assigned to the sector whose center is closest.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

from ..errors import InvalidInput

Cell = Tuple[int, int]

_COORDINATE_PATTERN = re.compile(r"^(-?\d+)-(-?\d+)$")


class SupportsCenter(Protocol):
    """Anything with an id and a center in grid space can act as a seed."""

    id: str
    center_x: float
    center_y: float


@dataclass(frozen=True)
class SeedPoint:
    """A partition seed: an identifier and a center in grid coordinates."""

    id: str
    center_x: float
    center_y: float


def format_coordinates(x: int, y: int) -> str:
    """Return the cell address used throughout game data (e.g. ``"-3-12"``)."""
    return f"{x}-{y}"


def parse_coordinates(value: str) -> Cell:
    """Inverse of :func:`format_coordinates`."""
    match = _COORDINATE_PATTERN.match(value.strip())
    if match is None:
        raise InvalidInput(f"Malformed cell coordinates: {value!r}")
    return int(match.group(1)), int(match.group(2))


def grid_cells(radius: int) -> Iterable[Cell]:
    """Yield every cell of the grid, ``x`` outer and ``y`` inner."""
    for x in range(-radius, radius + 1):
        for y in range(-radius, radius + 1):
            yield x, y


def partition(seeds: Sequence[SupportsCenter], radius: int) -> Dict[Cell, str]:
    """Assign every grid cell to the seed with the nearest center.

    The result is total (every cell of the ``(2r+1)^2`` grid appears exactly
    once) and deterministic for a given seed order. Seeds are scanned in input
    order with a strict ``<`` against the running minimum, so on equal
    distances the earlier seed keeps the cell. A seed may end up owning no
    cells at all.

    Args:
        seeds: Non-empty sequence of seeds exposing ``id``, ``center_x`` and
            ``center_y`` in the same coordinate space as the grid.
        radius: Grid half-width, at least 1.

    Returns:
        Insertion-ordered mapping of ``(x, y)`` to the owning seed id.

    Raises:
        InvalidInput: If ``seeds`` is empty or ``radius`` is below 1.
    """
    if not seeds:
        raise InvalidInput("Cannot partition the grid without at least one seed")
    if radius < 1:
        raise InvalidInput(f"Partition radius must be >= 1 (got {radius})")

    assignment: Dict[Cell, str] = {}
    for x, y in grid_cells(radius):
        owner = seeds[0].id
        best = math.inf
        for seed in seeds:
            distance = math.hypot(seed.center_x - x, seed.center_y - y)
            if distance < best:
                best = distance
                owner = seed.id
        assignment[(x, y)] = owner
    return assignment


def cells_by_seed(assignment: Dict[Cell, str], seed_ids: Iterable[str]) -> Dict[str, List[str]]:
    """Group an assignment into formatted cell lists per seed.

    Every id in ``seed_ids`` gets an entry, empty when the seed owns nothing.
    Cells keep the scan order of the assignment.
    """
    grouped: Dict[str, List[str]] = {seed_id: [] for seed_id in seed_ids}
    for (x, y), owner in assignment.items():
        grouped.setdefault(owner, []).append(format_coordinates(x, y))
    return grouped
