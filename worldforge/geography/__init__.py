"""Map geometry: grid partitioning and genre-driven map settings."""

from .grid import (
    Cell,
    SeedPoint,
    cells_by_seed,
    format_coordinates,
    grid_cells,
    parse_coordinates,
    partition,
)
from .settings import GENRE_MAP_STYLES, MapStyle, map_settings_for_genre

__all__ = [
    "Cell",
    "SeedPoint",
    "cells_by_seed",
    "format_coordinates",
    "grid_cells",
    "parse_coordinates",
    "partition",
    "GENRE_MAP_STYLES",
    "MapStyle",
    "map_settings_for_genre",
]
