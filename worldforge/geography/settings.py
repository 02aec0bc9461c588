"""Genre to map-presentation lookup."""

from __future__ import annotations

from typing import Dict, NamedTuple

from ..schemas import Genre, MapSettings


class MapStyle(NamedTuple):
    style: str
    grid_unit: str
    zone_label: str


# Explicit and total: every Genre member has a row.
GENRE_MAP_STYLES: Dict[Genre, MapStyle] = {
    Genre.FANTASY: MapStyle(style="fantasy", grid_unit="Miles", zone_label="Region"),
    Genre.MODERN: MapStyle(style="modern", grid_unit="Km", zone_label="District"),
    Genre.SCI_FI: MapStyle(style="sci-fi", grid_unit="Light Years", zone_label="System"),
    Genre.MAGITECH: MapStyle(style="sci-fi", grid_unit="Light Years", zone_label="System"),
}


def map_settings_for_genre(genre: Genre, grid_distance: int = 24) -> MapSettings:
    """Derive the map settings for a new world of the given genre."""
    row = GENRE_MAP_STYLES[Genre(genre)]
    return MapSettings(
        style=row.style,
        grid_unit=row.grid_unit,
        grid_distance=grid_distance,
        zone_label=row.zone_label,
    )
