"""
World bootstrapping: assemble the initial GameData snapshot.

Pure assembly with no I/O. The pipeline builds the snapshot once, hands it to
the persistence store whole, and keeps no reference afterwards.
"""

from datetime import datetime
from typing import List, Sequence
from uuid import uuid4

from .errors import InvariantViolation
from .geography import format_coordinates
from .schemas import (
    ChatMessage,
    GameData,
    GenerationSeed,
    LoreEntry,
    MapSector,
    MapSettings,
    MapZone,
    StoryLog,
)

ORIGIN = format_coordinates(0, 0)
START_ZONE_TAGS = ["location", "safe", "start"]


def _short_id() -> str:
    return uuid4().hex[:12]


def format_game_time(moment: datetime) -> str:
    """Format an in-game timestamp, e.g. ``"January 1, 2024, 08:00"``."""
    return f"{moment:%B} {moment.day}, {moment.year}, {moment:%H:%M}"


def select_starting_sector(sectors: Sequence[MapSector]) -> MapSector:
    """Return the sector owning the origin cell, else the first sector.

    Total coverage of the partition means the fallback should never trigger;
    it is kept for sector lists that did not come from a full partition.
    """
    if not sectors:
        raise InvariantViolation("Cannot select a starting sector from an empty sector list")
    for sector in sectors:
        if ORIGIN in sector.coordinates:
            return sector
    return sectors[0]


def build_starting_zone(sector: MapSector) -> MapZone:
    """Create the single starting zone at the origin inside ``sector``."""
    return MapZone(
        id=f"zone-start-{_short_id()}",
        name=f"{sector.name} Gateway",
        description=f"The central crossing of the {sector.name}. Discovery begins here.",
        hostility=0,
        coordinates=ORIGIN,
        sector_id=sector.id,
        visited=True,
        tags=list(START_ZONE_TAGS),
        keywords=list(sector.keywords),
    )


def build_gm_settings(seed: GenerationSeed) -> str:
    """Serialise the seed's narrative settings for the game master prompt."""
    return (
        f"Setting: {seed.genre.value}. "
        f"Themes: {', '.join(seed.themes)}. "
        f"Additional context: {seed.additional_context}."
    )


def bootstrap_game_data(
    lore: Sequence[LoreEntry],
    sectors: Sequence[MapSector],
    start_zone: MapZone,
    seed: GenerationSeed,
    summary_text: str,
    map_settings: MapSettings,
    start_timestamp: str,
) -> GameData:
    """Assemble the root game state for a freshly generated world.

    Args:
        lore: Final lore entries (history, races, factions, overview)
        sectors: Partitioned map sectors
        start_zone: The single starting zone
        seed: Generation parameters
        summary_text: Global world summary
        map_settings: Genre-derived map settings
        start_timestamp: Formatted in-game start time

    Returns:
        Fully populated GameData; every list field is a list, never None.

    Raises:
        InvariantViolation: If ``start_zone`` does not belong to any sector.
    """
    sector_ids = {sector.id for sector in sectors}
    if start_zone.sector_id not in sector_ids:
        raise InvariantViolation(
            f"Starting zone '{start_zone.id}' references sector "
            f"'{start_zone.sector_id}', which is not among the {len(sector_ids)} generated sectors"
        )

    location = start_zone.name
    story: List[StoryLog] = [
        StoryLog(
            id=f"story-start-{_short_id()}",
            timestamp=start_timestamp,
            location=location,
            content=(
                f"You arrive in {location}. The World Of {seed.name} lies before you, "
                "waiting to be explored."
            ),
            is_new=True,
        )
    ]
    messages: List[ChatMessage] = [
        ChatMessage(
            id=f"system-start-{_short_id()}",
            sender="system",
            content=(
                f"Welcome to {seed.name}. You stand in {location}. Use the Character Sheet "
                "to define who you are, or begin your journey immediately."
            ),
            location=location,
        )
    ]

    return GameData(
        story=story,
        objectives=[],
        knowledge=[],
        world=[entry.model_copy(deep=True) for entry in lore],
        gm_notes="",
        world_summary=summary_text,
        gm_settings=build_gm_settings(seed),
        map_settings=map_settings.model_copy(deep=True),
        map_sectors=[sector.model_copy(deep=True) for sector in sectors],
        map_zones=[start_zone.model_copy(deep=True)],
        messages=messages,
        player_coordinates=start_zone.coordinates,
        current_time=start_timestamp,
        skill_configuration=seed.genre,
    )
