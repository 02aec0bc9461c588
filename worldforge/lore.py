"""
Lore assembly: turn a confirmed WorldPreview into persisted lore entries.

Output order is part of the export format and must round-trip:
history -> races (input order) -> factions (input order). The "World
Overview" entry is appended later by the pipeline once the global summary
has been generated.

Keywords feed later retrieval scoring, so they are always lower-cased.
Duplicates are allowed and an empty list is fine; null never is.
"""

from typing import Iterable, List

from .schemas import Faction, Genre, LoreEntry, Race, WorldPreview

HISTORY_TITLE = "World History"
OVERVIEW_TITLE = "World Overview"

HISTORY_TAGS = ["origin", "history", "world_lore"]
RACE_TAGS = ["race", "npc"]
FACTION_TAGS = ["faction", "politics"]
OVERVIEW_TAGS = ["history", "world_lore"]


def _lower_keywords(keywords: Iterable[str] | None) -> List[str]:
    return [keyword.lower() for keyword in keywords or []]


def history_entry(context: str, world_name: str) -> LoreEntry:
    """Build the origin/history entry from the preview prose."""
    return LoreEntry(
        title=HISTORY_TITLE,
        content=context,
        tags=list(HISTORY_TAGS),
        keywords=["history", "overview", world_name.lower()],
    )


def race_entry(race: Race) -> LoreEntry:
    """Build the lore entry describing one race."""
    content = (
        f"{race.description}\n\n"
        f"Personality: {race.personality}\n"
        f"Allegiance: {race.faction or 'None'}"
    )
    return LoreEntry(
        title=race.name,
        content=content,
        tags=list(RACE_TAGS),
        keywords=_lower_keywords(race.keywords),
    )


def faction_entry(faction: Faction) -> LoreEntry:
    """Build the lore entry describing one faction."""
    content = (
        f"Goals: {faction.goals}\n\n"
        f"Relationships: {faction.relationships}\n"
        f"Composition: {faction.racial_composition}"
    )
    return LoreEntry(
        title=faction.name,
        content=content,
        tags=list(FACTION_TAGS),
        keywords=_lower_keywords(faction.keywords),
    )


def assemble_lore(preview: WorldPreview, world_name: str) -> List[LoreEntry]:
    """Convert a preview into the provisional lore collection.

    Args:
        preview: Confirmed stage-1 result
        world_name: Name of the world being generated

    Returns:
        New list: history entry, then one entry per race, then one per faction
    """
    entries: List[LoreEntry] = [history_entry(preview.context, world_name)]
    entries.extend(race_entry(race) for race in preview.races)
    entries.extend(faction_entry(faction) for faction in preview.factions)
    return entries


def build_overview_entry(summary: str, genre: Genre) -> LoreEntry:
    """Build the "World Overview" entry appended after the summary call."""
    return LoreEntry(
        title=OVERVIEW_TITLE,
        content=summary,
        tags=list(OVERVIEW_TAGS),
        keywords=["overview", "summary", Genre(genre).value.lower()],
    )
