"""Tests for the initial GameData snapshot and its helpers."""

from datetime import date, datetime, time

import pytest

from worldforge.bootstrap import (
    bootstrap_game_data,
    build_starting_zone,
    format_game_time,
    select_starting_sector,
)
from worldforge.errors import InvariantViolation
from worldforge.geography import map_settings_for_genre
from worldforge.schemas import Genre, GenerationSeed, LoreEntry, MapSector


def make_seed(**overrides) -> GenerationSeed:
    values = dict(
        name="Eldoria",
        genre=Genre.FANTASY,
        themes=["Intrigue", "Exploration"],
        race_count=2,
        faction_count=1,
        start_date=date(2024, 1, 1),
        start_time=time(8, 0),
        additional_context="Floating islands",
    )
    values.update(overrides)
    return GenerationSeed(**values)


def make_sectors() -> list[MapSector]:
    return [
        MapSector(id="sector-0", name="Ashen Wastes", coordinates=["-1--1", "-1-0"], keywords=["ash"]),
        MapSector(
            id="sector-1",
            name="Verdant Reach",
            color="#22aa44",
            coordinates=["0-0", "0-1"],
            keywords=["forest", "green"],
        ),
    ]


def make_lore() -> list[LoreEntry]:
    return [
        LoreEntry(title="World History", content="Long ago...", tags=["history"]),
        LoreEntry(title="Humans", content="Settlers", tags=["race"]),
    ]


def test_format_game_time():
    assert format_game_time(datetime(2024, 1, 1, 8, 0)) == "January 1, 2024, 08:00"
    assert format_game_time(datetime(1999, 12, 31, 23, 5)) == "December 31, 1999, 23:05"


def test_select_starting_sector_prefers_origin_owner():
    assert select_starting_sector(make_sectors()).id == "sector-1"


def test_select_starting_sector_falls_back_to_first():
    sectors = [
        MapSector(id="sector-a", name="A", coordinates=["1-1"]),
        MapSector(id="sector-b", name="B", coordinates=[]),
    ]

    assert select_starting_sector(sectors).id == "sector-a"


def test_select_starting_sector_requires_sectors():
    with pytest.raises(InvariantViolation):
        select_starting_sector([])


def test_build_starting_zone():
    sector = make_sectors()[1]
    zone = build_starting_zone(sector)

    assert zone.id.startswith("zone-start-")
    assert zone.name == "Verdant Reach Gateway"
    assert zone.description == "The central crossing of the Verdant Reach. Discovery begins here."
    assert zone.coordinates == "0-0"
    assert zone.sector_id == "sector-1"
    assert zone.hostility == 0
    assert zone.visited is True
    assert zone.tags == ["location", "safe", "start"]
    assert zone.keywords == ["forest", "green"]
    assert zone.keywords is not sector.keywords


def test_bootstrap_populates_snapshot():
    sectors = make_sectors()
    zone = build_starting_zone(sectors[1])
    seed = make_seed()
    lore = make_lore()
    settings = map_settings_for_genre(seed.genre)

    data = bootstrap_game_data(
        lore, sectors, zone, seed, "A realm adrift.", settings, "January 1, 2024, 08:00"
    )

    assert [log.content for log in data.story] == [
        "You arrive in Verdant Reach Gateway. The World Of Eldoria lies before you, "
        "waiting to be explored."
    ]
    assert data.story[0].timestamp == "January 1, 2024, 08:00"
    assert data.story[0].is_new is True
    assert data.objectives == []
    assert data.knowledge == []
    assert [entry.title for entry in data.world] == ["World History", "Humans"]
    assert data.gm_notes == ""
    assert data.world_summary == "A realm adrift."
    assert data.gm_settings == (
        "Setting: Fantasy. Themes: Intrigue, Exploration. Additional context: Floating islands."
    )
    assert data.map_settings == settings
    assert [sector.id for sector in data.map_sectors] == ["sector-0", "sector-1"]
    assert [z.id for z in data.map_zones] == [zone.id]
    assert data.player_coordinates == "0-0"
    assert data.current_time == "January 1, 2024, 08:00"
    assert data.skill_configuration is Genre.FANTASY

    assert len(data.messages) == 1
    welcome = data.messages[0]
    assert welcome.sender == "system"
    assert welcome.content == (
        "Welcome to Eldoria. You stand in Verdant Reach Gateway. Use the Character Sheet "
        "to define who you are, or begin your journey immediately."
    )


def test_bootstrap_copies_lore():
    sectors = make_sectors()
    lore = make_lore()
    data = bootstrap_game_data(
        lore,
        sectors,
        build_starting_zone(sectors[0]),
        make_seed(),
        "",
        map_settings_for_genre(Genre.FANTASY),
        "January 1, 2024, 08:00",
    )

    data.world[0].content = "Rewritten"
    assert lore[0].content == "Long ago..."


def test_bootstrap_rejects_zone_outside_sectors():
    sectors = make_sectors()
    orphan = build_starting_zone(MapSector(id="sector-missing", name="Nowhere"))

    with pytest.raises(InvariantViolation):
        bootstrap_game_data(
            make_lore(),
            sectors,
            orphan,
            make_seed(),
            "",
            map_settings_for_genre(Genre.FANTASY),
            "January 1, 2024, 08:00",
        )


def test_bootstrap_serialises_without_nulls_in_lists():
    sectors = make_sectors()
    data = bootstrap_game_data(
        [],
        sectors,
        build_starting_zone(sectors[1]),
        make_seed(themes=[]),
        "",
        map_settings_for_genre(Genre.MODERN),
        "January 1, 2024, 08:00",
    )
    payload = data.model_dump(by_alias=True)

    for key in ("story", "objectives", "knowledge", "world", "mapSectors", "mapZones", "messages"):
        assert isinstance(payload[key], list)
    assert payload["playerCoordinates"] == "0-0"
    assert payload["mapSettings"]["zoneLabel"] == "District"
