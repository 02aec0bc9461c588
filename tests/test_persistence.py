"""Tests for world stores and the export/import format."""

import json

import pytest

from worldforge.errors import PersistenceError
from worldforge.persistence import (
    InMemoryWorldStore,
    JsonWorldStore,
    migrate_tags,
    normalize_game_data,
    worlds_from_json,
)
from worldforge.schemas import GameData, Genre, LoreEntry, MapZone


def make_lore() -> list[LoreEntry]:
    return [
        LoreEntry(title="World History", content="Long ago...", tags=["origin", "history"], is_new=True),
        LoreEntry(title="Humans", content="Settlers", tags=["race", "npc"]),
    ]


def make_game_data() -> GameData:
    return GameData(
        map_zones=[MapZone(id="zone-start-1", name="Gate", coordinates="0-0", sector_id="sector-0")],
        skill_configuration=Genre.MODERN,
    )


@pytest.mark.asyncio
async def test_create_world_assigns_ids_and_time():
    store = InMemoryWorldStore()
    await store.initialize()
    lore = make_lore()

    world = await store.create_world("Eldoria", lore, "January 1, 2024, 08:00", make_game_data())

    assert world.id.startswith("world-")
    assert world.name == "Eldoria"
    assert world.game_data.current_time == "January 1, 2024, 08:00"
    ids = [entry.id for entry in world.game_data.world]
    assert all(entry_id.startswith("lore-") for entry_id in ids)
    assert [entry_id.rsplit("-", 1)[1] for entry_id in ids] == ["0", "1"]
    assert all(entry.is_new is False for entry in world.game_data.world)
    # Inputs are left untouched
    assert lore[0].id is None and lore[0].is_new is True

    stored = await store.get_world(world.id)
    assert stored == world
    await store.close()


@pytest.mark.asyncio
async def test_in_memory_list_and_delete():
    store = InMemoryWorldStore()
    first = await store.create_world("One", [], "t", GameData())
    second = await store.create_world("Two", [], "t", GameData())

    assert [world.id for world in await store.list_worlds()] == [first.id, second.id]

    await store.delete_world(first.id)
    await store.delete_world("world-missing")

    assert [world.id for world in await store.list_worlds()] == [second.id]
    assert await store.get_world(first.id) is None


@pytest.mark.asyncio
async def test_json_store_round_trip(tmp_path):
    store = JsonWorldStore(tmp_path / "worlds")
    await store.initialize()

    world = await store.create_world("Eldoria", make_lore(), "January 1, 2024, 08:00", make_game_data())

    path = tmp_path / "worlds" / f"{world.id}.json"
    assert path.exists()
    payload = json.loads(path.read_text("utf-8"))
    assert payload["gameData"]["currentTime"] == "January 1, 2024, 08:00"
    assert payload["gameData"]["mapZones"][0]["sectorId"] == "sector-0"

    loaded = await store.get_world(world.id)
    assert loaded == world
    assert [w.id for w in await store.list_worlds()] == [world.id]

    await store.delete_world(world.id)
    assert not path.exists()
    assert await store.get_world(world.id) is None


@pytest.mark.asyncio
async def test_export_then_import_into_fresh_store():
    source = InMemoryWorldStore()
    world = await source.create_world("Eldoria", make_lore(), "t", make_game_data())

    exported = await source.export_worlds()
    records = json.loads(exported)
    assert [set(record) for record in records] == [{"id", "name", "gameData"}]

    target = InMemoryWorldStore()
    imported = await target.import_worlds(exported)

    assert [w.id for w in imported] == [world.id]
    restored = await target.get_world(world.id)
    assert restored.game_data.skill_configuration is Genre.MODERN
    assert restored.game_data.map_zones == world.game_data.map_zones


@pytest.mark.asyncio
async def test_import_accepts_single_record_and_normalises():
    legacy = {
        "id": "world-legacy",
        "name": "Old Save",
        "gameData": {
            "world": [{"title": "The Capital", "tags": ["City", "Politics", "unknown", "city"]}],
            "knowledge": None,
            "mapZones": [{"id": "z1", "name": "Keep", "coordinates": "1-1", "hostility": "3", "tags": ["Dungeon"]}],
            "gmNotes": None,
            "playerInventory": {"carried": ["rope"]},
        },
    }
    store = InMemoryWorldStore()

    [world] = await store.import_worlds(json.dumps(legacy))

    data = world.game_data
    assert data.world[0].tags == ["location", "faction"]
    assert data.knowledge == []
    assert data.map_zones[0].hostility == 3
    assert data.map_zones[0].visited is False
    assert data.map_zones[0].tags == ["location"]
    assert data.gm_notes == ""
    assert data.skill_configuration is Genre.FANTASY
    assert world.model_dump(by_alias=True)["gameData"]["playerInventory"] == {"carried": ["rope"]}
    assert await store.get_world("world-legacy") is not None


@pytest.mark.asyncio
async def test_import_rejects_whole_file_on_bad_record():
    store = InMemoryWorldStore()
    payload = [
        {"id": "world-ok", "name": "Fine", "gameData": {}},
        {"id": "world-broken", "gameData": {}},
    ]

    with pytest.raises(PersistenceError):
        await store.import_worlds(json.dumps(payload))

    assert await store.list_worlds() == []


def test_import_rejects_invalid_json():
    with pytest.raises(PersistenceError) as excinfo:
        worlds_from_json("{not json")

    assert "not valid JSON" in excinfo.value.user_message


def test_migrate_tags():
    assert migrate_tags(["Origin", "HISTORY", "world_lore", "Cult", 7, "species"]) == [
        "history",
        "faction",
        "race",
    ]
    assert migrate_tags(None) == []
    assert migrate_tags("location") == []


def test_normalize_game_data_zone_fields():
    data = normalize_game_data(
        {
            "mapZones": [
                {"id": "a", "visited": 1, "hostility": None},
                {"id": "b", "hostility": "dangerous"},
                "not-a-zone",
            ],
            "skillConfiguration": "Sci-Fi",
        }
    )

    assert [zone["id"] for zone in data["mapZones"]] == ["a", "b"]
    assert data["mapZones"][0]["visited"] is True
    assert data["mapZones"][0]["hostility"] == 0
    assert data["mapZones"][1]["hostility"] == 0
    assert data["skillConfiguration"] == "Sci-Fi"
    assert data["story"] == [] and data["messages"] == []
