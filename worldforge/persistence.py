"""
WorldStore interface for pluggable world storage backends.

The pipeline talks to storage through exactly one operation,
``create_world``, called once at the very end of a successful generation.
Everything else here (listing, deleting, export/import) serves the callers
that manage saved worlds.

Three included implementations:
1. InMemoryWorldStore - Dict-based storage, data lost on exit (testing, prototyping)
2. JsonWorldStore - One human-readable ``{world_id}.json`` file per world
3. PostgresWorldStore - ``worlds`` table with the game data in a JSONB column

Usage pattern:
    store = JsonWorldStore(Config.WORLDS_DIR)
    await store.initialize()
    world = await store.create_world(name, lore, start_timestamp, game_data)
    await store.close()

Export format is a JSON array of ``{"id", "name", "gameData"}`` records with
camelCase keys. Imports are normalised (legacy lore tags migrated, missing
lists filled in) before validation, so older backups still load.
"""

import asyncio
import json
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

import asyncpg
from pydantic import ValidationError

from .config import Config
from .errors import PersistenceError
from .logging_utils import log_info, log_success
from .schemas import GameData, Genre, LoreEntry, World

LORE_TAGS = ("location", "npc", "faction", "history", "magic", "quest", "race")

# Legacy tag -> allowed lore tag
LORE_TAG_MAPPING: Dict[str, str] = {
    "place": "location", "geography": "location", "city": "location", "town": "location",
    "village": "location", "region": "location", "landmark": "location", "forest": "location",
    "mountain": "location", "dungeon": "location", "map": "location", "kingdom": "location",
    "capital": "location", "border": "location",
    "beast": "npc", "enemy": "npc", "monster": "npc", "boss": "npc",
    "species": "race", "ancestry": "race", "lineage": "race",
    "group": "faction", "organization": "faction", "politics": "faction",
    "guild": "faction", "cult": "faction",
    "origin": "history", "timeline": "history", "past": "history",
    "legend": "history", "myth": "history", "lore": "history", "general": "history",
    "event": "history", "rumor": "history", "ancient": "history", "cataclysm": "history",
    "technology": "magic", "science": "magic", "system": "magic",
    "gods": "magic", "religion": "magic", "artifact": "magic",
    "side_quest": "quest", "main": "quest", "objective": "quest",
}

_LIST_FIELDS = ("story", "objectives", "knowledge", "world", "mapSectors", "mapZones", "messages")
_LORE_FIELDS = ("world", "knowledge", "objectives")


# ============================================================================
# Import normalisation
# ============================================================================


def migrate_tags(tags: Any) -> List[str]:
    """Map arbitrary tags onto the allowed lore tag set.

    Matching is case-insensitive. Known legacy tags are translated, unknown
    tags are dropped, and the first occurrence order is kept without duplicates.
    """
    if not isinstance(tags, list):
        return []
    migrated: List[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        lower = tag.lower()
        target = lower if lower in LORE_TAGS else LORE_TAG_MAPPING.get(lower)
        if target and target not in migrated:
            migrated.append(target)
    return migrated


def _as_number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return number if math.isfinite(number) else 0


def normalize_game_data(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Bring a raw (camelCase) gameData payload up to the current format.

    Returns a new dict; the input is not modified.
    """
    data = dict(raw)
    for key in _LIST_FIELDS:
        if not isinstance(data.get(key), list):
            data[key] = []

    for key in _LORE_FIELDS:
        data[key] = [
            {
                **entry,
                "tags": migrate_tags(entry.get("tags")),
                "keywords": entry.get("keywords") if isinstance(entry.get("keywords"), list) else [],
                "isNew": bool(entry.get("isNew")),
            }
            for entry in data[key]
            if isinstance(entry, dict)
        ]

    data["mapZones"] = [
        {
            **zone,
            "tags": migrate_tags(zone.get("tags")),
            "visited": bool(zone.get("visited")),
            "hostility": _as_number(zone.get("hostility")),
        }
        for zone in data["mapZones"]
        if isinstance(zone, dict)
    ]

    if not isinstance(data.get("gmNotes"), str):
        data["gmNotes"] = ""
    if not data.get("skillConfiguration"):
        data["skillConfiguration"] = Genre.FANTASY.value
    return data


# ============================================================================
# Export / import codec
# ============================================================================


def worlds_to_json(worlds: Iterable[World]) -> str:
    """Serialise worlds to the backup format (JSON array, camelCase keys)."""
    payload = [world.model_dump(mode="json", by_alias=True) for world in worlds]
    return json.dumps(payload, indent=2)


def worlds_from_json(json_text: str) -> List[World]:
    """Parse a backup file into validated worlds.

    Accepts a JSON array or a single record. Any malformed record rejects the
    whole file.

    Raises:
        PersistenceError: If the text is not valid JSON or a record is invalid
    """
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise PersistenceError(
            f"Import file is not valid JSON: {exc}",
            underlying=exc,
            user_message="Failed to import worlds. The file is not valid JSON.",
        ) from exc

    records = payload if isinstance(payload, list) else [payload]
    worlds: List[World] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict) or not all(
            key in record for key in ("id", "name", "gameData")
        ):
            raise PersistenceError(
                f"Import record {index} is missing one of id, name, gameData",
                user_message="Failed to import worlds. The file format is invalid.",
            )
        game_data = record["gameData"] if isinstance(record["gameData"], dict) else {}
        try:
            worlds.append(
                World.model_validate({**record, "gameData": normalize_game_data(game_data)})
            )
        except ValidationError as exc:
            raise PersistenceError(
                f"Import record {index} ({record.get('id')}) failed validation: {exc}",
                underlying=exc,
                user_message="Failed to import worlds. The file format is invalid.",
            ) from exc
    return worlds


def build_world(
    name: str,
    lore_entries: Sequence[LoreEntry],
    start_timestamp: str,
    game_data: GameData,
) -> World:
    """Assign identifiers and wrap a bootstrapped snapshot into a World.

    Lore entries get ids ``lore-<hex>-<index>`` and are marked as not new;
    the snapshot's ``world`` list and ``current_time`` are set from the
    arguments. Inputs are copied, never modified.
    """
    batch = uuid4().hex[:8]
    lore = [
        entry.model_copy(update={"id": f"lore-{batch}-{index}", "is_new": False}, deep=True)
        for index, entry in enumerate(lore_entries)
    ]
    snapshot = game_data.model_copy(
        update={"world": lore, "current_time": start_timestamp},
        deep=True,
    )
    return World(id=f"world-{uuid4().hex[:12]}", name=name, game_data=snapshot)


# ============================================================================
# Store interface
# ============================================================================


class WorldStore(ABC):
    """Abstract base class for world storage.

    Backends implement lifecycle plus the four record operations
    (save/get/list/delete). ``create_world``, ``export_worlds`` and
    ``import_worlds`` are built on top of them.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections, create directories or tables."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections and other resources."""

    @abstractmethod
    async def save_world(self, world: World) -> None:
        """Insert or replace one world record in a single write."""

    @abstractmethod
    async def get_world(self, world_id: str) -> Optional[World]:
        """Return the world with ``world_id`` or None."""

    @abstractmethod
    async def list_worlds(self) -> List[World]:
        """Return all stored worlds."""

    @abstractmethod
    async def delete_world(self, world_id: str) -> None:
        """Delete a world; unknown ids are ignored."""

    async def create_world(
        self,
        name: str,
        lore_entries: Sequence[LoreEntry],
        start_timestamp: str,
        game_data: GameData,
    ) -> World:
        """Persist a freshly generated world with one write.

        Returns:
            The stored World, including its generated id
        """
        world = build_world(name, lore_entries, start_timestamp, game_data)
        await self.save_world(world)
        return world

    async def export_worlds(self) -> str:
        return worlds_to_json(await self.list_worlds())

    async def import_worlds(self, json_text: str) -> List[World]:
        """Validate a backup file and store every record in it.

        Nothing is written unless the whole file parses. Records whose id
        already exists replace the stored world.
        """
        worlds = worlds_from_json(json_text)
        for world in worlds:
            await self.save_world(world)
        log_info(f"Imported {len(worlds)} world(s)")
        return worlds


class InMemoryWorldStore(WorldStore):
    """Dict-backed store. Data is lost on exit; close() keeps it readable."""

    def __init__(self) -> None:
        self.worlds: Dict[str, World] = {}

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def save_world(self, world: World) -> None:
        self.worlds[world.id] = world.model_copy(deep=True)

    async def get_world(self, world_id: str) -> Optional[World]:
        world = self.worlds.get(world_id)
        return world.model_copy(deep=True) if world is not None else None

    async def list_worlds(self) -> List[World]:
        return [world.model_copy(deep=True) for world in self.worlds.values()]

    async def delete_world(self, world_id: str) -> None:
        self.worlds.pop(world_id, None)


class JsonWorldStore(WorldStore):
    """File-based store writing one pretty-printed JSON file per world.

    Directory structure:
    ```
    {base_path}/
      world-3f2a9c1b7d4e.json
      world-8b01e6d2c9aa.json
    ```

    All file I/O runs in the default thread pool (asyncio.to_thread).
    """

    def __init__(self, base_path: Path | str | None = None):
        self.base_path = Path(base_path) if base_path is not None else Config.WORLDS_DIR

    async def initialize(self) -> None:
        await asyncio.to_thread(self.base_path.mkdir, parents=True, exist_ok=True)

    async def close(self) -> None:
        return None

    async def save_world(self, world: World) -> None:
        path = self._world_path(world.id)
        await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        payload = world.model_dump(mode="json", by_alias=True)
        await asyncio.to_thread(path.write_text, json.dumps(payload, indent=2), "utf-8")
        log_success(f"Saved world '{world.name}' to {path}")

    async def get_world(self, world_id: str) -> Optional[World]:
        path = self._world_path(world_id)
        if not path.exists():
            return None
        text = await asyncio.to_thread(path.read_text, "utf-8")
        return World.model_validate_json(text)

    async def list_worlds(self) -> List[World]:
        if not self.base_path.exists():
            return []

        def _read_all() -> List[str]:
            return [path.read_text("utf-8") for path in sorted(self.base_path.glob("*.json"))]

        texts = await asyncio.to_thread(_read_all)
        return [World.model_validate_json(text) for text in texts]

    async def delete_world(self, world_id: str) -> None:
        path = self._world_path(world_id)
        if path.exists():
            await asyncio.to_thread(path.unlink)

    def _world_path(self, world_id: str) -> Path:
        return self.base_path / f"{world_id}.json"


class PostgresWorldStore(WorldStore):
    """PostgreSQL-backed store using an asyncpg connection pool.

    Schema (created by initialize() when missing):
    - worlds: id TEXT PRIMARY KEY, name TEXT, game_data JSONB, created_at TIMESTAMPTZ
    """

    CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS worlds (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            game_data JSONB NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None

    async def initialize(self) -> None:
        if self.pool is None:
            self.pool = await asyncpg.create_pool(self.database_url)
            async with self.pool.acquire() as conn:
                await conn.execute(self.CREATE_TABLE)

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    async def save_world(self, world: World) -> None:
        assert self.pool is not None, "WorldStore not initialized"

        query = """
            INSERT INTO worlds (id, name, game_data)
            VALUES ($1, $2, $3::jsonb)
            ON CONFLICT (id) DO UPDATE SET name = $2, game_data = $3::jsonb
        """

        async with self.pool.acquire() as conn:
            await conn.execute(
                query,
                world.id,
                world.name,
                world.game_data.model_dump_json(by_alias=True),
            )

    async def get_world(self, world_id: str) -> Optional[World]:
        assert self.pool is not None, "WorldStore not initialized"

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, name, game_data FROM worlds WHERE id = $1", world_id
            )

        if not row:
            return None
        return self._row_to_world(row)

    async def list_worlds(self) -> List[World]:
        assert self.pool is not None, "WorldStore not initialized"

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT id, name, game_data FROM worlds ORDER BY created_at"
            )

        return [self._row_to_world(row) for row in rows]

    async def delete_world(self, world_id: str) -> None:
        assert self.pool is not None, "WorldStore not initialized"

        async with self.pool.acquire() as conn:
            await conn.execute("DELETE FROM worlds WHERE id = $1", world_id)

    @staticmethod
    def _row_to_world(row: Any) -> World:
        game_data = GameData.model_validate_json(row["game_data"])
        return World(id=row["id"], name=row["name"], game_data=game_data)
