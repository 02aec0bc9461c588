"""
Example: Offline World (no LLM)
===============================

WHAT THIS SHOWS:
- Plugging a hand-written ContentService into the pipeline
- Deterministic sectors: the same blueprints always give the same map
- Backing worlds up with export_worlds() and restoring with import_worlds()

RUN:
    python -m examples.offline_world.run
"""

import asyncio
from datetime import date

from worldforge import (
    ContentService,
    Faction,
    GenerationSeed,
    Genre,
    InMemoryWorldStore,
    Race,
    SectorBlueprint,
    WorldGenerationPipeline,
    WorldPreview,
)


class ScriptedContentService(ContentService):
    """Returns fixed content so the pipeline runs without network access."""

    async def preview_world(self, genre, themes, race_count, faction_count, name, context):
        races = [Race(name="Humans", description="Dock workers and data runners.", personality="Restless")]
        races += [
            Race(name=f"Synth Line {index + 1}", description="Contract androids.", personality="Literal")
            for index in range(race_count)
        ]
        factions = [
            Faction(name=f"Syndicate {index + 1}", goals="Own the harbour.")
            for index in range(faction_count)
        ]
        return WorldPreview(context=f"{name} never sleeps.", races=races, factions=factions)

    async def generate_sectors(self, lore_entries, map_settings, *, radius):
        top = 2 * radius
        return [
            SectorBlueprint(name="Old Harbour", center_x=radius, center_y=radius, color="#3366aa"),
            SectorBlueprint(name="Neon Heights", center_x=top, center_y=0, color="#cc33aa"),
            SectorBlueprint(name="Rust Flats", center_x=0, center_y=top, color="#aa6633"),
        ]

    async def summarize_world(self, lore_entries):
        return "A harbour city run by syndicates, where every contract has a catch."


async def main():
    store = InMemoryWorldStore()
    await store.initialize()

    pipeline = WorldGenerationPipeline(
        ScriptedContentService(),
        store,
        progress_listeners=[lambda event: print(f"{event.percent:3d}% {event.stage_label}")],
        radius=6,
    )
    await pipeline.request_preview(
        GenerationSeed(name="Port Meridian", genre=Genre.MODERN, race_count=1, start_date=date(2031, 3, 9))
    )
    world_id = await pipeline.confirm_generation()

    world = await store.get_world(world_id)
    for sector in world.game_data.map_sectors:
        print(f"{sector.name:<13} {len(sector.coordinates):3d} cells")

    backup = await store.export_worlds()
    restored = InMemoryWorldStore()
    await restored.import_worlds(backup)
    print(f"\nRestored {len(await restored.list_worlds())} world(s) from a {len(backup)}-byte backup")

    await store.close()
    await restored.close()


if __name__ == "__main__":
    asyncio.run(main())
