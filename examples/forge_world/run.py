"""
Example: Forge a World with an LLM
==================================

WHAT THIS SHOWS:
- Two-phase generation: request a preview, review it, then confirm
- Progress events streamed while sectors, summary and start zone are built
- The finished world written once to a JSON world store

REQUIRES:
- LLM_PROVIDER environment variable (e.g., "openai", or "ollama" for local models)
- LLM_MODEL environment variable (e.g., "gpt-5-nano")
- API key for your provider (e.g., OPENAI_API_KEY)

RUN:
    export LLM_PROVIDER=openai
    export LLM_MODEL=gpt-5-nano
    export OPENAI_API_KEY=your_key
    python -m examples.forge_world.run
"""

import asyncio
from datetime import date, time

from worldforge import (
    GenerationError,
    GenerationProgress,
    GenerationSeed,
    Genre,
    JsonWorldStore,
    LLMContentService,
    WorldGenerationPipeline,
)
from worldforge.config import Config


def print_progress(event: GenerationProgress) -> None:
    filled = event.percent // 5
    bar = "#" * filled + "-" * (20 - filled)
    print(f"[{bar}] {event.percent:3d}%  {event.stage_label}")


async def main():
    try:
        Config.validate()
    except ValueError as exc:
        print(f"❌ {exc}")
        print("\nPlease set environment variables:")
        print("  export LLM_PROVIDER=openai")
        print("  export LLM_MODEL=gpt-5-nano")
        print("  export OPENAI_API_KEY=your_key")
        return

    print("=" * 60)
    print("FORGE A WORLD")
    print("=" * 60)
    print(Config.display())
    print()

    seed = GenerationSeed(
        name="Eldoria",
        genre=Genre.FANTASY,
        themes=["Intrigue", "Exploration"],
        race_count=2,
        faction_count=1,
        start_date=date(2024, 1, 1),
        start_time=time(8, 0),
        additional_context="A realm of floating islands bound by old chains.",
    )

    store = JsonWorldStore(Config.WORLDS_DIR)
    await store.initialize()
    pipeline = WorldGenerationPipeline(LLMContentService(), store, progress_listeners=[print_progress])

    try:
        preview = await pipeline.request_preview(seed)
        print("\nPREVIEW")
        print(preview.context)
        for race in preview.races:
            print(f"  Race: {race.name} - {race.description}")
        for faction in preview.factions:
            print(f"  Faction: {faction.name} - {faction.goals}")
        print()

        world_id = await pipeline.confirm_generation()
    except GenerationError as exc:
        print(f"\n❌ {exc.user_message}")
        return
    finally:
        await store.close()

    world = await store.get_world(world_id)
    data = world.game_data
    print(f"\n✅ World saved: {world_id}")
    print(f"Sectors: {', '.join(sector.name for sector in data.map_sectors)}")
    print(f"Start: {data.map_zones[0].name} at {data.player_coordinates}")
    print(f"Time: {data.current_time}")


if __name__ == "__main__":
    asyncio.run(main())
