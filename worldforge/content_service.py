"""
Generative content service: interface plus the LLM-backed implementation.

The pipeline treats the service as opaque. It awaits each capability and
consumes validated pydantic models:
- preview_world   -> WorldPreview (history prose, races, factions)
- generate_sectors -> list[SectorBlueprint]
- summarize_world -> str

LLMContentService is stateless apart from its configuration; prompts are
rendered from a PromptLibrary and structured outputs go through
call_llm_with_retries so schema violations are corrected by the model.
"""

import json
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .config import Config
from .llm_utils import call_llm_text, call_llm_with_retries
from .prompts import DEFAULT_PROMPTS, PromptLibrary, render_prompt
from .schemas import (
    Faction,
    Genre,
    LoreEntry,
    MapSettings,
    Race,
    SectorBlueprint,
    WorldPreview,
)

FALLBACK_CONTEXT = "A mysterious world awaits."

# How much lore each call sees
SECTOR_LORE_LIMIT = 3
SUMMARY_LORE_LIMIT = 20


class PreviewDraft(BaseModel):
    """Raw response shape requested from the model for the preview stage."""

    summary: str = Field("", description="Two-paragraph atmospheric summary of the world")
    races: List[Race] = Field(default_factory=list)
    factions: List[Faction] = Field(default_factory=list)


class SectorBatch(BaseModel):
    """Raw response shape requested from the model for sector generation."""

    sectors: List[SectorBlueprint] = Field(default_factory=list)


def lore_to_json(entries: Sequence[LoreEntry], limit: int) -> str:
    """Serialise the first ``limit`` lore entries for a prompt."""
    payload = [
        entry.model_dump(mode="json", by_alias=True, include={"title", "content", "tags", "keywords"})
        for entry in list(entries)[:limit]
    ]
    return json.dumps(payload)


class ContentService(ABC):
    """Interface of the external generative content service."""

    @abstractmethod
    async def preview_world(
        self,
        genre: Genre,
        themes: Sequence[str],
        race_count: int,
        faction_count: int,
        name: str,
        context: str,
    ) -> WorldPreview:
        """Generate the stage-1 preview for a world seed.

        Races requested are ``race_count`` plus one mandatory baseline race.
        """

    @abstractmethod
    async def generate_sectors(
        self,
        lore_entries: Sequence[LoreEntry],
        map_settings: MapSettings,
        *,
        radius: int,
    ) -> List[SectorBlueprint]:
        """Generate sector blueprints with centers in ``0..2*radius``."""

    @abstractmethod
    async def summarize_world(self, lore_entries: Sequence[LoreEntry]) -> str:
        """Write the global world summary from the provisional lore."""


class LLMContentService(ContentService):
    """ContentService backed by an LLM provider (OpenAI, Anthropic, Ollama, ...)."""

    def __init__(
        self,
        llm_provider: Optional[str] = None,
        llm_model: Optional[str] = None,
        *,
        sector_model: Optional[str] = None,
        summary_model: Optional[str] = None,
        prompts: Optional[PromptLibrary] = None,
    ) -> None:
        """Configure the service.

        Args:
            llm_provider: Provider name (defaults to Config.LLM_PROVIDER)
            llm_model: Model used for previews and as the fallback for other calls
            sector_model: Optional cheaper model for sector blueprints
            summary_model: Optional model for the global summary
            prompts: Prompt library overriding DEFAULT_PROMPTS
        """
        self.llm_provider = llm_provider or Config.LLM_PROVIDER
        self.llm_model = llm_model or Config.LLM_MODEL
        self.sector_model = sector_model or Config.SECTOR_LLM_MODEL or self.llm_model
        self.summary_model = summary_model or Config.SUMMARY_LLM_MODEL or self.llm_model
        self.prompts = prompts or DEFAULT_PROMPTS

    async def preview_world(
        self,
        genre: Genre,
        themes: Sequence[str],
        race_count: int,
        faction_count: int,
        name: str,
        context: str,
    ) -> WorldPreview:
        rendered = render_prompt(
            self.prompts.get("world_preview"),
            {
                "name": name,
                "genre": Genre(genre).value,
                "themes": ", ".join(themes),
                "context": context,
                "race_total": race_count + 1,
                "faction_count": faction_count,
            },
        )
        draft = await call_llm_with_retries(
            system_prompt=rendered.system,
            user_prompt=rendered.user,
            llm_provider=self.llm_provider,
            llm_model=self.llm_model,
            response_model=PreviewDraft,
        )
        return WorldPreview(
            context=draft.summary.strip() or FALLBACK_CONTEXT,
            races=draft.races,
            factions=draft.factions,
        )

    async def generate_sectors(
        self,
        lore_entries: Sequence[LoreEntry],
        map_settings: MapSettings,
        *,
        radius: int,
    ) -> List[SectorBlueprint]:
        rendered = render_prompt(
            self.prompts.get("world_sectors"),
            {
                "map_settings": map_settings.model_dump_json(by_alias=True),
                "lore": lore_to_json(lore_entries, SECTOR_LORE_LIMIT),
                "grid_max": 2 * radius,
            },
        )
        batch = await call_llm_with_retries(
            system_prompt=rendered.system,
            user_prompt=rendered.user,
            llm_provider=self.llm_provider,
            llm_model=self.sector_model,
            response_model=SectorBatch,
        )
        return batch.sectors

    async def summarize_world(self, lore_entries: Sequence[LoreEntry]) -> str:
        rendered = render_prompt(
            self.prompts.get("world_summary"),
            {"lore": lore_to_json(lore_entries, SUMMARY_LORE_LIMIT)},
        )
        return await call_llm_text(
            system_prompt=rendered.system,
            user_prompt=rendered.user,
            llm_provider=self.llm_provider,
            llm_model=self.summary_model,
        )
