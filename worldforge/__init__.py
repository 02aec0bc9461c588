"""
Worldforge - two-phase generation of playable campaign worlds.

A seed becomes a reviewable preview (history, races, factions); confirming
the preview charts sectors on a bounded grid, places the starting zone and
persists a complete, playable world in one write.

No global state. The content service and world store are injected by the user.
"""

__version__ = "0.1.0"

# Pipeline
from .orchestrator import WorldGenerationPipeline

# Collaborator interfaces
from .content_service import ContentService, LLMContentService
from .persistence import (
    WorldStore,
    InMemoryWorldStore,
    JsonWorldStore,
    PostgresWorldStore,
)
from .prompts import PromptLibrary, PromptTemplate, DEFAULT_PROMPTS

# Pure building blocks
from .geography import partition, map_settings_for_genre
from .lore import assemble_lore
from .bootstrap import bootstrap_game_data

# Schemas
from .schemas import (
    Genre,
    GenerationSeed,
    WorldPreview,
    Race,
    Faction,
    SectorBlueprint,
    MapSettings,
    MapSector,
    MapZone,
    LoreEntry,
    GameData,
    World,
    PipelineState,
    GenerationProgress,
)

# Errors
from .errors import (
    WorldForgeError,
    SeedValidationError,
    InvalidStateError,
    InvariantViolation,
    GenerationError,
    ServiceError,
    PersistenceError,
)

__all__ = [
    "WorldGenerationPipeline",
    "ContentService",
    "LLMContentService",
    "WorldStore",
    "InMemoryWorldStore",
    "JsonWorldStore",
    "PostgresWorldStore",
    "PromptLibrary",
    "PromptTemplate",
    "DEFAULT_PROMPTS",
    "partition",
    "map_settings_for_genre",
    "assemble_lore",
    "bootstrap_game_data",
    "Genre",
    "GenerationSeed",
    "WorldPreview",
    "Race",
    "Faction",
    "SectorBlueprint",
    "MapSettings",
    "MapSector",
    "MapZone",
    "LoreEntry",
    "GameData",
    "World",
    "PipelineState",
    "GenerationProgress",
    "WorldForgeError",
    "SeedValidationError",
    "InvalidStateError",
    "InvariantViolation",
    "GenerationError",
    "ServiceError",
    "PersistenceError",
]
