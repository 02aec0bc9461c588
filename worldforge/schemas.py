"""
Pydantic schemas for the world generation pipeline.

All data structures passed between pipeline stages, the content service and
the persistence store are defined here.

Design Philosophy:
- Two-phase inputs: GenerationSeed and WorldPreview are frozen values passed
  between stages, never mutated in place
- Persisted models (LoreEntry, MapSector, MapZone, GameData, World) serialise
  with camelCase aliases so exports match the established backup format
- List fields always default to [] so snapshots never carry nulls
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _none_to_list(value: Any) -> Any:
    """Coerce a null list field (common in generated JSON) to an empty list."""
    return [] if value is None else value


# Generated JSON often carries null where a list is expected
StrList = Annotated[List[str], BeforeValidator(_none_to_list)]


class WorldModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Generation Inputs
# ============================================================================


class Genre(str, Enum):
    """Campaign genre; also drives the skill configuration of the new world."""

    FANTASY = "Fantasy"
    SCI_FI = "Sci-Fi"
    MODERN = "Modern"
    MAGITECH = "Magitech"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Genre"]:
        # Accept "scifi", "SciFi", "sci fi", "fantasy", ...
        if isinstance(value, str):
            wanted = value.strip().lower().replace("-", "").replace(" ", "")
            for member in cls:
                if member.value.lower().replace("-", "") == wanted:
                    return member
        return None


class GenerationSeed(WorldModel):
    """User-chosen parameters that start a generation attempt.

    Frozen: once a preview is requested the seed cannot change. Regenerating
    with different parameters means building a new seed.

    The world name is deliberately not constrained here; the pipeline checks it
    so a blank name is reported as a SeedValidationError before any call out.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="World name (must not be blank)")
    genre: Genre = Field(Genre.FANTASY, description="Campaign genre")
    themes: List[str] = Field(default_factory=list, description="Theme labels (set semantics)")
    race_count: int = Field(3, ge=0, description="Races to generate besides the baseline race")
    faction_count: int = Field(3, ge=1, description="Factions to generate")
    start_date: date = Field(..., description="In-game starting date")
    start_time: time = Field(time(8, 0), description="In-game starting time of day")
    additional_context: str = Field("", description="Free-form guidance for the content service")

    @field_validator("themes", mode="before")
    @classmethod
    def _dedupe_themes(cls, value: Any) -> Any:
        if value is None:
            return []
        seen: List[str] = []
        for theme in value:
            if theme not in seen:
                seen.append(theme)
        return seen

    @property
    def start_datetime(self) -> datetime:
        """Starting date and time combined into a single timestamp."""
        return datetime.combine(self.start_date, self.start_time)


# ============================================================================
# Preview (stage 1 output)
# ============================================================================


class Race(WorldModel):
    """A playable or notable race produced by the preview stage."""

    name: str
    description: str = ""
    personality: str = ""
    faction: Optional[str] = Field(None, description="Primary faction affiliation, if any")
    keywords: StrList = Field(default_factory=list)


class Faction(WorldModel):
    """An organisation produced by the preview stage."""

    name: str
    goals: str = ""
    relationships: str = ""
    racial_composition: str = ""
    keywords: StrList = Field(default_factory=list)


class WorldPreview(WorldModel):
    """Stage-1 result held in pipeline memory until confirmed or discarded."""

    model_config = ConfigDict(frozen=True)

    context: str = Field(..., description="World history prose")
    races: Annotated[List[Race], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    factions: Annotated[List[Faction], BeforeValidator(_none_to_list)] = Field(default_factory=list)


# ============================================================================
# Geography
# ============================================================================


class MapSettings(WorldModel):
    """Presentation settings for the generated map, derived from the genre."""

    style: str
    grid_unit: str
    grid_distance: int = 24
    zone_label: str


class SectorBlueprint(WorldModel):
    """Content-service description of one sector before partitioning.

    Centers are expressed in blueprint-local space (0..2*radius); the pipeline
    shifts them so the local origin maps to the grid's center.
    """

    name: str
    description: str = ""
    color: str = "#808080"
    center_x: int = Field(..., description="Blueprint-local X (0..2*radius)")
    center_y: int = Field(..., description="Blueprint-local Y (0..2*radius)")
    keywords: StrList = Field(default_factory=list)


class MapSector(WorldModel):
    """A macro-region of the map owning a set of grid cells."""

    id: str
    name: str
    description: str = ""
    color: str = "#808080"
    coordinates: List[str] = Field(default_factory=list, description="Owned cells as 'x-y'")
    keywords: StrList = Field(default_factory=list)


class MapZone(WorldModel):
    """A single addressable cell within a sector."""

    id: str
    name: str
    description: str = ""
    hostility: float = 0
    coordinates: str = Field(..., description="Cell address as 'x-y'")
    sector_id: Optional[str] = None
    visited: bool = False
    tags: StrList = Field(default_factory=list)
    keywords: StrList = Field(default_factory=list)


# ============================================================================
# Lore & Narrative
# ============================================================================


class LoreEntry(WorldModel):
    """Tagged, keyword-indexed unit of world knowledge.

    ``id`` is assigned by the persistence store when the world is created.
    """

    id: Optional[str] = None
    title: str
    content: str = ""
    tags: StrList = Field(default_factory=list)
    keywords: StrList = Field(default_factory=list)
    is_new: bool = False


class StoryLog(WorldModel):
    """An entry in the campaign story log."""

    id: str
    timestamp: str
    location: str
    content: str
    is_new: bool = True


class ChatMessage(WorldModel):
    """A message in the campaign chat transcript."""

    id: str
    sender: Literal["user", "ai", "system"]
    content: str
    location: Optional[str] = None


class GameData(WorldModel):
    """Root mutable game state of a world.

    Fields not modelled here (inventories, NPCs, combat settings, ...) belong to
    other game subsystems; they are kept as extra keys so they survive a
    load/save or import/export cycle.
    """

    model_config = ConfigDict(extra="allow")

    story: List[StoryLog] = Field(default_factory=list)
    objectives: List[LoreEntry] = Field(default_factory=list)
    knowledge: List[LoreEntry] = Field(default_factory=list)
    world: List[LoreEntry] = Field(default_factory=list)
    gm_notes: str = ""
    world_summary: str = ""
    gm_settings: str = ""
    map_settings: Optional[MapSettings] = None
    map_sectors: List[MapSector] = Field(default_factory=list)
    map_zones: List[MapZone] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(default_factory=list)
    player_coordinates: str = "0-0"
    current_time: str = ""
    skill_configuration: Genre = Genre.FANTASY


class World(WorldModel):
    """A persisted world record ({id, name, gameData} on the wire)."""

    id: str
    name: str
    game_data: GameData = Field(default_factory=GameData)


# ============================================================================
# Pipeline Status
# ============================================================================


class PipelineState(str, Enum):
    """States of one generation attempt."""

    IDLE = "idle"
    PREVIEW_PENDING = "preview_pending"
    PREVIEW_READY = "preview_ready"
    GENERATION_PENDING = "generation_pending"
    FINALIZED = "finalized"


class GenerationProgress(WorldModel):
    """Progress checkpoint emitted while a world is being generated."""

    model_config = ConfigDict(frozen=True)

    stage_label: str
    percent: int = Field(..., ge=0, le=100)
