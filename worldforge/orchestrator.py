"""
World generation pipeline: the two-phase state machine.

One WorldGenerationPipeline instance drives one generation attempt:

    Idle -> PreviewPending -> PreviewReady -> GenerationPending -> Finalized

A failure or cancellation in either pending state drops back to Idle and
discards the seed and preview. Stages run strictly in order; the state
flips to the pending value before the first await, so a second concurrent
call is rejected instead of starting the run twice.

Deep generation (confirm_generation):
1. Assemble provisional lore from the preview (local)
2. Request sector blueprints (content service)
3. Partition the grid around the shifted blueprint centers (local)
4. Request the global summary, append the World Overview entry (content service)
5. Pick the starting sector and build the starting zone (local)
6. Format the starting timestamp (local)
7. Bootstrap GameData and write the world once (persistence)

The single store write is the last step, so a failure anywhere earlier
leaves nothing persisted.
"""

import asyncio
from typing import Callable, List, Optional, Sequence
from uuid import uuid4

from .bootstrap import (
    bootstrap_game_data,
    build_starting_zone,
    format_game_time,
    select_starting_sector,
)
from .config import Config
from .content_service import ContentService
from .errors import (
    PREVIEW_FAILED_MESSAGE,
    InvalidStateError,
    InvariantViolation,
    PersistenceError,
    SeedValidationError,
    ServiceError,
)
from .geography import SeedPoint, cells_by_seed, map_settings_for_genre, partition
from .logging_utils import log_deterministic, log_error, log_info, log_llm, log_success
from .lore import assemble_lore, build_overview_entry
from .persistence import WorldStore
from .schemas import (
    GenerationProgress,
    GenerationSeed,
    MapSector,
    PipelineState,
    SectorBlueprint,
    WorldPreview,
)

ProgressListener = Callable[[GenerationProgress], None]


class WorldGenerationPipeline:
    """Coordinates preview and deep generation for a single world.

    Holds no process-wide state; two pipelines for two seeds can run
    concurrently. The caller owns the store lifecycle (initialize/close).
    """

    def __init__(
        self,
        content_service: ContentService,
        store: WorldStore,
        progress_listeners: Optional[List[ProgressListener]] = None,
        radius: Optional[int] = None,
        grid_distance: Optional[int] = None,
    ):
        """Initialize the pipeline with its collaborators injected.

        Args:
            content_service: Generates previews, sector blueprints and summaries
            store: Persistence target for the finished world
            progress_listeners: Sync callables receiving GenerationProgress events
            radius: Grid half-width (defaults to Config.GENERATION_RADIUS)
            grid_distance: Map grid distance (defaults to Config.GRID_DISTANCE)
        """
        self.content_service = content_service
        self.store = store
        self.progress_listeners: List[ProgressListener] = list(progress_listeners or [])
        self.radius = radius if radius is not None else Config.GENERATION_RADIUS
        self.grid_distance = grid_distance if grid_distance is not None else Config.GRID_DISTANCE

        self._state = PipelineState.IDLE
        self._seed: Optional[GenerationSeed] = None
        self._preview: Optional[WorldPreview] = None
        self._last_percent = 0

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def preview(self) -> Optional[WorldPreview]:
        return self._preview

    @property
    def seed(self) -> Optional[GenerationSeed]:
        return self._seed

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a progress listener; returns a callable that removes it."""
        self.progress_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self.progress_listeners:
                self.progress_listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Phase 1: preview
    # ------------------------------------------------------------------

    async def request_preview(self, seed: GenerationSeed) -> WorldPreview:
        """Generate (or regenerate) the preview for ``seed``.

        Raises:
            SeedValidationError: Blank world name; state is unchanged
            InvalidStateError: Called outside Idle/PreviewReady
            ServiceError: Content service failed; state is back to Idle
        """
        if self._state not in (PipelineState.IDLE, PipelineState.PREVIEW_READY):
            raise InvalidStateError(operation="request a preview", state=self._state.value)
        if not seed.name.strip():
            raise SeedValidationError("name", "World name is required.")

        self._state = PipelineState.PREVIEW_PENDING
        self._seed = seed
        self._preview = None

        log_llm(f"Requesting preview for '{seed.name}' ({seed.genre.value})")
        try:
            preview = await self.content_service.preview_world(
                seed.genre,
                list(seed.themes),
                seed.race_count,
                seed.faction_count,
                seed.name,
                seed.additional_context,
            )
        except Exception as exc:
            self._reset()
            log_error(f"Preview failed: {exc}")
            raise ServiceError(
                stage="preview",
                underlying=exc,
                user_message=PREVIEW_FAILED_MESSAGE,
            ) from exc
        except asyncio.CancelledError:
            self._reset()
            log_error("Preview cancelled")
            raise

        self._preview = preview
        self._state = PipelineState.PREVIEW_READY
        log_success(
            f"Preview ready: {len(preview.races)} races, {len(preview.factions)} factions"
        )
        return preview

    # ------------------------------------------------------------------
    # Phase 2: deep generation
    # ------------------------------------------------------------------

    async def confirm_generation(self) -> str:
        """Run deep generation for the held preview and persist the world.

        Returns:
            The new world's id

        Raises:
            InvalidStateError: Not in PreviewReady (including a second
                concurrent call)
            ServiceError: A content-service stage failed
            PersistenceError: The final store write failed
            InvariantViolation: Assembly produced inconsistent data
        """
        if self._state is not PipelineState.PREVIEW_READY:
            raise InvalidStateError(operation="confirm generation", state=self._state.value)

        seed = self._seed
        preview = self._preview
        if seed is None or preview is None:
            raise InvariantViolation("Pipeline is PreviewReady without a seed and preview")

        self._state = PipelineState.GENERATION_PENDING
        self._last_percent = 0
        log_info(f"Generating world '{seed.name}' (radius {self.radius})")

        try:
            world_id = await self._generate(seed, preview)
        except Exception as exc:
            self._reset()
            log_error(f"World generation failed: {exc}")
            raise
        except asyncio.CancelledError:
            self._reset()
            log_error("World generation cancelled")
            raise

        self._state = PipelineState.FINALIZED
        log_success(f"World '{seed.name}' created ({world_id})")
        return world_id

    async def _generate(self, seed: GenerationSeed, preview: WorldPreview) -> str:
        # 1. Provisional lore
        lore = assemble_lore(preview, seed.name)
        log_deterministic(f"Assembled {len(lore)} lore entries")
        self._emit("Weaving world lore", 10)

        # 2. Sector blueprints
        map_settings = map_settings_for_genre(seed.genre, self.grid_distance)
        log_llm("Requesting sector blueprints")
        try:
            blueprints = await self.content_service.generate_sectors(
                lore, map_settings, radius=self.radius
            )
        except Exception as exc:
            raise ServiceError(stage="sectors", underlying=exc) from exc
        if not blueprints:
            raise ServiceError(stage="sectors", reason="content service returned no sectors")
        self._emit("Charting sectors", 30)

        # 3. Partition
        sectors = self._partition_sectors(blueprints)
        log_deterministic(
            f"Partitioned {(2 * self.radius + 1) ** 2} cells into {len(sectors)} sectors"
        )
        self._emit("Drawing sector borders", 45)

        # 4. Global summary
        log_llm("Requesting world summary")
        try:
            summary = await self.content_service.summarize_world(lore)
        except Exception as exc:
            raise ServiceError(stage="summary", underlying=exc) from exc
        lore.append(build_overview_entry(summary, seed.genre))
        self._emit("Summarising history", 60)

        # 5. Starting zone
        start_sector = select_starting_sector(sectors)
        start_zone = build_starting_zone(start_sector)
        log_deterministic(f"Starting zone '{start_zone.name}' in sector '{start_sector.name}'")
        self._emit("Placing the starting zone", 75)

        # 6. Start timestamp
        start_timestamp = format_game_time(seed.start_datetime)
        self._emit("Setting the calendar", 85)

        # 7. Bootstrap and persist
        game_data = bootstrap_game_data(
            lore,
            sectors,
            start_zone,
            seed,
            summary,
            map_settings,
            start_timestamp,
        )
        self._emit("Bootstrapping the world", 90)

        try:
            world = await self.store.create_world(seed.name, lore, start_timestamp, game_data)
        except Exception as exc:
            raise PersistenceError(
                f"Failed to save world '{seed.name}': {exc}", underlying=exc
            ) from exc
        self._emit("World ready", 100)
        return world.id

    def _partition_sectors(self, blueprints: Sequence[SectorBlueprint]) -> List[MapSector]:
        """Turn blueprints into sectors owning a total, disjoint set of cells.

        Blueprint centers live in ``0..2*radius``; subtracting the radius maps
        the blueprint origin onto the grid's corner so its midpoint is (0, 0).
        """
        batch = uuid4().hex[:6]
        seeds = [
            SeedPoint(
                id=f"sector-{index}-{batch}",
                center_x=blueprint.center_x - self.radius,
                center_y=blueprint.center_y - self.radius,
            )
            for index, blueprint in enumerate(blueprints)
        ]
        grouped = cells_by_seed(partition(seeds, self.radius), [seed.id for seed in seeds])
        return [
            MapSector(
                id=seed.id,
                name=blueprint.name,
                description=blueprint.description,
                color=blueprint.color,
                coordinates=grouped[seed.id],
                keywords=[keyword.lower() for keyword in blueprint.keywords],
            )
            for seed, blueprint in zip(seeds, blueprints)
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit(self, stage_label: str, percent: int) -> None:
        """Send a progress event to every listener; listener failures are ignored."""
        percent = max(percent, self._last_percent)
        self._last_percent = percent
        event = GenerationProgress(stage_label=stage_label, percent=percent)
        for listener in list(self.progress_listeners):
            try:
                listener(event)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                print(f"  [Progress] Listener failed: {exc}")

    def _reset(self) -> None:
        self._state = PipelineState.IDLE
        self._preview = None
        self._seed = None
