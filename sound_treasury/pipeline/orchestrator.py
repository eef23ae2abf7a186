"""
Cache/Fallback Orchestrator

The single entry point the presentation layer asks for data. Per domain
(the model series, and each sector's comparison series) it walks:

    session cache -> persisted cache (model only, 24h TTL) -> live fetch
        -> fallback (previous value, else synthetic/static)

and always returns a snapshot. NetworkFailure, InvalidPayload and
StorageFailure are recovered here and reported as advisory warnings on the
snapshot; they never reach the caller as exceptions.

Synthetic data is never written to a cache tier, and a failed refresh
leaves both tiers exactly as they were.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Awaitable, Callable, Dict, Hashable, List, Optional, Tuple, TypeVar

from sound_treasury.config import Config
from sound_treasury.constants import (
    ADVISORY_MODEL_FALLBACK,
    ADVISORY_MODEL_STALE,
    ADVISORY_SECTOR_FALLBACK,
    ADVISORY_SECTOR_STALE,
    ADVISORY_STORAGE,
    LABEL_CACHED_SUFFIX,
    LABEL_INITIALIZING,
    LABEL_LIVE_SECTOR,
    LABEL_SIMULATED,
    LABEL_STATIC,
    LABEL_VERIFY_SUFFIX,
)
from sound_treasury.core.cache import PersistedCache, SessionCache, StorageResult, utc_now
from sound_treasury.core.timing import Timer
from sound_treasury.data.sectors import SECTOR_CONFIG, get_sector
from sound_treasury.exceptions import DashboardDataError, NetworkFailure
from sound_treasury.logging_config import get_logger
from sound_treasury.models.comparison import build_comparison_series
from sound_treasury.models.fair_value import PowerLawModel
from sound_treasury.models.records import (
    CacheEntry,
    DataSource,
    ModelSnapshot,
    ModelStats,
    SectorSnapshot,
)
from sound_treasury.pipeline.downsample import downsample
from sound_treasury.pipeline.sources import DashboardSource
from sound_treasury.pipeline.synthetic import generate_baseline_history, generate_simulated_series

logger = get_logger(__name__)

MODEL_DOMAIN = "model"
SECTOR_DOMAIN = "sector"

T = TypeVar("T")


def live_label(stats: ModelStats) -> str:
    """Upstream source name, flagged when upstream verification disagreed."""
    if stats.verification_matches is False:
        return f"{stats.data_source}{LABEL_VERIFY_SUFFIX}"
    return stats.data_source


class DashboardDataOrchestrator:
    """
    Always-succeeding data access for the dashboard.

    Example:
        orchestrator = DashboardDataOrchestrator(
            source=RemoteDataSource.from_config(config),
            session_cache=SessionCache(),
            persisted_cache=PersistedCache(config.cache_dir),
            config=config,
        )
        first_paint = orchestrator.baseline_model()
        snapshot = await orchestrator.get_model_series()
    """

    def __init__(
        self,
        source: DashboardSource,
        session_cache: Optional[SessionCache] = None,
        persisted_cache: Optional[PersistedCache] = None,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = utc_now,
        model: Optional[PowerLawModel] = None,
    ):
        self.config = config or Config()
        self.source = source
        self.clock = clock
        self.session_cache = session_cache if session_cache is not None else SessionCache()
        self.persisted_cache = persisted_cache or PersistedCache(
            self.config.cache_dir, self.config.cache_ttl_hours, clock=clock
        )
        self.model = model or PowerLawModel.from_config(self.config)
        self._in_flight: Dict[Tuple[str, Hashable, bool], asyncio.Future] = {}

        # Pre-fetch baselines: available instantly, before any I/O
        self._baseline = self._build_baseline()
        self._static_sectors = {key: self._build_static_sector(key) for key in SECTOR_CONFIG}

    # =========================================================================
    # Baselines
    # =========================================================================

    def _build_baseline(self) -> ModelSnapshot:
        points, stats = generate_baseline_history(self.clock(), self.model)
        return ModelSnapshot(
            points=points,
            chart_points=downsample(points, self.config.chart_max_points),
            stats=stats,
            source=DataSource.SIMULATED,
            label=LABEL_INITIALIZING,
        )

    def _build_static_sector(self, sector_key: str) -> SectorSnapshot:
        sector = get_sector(sector_key)
        series = build_comparison_series(
            sector.history_copy(),
            sector.assets,
            start_year=self.config.comparison_start_year,
            end_year=self.config.comparison_end_year,
            cagr_windows=self.config.cagr_windows,
            long_window_start=self.config.long_window_start_year,
            long_window_years=self.config.long_window_years,
        )
        return SectorSnapshot(sector_key=sector_key, series=series, source=DataSource.STATIC, label=LABEL_STATIC)

    def baseline_model(self) -> ModelSnapshot:
        """Synthetic model series for first paint."""
        return self._baseline

    def static_sector(self, sector_key: str) -> SectorSnapshot:
        """Bundled static comparison for a sector."""
        get_sector(sector_key)
        return self._static_sectors[sector_key]

    def cached_model(self) -> Optional[ModelSnapshot]:
        return self.session_cache.get(MODEL_DOMAIN)

    def cached_sector(self, sector_key: str) -> Optional[SectorSnapshot]:
        return self.session_cache.get(SECTOR_DOMAIN, sector_key)

    # =========================================================================
    # Public API
    # =========================================================================

    async def get_model_series(self, force_refresh: bool = False) -> ModelSnapshot:
        """
        Best available model series.

        Args:
            force_refresh: Skip both cache tiers and fetch live

        Returns:
            ModelSnapshot; never raises for data failures
        """
        return await self._single_flight((MODEL_DOMAIN, None, force_refresh), lambda: self._resolve_model(force_refresh))

    async def get_sector_series(self, sector_key: str, force_refresh: bool = False) -> SectorSnapshot:
        """
        Best available comparison series for a sector.

        Raises:
            KeyError: unknown sector key (caller bug, not a data failure)
        """
        get_sector(sector_key)
        return await self._single_flight(
            (SECTOR_DOMAIN, sector_key, force_refresh),
            lambda: self._resolve_sector(sector_key, force_refresh),
        )

    def invalidate(self, domain: Optional[str] = None, key: Hashable = None, include_persisted: bool = False) -> int:
        """
        Explicitly drop cached values.

        Returns:
            Number of session entries removed
        """
        removed = self.session_cache.invalidate(domain, key)
        if include_persisted and domain in (None, MODEL_DOMAIN):
            self.persisted_cache.invalidate(self.config.storage_key)
        logger.info("Invalidated %d session entries (domain=%s, key=%s)", removed, domain, key)
        return removed

    # =========================================================================
    # Internals
    # =========================================================================

    async def _single_flight(self, flight_key: Tuple[str, Hashable, bool], factory: Callable[[], Awaitable[T]]) -> T:
        """Share one in-flight task between concurrent callers of the same key."""
        task = self._in_flight.get(flight_key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[flight_key] = task

            def _clear(done: asyncio.Future, key=flight_key) -> None:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

            task.add_done_callback(_clear)
        else:
            logger.debug("Joining in-flight request %s", flight_key)
        # A caller that goes away must not cancel the shared fetch
        return await asyncio.shield(task)

    async def _read_persisted(self) -> StorageResult[CacheEntry]:
        try:
            return await asyncio.to_thread(self.persisted_cache.get, self.config.storage_key)
        except Exception as e:
            logger.warning("Persisted cache read raised: %s", e)
            return StorageResult.failure(str(e), e)

    async def _write_persisted(self, entry: CacheEntry) -> StorageResult[CacheEntry]:
        try:
            return await asyncio.to_thread(self.persisted_cache.set, self.config.storage_key, entry)
        except Exception as e:
            logger.warning("Persisted cache write raised: %s", e)
            return StorageResult.failure(str(e), e)

    def _snapshot_from_entry(self, entry: CacheEntry, source: DataSource, label: str) -> ModelSnapshot:
        chart = entry.chart_series or downsample(entry.payload, self.config.chart_max_points)
        return ModelSnapshot(points=entry.payload, chart_points=chart, stats=entry.stats, source=source, label=label)

    @staticmethod
    def _as_data_error(error: Exception) -> DashboardDataError:
        if isinstance(error, DashboardDataError):
            return error
        wrapped = NetworkFailure(f"{type(error).__name__}: {error}")
        wrapped.__cause__ = error
        return wrapped

    async def _resolve_model(self, force_refresh: bool) -> ModelSnapshot:
        warnings: List[str] = []

        if not force_refresh:
            cached = self.session_cache.get(MODEL_DOMAIN)
            if cached is not None:
                return cached

            stored = await self._read_persisted()
            if not stored.ok:
                warnings.append(ADVISORY_STORAGE)
            elif stored.value is not None:
                entry = stored.value
                snapshot = self._snapshot_from_entry(
                    entry, DataSource.CACHED, f"{entry.stats.data_source}{LABEL_CACHED_SUFFIX}"
                )
                self.session_cache.set(MODEL_DOMAIN, None, snapshot)
                logger.info("Loaded model series from persisted cache (%d points)", len(entry.payload))
                return snapshot

        try:
            with Timer("Model series fetch"):
                payload = await self.source.fetch_model_series()
        except Exception as e:
            return await self._model_fallback(self._as_data_error(e), warnings, force_refresh)

        chart = payload.chart_data or downsample(payload.data, self.config.chart_max_points)
        entry = CacheEntry(payload=payload.data, stats=payload.stats, chart_series=chart, written_at=self.clock())
        snapshot = ModelSnapshot(
            points=entry.payload,
            chart_points=entry.chart_series,
            stats=entry.stats,
            source=DataSource.LIVE,
            label=live_label(entry.stats),
        )
        self.session_cache.set(MODEL_DOMAIN, None, snapshot)

        written = await self._write_persisted(entry)
        if not written.ok:
            warnings.append(ADVISORY_STORAGE)

        if warnings:
            return replace(snapshot, warnings=tuple(warnings))
        return snapshot

    async def _model_fallback(
        self, error: DashboardDataError, warnings: List[str], force_refresh: bool
    ) -> ModelSnapshot:
        logger.warning("Model series unavailable (%s): %s", type(error).__name__, error)

        previous = self.session_cache.get(MODEL_DOMAIN)
        if previous is None and force_refresh:
            stored = await self._read_persisted()
            if stored.ok and stored.value is not None:
                entry = stored.value
                previous = self._snapshot_from_entry(
                    entry, DataSource.CACHED, f"{entry.stats.data_source}{LABEL_CACHED_SUFFIX}"
                )
        if previous is not None:
            return replace(previous, warnings=tuple(warnings) + (ADVISORY_MODEL_STALE,), failure=error)

        points, stats = generate_simulated_series(
            self.clock(),
            self.model,
            seed=self.config.synthetic_seed,
            project_to_year=self.config.project_to_year,
        )
        return ModelSnapshot(
            points=points,
            chart_points=downsample(points, self.config.chart_max_points),
            stats=stats,
            source=DataSource.SIMULATED,
            label=LABEL_SIMULATED,
            warnings=tuple(warnings) + (ADVISORY_MODEL_FALLBACK,),
            failure=error,
        )

    async def _resolve_sector(self, sector_key: str, force_refresh: bool) -> SectorSnapshot:
        if not force_refresh:
            cached = self.session_cache.get(SECTOR_DOMAIN, sector_key)
            if cached is not None:
                return cached

        try:
            with Timer(f"Sector {sector_key} fetch"):
                series = await self.source.fetch_sector_series(sector_key)
        except Exception as e:
            error = self._as_data_error(e)
            logger.warning("Sector %s unavailable (%s): %s", sector_key, type(error).__name__, error)
            previous = self.session_cache.get(SECTOR_DOMAIN, sector_key)
            if previous is not None:
                return replace(previous, warnings=(ADVISORY_SECTOR_STALE,), failure=error)
            return replace(self._static_sectors[sector_key], warnings=(ADVISORY_SECTOR_FALLBACK,), failure=error)

        snapshot = SectorSnapshot(sector_key=sector_key, series=series, source=DataSource.LIVE, label=LABEL_LIVE_SECTOR)
        self.session_cache.set(SECTOR_DOMAIN, sector_key, snapshot)
        return snapshot
