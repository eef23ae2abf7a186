"""
View-side state for the data & models dashboard.

Holds what is currently displayed (model snapshot, active sector and its
snapshot, advisories) and applies orchestrator results to it. A sector
response that lands after the user switched to another sector is not
displayed; the orchestrator's cache still keeps it for later.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sound_treasury.data.sectors import DEFAULT_SECTOR, get_sector
from sound_treasury.logging_config import get_logger
from sound_treasury.models.records import ModelSnapshot, SectorSnapshot
from sound_treasury.pipeline.orchestrator import DashboardDataOrchestrator

logger = get_logger(__name__)

TAB_MODEL = "powerLaw"
TAB_COMPARISON = "comparison"


def join_advisories(warnings: Sequence[str]) -> Optional[str]:
    """All advisories of a snapshot as one banner line, or None."""
    return " ".join(warnings) or None


class DashboardState:
    """
    Displayed state of the dashboard, seeded from the instant baselines.

    Example:
        state = DashboardState(orchestrator)
        await state.load_model()
        await state.select_tab(TAB_COMPARISON)
        await state.select_sector("agriculture")
    """

    def __init__(self, orchestrator: DashboardDataOrchestrator, sector_key: str = DEFAULT_SECTOR):
        get_sector(sector_key)
        self.orchestrator = orchestrator
        self.active_tab = TAB_MODEL
        self.active_sector = sector_key

        self.model: ModelSnapshot = orchestrator.cached_model() or orchestrator.baseline_model()
        self.sector: SectorSnapshot = orchestrator.cached_sector(sector_key) or orchestrator.static_sector(sector_key)
        self.model_advisory: Optional[str] = None
        self.sector_advisory: Optional[str] = None
        self.model_loading = False
        self.sector_loading = False

    @property
    def data_source_label(self) -> str:
        return self.model.label

    async def load_model(self, force_refresh: bool = False) -> ModelSnapshot:
        self.model_loading = True
        try:
            snapshot = await self.orchestrator.get_model_series(force_refresh=force_refresh)
        finally:
            self.model_loading = False
        self.model = snapshot
        self.model_advisory = join_advisories(snapshot.warnings)
        return snapshot

    async def select_tab(self, tab: str) -> None:
        if tab not in (TAB_MODEL, TAB_COMPARISON):
            raise ValueError(f"Unknown tab '{tab}'")
        self.active_tab = tab
        if tab == TAB_COMPARISON:
            await self.load_sector()

    async def select_sector(self, sector_key: str) -> SectorSnapshot:
        get_sector(sector_key)
        if sector_key != self.active_sector:
            self.active_sector = sector_key
            # Never show the previous sector's numbers under the new label
            self.sector = self.orchestrator.cached_sector(sector_key) or self.orchestrator.static_sector(sector_key)
            self.sector_advisory = None
        return await self.load_sector()

    async def load_sector(self, force_refresh: bool = False) -> SectorSnapshot:
        requested = self.active_sector
        self.sector_loading = True
        try:
            snapshot = await self.orchestrator.get_sector_series(requested, force_refresh=force_refresh)
        finally:
            if requested == self.active_sector:
                self.sector_loading = False

        if requested != self.active_sector:
            logger.debug("Discarding %s result; active sector is now %s", requested, self.active_sector)
            return snapshot

        self.sector = snapshot
        self.sector_advisory = join_advisories(snapshot.warnings)
        return snapshot

    async def refresh(self) -> None:
        """Force-refresh whatever the active tab shows."""
        if self.active_tab == TAB_MODEL:
            await self.load_model(force_refresh=True)
        else:
            await self.load_sector(force_refresh=True)
