"""
Pytest configuration and fixtures for the Sound Treasury tests.
"""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to Python path so imports work
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sound_treasury.core.cache import PersistedCache, SessionCache
from sound_treasury.models.comparison import build_comparison_series
from sound_treasury.models.fair_value import PowerLawModel
from sound_treasury.models.records import ModelSeriesPayload, ModelStats
from sound_treasury.data.sectors import CHEMICALS
from sound_treasury.logging_config import disable_logging, enable_logging
from sound_treasury.pipeline.sources import DashboardSource

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Settable clock for cache expiry tests."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_payload(count: int = 30, data_source: str = "Test Feed", matches=None) -> ModelSeriesPayload:
    """A small, valid live model payload ending at FIXED_NOW."""
    model = PowerLawModel()
    sigma = 0.5
    start = FIXED_NOW - timedelta(days=count - 1)
    points = tuple(
        model.point(start + timedelta(days=i), sigma, actual_price=50000.0 + i * 10)
        for i in range(count)
    )
    stats = ModelStats(
        std_dev=sigma,
        r_squared=0.95,
        current_price=points[-1].actual_price,
        current_fair_price=points[-1].fair_price,
        data_source=data_source,
        verification_matches=matches,
    )
    return ModelSeriesPayload(data=points, stats=stats)


class FakeSource(DashboardSource):
    """
    In-memory DashboardSource.

    Set `model_error` / `sector_error` to make the next fetches raise, and
    `gate` to an asyncio.Event to hold fetches until it is set.
    """

    def __init__(self, payload: ModelSeriesPayload = None, sector_series=None):
        self.payload = payload or make_payload()
        self.sector_series = sector_series or {
            "chemicals": build_comparison_series(CHEMICALS.history_copy(), CHEMICALS.assets),
        }
        self.model_error = None
        self.sector_error = None
        self.gate = None
        self.model_calls = 0
        self.sector_calls = []

    async def fetch_model_series(self):
        self.model_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.model_error is not None:
            raise self.model_error
        return self.payload

    async def fetch_sector_series(self, sector_key):
        self.sector_calls.append(sector_key)
        if self.gate is not None:
            await self.gate.wait()
        if self.sector_error is not None:
            raise self.sector_error
        return self.sector_series[sector_key]


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


@pytest.fixture
def quiet_logging():
    """Silence the fallback warnings of failure-path tests."""
    disable_logging()
    yield
    enable_logging()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def persisted_cache(cache_dir, clock):
    return PersistedCache(str(cache_dir), ttl_hours=24, clock=clock)


@pytest.fixture
def session_cache():
    return SessionCache()


@pytest.fixture
def fake_source():
    return FakeSource()
