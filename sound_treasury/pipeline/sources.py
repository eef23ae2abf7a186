"""
Live data sources for the dashboard.

The backend exposes two read-only JSON endpoints:

    GET {base}/model-series               -> {data, stats, chartData?}
    GET {base}/sector-series/{sectorKey}  -> {years, scoreboard}

Responses are validated into records here. Failures surface as
NetworkFailure (transport, timeout, non-2xx) or InvalidPayload (bad JSON or
shape) for the orchestrator to recover from.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from sound_treasury.constants import (
    API_TIMEOUT_SECONDS,
    DEFAULT_API_BASE_URL,
    INITIAL_RETRY_DELAY_SECONDS,
    MAX_RETRY_ATTEMPTS,
    MODEL_SERIES_PATH,
    SECTOR_SERIES_PATH,
    USER_AGENT,
)
from sound_treasury.core.retry import retry_with_backoff
from sound_treasury.exceptions import InvalidPayload, NetworkFailure
from sound_treasury.logging_config import get_logger
from sound_treasury.models.records import ComparisonSeries, ModelSeriesPayload

logger = get_logger(__name__)


class DashboardSource(ABC):
    """Async interface the orchestrator fetches live data through."""

    @abstractmethod
    async def fetch_model_series(self) -> ModelSeriesPayload:
        """
        Fetch the model series.

        :raises NetworkFailure: transport failure or non-success status.
        :raises InvalidPayload: response failed validation.
        """
        ...

    @abstractmethod
    async def fetch_sector_series(self, sector_key: str) -> ComparisonSeries:
        """
        Fetch one sector's comparison series.

        :raises NetworkFailure: transport failure or non-success status.
        :raises InvalidPayload: response failed validation.
        """
        ...


class RemoteDataSource(DashboardSource):
    """
    HTTP client for the dashboard JSON services.

    Blocking requests calls run in a worker thread so the event loop only
    suspends at the fetch boundary.

    Example:
        source = RemoteDataSource("https://example.org/api")
        payload = source.get_model_series()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        max_attempts: int = MAX_RETRY_ATTEMPTS,
        retry_delay: float = INITIAL_RETRY_DELAY_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})

    @classmethod
    def from_config(cls, config) -> "RemoteDataSource":
        return cls(
            base_url=config.api_base_url,
            timeout=config.request_timeout,
            max_attempts=config.fetch_attempts,
            retry_delay=config.retry_delay,
        )

    def _request(self, url: str) -> Any:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkFailure(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise NetworkFailure(f"{url} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise InvalidPayload(f"{url} returned malformed JSON") from e

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        # Only transport failures are retried; a bad payload will not improve
        return retry_with_backoff(
            lambda: self._request(url),
            max_attempts=self.max_attempts,
            initial_delay=self.retry_delay,
            exceptions=(NetworkFailure,),
            reraise=True,
        )

    def get_model_series(self) -> ModelSeriesPayload:
        """Blocking fetch of the model series."""
        payload = ModelSeriesPayload.from_dict(self._get_json(MODEL_SERIES_PATH))
        logger.info("Fetched %d model points from %s", len(payload.data), payload.stats.data_source)
        return payload

    def get_sector_series(self, sector_key: str) -> ComparisonSeries:
        """Blocking fetch of one sector's comparison series."""
        series = ComparisonSeries.from_dict(self._get_json(SECTOR_SERIES_PATH.format(sector_key=sector_key)))
        logger.info("Fetched %d years for sector %s", len(series.years), sector_key)
        return series

    async def fetch_model_series(self) -> ModelSeriesPayload:
        return await asyncio.to_thread(self.get_model_series)

    async def fetch_sector_series(self, sector_key: str) -> ComparisonSeries:
        return await asyncio.to_thread(self.get_sector_series, sector_key)

    def close(self) -> None:
        self.session.close()
