"""
Application configuration for the Sound Treasury dashboard core.

A frozen dataclass whose defaults come from constants.py. Deployments
override the handful of environment-dependent fields through `Config.from_env()`.

Usage:
    from sound_treasury.config import Config

    config = Config.from_env()
    orchestrator = DashboardDataOrchestrator(config=config, ...)
"""

import os
from dataclasses import dataclass, replace
from typing import Dict, Tuple

from sound_treasury.constants import (
    # Model
    MODEL_COEFF,
    MODEL_EXPONENT,
    PROJECT_TO_YEAR,
    BAND_UPPER_SIGMAS,
    BAND_LOWER_SIGMAS,
    # Chart
    CHART_MAX_POINTS,
    # Comparison
    COMPARISON_START_YEAR,
    COMPARISON_END_YEAR,
    CAGR_WINDOWS,
    LONG_WINDOW_START_YEAR,
    LONG_WINDOW_YEARS,
    # Cache
    DEFAULT_CACHE_DIR,
    PERSISTED_CACHE_TTL_HOURS,
    STORAGE_KEY,
    # API
    DEFAULT_API_BASE_URL,
    API_TIMEOUT_SECONDS,
    MAX_RETRY_ATTEMPTS,
    INITIAL_RETRY_DELAY_SECONDS,
    # Synthetic
    SYNTHETIC_SEED,
)

ENV_API_URL = "SOUND_TREASURY_API_URL"
ENV_CACHE_DIR = "SOUND_TREASURY_CACHE_DIR"
ENV_TIMEOUT = "SOUND_TREASURY_TIMEOUT"


@dataclass(frozen=True)
class Config:
    """
    Immutable application configuration.

    The frozen=True ensures configuration cannot be modified at runtime;
    use `dataclasses.replace` (or `with_overrides`) to derive variants.
    """

    # =========================================================================
    # Fair-Value Model
    # =========================================================================
    model_coefficient: float = MODEL_COEFF
    model_exponent: float = MODEL_EXPONENT
    project_to_year: int = PROJECT_TO_YEAR
    band_upper_sigmas: float = BAND_UPPER_SIGMAS
    band_lower_sigmas: float = BAND_LOWER_SIGMAS

    # =========================================================================
    # Chart
    # =========================================================================
    chart_max_points: int = CHART_MAX_POINTS

    # =========================================================================
    # Sector Comparison
    # =========================================================================
    comparison_start_year: int = COMPARISON_START_YEAR
    comparison_end_year: int = COMPARISON_END_YEAR
    long_window_start_year: int = LONG_WINDOW_START_YEAR
    long_window_years: int = LONG_WINDOW_YEARS
    # (name, anchor year, years)
    cagr_window_table: Tuple[Tuple[str, int, int], ...] = tuple(
        (name, anchor, span) for name, (anchor, span) in CAGR_WINDOWS.items()
    )

    # =========================================================================
    # Cache
    # =========================================================================
    cache_dir: str = DEFAULT_CACHE_DIR
    cache_ttl_hours: int = PERSISTED_CACHE_TTL_HOURS
    storage_key: str = STORAGE_KEY

    # =========================================================================
    # Remote Data Service
    # =========================================================================
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = API_TIMEOUT_SECONDS
    fetch_attempts: int = MAX_RETRY_ATTEMPTS
    retry_delay: float = INITIAL_RETRY_DELAY_SECONDS

    # =========================================================================
    # Synthetic Data
    # =========================================================================
    synthetic_seed: int = SYNTHETIC_SEED

    @property
    def cagr_windows(self) -> Dict[str, Tuple[int, int]]:
        """CAGR window table: name -> (anchor year, years)."""
        return {name: (anchor, span) for name, anchor, span in self.cagr_window_table}

    def with_overrides(self, **changes) -> "Config":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a config, letting environment variables override defaults."""
        overrides = {}
        if os.getenv(ENV_API_URL):
            overrides["api_base_url"] = os.environ[ENV_API_URL].rstrip("/")
        if os.getenv(ENV_CACHE_DIR):
            overrides["cache_dir"] = os.environ[ENV_CACHE_DIR]
        if os.getenv(ENV_TIMEOUT):
            overrides["request_timeout"] = float(os.environ[ENV_TIMEOUT])
        return cls(**overrides)
