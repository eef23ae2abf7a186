"""
Centralized constants for the Sound Treasury dashboard data core.

All magic numbers and hardcoded values should be defined here.
The band multipliers and CAGR anchors have no derivation of their own;
they are configuration, not policy, and must not be "corrected".
"""

from datetime import datetime, timezone
from typing import Final

# =============================================================================
# TIME
# =============================================================================
ONE_DAY_SECONDS: Final[int] = 86_400
ONE_DAY_MS: Final[int] = ONE_DAY_SECONDS * 1000

# =============================================================================
# POWER-LAW FAIR VALUE MODEL
# =============================================================================
GENESIS_DATE: Final[datetime] = datetime(2009, 1, 3, tzinfo=timezone.utc)
MODEL_COEFF: Final[float] = 1.0117e-17
MODEL_EXPONENT: Final[float] = 5.82
PROJECT_TO_YEAR: Final[int] = 2030  # Model series runs to Dec 31 of this year

# Band multipliers in residual standard deviations (asymmetric on purpose)
BAND_UPPER_SIGMAS: Final[float] = 2.0
BAND_LOWER_SIGMAS: Final[float] = 1.0

# =============================================================================
# CHART
# =============================================================================
CHART_MAX_POINTS: Final[int] = 800

# =============================================================================
# SECTOR COMPARISON
# =============================================================================
COMPARISON_START_YEAR: Final[int] = 2016
COMPARISON_END_YEAR: Final[int] = 2025

# name -> (anchor year whose END price starts the window, window length in years)
CAGR_WINDOWS: Final[dict] = {
    "cagr2": (2023, 2),
    "cagr3": (2022, 3),
    "cagr5": (2020, 5),
}

# Long window starts at the START price of this year
LONG_WINDOW_START_YEAR: Final[int] = 2016
LONG_WINDOW_YEARS: Final[int] = 10

# =============================================================================
# CACHE CONFIGURATION
# =============================================================================
DEFAULT_CACHE_DIR: Final[str] = "data/cache"
PERSISTED_CACHE_TTL_HOURS: Final[int] = 24
STORAGE_KEY: Final[str] = "sound_money_btc_cache_v2"

# =============================================================================
# REMOTE DATA SERVICE
# =============================================================================
DEFAULT_API_BASE_URL: Final[str] = "http://localhost:3000/api"
MODEL_SERIES_PATH: Final[str] = "/model-series"
SECTOR_SERIES_PATH: Final[str] = "/sector-series/{sector_key}"
API_TIMEOUT_SECONDS: Final[float] = 15.0
USER_AGENT: Final[str] = "SoundTreasuryDashboard/1.0"

# Retry configuration
MAX_RETRY_ATTEMPTS: Final[int] = 2
INITIAL_RETRY_DELAY_SECONDS: Final[float] = 0.5
RETRY_BACKOFF_FACTOR: Final[float] = 2.0

# =============================================================================
# SYNTHETIC DATA
# =============================================================================
SYNTHETIC_SEED: Final[int] = 42
SIMULATED_STD_DEV: Final[float] = 0.6
SIMULATED_R_SQUARED: Final[float] = 0.92
SIMULATED_START_DAY: Final[int] = 500
SIMULATED_STEP_DAYS: Final[int] = 30
SIMULATED_NOISE_AMPLITUDE: Final[float] = 0.2  # Total width of the uniform noise

# Cycle shape shared by the simulation and the baseline
CYCLE_PERIOD_DAYS: Final[float] = 600.0
CYCLE_AMPLITUDE: Final[float] = 1.5
BASELINE_START_DATE: Final[datetime] = datetime(2010, 7, 17, tzinfo=timezone.utc)
BASELINE_WOBBLE_PERIOD_DAYS: Final[float] = 50.0
BASELINE_WOBBLE_AMPLITUDE: Final[float] = 0.3

# =============================================================================
# PROVENANCE LABELS AND ADVISORIES
# =============================================================================
LABEL_INITIALIZING: Final[str] = "Initializing..."
LABEL_SIMULATED: Final[str] = "Demo Data (Simulation)"
LABEL_STATIC: Final[str] = "Static History"
LABEL_LIVE_SECTOR: Final[str] = "Live Market Data"
LABEL_CACHED_SUFFIX: Final[str] = " (cached)"
LABEL_VERIFY_SUFFIX: Final[str] = " (verify)"

ADVISORY_MODEL_FALLBACK: Final[str] = "Live data unavailable. Using simulated data."
ADVISORY_MODEL_STALE: Final[str] = "Live data unavailable. Showing previously loaded data."
ADVISORY_SECTOR_FALLBACK: Final[str] = "Could not fetch latest data. Showing static history."
ADVISORY_SECTOR_STALE: Final[str] = "Could not fetch latest data. Showing previously loaded data."
ADVISORY_STORAGE: Final[str] = "Local cache unavailable. Data will not persist between sessions."

# =============================================================================
# EXPORT
# =============================================================================
CSV_DECIMALS: Final[int] = 2
CSV_HEADERS: Final[tuple] = ("Date", "Days", "Price", "FairValue", "+2SD", "-1SD")
CSV_FILENAME: Final[str] = "btc_power_law.csv"
