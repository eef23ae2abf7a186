"""Fair-value model, sector comparison engine and the records they exchange."""

from sound_treasury.models.comparison import build_comparison_series, build_scoreboard, cagr_percent, percent_change
from sound_treasury.models.fair_value import PowerLawModel
from sound_treasury.models.records import (
    AssetReturn,
    AssetSpec,
    CacheEntry,
    ComparisonSeries,
    DataSource,
    ModelSnapshot,
    ModelStats,
    ScoreboardEntry,
    SectorSnapshot,
    TimePoint,
    YearlyHistory,
    YearPrices,
    YearResult,
)

__all__ = [
    "PowerLawModel",
    "build_comparison_series",
    "build_scoreboard",
    "cagr_percent",
    "percent_change",
    "AssetReturn",
    "AssetSpec",
    "CacheEntry",
    "ComparisonSeries",
    "DataSource",
    "ModelSnapshot",
    "ModelStats",
    "ScoreboardEntry",
    "SectorSnapshot",
    "TimePoint",
    "YearlyHistory",
    "YearPrices",
    "YearResult",
]
