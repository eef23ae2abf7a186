"""
Structured records for the dashboard data core.

Wire payloads (camelCase JSON) are validated here, at the service boundary,
before anything reaches the pure model/comparison code. Every record is a
frozen dataclass and every sequence a tuple, so snapshots handed to the
presentation layer cannot be mutated in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from sound_treasury.exceptions import DashboardDataError, InvalidPayload


class DataSource(str, Enum):
    """Provenance of the data currently on screen."""

    LIVE = "live"
    CACHED = "cached"
    STATIC = "static"
    SIMULATED = "simulated"

    def __str__(self) -> str:
        return self.value

    @property
    def is_synthetic(self) -> bool:
        return self in (DataSource.STATIC, DataSource.SIMULATED)


# =============================================================================
# Field helpers
# =============================================================================

def _pick(data: Mapping[str, Any], *names: str) -> Any:
    """Return the first present key among `names` (wire aliases)."""
    for name in names:
        if name in data:
            return data[name]
    return None


def _require(data: Mapping[str, Any], *names: str) -> Any:
    value = _pick(data, *names)
    if value is None:
        raise InvalidPayload(f"Missing required field '{names[0]}'")
    return value


def _number(value: Any, name: str) -> float:
    # bool is an int subclass; a JSON true is never a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPayload(f"Field '{name}' must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise InvalidPayload(f"Field '{name}' must be finite")
    return float(value)


def _optional_number(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    return _number(value, name)


def _mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidPayload(f"Field '{name}' must be an object")
    return value


def _non_empty_list(value: Any, name: str) -> Sequence[Any]:
    if not isinstance(value, list) or not value:
        raise InvalidPayload(f"Field '{name}' must be a non-empty list")
    return value


def parse_instant(value: Any) -> datetime:
    """Parse epoch milliseconds or an ISO-8601 string into an aware UTC datetime."""
    if isinstance(value, bool):
        raise InvalidPayload("Timestamp must be epoch milliseconds or ISO-8601")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise InvalidPayload("Timestamp must be finite")
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidPayload(f"Unparseable timestamp '{value}'") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    raise InvalidPayload("Timestamp must be epoch milliseconds or ISO-8601")


def to_epoch_ms(instant: datetime) -> int:
    return int(round(instant.timestamp() * 1000))


# =============================================================================
# Fair-value series
# =============================================================================

@dataclass(frozen=True)
class TimePoint:
    """One point of the model series."""

    timestamp: datetime
    actual_price: Optional[float]  # None for future timestamps
    fair_price: float
    days_since_genesis: float
    upper_band: float
    lower_band: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TimePoint":
        data = _mapping(data, "point")
        fair = _number(_require(data, "fairPrice"), "fairPrice")
        upper = _number(_require(data, "upperBand"), "upperBand")
        lower = _number(_require(data, "lowerBand"), "lowerBand")
        if fair <= 0:
            raise InvalidPayload(f"fairPrice must be positive, got {fair}")
        if not upper >= fair >= lower:
            raise InvalidPayload(
                f"Bands out of order: upper={upper}, fair={fair}, lower={lower}"
            )
        return cls(
            timestamp=parse_instant(_require(data, "timestamp", "date")),
            actual_price=_optional_number(_pick(data, "actualPrice", "price"), "actualPrice"),
            fair_price=fair,
            days_since_genesis=_number(_require(data, "daysSinceGenesis"), "daysSinceGenesis"),
            upper_band=upper,
            lower_band=lower,
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": to_epoch_ms(self.timestamp),
            "actualPrice": self.actual_price,
            "fairPrice": self.fair_price,
            "daysSinceGenesis": self.days_since_genesis,
            "upperBand": self.upper_band,
            "lowerBand": self.lower_band,
        }


def parse_series(items: Any, name: str = "data") -> Tuple[TimePoint, ...]:
    """Validate a wire list of points; days must be strictly increasing."""
    points = tuple(TimePoint.from_dict(item) for item in _non_empty_list(items, name))
    for previous, current in zip(points, points[1:]):
        if current.days_since_genesis <= previous.days_since_genesis:
            raise InvalidPayload(
                f"'{name}' is not strictly increasing at day {current.days_since_genesis}"
            )
    return points


@dataclass(frozen=True)
class ModelStats:
    """Fit quality and provenance of the model series in use."""

    std_dev: float
    r_squared: float
    current_price: Optional[float]
    current_fair_price: Optional[float]
    data_source: str
    verification_matches: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelStats":
        data = _mapping(data, "stats")
        std_dev = _number(_require(data, "stdDev"), "stdDev")
        r_squared = _number(_require(data, "rSquared"), "rSquared")
        if std_dev < 0:
            raise InvalidPayload(f"stdDev must be >= 0, got {std_dev}")
        if not 0.0 <= r_squared <= 1.0:
            raise InvalidPayload(f"rSquared must be in [0, 1], got {r_squared}")

        source = _require(data, "dataSource")
        if not isinstance(source, str) or not source.strip():
            raise InvalidPayload("dataSource must be a non-empty string")

        matches = None
        verification = data.get("verification")
        if verification is not None:
            matches = _mapping(verification, "verification").get("matches")
            if matches is not None and not isinstance(matches, bool):
                raise InvalidPayload("verification.matches must be a boolean")

        return cls(
            std_dev=std_dev,
            r_squared=r_squared,
            current_price=_optional_number(data.get("currentPrice"), "currentPrice"),
            current_fair_price=_optional_number(data.get("currentFairPrice"), "currentFairPrice"),
            data_source=source,
            verification_matches=matches,
        )

    def to_dict(self) -> dict:
        result = {
            "stdDev": self.std_dev,
            "rSquared": self.r_squared,
            "currentPrice": self.current_price,
            "currentFairPrice": self.current_fair_price,
            "dataSource": self.data_source,
        }
        if self.verification_matches is not None:
            result["verification"] = {"matches": self.verification_matches}
        return result


@dataclass(frozen=True)
class ModelSeriesPayload:
    """Validated body of `GET /model-series`."""

    data: Tuple[TimePoint, ...]
    stats: ModelStats
    chart_data: Tuple[TimePoint, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> "ModelSeriesPayload":
        payload = _mapping(payload, "payload")
        chart_raw = payload.get("chartData")
        # Absent or empty chartData is derived by the caller
        chart = parse_series(chart_raw, "chartData") if chart_raw else ()
        return cls(
            data=parse_series(payload.get("data"), "data"),
            stats=ModelStats.from_dict(_require(payload, "stats")),
            chart_data=chart,
        )


@dataclass(frozen=True)
class CacheEntry:
    """The persisted model tuple. Written whole or not at all."""

    payload: Tuple[TimePoint, ...]
    stats: ModelStats
    chart_series: Tuple[TimePoint, ...]
    written_at: datetime

    def to_storage_dict(self) -> dict:
        return {
            "data": [p.to_dict() for p in self.payload],
            "stats": self.stats.to_dict(),
            "chartData": [p.to_dict() for p in self.chart_series],
            "timestamp": to_epoch_ms(self.written_at),
        }

    @classmethod
    def from_storage_dict(cls, raw: Any) -> "CacheEntry":
        raw = _mapping(raw, "cache entry")
        chart_raw = raw.get("chartData")
        return cls(
            payload=parse_series(raw.get("data"), "data"),
            stats=ModelStats.from_dict(_require(raw, "stats")),
            chart_series=parse_series(chart_raw, "chartData") if chart_raw else (),
            written_at=parse_instant(_require(raw, "timestamp")),
        )


# =============================================================================
# Sector comparison
# =============================================================================

@dataclass(frozen=True)
class AssetSpec:
    """Reference data for one tracked asset."""

    symbol: str
    display_name: str
    color: str
    yahoo_symbol: Optional[str] = None
    google_symbol: Optional[str] = None
    listed_year: Optional[int] = None  # First year with a full start price

    @property
    def quote_symbol(self) -> str:
        """Symbol to request from Yahoo Finance."""
        return self.yahoo_symbol or self.symbol


@dataclass(frozen=True)
class YearPrices:
    start: float
    end: float


YearlyHistory = Dict[int, Dict[str, Optional[YearPrices]]]


@dataclass(frozen=True)
class AssetReturn:
    """One asset's result for one year."""

    symbol: str
    display_name: str
    color: str
    value: Optional[float]  # Percent change
    start_price: Optional[float]
    end_price: Optional[float]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssetReturn":
        data = _mapping(data, "return")
        symbol = _require(data, "symbol")
        if not isinstance(symbol, str) or not symbol:
            raise InvalidPayload("symbol must be a non-empty string")
        return cls(
            symbol=symbol,
            display_name=str(_pick(data, "displayName", "name") or symbol),
            color=str(data.get("color") or ""),
            value=_optional_number(data.get("value"), "value"),
            start_price=_optional_number(data.get("startPrice"), "startPrice"),
            end_price=_optional_number(data.get("endPrice"), "endPrice"),
        )

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "displayName": self.display_name,
            "color": self.color,
            "value": self.value,
            "startPrice": self.start_price,
            "endPrice": self.end_price,
        }


@dataclass(frozen=True)
class YearResult:
    year: int
    returns: Tuple[AssetReturn, ...]
    winner: Optional[AssetReturn]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "YearResult":
        data = _mapping(data, "year")
        year = _require(data, "year")
        if isinstance(year, bool) or not isinstance(year, int):
            raise InvalidPayload("year must be an integer")
        winner = data.get("winner")
        return cls(
            year=year,
            returns=tuple(AssetReturn.from_dict(r) for r in _non_empty_list(data.get("returns"), "returns")),
            winner=AssetReturn.from_dict(winner) if winner is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "returns": [r.to_dict() for r in self.returns],
            "winner": self.winner.to_dict() if self.winner else None,
        }


@dataclass(frozen=True)
class ScoreboardEntry:
    symbol: str
    display_name: str
    color: str
    win_count: int
    cagr2: Optional[float]
    cagr3: Optional[float]
    cagr5: Optional[float]
    cagr_long: Optional[float]
    long_window_label: str
    total_return: Optional[float]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoreboardEntry":
        data = _mapping(data, "scoreboard entry")
        count = _require(data, "winCount", "count")
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidPayload("winCount must be a non-negative integer")
        symbol = _require(data, "symbol")
        return cls(
            symbol=str(symbol),
            display_name=str(_pick(data, "displayName", "name") or symbol),
            color=str(data.get("color") or ""),
            win_count=count,
            cagr2=_optional_number(data.get("cagr2"), "cagr2"),
            cagr3=_optional_number(data.get("cagr3"), "cagr3"),
            cagr5=_optional_number(data.get("cagr5"), "cagr5"),
            cagr_long=_optional_number(_pick(data, "cagrLong", "cagr10"), "cagrLong"),
            long_window_label=str(_pick(data, "longWindowLabel", "label10") or ""),
            total_return=_optional_number(data.get("totalReturn"), "totalReturn"),
        )

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "displayName": self.display_name,
            "color": self.color,
            "winCount": self.win_count,
            "cagr2": self.cagr2,
            "cagr3": self.cagr3,
            "cagr5": self.cagr5,
            "cagrLong": self.cagr_long,
            "longWindowLabel": self.long_window_label,
            "totalReturn": self.total_return,
        }


@dataclass(frozen=True)
class ComparisonSeries:
    years: Tuple[YearResult, ...]
    scoreboard: Tuple[ScoreboardEntry, ...]

    @classmethod
    def from_dict(cls, payload: Any) -> "ComparisonSeries":
        """Validate the body of `GET /sector-series/{key}`."""
        payload = _mapping(payload, "payload")
        return cls(
            years=tuple(YearResult.from_dict(y) for y in _non_empty_list(payload.get("years"), "years")),
            scoreboard=tuple(
                ScoreboardEntry.from_dict(s) for s in _non_empty_list(payload.get("scoreboard"), "scoreboard")
            ),
        )

    def to_dict(self) -> dict:
        return {
            "years": [y.to_dict() for y in self.years],
            "scoreboard": [s.to_dict() for s in self.scoreboard],
        }


# =============================================================================
# Snapshots handed to the presentation layer
# =============================================================================

@dataclass(frozen=True)
class ModelSnapshot:
    points: Tuple[TimePoint, ...]
    chart_points: Tuple[TimePoint, ...]
    stats: ModelStats
    source: DataSource
    label: str
    warnings: Tuple[str, ...] = field(default_factory=tuple)
    failure: Optional[DashboardDataError] = None  # What sent us down the fallback path


@dataclass(frozen=True)
class SectorSnapshot:
    sector_key: str
    series: ComparisonSeries
    source: DataSource
    label: str
    warnings: Tuple[str, ...] = field(default_factory=tuple)
    failure: Optional[DashboardDataError] = None
