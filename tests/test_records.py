"""Validation of wire payloads into records."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sound_treasury.exceptions import InvalidPayload
from sound_treasury.models.records import (
    CacheEntry,
    ComparisonSeries,
    DataSource,
    ModelSeriesPayload,
    ModelStats,
    ScoreboardEntry,
    TimePoint,
    parse_instant,
    parse_series,
)


def wire_point(day, price=100.0, fair=90.0, upper=200.0, lower=50.0, ts=1_700_000_000_000):
    return {
        "timestamp": ts + int(day) * 86_400_000,
        "actualPrice": price,
        "fairPrice": fair,
        "daysSinceGenesis": day,
        "upperBand": upper,
        "lowerBand": lower,
    }


WIRE_STATS = {
    "stdDev": 0.6,
    "rSquared": 0.93,
    "currentPrice": 100.0,
    "currentFairPrice": 90.0,
    "dataSource": "Exchange Feed",
}


class TestTimePoint:

    def test_parses_wire_point(self):
        point = TimePoint.from_dict(wire_point(5000))
        assert point.days_since_genesis == 5000
        assert point.timestamp.tzinfo is not None

    def test_accepts_aliases(self):
        raw = wire_point(10)
        raw["date"] = "2024-01-01T00:00:00Z"
        del raw["timestamp"]
        raw["price"] = raw.pop("actualPrice")
        point = TimePoint.from_dict(raw)
        assert point.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert point.actual_price == 100.0

    def test_null_price_allowed(self):
        assert TimePoint.from_dict(wire_point(10, price=None)).actual_price is None

    def test_rejects_bands_out_of_order(self):
        with pytest.raises(InvalidPayload):
            TimePoint.from_dict(wire_point(10, upper=80.0))

    def test_rejects_non_positive_fair(self):
        with pytest.raises(InvalidPayload):
            TimePoint.from_dict(wire_point(10, fair=0.0, lower=0.0))

    def test_rejects_boolean_number(self):
        with pytest.raises(InvalidPayload):
            TimePoint.from_dict(wire_point(10, price=True))

    def test_to_dict_round_trip(self):
        point = TimePoint.from_dict(wire_point(10))
        assert TimePoint.from_dict(point.to_dict()) == point


class TestParseSeries:

    def test_requires_increasing_days(self):
        with pytest.raises(InvalidPayload):
            parse_series([wire_point(10), wire_point(10)])

    def test_rejects_empty(self):
        with pytest.raises(InvalidPayload):
            parse_series([])

    def test_rejects_non_list(self):
        with pytest.raises(InvalidPayload):
            parse_series({"a": 1})


class TestModelPayload:

    def test_parses_payload(self):
        payload = ModelSeriesPayload.from_dict({"data": [wire_point(1), wire_point(2)], "stats": WIRE_STATS})
        assert len(payload.data) == 2
        assert payload.chart_data == ()
        assert payload.stats.data_source == "Exchange Feed"

    def test_missing_stats(self):
        with pytest.raises(InvalidPayload):
            ModelSeriesPayload.from_dict({"data": [wire_point(1)]})

    def test_r_squared_range(self):
        with pytest.raises(InvalidPayload):
            ModelStats.from_dict(dict(WIRE_STATS, rSquared=1.5))

    def test_verification_flag(self):
        stats = ModelStats.from_dict(dict(WIRE_STATS, verification={"matches": False}))
        assert stats.verification_matches is False
        assert stats.to_dict()["verification"] == {"matches": False}

    def test_not_an_object(self):
        with pytest.raises(InvalidPayload):
            ModelSeriesPayload.from_dict([1, 2, 3])


class TestCacheEntry:

    def test_storage_round_trip(self):
        payload = ModelSeriesPayload.from_dict({"data": [wire_point(1), wire_point(2)], "stats": WIRE_STATS})
        entry = CacheEntry(
            payload=payload.data,
            stats=payload.stats,
            chart_series=payload.data[:1],
            written_at=datetime(2025, 6, 1, tzinfo=timezone.utc),
        )
        restored = CacheEntry.from_storage_dict(entry.to_storage_dict())
        assert restored == entry

    def test_missing_timestamp(self):
        with pytest.raises(InvalidPayload):
            CacheEntry.from_storage_dict({"data": [wire_point(1)], "stats": WIRE_STATS})


class TestComparisonPayload:

    def test_legacy_scoreboard_keys(self):
        entry = ScoreboardEntry.from_dict(
            {"symbol": "DOW", "name": "Dow Inc.", "count": 2, "cagr10": -4.1, "label10": "6Y"}
        )
        assert entry.win_count == 2
        assert entry.cagr_long == -4.1
        assert entry.long_window_label == "6Y"
        assert entry.display_name == "Dow Inc."

    def test_negative_win_count(self):
        with pytest.raises(InvalidPayload):
            ScoreboardEntry.from_dict({"symbol": "X", "winCount": -1})

    def test_requires_years(self):
        with pytest.raises(InvalidPayload):
            ComparisonSeries.from_dict({"years": [], "scoreboard": [{"symbol": "X", "winCount": 0}]})

    def test_parses_series(self):
        series = ComparisonSeries.from_dict(
            {
                "years": [
                    {
                        "year": 2024,
                        "returns": [{"symbol": "BTC-USD", "value": 131.9}, {"symbol": "DOW", "value": None}],
                        "winner": {"symbol": "BTC-USD", "value": 131.9},
                    }
                ],
                "scoreboard": [{"symbol": "BTC-USD", "winCount": 1}],
            }
        )
        assert series.years[0].winner.symbol == "BTC-USD"
        assert series.years[0].returns[1].value is None


class TestHelpers:

    def test_parse_instant_naive_is_utc(self):
        assert parse_instant("2024-01-01T00:00:00") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_parse_instant_garbage(self):
        with pytest.raises(InvalidPayload):
            parse_instant("yesterday")

    def test_data_source_synthetic(self):
        assert DataSource.SIMULATED.is_synthetic
        assert DataSource.STATIC.is_synthetic
        assert not DataSource.LIVE.is_synthetic
        assert str(DataSource.CACHED) == "cached"
