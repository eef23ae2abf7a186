"""Unit tests for the sector comparison engine."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sound_treasury.data.sectors import AGRICULTURE, CHEMICALS
from sound_treasury.models.comparison import (
    build_comparison_series,
    build_scoreboard,
    cagr_percent,
    long_window,
    percent_change,
    rank_year,
)
from sound_treasury.models.records import AssetSpec, YearPrices

ALPHA = AssetSpec("AAA", "Alpha", "#111111")
BETA = AssetSpec("BBB", "Beta", "#222222")
GAMMA = AssetSpec("CCC", "Gamma", "#333333", listed_year=2019)


def chemicals_through_2025():
    history = CHEMICALS.history_copy()
    history[2025] = {
        "BTC-USD": YearPrices(98000, 105000),
        "DOW": YearPrices(40.13, 40.13),
        "BASFY": YearPrices(12.44, 12.9),
        "CE": YearPrices(68.76, 60.0),
        "MEOH": YearPrices(49, 41.0),
        "FSCHX": YearPrices(13.53, 14.0),
    }
    return history


class TestPercentChange:

    def test_one_year_drop(self):
        assert percent_change(46200, 16530) == pytest.approx(-64.22, abs=0.01)

    def test_missing_endpoints(self):
        assert percent_change(None, 10) is None
        assert percent_change(10, None) is None

    def test_zero_start_is_undefined(self):
        assert percent_change(0, 10) is None

    def test_zero_end_is_a_number(self):
        assert percent_change(10, 0) == -100.0


class TestCagr:

    def test_doubling_over_one_year(self):
        assert cagr_percent(50, 100, 1) == pytest.approx(100.0)

    def test_short_listing_window(self):
        assert cagr_percent(51.63, 40.13, 6) == pytest.approx(-4.11, abs=0.01)

    def test_undefined_cases(self):
        assert cagr_percent(None, 1, 2) is None
        assert cagr_percent(1, None, 2) is None
        assert cagr_percent(0, 1, 2) is None
        assert cagr_percent(1, 2, 0) is None


class TestRankYear:

    def test_sorted_descending_with_winner(self):
        row = {"AAA": YearPrices(100, 110), "BBB": YearPrices(100, 150)}
        result = rank_year(2020, row, [ALPHA, BETA])
        assert [r.symbol for r in result.returns] == ["BBB", "AAA"]
        assert result.winner.symbol == "BBB"

    def test_missing_sorts_last(self):
        row = {"AAA": None, "BBB": YearPrices(100, 50)}
        result = rank_year(2020, row, [ALPHA, BETA])
        assert [r.symbol for r in result.returns] == ["BBB", "AAA"]
        assert result.returns[1].value is None
        assert result.winner.symbol == "BBB"

    def test_tie_keeps_asset_order(self):
        row = {"AAA": YearPrices(10, 20), "BBB": YearPrices(5, 10)}
        result = rank_year(2020, row, [ALPHA, BETA])
        assert result.winner.symbol == "AAA"

    def test_no_winner_when_all_missing(self):
        result = rank_year(2020, {}, [ALPHA, BETA])
        assert result.winner is None
        assert all(r.value is None for r in result.returns)

    def test_every_asset_reported(self):
        row = {"AAA": YearPrices(10, 20)}
        result = rank_year(2020, row, [ALPHA, BETA, GAMMA])
        assert len(result.returns) == 3


class TestLongWindow:

    def test_full_history_label(self):
        assert long_window(ALPHA, 2025, 2016, 10) == (2016, 10, "10Y")

    def test_late_listing_shortens(self):
        assert long_window(GAMMA, 2025, 2016, 10) == (2019, 6, "6Y")

    def test_listing_in_end_year_spans_one_year(self):
        fresh = AssetSpec("NEW", "Newco", "#444444", listed_year=2025)
        assert long_window(fresh, 2025, 2016, 10) == (2025, 1, "1Y")

    def test_listing_after_end_year_never_negative(self):
        future = AssetSpec("NXT", "Next", "#555555", listed_year=2027)
        start, span, label = long_window(future, 2025, 2016, 10)
        assert span == 1
        assert label == "1Y"


class TestBuildComparisonSeries:

    def test_known_year_winner(self):
        series = build_comparison_series(CHEMICALS.history_copy(), CHEMICALS.assets)
        by_year = {y.year: y for y in series.years}
        assert by_year[2017].winner.symbol == "BTC-USD"
        assert by_year[2022].winner.symbol == "MEOH"

    def test_skips_years_without_data(self):
        series = build_comparison_series(CHEMICALS.history_copy(), CHEMICALS.assets)
        assert [y.year for y in series.years] == list(range(2016, 2025))

    def test_win_counts_sum_to_years_with_winner(self):
        for sector in (CHEMICALS, AGRICULTURE):
            series = build_comparison_series(sector.history_copy(), sector.assets)
            winners = sum(1 for y in series.years if y.winner is not None)
            assert sum(e.win_count for e in series.scoreboard) == winners

    def test_scoreboard_sorted_by_wins(self):
        series = build_comparison_series(AGRICULTURE.history_copy(), AGRICULTURE.assets)
        counts = [e.win_count for e in series.scoreboard]
        assert counts == sorted(counts, reverse=True)
        assert len(series.scoreboard) == len(AGRICULTURE.assets)

    def test_static_history_has_no_cagr(self):
        # Static tables stop at 2024, so there is no end-of-2025 anchor
        series = build_comparison_series(CHEMICALS.history_copy(), CHEMICALS.assets)
        for entry in series.scoreboard:
            assert entry.cagr2 is None
            assert entry.cagr_long is None

    def test_input_not_mutated(self):
        history = CHEMICALS.history_copy()
        before = {year: dict(row) for year, row in history.items()}
        build_comparison_series(history, CHEMICALS.assets)
        assert history == before

    def test_cagr_windows_with_2025_data(self):
        series = build_comparison_series(chemicals_through_2025(), CHEMICALS.assets)
        btc = next(e for e in series.scoreboard if e.symbol == "BTC-USD")
        assert btc.cagr2 == pytest.approx(((105000 / 42260) ** 0.5 - 1) * 100)
        assert btc.cagr3 == pytest.approx(((105000 / 16530) ** (1 / 3) - 1) * 100)
        assert btc.cagr5 == pytest.approx(((105000 / 28990) ** 0.2 - 1) * 100)
        assert btc.cagr_long == pytest.approx(((105000 / 434) ** 0.1 - 1) * 100)
        assert btc.long_window_label == "10Y"
        assert btc.total_return == pytest.approx((105000 - 434) / 434 * 100)

    def test_late_listed_asset_uses_listing_year(self):
        series = build_comparison_series(chemicals_through_2025(), CHEMICALS.assets)
        dow = next(e for e in series.scoreboard if e.symbol == "DOW")
        assert dow.long_window_label == "6Y"
        assert dow.cagr_long == pytest.approx(-4.11, abs=0.01)
        assert dow.total_return == pytest.approx((40.13 - 51.63) / 51.63 * 100)

    def test_custom_windows(self):
        series = build_comparison_series(
            chemicals_through_2025(),
            CHEMICALS.assets,
            cagr_windows={"cagr2": (2023, 2)},
            long_window_start=2018,
            long_window_years=7,
        )
        btc = next(e for e in series.scoreboard if e.symbol == "BTC-USD")
        assert btc.long_window_label == "7Y"
        assert btc.cagr_long == pytest.approx(((105000 / 13860) ** (1 / 7) - 1) * 100)
        assert btc.cagr2 is not None
        assert btc.cagr5 is None


class TestBuildScoreboard:

    def test_unknown_symbol_dropped(self):
        history = {2025: {"AAA": YearPrices(1, 2)}}
        board = build_scoreboard(history, [ALPHA], {"AAA": 1, "ZZZ": 3})
        assert [e.symbol for e in board] == ["AAA"]

    def test_stable_order_for_equal_wins(self):
        board = build_scoreboard({}, [ALPHA, BETA], {"AAA": 2, "BBB": 2})
        assert [e.symbol for e in board] == ["AAA", "BBB"]
