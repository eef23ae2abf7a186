"""
Sector Comparison Engine

Turns a sparse year -> asset -> {start, end} price table into:
- per-year ranked returns with a winner, and
- a scoreboard of win counts and multi-window CAGR per asset.

Missing prices are explicit None. A price of 0 is a real number, though a
zero start price leaves the return undefined (also None).
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from sound_treasury.constants import (
    CAGR_WINDOWS,
    COMPARISON_END_YEAR,
    COMPARISON_START_YEAR,
    LONG_WINDOW_START_YEAR,
    LONG_WINDOW_YEARS,
)
from sound_treasury.logging_config import get_logger
from sound_treasury.models.records import (
    AssetReturn,
    AssetSpec,
    ComparisonSeries,
    ScoreboardEntry,
    YearlyHistory,
    YearResult,
)

logger = get_logger(__name__)


def percent_change(start: Optional[float], end: Optional[float]) -> Optional[float]:
    """(end - start) / start * 100, or None when undefined."""
    if start is None or end is None or start == 0:
        return None
    return (end - start) / start * 100


def cagr_percent(start: Optional[float], end: Optional[float], years: float) -> Optional[float]:
    """Compound annual growth rate in percent, or None when undefined."""
    if start is None or end is None or years <= 0:
        return None
    if start <= 0 or end < 0:
        return None
    return ((end / start) ** (1 / years) - 1) * 100


def _price(history: YearlyHistory, year: int, symbol: str, which: str) -> Optional[float]:
    year_data = history.get(year)
    if year_data is None:
        return None
    prices = year_data.get(symbol)
    if prices is None:
        return None
    return prices.start if which == "start" else prices.end


def _rank_key(item: AssetReturn) -> Tuple[bool, float]:
    # None sorts after every number; sorted() is stable for ties
    return (item.value is None, -item.value if item.value is not None else 0.0)


def rank_year(year: int, year_data: Mapping[str, object], assets: Sequence[AssetSpec]) -> YearResult:
    """Compute and rank one year's returns."""
    returns: List[AssetReturn] = []
    for asset in assets:
        prices = year_data.get(asset.symbol)
        start = prices.start if prices is not None else None
        end = prices.end if prices is not None else None
        returns.append(
            AssetReturn(
                symbol=asset.symbol,
                display_name=asset.display_name,
                color=asset.color,
                value=percent_change(start, end),
                start_price=start,
                end_price=end,
            )
        )

    ranked = tuple(sorted(returns, key=_rank_key))
    winner = ranked[0] if ranked and ranked[0].value is not None else None
    return YearResult(year=year, returns=ranked, winner=winner)


def long_window(
    asset: AssetSpec,
    end_year: int = COMPARISON_END_YEAR,
    start_year: int = LONG_WINDOW_START_YEAR,
    years: int = LONG_WINDOW_YEARS,
) -> Tuple[int, int, str]:
    """
    Resolve (start year, span in years, label) of an asset's long window.

    Assets listed after the nominal start use their listing year and the
    span end_year - listed_year, e.g. 2019 -> 2025 is "6Y". The span never
    drops below one year.
    """
    if asset.listed_year is not None and asset.listed_year > start_year:
        span = max(end_year - asset.listed_year, 1)
        return asset.listed_year, span, f"{span}Y"
    return start_year, years, f"{years}Y"


def build_scoreboard(
    history: YearlyHistory,
    assets: Sequence[AssetSpec],
    wins: Mapping[str, int],
    end_year: int = COMPARISON_END_YEAR,
    cagr_windows: Optional[Mapping[str, Tuple[int, int]]] = None,
    long_window_start: int = LONG_WINDOW_START_YEAR,
    long_window_years: int = LONG_WINDOW_YEARS,
) -> Tuple[ScoreboardEntry, ...]:
    """
    Build scoreboard entries ordered by win count (descending, stable).

    A symbol in `wins` with no AssetSpec is an internal-consistency fault;
    it is logged and left off the board.
    """
    windows = cagr_windows if cagr_windows is not None else CAGR_WINDOWS
    by_symbol: Dict[str, AssetSpec] = {asset.symbol: asset for asset in assets}

    entries: List[ScoreboardEntry] = []
    for symbol, count in wins.items():
        asset = by_symbol.get(symbol)
        if asset is None:
            logger.warning("Dropping scoreboard entry for unknown asset %s", symbol)
            continue

        current_end = _price(history, end_year, symbol, "end")
        cagrs = {
            name: cagr_percent(_price(history, anchor, symbol, "end"), current_end, span)
            for name, (anchor, span) in windows.items()
        }

        start_year, span, label = long_window(asset, end_year, long_window_start, long_window_years)
        long_start = _price(history, start_year, symbol, "start")

        entries.append(
            ScoreboardEntry(
                symbol=asset.symbol,
                display_name=asset.display_name,
                color=asset.color,
                win_count=count,
                cagr2=cagrs.get("cagr2"),
                cagr3=cagrs.get("cagr3"),
                cagr5=cagrs.get("cagr5"),
                cagr_long=cagr_percent(long_start, current_end, span),
                long_window_label=label,
                total_return=percent_change(long_start, current_end),
            )
        )

    entries.sort(key=lambda e: -e.win_count)
    return tuple(entries)


def build_comparison_series(
    history: YearlyHistory,
    assets: Sequence[AssetSpec],
    start_year: int = COMPARISON_START_YEAR,
    end_year: int = COMPARISON_END_YEAR,
    cagr_windows: Optional[Mapping[str, Tuple[int, int]]] = None,
    long_window_start: int = LONG_WINDOW_START_YEAR,
    long_window_years: int = LONG_WINDOW_YEARS,
) -> ComparisonSeries:
    """
    Rank every year in [start_year, end_year] and build the scoreboard.

    Years absent from `history` are skipped entirely. The input is not
    modified.

    Args:
        history: Sparse yearly price table
        assets: Tracked assets, in display order (also the tie-break order)
        start_year: First year to process
        end_year: Last year to process and the CAGR end anchor
        cagr_windows: name -> (anchor year, years); defaults to CAGR_WINDOWS
        long_window_start: Nominal first year of the long window
        long_window_years: Nominal span of the long window

    Returns:
        ComparisonSeries with ranked years and the scoreboard
    """
    wins: Dict[str, int] = {asset.symbol: 0 for asset in assets}
    years: List[YearResult] = []

    for year in range(start_year, end_year + 1):
        year_data = history.get(year)
        if year_data is None:
            continue
        result = rank_year(year, year_data, assets)
        if result.winner is not None:
            wins[result.winner.symbol] = wins.get(result.winner.symbol, 0) + 1
        years.append(result)

    logger.debug("Ranked %d years across %d assets", len(years), len(assets))
    return ComparisonSeries(
        years=tuple(years),
        scoreboard=build_scoreboard(
            history,
            assets,
            wins,
            end_year=end_year,
            cagr_windows=cagr_windows,
            long_window_start=long_window_start,
            long_window_years=long_window_years,
        ),
    )
