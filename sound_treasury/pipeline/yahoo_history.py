"""
Yearly price history from Yahoo Finance.

Rebuilds the sector comparison table (year -> symbol -> first/last close)
from daily closes, so the bundled static history can be refreshed and the
comparison engine run against current prices.

Usage:
    history = build_yearly_history(CHEMICALS.assets, 2016, 2025)
    series = build_comparison_series(history, CHEMICALS.assets)
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

import pandas as pd
import yfinance as yf

from sound_treasury.logging_config import get_logger
from sound_treasury.models.records import AssetSpec, YearlyHistory, YearPrices

logger = get_logger(__name__)

Downloader = Callable[..., pd.DataFrame]


def fetch_daily_closes(
    ticker: str,
    start_year: int,
    end_year: int,
    downloader: Optional[Downloader] = None,
) -> Optional[pd.Series]:
    """
    Download daily closes for one ticker.

    Returns:
        Close prices indexed by date, or None if nothing usable came back
    """
    download = downloader or yf.download
    try:
        data = download(
            ticker,
            start=f"{start_year}-01-01",
            end=f"{end_year + 1}-01-01",
            progress=False,
            auto_adjust=True,
        )
    except Exception as e:
        logger.warning("Download failed for %s: %s", ticker, e)
        return None

    if data is None or data.empty:
        logger.warning("No data returned from Yahoo Finance for %s", ticker)
        return None

    # Single tickers can still come back with (field, ticker) columns
    if isinstance(data.columns, pd.MultiIndex):
        data = data.copy()
        data.columns = data.columns.get_level_values(0)

    if "Close" not in data.columns:
        logger.warning("No Close column for %s", ticker)
        return None

    closes = data["Close"].dropna()
    if closes.empty:
        return None
    closes.index = pd.to_datetime(closes.index)
    return closes.sort_index()


def yearly_prices(closes: pd.Series) -> Dict[int, YearPrices]:
    """First and last close of each calendar year."""
    result: Dict[int, YearPrices] = {}
    for year, group in closes.groupby(closes.index.year):
        result[int(year)] = YearPrices(start=float(group.iloc[0]), end=float(group.iloc[-1]))
    return result


def build_yearly_history(
    assets: Sequence[AssetSpec],
    start_year: int,
    end_year: int,
    downloader: Optional[Downloader] = None,
) -> YearlyHistory:
    """
    Build a YearlyHistory for `assets` over [start_year, end_year].

    Assets with no data in a year are recorded as None for that year; years
    with no data for any asset are left out.
    """
    history: YearlyHistory = {
        year: {asset.symbol: None for asset in assets} for year in range(start_year, end_year + 1)
    }

    for asset in assets:
        closes = fetch_daily_closes(asset.quote_symbol, start_year, end_year, downloader)
        if closes is None:
            continue
        for year, prices in yearly_prices(closes).items():
            if year in history:
                history[year][asset.symbol] = prices
        logger.debug("%s: %d daily closes", asset.symbol, len(closes))

    populated = {year: row for year, row in history.items() if any(p is not None for p in row.values())}
    logger.info("Built yearly history for %d assets over %d years", len(assets), len(populated))
    return populated


def history_to_dict(history: YearlyHistory) -> Dict[str, Dict[str, Any]]:
    """JSON-friendly form: {"2019": {"DOW": {"start": .., "end": ..}, "X": None}}."""
    return {
        str(year): {
            symbol: {"start": prices.start, "end": prices.end} if prices is not None else None
            for symbol, prices in row.items()
        }
        for year, row in sorted(history.items())
    }
