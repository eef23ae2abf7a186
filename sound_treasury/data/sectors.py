"""
Sector reference data: tracked assets and the bundled yearly price history.

The static tables are the offline fallback for the sector comparison and
are rebuilt with `python main.py history <sector>` (Yahoo Finance closes).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sound_treasury.models.records import AssetSpec, YearlyHistory, YearPrices


@dataclass(frozen=True)
class SectorConfig:
    key: str
    label: str
    assets: Tuple[AssetSpec, ...]
    static_history: YearlyHistory

    def history_copy(self) -> YearlyHistory:
        """Deep copy of the static table so callers cannot alter the bundle."""
        return copy.deepcopy(self.static_history)


def _row(**prices: Optional[Tuple[float, float]]) -> Dict[str, Optional[YearPrices]]:
    return {
        symbol.replace("_", "-"): YearPrices(*pair) if pair is not None else None
        for symbol, pair in prices.items()
    }


BITCOIN = AssetSpec("BTC-USD", "Bitcoin", "#f7931a", yahoo_symbol="BTC-USD", google_symbol="CURRENCY:BTC-USD")

CHEMICALS = SectorConfig(
    key="chemicals",
    label="Chemicals",
    assets=(
        BITCOIN,
        AssetSpec("DOW", "Dow Inc.", "#C8102E", google_symbol="NYSE:DOW", listed_year=2019),
        AssetSpec("BASFY", "BASF (ADR)", "#004A96", google_symbol="OTCMKTS:BASFY"),
        AssetSpec("CE", "Celanese", "#008542", google_symbol="NYSE:CE"),
        AssetSpec("MEOH", "Methanex", "#582C83", google_symbol="NASDAQ:MEOH"),
        AssetSpec("FSCHX", "Fidelity Chem", "#71c7ec", google_symbol="MUTF:FSCHX"),
    ),
    static_history={
        2016: _row(BTC_USD=(434, 963), DOW=None, BASFY=(16.5, 20.8), CE=(66, 78.5), MEOH=(27.77, 45.95), FSCHX=(12.12, 14.91)),
        2017: _row(BTC_USD=(963, 13860), DOW=None, BASFY=(20.8, 27.5), CE=(78.5, 107), MEOH=(45.95, 54.15), FSCHX=(14.91, 18.42)),
        2018: _row(BTC_USD=(13860, 3740), DOW=None, BASFY=(27.5, 17.2), CE=(107, 90), MEOH=(54.15, 64.49), FSCHX=(18.42, 14.42)),
        2019: _row(BTC_USD=(3740, 7200), DOW=(51.63, 54.73), BASFY=(17.2, 19.5), CE=(90, 123), MEOH=(64.49, 35.42), FSCHX=(14.42, 11.95)),
        2020: _row(BTC_USD=(7200, 28990), DOW=(46.07, 55.5), BASFY=(19.5, 17.8), CE=(123, 129), MEOH=(35.42, 45.45), FSCHX=(11.95, 12.26)),
        2021: _row(BTC_USD=(28990, 46200), DOW=(55.5, 56.72), BASFY=(17.8, 19.2), CE=(129, 168), MEOH=(45.45, 39.55), FSCHX=(12.26, 16.76)),
        2022: _row(BTC_USD=(46200, 16530), DOW=(59.73, 50.39), BASFY=(19.2, 13.5), CE=(168, 102.2), MEOH=(39.55, 37.86), FSCHX=(16.76, 15.81)),
        2023: _row(BTC_USD=(16530, 42260), DOW=(59.35, 54.84), BASFY=(13.5, 15.2), CE=(102.2, 155.3), MEOH=(37.86, 47.36), FSCHX=(15.81, 15.41)),
        2024: _row(BTC_USD=(42260, 98000), DOW=(53.6, 40.13), BASFY=(15.2, 12.44), CE=(146.14, 68.76), MEOH=(45.58, 49), FSCHX=(14.78, 13.53)),
    },
)

AGRICULTURE = SectorConfig(
    key="agriculture",
    label="Agriculture",
    assets=(
        BITCOIN,
        AssetSpec("ADM", "ADM", "#005eb8", google_symbol="NYSE:ADM"),
        AssetSpec("BG", "Bunge", "#002d72", google_symbol="NYSE:BG"),
        AssetSpec("DE", "Deere", "#367C2B", google_symbol="NYSE:DE"),
        AssetSpec("MOS", "Mosaic", "#e37e26", google_symbol="NYSE:MOS"),
        AssetSpec("CF", "CF Ind", "#008542", google_symbol="NYSE:CF"),
    ),
    static_history={
        2016: _row(BTC_USD=(434, 963), ADM=(26.23, 34.95), BG=(46.11, 55.19), DE=(65.43, 89.51), MOS=(20.05, 25.41), CF=(22.57, 24.79)),
        2017: _row(BTC_USD=(963, 13860), ADM=(33.88, 31.64), BG=(52.87, 52.56), DE=(93.54, 138.87), MOS=(27.18, 22.75), CF=(27.79, 34.77)),
        2018: _row(BTC_USD=(13860, 3740), ADM=(33.9, 33.31), BG=(62.23, 43.1), DE=(148.22, 134.66), MOS=(24.23, 25.99), CF=(34.69, 36.55)),
        2019: _row(BTC_USD=(3740, 7200), ADM=(36.5, 39), BG=(44.42, 48.18), DE=(148.82, 159.43), MOS=(28.74, 19.38), CF=(36.67, 41.21)),
        2020: _row(BTC_USD=(7200, 28990), ADM=(37.66, 43.85), BG=(43.89, 57.29), DE=(146.56, 252.2), MOS=(17.82, 20.86), CF=(34.77, 34.71)),
        2021: _row(BTC_USD=(28990, 46200), ADM=(43.51, 60.22), BG=(57.17, 83.57), DE=(271.49, 324.93), MOS=(23.59, 35.92), CF=(37.11, 64.97)),
        2022: _row(BTC_USD=(46200, 16530), ADM=(66.82, 84.3), BG=(88.5, 91.33), DE=(357.77, 411.42), MOS=(36.6, 40.6), CF=(63.22, 79.46)),
        2023: _row(BTC_USD=(16530, 42260), ADM=(75.22, 67.09), BG=(90.71, 94.79), DE=(406.88, 388.54), MOS=(45.85, 33.74), CF=(78.99, 75.69)),
        2024: _row(BTC_USD=(42260, 98000), ADM=(51.63, 48.62), BG=(82.72, 75.13), DE=(383.83, 417.83), MOS=(29.17, 23.86), CF=(71.89, 83.31)),
    },
)

SECTOR_CONFIG: Dict[str, SectorConfig] = {
    CHEMICALS.key: CHEMICALS,
    AGRICULTURE.key: AGRICULTURE,
}

DEFAULT_SECTOR = CHEMICALS.key


def get_sector(sector_key: str) -> SectorConfig:
    """Look up a sector; raises KeyError with the valid keys listed."""
    try:
        return SECTOR_CONFIG[sector_key]
    except KeyError:
        raise KeyError(f"Unknown sector '{sector_key}'. Valid: {sorted(SECTOR_CONFIG)}") from None
