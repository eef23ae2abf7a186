"""
CSV export of the model series.

Columns: Date, Days, Price, FairValue, +2SD, -1SD. Dates are ISO calendar
dates (UTC), numbers carry a fixed number of decimals, and a missing price
is an empty field.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence, Union

import pandas as pd

from sound_treasury.constants import CSV_DECIMALS, CSV_HEADERS
from sound_treasury.logging_config import get_logger
from sound_treasury.models.records import TimePoint

logger = get_logger(__name__)

DATE, DAYS, PRICE, FAIR, UPPER, LOWER = CSV_HEADERS


def model_frame(points: Sequence[TimePoint]) -> pd.DataFrame:
    """Model series as a DataFrame with the export column names."""
    return pd.DataFrame(
        {
            DATE: [p.timestamp.date().isoformat() for p in points],
            DAYS: [p.days_since_genesis for p in points],
            PRICE: pd.Series([p.actual_price for p in points], dtype="float64"),
            FAIR: [p.fair_price for p in points],
            UPPER: [p.upper_band for p in points],
            LOWER: [p.lower_band for p in points],
        },
        columns=list(CSV_HEADERS),
    )


def to_csv_text(points: Sequence[TimePoint], decimals: int = CSV_DECIMALS) -> str:
    """Render the series as CSV text (header plus one row per point)."""
    return model_frame(points).to_csv(
        index=False,
        float_format=f"%.{decimals}f",
        na_rep="",
        lineterminator="\n",
    )


def write_model_csv(points: Sequence[TimePoint], path: Union[str, Path], decimals: int = CSV_DECIMALS) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv_text(points, decimals), encoding="utf-8")
    logger.info("Exported %d rows to %s", len(points), path)
    return path


def parse_model_csv(text: str) -> pd.DataFrame:
    """
    Read exported CSV text back into a DataFrame.

    Price is NaN where the export left it empty.
    """
    frame = pd.read_csv(io.StringIO(text), dtype={DATE: str})
    missing = [c for c in CSV_HEADERS if c not in frame.columns]
    if missing:
        raise ValueError(f"Not a model export, missing columns: {missing}")
    return frame
