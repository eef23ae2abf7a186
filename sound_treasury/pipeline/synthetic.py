"""
Deterministic synthetic model series.

Two generators, both shaped by the fair-value formula plus a sine "market
cycle":

- the baseline: daily points from mid-2010 to now, shown instantly on first
  paint while the live fetch is in flight;
- the simulation: a 30-day grid out to the projection year with seeded
  uniform noise, shown when the live fetch fails.

Neither is ever labelled as live data.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import numpy as np

from sound_treasury.constants import (
    BASELINE_START_DATE,
    BASELINE_WOBBLE_AMPLITUDE,
    BASELINE_WOBBLE_PERIOD_DAYS,
    CYCLE_AMPLITUDE,
    CYCLE_PERIOD_DAYS,
    LABEL_INITIALIZING,
    LABEL_SIMULATED,
    PROJECT_TO_YEAR,
    SIMULATED_NOISE_AMPLITUDE,
    SIMULATED_R_SQUARED,
    SIMULATED_START_DAY,
    SIMULATED_STD_DEV,
    SIMULATED_STEP_DAYS,
    SYNTHETIC_SEED,
)
from sound_treasury.logging_config import get_logger
from sound_treasury.models.fair_value import PowerLawModel
from sound_treasury.models.records import ModelStats, TimePoint

logger = get_logger(__name__)

SyntheticSeries = Tuple[Tuple[TimePoint, ...], ModelStats]


def _build_points(
    model: PowerLawModel,
    days: np.ndarray,
    prices: np.ndarray,
    priced: np.ndarray,
    sigma: float,
) -> Tuple[TimePoint, ...]:
    fair = model.fair_price_array(days)
    upper = fair * np.exp(model.upper_sigmas * sigma)
    lower = fair * np.exp(-model.lower_sigmas * sigma)
    return tuple(
        TimePoint(
            timestamp=model.instant_at(float(d)),
            actual_price=float(p) if is_priced else None,
            fair_price=float(f),
            days_since_genesis=float(d),
            upper_band=float(u),
            lower_band=float(lo),
        )
        for d, p, is_priced, f, u, lo in zip(days, prices, priced, fair, upper, lower)
    )


def _stats(points: Tuple[TimePoint, ...], label: str) -> ModelStats:
    last_priced: Optional[TimePoint] = None
    for point in reversed(points):
        if point.actual_price is not None:
            last_priced = point
            break
    return ModelStats(
        std_dev=SIMULATED_STD_DEV,
        r_squared=SIMULATED_R_SQUARED,
        current_price=last_priced.actual_price if last_priced else None,
        current_fair_price=last_priced.fair_price if last_priced else None,
        data_source=label,
    )


def generate_simulated_series(
    now: datetime,
    model: Optional[PowerLawModel] = None,
    seed: int = SYNTHETIC_SEED,
    project_to_year: int = PROJECT_TO_YEAR,
) -> SyntheticSeries:
    """
    Simulated price/fair-value series used when live data is unavailable.

    Noise is drawn for every grid point from a seeded generator, so the
    curve is identical run to run; only the cut-off between priced and
    future points moves with `now`.

    Args:
        now: Generation time; later points carry no price
        model: Fair-value model (defaults to the standard parameters)
        seed: Noise seed
        project_to_year: Last year of the grid (through Dec 31)

    Returns:
        (points, stats)
    """
    model = model or PowerLawModel()
    end = datetime(project_to_year, 12, 31, tzinfo=timezone.utc)
    total_days = model.days_since_genesis(end)

    days = np.arange(SIMULATED_START_DAY, total_days, SIMULATED_STEP_DAYS, dtype=float)
    rng = np.random.default_rng(seed)
    half = SIMULATED_NOISE_AMPLITUDE / 2
    noise = rng.uniform(-half, half, size=days.shape)

    cycle = np.sin(days / CYCLE_PERIOD_DAYS) * CYCLE_AMPLITUDE
    prices = model.fair_price_array(days) * np.exp(cycle + noise)
    priced = days <= model.days_since_genesis(now)

    points = _build_points(model, days, prices, priced, SIMULATED_STD_DEV)
    logger.debug("Generated %d simulated points (%d priced)", len(points), int(priced.sum()))
    return points, _stats(points, LABEL_SIMULATED)


def generate_baseline_history(
    now: datetime,
    model: Optional[PowerLawModel] = None,
    start: datetime = BASELINE_START_DATE,
) -> SyntheticSeries:
    """
    Daily deterministic curve shaped like the asset's history, for first paint.

    price = fair * exp(1.5 sin(days / 600) + 0.3 cos(days / 50))
    """
    model = model or PowerLawModel()
    count = max(int((now - start) / timedelta(days=1)) + 1, 2)
    first_day = model.days_since_genesis(start)
    days = first_day + np.arange(count, dtype=float)

    cycle = np.sin(days / CYCLE_PERIOD_DAYS) * CYCLE_AMPLITUDE
    wobble = np.cos(days / BASELINE_WOBBLE_PERIOD_DAYS) * BASELINE_WOBBLE_AMPLITUDE
    prices = model.fair_price_array(days) * np.exp(cycle + wobble)
    priced = np.ones(days.shape, dtype=bool)

    points = _build_points(model, days, prices, priced, SIMULATED_STD_DEV)
    return points, _stats(points, LABEL_INITIALIZING)
