"""
Power-Law Fair Value Model

Deterministic fair price as a power function of days since the genesis date:

    fair = coefficient * days ** exponent

with confidence bands expressed in residual standard deviations (sigma) of
log price. The bands are deliberately asymmetric:

    upper = fair * exp(+2 sigma)
    lower = fair * exp(-1 sigma)

Coefficients are fixed inputs; nothing here fits them. Prices are compared to
fair value through the ratio price / fair, since the process is log-normal-like.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

import numpy as np

from sound_treasury.constants import (
    BAND_LOWER_SIGMAS,
    BAND_UPPER_SIGMAS,
    GENESIS_DATE,
    MODEL_COEFF,
    MODEL_EXPONENT,
    ONE_DAY_SECONDS,
)
from sound_treasury.models.records import TimePoint


@dataclass(frozen=True)
class PowerLawModel:
    """
    Fair-value model with fixed parameters.

    Negative day counts are a caller contract violation; they are clamped
    to 0 rather than raised, so the fair price there is 0.

    Example:
        model = PowerLawModel()
        fair = model.fair_price(model.days_since_genesis(datetime.now(timezone.utc)))
        upper, lower = model.bands(fair, sigma=0.6)
    """

    coefficient: float = MODEL_COEFF
    exponent: float = MODEL_EXPONENT
    genesis: datetime = GENESIS_DATE
    upper_sigmas: float = BAND_UPPER_SIGMAS
    lower_sigmas: float = BAND_LOWER_SIGMAS

    def __post_init__(self) -> None:
        if self.coefficient <= 0 or self.exponent <= 0:
            raise ValueError("coefficient and exponent must be positive")

    @classmethod
    def from_config(cls, config) -> "PowerLawModel":
        return cls(
            coefficient=config.model_coefficient,
            exponent=config.model_exponent,
            upper_sigmas=config.band_upper_sigmas,
            lower_sigmas=config.band_lower_sigmas,
        )

    def days_since_genesis(self, instant: datetime) -> float:
        return (instant - self.genesis).total_seconds() / ONE_DAY_SECONDS

    def instant_at(self, days: float) -> datetime:
        return self.genesis + timedelta(days=days)

    def fair_price(self, days: float) -> float:
        return self.coefficient * max(days, 0.0) ** self.exponent

    def fair_price_array(self, days: np.ndarray) -> np.ndarray:
        """Vectorised fair_price over an array of day counts."""
        return self.coefficient * np.power(np.clip(days, 0.0, None), self.exponent)

    def bands(self, fair_price: float, sigma: float) -> Tuple[float, float]:
        """Return (upper, lower) for a fair price and residual sigma."""
        return (
            fair_price * math.exp(self.upper_sigmas * sigma),
            fair_price * math.exp(-self.lower_sigmas * sigma),
        )

    def valuation_ratio(self, price: float, days: float) -> Optional[float]:
        """price / fair; None where the fair price is 0 (days <= 0)."""
        fair = self.fair_price(days)
        if fair <= 0:
            return None
        return price / fair

    def point(self, instant: datetime, sigma: float, actual_price: Optional[float] = None) -> TimePoint:
        """Evaluate the model at one instant."""
        days = self.days_since_genesis(instant)
        fair = self.fair_price(days)
        upper, lower = self.bands(fair, sigma)
        return TimePoint(
            timestamp=instant,
            actual_price=actual_price,
            fair_price=fair,
            days_since_genesis=days,
            upper_band=upper,
            lower_band=lower,
        )
