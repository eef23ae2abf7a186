"""
Sound Treasury - data core of the Bitcoin fair-value and sector comparison dashboard.
"""

__version__ = "0.1.0"

from sound_treasury.config import Config
from sound_treasury.exceptions import DashboardDataError, InvalidPayload, NetworkFailure, StorageFailure

__all__ = [
    "Config",
    "DashboardDataError",
    "InvalidPayload",
    "NetworkFailure",
    "StorageFailure",
    "__version__",
]
