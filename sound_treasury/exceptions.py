"""Dashboard data exception hierarchy.

All data-core exceptions derive from :class:`DashboardDataError` so the
orchestrator can recover from every one of them at a single seam.
"""

from __future__ import annotations


class DashboardDataError(Exception):
    """Base class for failures while obtaining dashboard data."""


class NetworkFailure(DashboardDataError):
    """Raised when a fetch throws, times out or returns a non-success status."""


class InvalidPayload(DashboardDataError):
    """Raised when a response or stored payload fails shape validation."""


class StorageFailure(DashboardDataError):
    """Reading from or writing to the persisted cache failed.

    Returned inside a :class:`~sound_treasury.core.cache.StorageResult`
    rather than raised across the core.
    """


__all__ = [
    "DashboardDataError",
    "NetworkFailure",
    "InvalidPayload",
    "StorageFailure",
]
