"""
Core utilities for the Sound Treasury dashboard core.

- Caching (SessionCache, PersistedCache, StorageResult)
- Retry logic (retry_with_backoff)
- Timing utilities (Timer)
"""

from sound_treasury.core.cache import PersistedCache, SessionCache, StorageResult, utc_now
from sound_treasury.core.retry import retry_with_backoff
from sound_treasury.core.timing import Timer

__all__ = [
    # Cache
    "PersistedCache",
    "SessionCache",
    "StorageResult",
    "utc_now",
    # Retry
    "retry_with_backoff",
    # Timing
    "Timer",
]
