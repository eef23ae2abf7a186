"""
Retry utilities with exponential backoff.

Provides retry logic for unreliable network calls.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from sound_treasury.constants import (
    INITIAL_RETRY_DELAY_SECONDS,
    MAX_RETRY_ATTEMPTS,
    RETRY_BACKOFF_FACTOR,
)
from sound_treasury.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: int = MAX_RETRY_ATTEMPTS,
    initial_delay: float = INITIAL_RETRY_DELAY_SECONDS,
    backoff_factor: float = RETRY_BACKOFF_FACTOR,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    reraise: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[T]:
    """
    Retry a function with exponential backoff.

    Args:
        func: Function to retry (takes no arguments - use lambda for params)
        max_attempts: Maximum number of attempts
        initial_delay: Initial delay in seconds
        backoff_factor: Multiplier for delay on each retry
        exceptions: Exceptions that trigger a retry; others propagate at once
        reraise: Re-raise the last exception instead of returning None
        sleep: Sleep function, injectable for tests

    Returns:
        Function result, or None if all attempts failed and reraise is False

    Example:
        payload = retry_with_backoff(
            lambda: session.get(url, timeout=10).json(),
            exceptions=(requests.RequestException,),
            reraise=True,
        )
    """
    delay = initial_delay

    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except exceptions as e:
            if attempt == max_attempts:
                logger.warning("All %d attempts failed: %s", max_attempts, e)
                if reraise:
                    raise
                return None

            logger.debug(
                "Attempt %d/%d failed: %s. Retrying in %.1fs...",
                attempt,
                max_attempts,
                e,
                delay,
            )
            sleep(delay)
            delay *= backoff_factor

    return None
