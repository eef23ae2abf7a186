"""
Timing utilities for fetch and build durations.

Timer works as a context manager; durations go to the module logger.
"""

from __future__ import annotations

import time
from typing import Any, Optional

from sound_treasury.logging_config import get_logger

logger = get_logger(__name__)


class Timer:
    """
    Context manager for timing code execution.

    Example:
        with Timer("Model series fetch") as timer:
            payload = source.fetch_model_series()
        print(timer.elapsed)
    """

    def __init__(self, name: str = "Operation", verbose: bool = True):
        """
        Initialize timer.

        Args:
            name: Name used in timing messages
            verbose: Log start/finish at DEBUG
        """
        self.name = name
        self.verbose = verbose
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        if self.verbose:
            logger.debug("⏱️  %s: Starting...", self.name)
        return self

    def __exit__(self, exc_type: Any, *args: Any) -> None:
        if self.start_time is None:
            return
        self.elapsed = time.perf_counter() - self.start_time
        if self.verbose:
            outcome = "Failed" if exc_type is not None else "Completed"
            logger.debug("⏱️  %s: %s in %.2fs", self.name, outcome, self.elapsed)
