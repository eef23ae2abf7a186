"""Chart downsampling: pick a bounded, order-preserving subset of a series."""

from __future__ import annotations

from typing import Sequence, Tuple, TypeVar

from sound_treasury.constants import CHART_MAX_POINTS

T = TypeVar("T")


def downsample(points: Sequence[T], max_points: int = CHART_MAX_POINTS) -> Tuple[T, ...]:
    """
    Reduce a series to at most `max_points` points for display.

    Always keeps the first and last input point and never creates or alters
    points; it only selects. Same input, same output.

    Args:
        points: Ordered series (typically TimePoints)
        max_points: Upper bound on the output length (>= 2)

    Returns:
        Tuple of selected points in input order
    """
    if max_points < 2:
        raise ValueError(f"max_points must be >= 2 to keep both endpoints, got {max_points}")

    n = len(points)
    if n <= max_points:
        return tuple(points)

    # n > max_points, so the stride (n-1)/(max_points-1) exceeds 1 and the
    # floored indices are strictly increasing from 0 to n-1
    last = n - 1
    span = max_points - 1
    return tuple(points[i * last // span] for i in range(max_points))
