"""Centered moving average for noisy per-second series."""

from __future__ import annotations

import math
from collections.abc import Sequence


def check_window_size(window_size: int) -> None:
    """Reject window sizes a centered average cannot use.

    Raises:
        ValueError: If ``window_size`` is below 1 or even
    """
    if window_size < 1 or window_size % 2 == 0:
        raise ValueError(f"Smoothing window must be an odd integer >= 1, got {window_size}")


def smooth(series: Sequence[float | None], window_size: int) -> list[float | None]:
    """Smooth a series with a boundary-shrinking centered moving average.

    The window ``[i - w//2, i + w//2]`` is clamped to the series bounds, so it
    shrinks near the edges. Null and non-finite values are ignored; a window
    with no valid values keeps the original value at ``i``.

    Args:
        series: Values to smooth, nulls allowed
        window_size: Odd window width; ``<= 1`` disables smoothing

    Returns:
        New list of the same length
    """
    if window_size <= 1:
        return list(series)

    half = window_size // 2
    length = len(series)
    smoothed: list[float | None] = []

    for i, original in enumerate(series):
        window = series[max(0, i - half) : min(length, i + half + 1)]
        valid = [v for v in window if v is not None and math.isfinite(v)]
        smoothed.append(sum(valid) / len(valid) if valid else original)

    return smoothed
