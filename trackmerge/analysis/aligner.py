"""Per-second alignment of two activities for side-by-side comparison.

Both activities are resampled onto one timeline that starts at the earlier of
their first timestamps. This is a sparse resample: seconds without a source
sample stay null, and drawing across the gaps is left to the caller.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from loguru import logger
from pydantic import BaseModel, ConfigDict

from trackmerge.analysis.smoothing import smooth
from trackmerge.models.activity import Activity, TrackPoint


class AlignedSample(BaseModel):
    """One second of the shared comparison timeline."""

    model_config = ConfigDict(frozen=True)

    offset_seconds: int
    timestamp: datetime
    hr_a: int | None = None
    hr_b: int | None = None
    pace_a: float | None = None
    pace_b: float | None = None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _points(activity: Activity | None) -> Sequence[TrackPoint]:
    return activity.track_points if activity is not None else ()


def _sample_map(points: Sequence[TrackPoint], origin: datetime) -> dict[int, TrackPoint]:
    """Map rounded elapsed seconds to the last point recorded at that second."""
    samples: dict[int, TrackPoint] = {}
    for point in points:
        samples[_round_half_up((point.timestamp - origin).total_seconds())] = point
    return samples


def _elapsed_end(points: Sequence[TrackPoint], origin: datetime) -> float:
    if not points:
        return 0.0
    return (points[-1].timestamp - origin).total_seconds()


def align_activities(activity_a: Activity | None, activity_b: Activity | None) -> list[AlignedSample]:
    """Align two activities onto a shared one-second timeline.

    Args:
        activity_a: First activity, may be None or empty
        activity_b: Second activity, may be None or empty

    Returns:
        One sample per second from 0 to the later end time (inclusive), or an
        empty list when neither activity has points
    """
    points_a = _points(activity_a)
    points_b = _points(activity_b)

    starts = [points[0].timestamp for points in (points_a, points_b) if points]
    if not starts:
        return []
    origin = min(starts)

    map_a = _sample_map(points_a, origin)
    map_b = _sample_map(points_b, origin)
    max_offset = math.ceil(max(_elapsed_end(points_a, origin), _elapsed_end(points_b, origin)))

    samples: list[AlignedSample] = []
    for offset in range(max_offset + 1):
        point_a = map_a.get(offset)
        point_b = map_b.get(offset)
        samples.append(
            AlignedSample(
                offset_seconds=offset,
                timestamp=origin + timedelta(seconds=offset),
                hr_a=point_a.heart_rate if point_a is not None else None,
                hr_b=point_b.heart_rate if point_b is not None else None,
                pace_a=point_a.pace if point_a is not None else None,
                pace_b=point_b.pace if point_b is not None else None,
            )
        )

    logger.debug(f"Aligned activities onto {len(samples)} seconds from {origin.isoformat()}")
    return samples


def smooth_pace(samples: Sequence[AlignedSample], window_size: int) -> list[AlignedSample]:
    """Return new samples with both pace series smoothed."""
    if window_size <= 1:
        return list(samples)

    pace_a = smooth([s.pace_a for s in samples], window_size)
    pace_b = smooth([s.pace_b for s in samples], window_size)
    return [
        sample.model_copy(update={"pace_a": a, "pace_b": b})
        for sample, a, b in zip(samples, pace_a, pace_b, strict=True)
    ]


def timeline_seconds(activity_a: Activity | None, activity_b: Activity | None) -> int:
    """Number of samples ``align_activities`` would produce, without building them."""
    points_a = _points(activity_a)
    points_b = _points(activity_b)
    starts = [points[0].timestamp for points in (points_a, points_b) if points]
    if not starts:
        return 0
    origin = min(starts)
    return math.ceil(max(_elapsed_end(points_a, origin), _elapsed_end(points_b, origin))) + 1


def limit_pace(samples: Sequence[AlignedSample], slowest: float, fastest: float) -> list[AlignedSample]:
    """Blank pace values outside ``[fastest, slowest]`` seconds per km.

    Heart rate is left untouched. The bounds may be given in either order.
    """
    low, high = sorted((fastest, slowest))

    def _within(pace: float | None) -> float | None:
        return pace if pace is not None and low <= pace <= high else None

    return [
        sample.model_copy(update={"pace_a": _within(sample.pace_a), "pace_b": _within(sample.pace_b)})
        for sample in samples
    ]
