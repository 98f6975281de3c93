"""Point construction and statistics shared by the GPX and TCX parsers.

Both parsers reduce their XML dialect to a sequence of ``RawPoint`` values and
hand it to ``build_activity``. The loop-carried state (cumulative distance and
cadence totals) lives in an explicit ``TrackAccumulator`` that is threaded
through ``fold_points`` and returned alongside the built points.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Literal

from loguru import logger

from trackmerge.models.activity import Activity, ActivityStats, TrackPoint
from trackmerge.utils.geodesy import distance_km


@dataclass(frozen=True)
class DistanceSource:
    """Where a point's cumulative distance comes from.

    ``reported`` carries a cumulative distance (km) written by the recording
    device; ``derived`` means the distance is computed geometrically from the
    previous point.
    """

    kind: Literal["reported", "derived"]
    km: float | None = None

    @classmethod
    def reported(cls, km: float) -> DistanceSource:
        return cls(kind="reported", km=km)

    @classmethod
    def derived(cls) -> DistanceSource:
        return cls(kind="derived")


@dataclass(frozen=True)
class RawPoint:
    """Fields extracted from one XML point element, before derivation."""

    latitude: float
    longitude: float
    elevation: float | None
    time: str
    timestamp: datetime
    heart_rate: int | None
    cadence: int | None
    distance_source: DistanceSource = field(default_factory=DistanceSource.derived)


@dataclass(frozen=True)
class TrackAccumulator:
    cumulative_distance: float = 0.0
    cadence_sum: int = 0
    cadence_count: int = 0

    def with_cadence(self, cadence: int | None) -> TrackAccumulator:
        if cadence is None:
            return self
        return replace(self, cadence_sum=self.cadence_sum + cadence, cadence_count=self.cadence_count + 1)


def default_timestamp_policy(raw: str | None) -> tuple[str, datetime]:
    """Resolve a point's timestamp, falling back to the current instant.

    Missing or unparsable timestamps are not an error: the point is stamped
    with "now" (UTC) and keeps a matching ISO string.

    Args:
        raw: Timestamp text from the source file

    Returns:
        Tuple of (timestamp string, timezone-aware datetime)
    """
    if raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparsable timestamp {raw!r}, defaulting to now")
        else:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return raw, parsed

    now = datetime.now(timezone.utc)
    return to_iso_z(now), now


def to_iso_z(moment: datetime) -> str:
    """Format an instant as UTC ISO-8601 with millisecond precision and a Z suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def resolve_interval(
    previous: TrackPoint | None,
    raw: RawPoint,
    acc: TrackAccumulator,
) -> tuple[float, float | None]:
    """Resolve a point's cumulative distance and pace.

    Args:
        previous: Previously built point, or None for the first point
        raw: Point being built
        acc: Accumulator carrying the running cumulative distance

    Returns:
        Tuple of (cumulative distance in km, pace in seconds per km or None)
    """
    source = raw.distance_source

    if source.kind == "reported" and source.km is not None:
        # Device odometers occasionally step backwards; keep the track monotonic
        cumulative = max(source.km, acc.cumulative_distance)
        if previous is None:
            return cumulative, None
        interval_km = source.km - previous.cumulative_distance
    else:
        if previous is None:
            return acc.cumulative_distance, None
        interval_km = distance_km(previous.latitude, previous.longitude, raw.latitude, raw.longitude)
        cumulative = acc.cumulative_distance + interval_km

    interval_seconds = (raw.timestamp - previous.timestamp).total_seconds()
    if interval_km <= 0 or interval_seconds <= 0:
        return cumulative, None
    pace = interval_seconds / interval_km
    return cumulative, pace if math.isfinite(pace) else None


def fold_points(raw_points: Iterable[RawPoint]) -> tuple[list[TrackPoint], TrackAccumulator]:
    """Build track points from raw points, threading the accumulator through."""
    points: list[TrackPoint] = []
    acc = TrackAccumulator()

    for raw in raw_points:
        previous = points[-1] if points else None
        cumulative, pace = resolve_interval(previous, raw, acc)
        points.append(
            TrackPoint(
                latitude=raw.latitude,
                longitude=raw.longitude,
                elevation=raw.elevation,
                time=raw.time,
                timestamp=raw.timestamp,
                heart_rate=raw.heart_rate,
                cadence=raw.cadence,
                cumulative_distance=cumulative,
                pace=pace,
            )
        )
        acc = replace(acc, cumulative_distance=cumulative).with_cadence(raw.cadence)

    return points, acc


def average_heart_rate(points: Sequence[TrackPoint]) -> float | None:
    samples = [p.heart_rate for p in points if p.heart_rate is not None]
    if not samples:
        return None
    return sum(samples) / len(samples)


def compute_stats(points: Sequence[TrackPoint], acc: TrackAccumulator) -> ActivityStats:
    """Compute aggregate statistics for a built track.

    ``avg_pace`` is the global average (duration / distance), not the mean of
    per-point paces.
    """
    if not points:
        return ActivityStats(total_distance=0.0, duration=0.0)

    total_distance = points[-1].cumulative_distance
    duration = (points[-1].timestamp - points[0].timestamp).total_seconds()
    avg_pace = duration / total_distance if total_distance > 0 and duration > 0 else None
    avg_cadence = acc.cadence_sum / acc.cadence_count if acc.cadence_count > 0 else None

    return ActivityStats(
        total_distance=total_distance,
        duration=duration,
        avg_heart_rate=average_heart_rate(points),
        avg_pace=avg_pace,
        avg_cadence=avg_cadence,
    )


def build_activity(name: str, device_name: str | None, raw_points: Iterable[RawPoint]) -> Activity:
    points, acc = fold_points(raw_points)
    stats = compute_stats(points, acc)
    return Activity(
        name=name,
        device_name=device_name,
        track_points=tuple(points),
        stats=stats,
    )
