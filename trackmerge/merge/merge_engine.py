"""Graft one activity's heart rate onto another activity's track.

The base activity supplies geometry, elevation and time; the HR source
supplies heart rate for points whose timestamp string matches exactly.
"""

from __future__ import annotations

from loguru import logger

from trackmerge.ingestion.track_builder import average_heart_rate
from trackmerge.models.activity import Activity, TrackPoint

MERGED_NAME_SUFFIX = " (Merged)"


def merge_activities(base: Activity, hr_source: Activity) -> Activity:
    """Merge heart rate from ``hr_source`` into a copy of ``base``.

    Matching is exact equality of the timestamp strings; there is no
    tolerance window or interpolation. Unmatched base points keep their own
    heart rate. Only ``avg_heart_rate`` is recomputed; every other stat is
    inherited from ``base`` unchanged.

    Neither input is validated for emptiness; callers check both activities
    are loaded first.

    Args:
        base: Activity providing geometry, elevation and time
        hr_source: Activity providing heart rate

    Returns:
        New Activity; inputs are not modified
    """
    hr_points: dict[str, TrackPoint] = {p.time: p for p in hr_source.track_points}

    merged_points: list[TrackPoint] = []
    matched = 0
    for point in base.track_points:
        hr_point = hr_points.get(point.time)
        if hr_point is None:
            merged_points.append(point.model_copy())
            continue
        matched += 1
        merged_points.append(point.model_copy(update={"heart_rate": hr_point.heart_rate}))

    if base.track_points and not matched:
        logger.warning(
            f"No timestamps of {hr_source.name!r} matched {base.name!r}; merged heart rate is unchanged"
        )
    logger.info(f"Merged heart rate into {base.name!r}: matched {matched}/{len(base.track_points)} points")

    stats = base.stats.model_copy(update={"avg_heart_rate": average_heart_rate(merged_points)})

    return Activity(
        name=f"{base.name}{MERGED_NAME_SUFFIX}",
        device_name=base.device_name,
        track_points=tuple(merged_points),
        stats=stats,
    )
