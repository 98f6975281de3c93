from trackmerge.models.activity import Activity, ActivitySummary
from trackmerge.utils.formatting import (
    NOT_AVAILABLE,
    format_cadence,
    format_distance,
    format_duration,
    format_heart_rate,
    format_pace,
)


def summarize_activity(activity: Activity, label: str) -> ActivitySummary:
    """Build a display-ready summary of an activity's stats."""
    stats = activity.stats
    avg_pace = f"{format_pace(stats.avg_pace)} /km" if stats.avg_pace else NOT_AVAILABLE

    return ActivitySummary(
        label=label,
        name=activity.name,
        device_name=activity.device_name,
        point_count=len(activity.track_points),
        stats=stats,
        distance=format_distance(stats.total_distance),
        duration=format_duration(stats.duration),
        avg_heart_rate=format_heart_rate(stats.avg_heart_rate),
        avg_pace=avg_pace,
        avg_cadence=format_cadence(stats.avg_cadence),
    )
