"""Display formatting for pace, duration and chart axes.

Pure helpers with no model dependencies, shared by the CLI and the API
summaries.
"""

from __future__ import annotations

import math

NOT_AVAILABLE = "N/A"


def format_pace(seconds_per_km: float | None) -> str:
    """Format a pace as ``m:ss``.

    Args:
        seconds_per_km: Pace in seconds per kilometer

    Returns:
        Formatted pace, or "N/A" for missing/non-finite values
    """
    if seconds_per_km is None or not math.isfinite(seconds_per_km):
        return NOT_AVAILABLE
    minutes, seconds = divmod(round(seconds_per_km), 60)
    return f"{minutes}:{seconds:02d}"


def parse_pace_to_seconds(pace: str | None) -> int | None:
    """Parse a ``m:ss`` or plain ``ss`` pace string into seconds.

    Args:
        pace: Pace string entered by a user

    Returns:
        Seconds per kilometer, or None if the string is not a valid pace
    """
    if not pace or not isinstance(pace, str):
        return None

    parts = pace.strip().split(":")
    try:
        values = [int(part) for part in parts]
    except ValueError:
        return None

    if len(values) == 1:
        return values[0] if values[0] >= 0 else None
    if len(values) == 2:
        minutes, seconds = values
        if minutes < 0 or seconds < 0 or seconds >= 60:
            return None
        return minutes * 60 + seconds

    return None


def parse_pace_range(text: str | None) -> tuple[int, int] | None:
    """Parse a ``slowest..fastest`` pace range such as ``9:00..3:00``.

    Returns:
        Tuple of (slowest, fastest) seconds per km, or None if either end is
        not a valid pace or the range is empty
    """
    if not text or ".." not in text:
        return None
    slowest_text, fastest_text = text.split("..", 1)
    slowest = parse_pace_to_seconds(slowest_text)
    fastest = parse_pace_to_seconds(fastest_text)
    if slowest is None or fastest is None or slowest == fastest:
        return None
    return slowest, fastest


def format_duration(total_seconds: float | None) -> str:
    """Format a duration as ``HH:MM:SS``."""
    if total_seconds is None or not math.isfinite(total_seconds):
        return "00:00:00"
    total = int(total_seconds)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_time_axis(total_seconds: float | None) -> str:
    """Format elapsed time as ``m:ss``, or ``h:mm:ss`` past the hour."""
    if total_seconds is None or not math.isfinite(total_seconds):
        return "00:00"
    total = int(total_seconds)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_distance(distance_km: float) -> str:
    return f"{distance_km:.2f} km"


def format_heart_rate(bpm: float | None) -> str:
    if not bpm:
        return NOT_AVAILABLE
    return f"{round(bpm)} bpm"


def format_cadence(spm: float | None) -> str:
    if not spm:
        return NOT_AVAILABLE
    return f"{round(spm)} spm"
