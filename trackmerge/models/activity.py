"""Canonical activity model shared by the parsers and all downstream consumers.

Activities are created once by a parser and are immutable thereafter. Any
transformation (merge, smoothing) builds new instances.
"""

from __future__ import annotations

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class TrackPoint(BaseModel):
    """One timestamped GPS/physiological sample.

    Attributes:
        latitude: Decimal degrees
        longitude: Decimal degrees
        elevation: Meters, if recorded
        time: Timestamp string as written in the source file
        timestamp: Parsed absolute instant (timezone-aware)
        heart_rate: Beats per minute, if recorded
        cadence: Steps per minute after normalization, if recorded
        cumulative_distance: Kilometers from the first point of the track
        pace: Seconds per kilometer over the interval ending at this point
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    elevation: float | None = None
    time: str
    timestamp: datetime
    heart_rate: int | None = None
    cadence: int | None = None
    cumulative_distance: float = 0.0
    pace: float | None = None

    @field_validator("heart_rate", "cadence")
    @classmethod
    def validate_non_negative(cls, v: int | None) -> int | None:
        """Validate physiological samples are non-negative."""
        if v is not None and v < 0:
            raise ValueError("heart_rate and cadence must be >= 0")
        return v

    @field_validator("pace")
    @classmethod
    def validate_pace(cls, v: float | None) -> float | None:
        """Validate pace is finite and positive."""
        if v is not None and (not math.isfinite(v) or v <= 0):
            raise ValueError("pace must be finite and > 0")
        return v


class ActivityStats(BaseModel):
    """Aggregate statistics derived from an activity's track points."""

    model_config = ConfigDict(frozen=True)

    total_distance: float
    duration: float
    avg_heart_rate: float | None = None
    avg_pace: float | None = None
    avg_cadence: float | None = None


class Activity(BaseModel):
    """One complete parsed or derived recording."""

    model_config = ConfigDict(frozen=True)

    name: str
    device_name: str | None = None
    track_points: tuple[TrackPoint, ...]
    stats: ActivityStats

    @property
    def start_time(self) -> datetime | None:
        if not self.track_points:
            return None
        return self.track_points[0].timestamp

    @property
    def end_time(self) -> datetime | None:
        if not self.track_points:
            return None
        return self.track_points[-1].timestamp


class ActivitySummary(BaseModel):
    """Display-ready summary of an activity for a comparison caller."""

    label: str
    name: str
    device_name: str | None = None
    point_count: int
    stats: ActivityStats
    distance: str
    duration: str
    avg_heart_rate: str
    avg_pace: str
    avg_cadence: str
