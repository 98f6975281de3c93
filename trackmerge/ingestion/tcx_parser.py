"""TCX (Garmin Training Center Database v2) parser.

Converts TCX text into an Activity. Unlike GPX, TCX points may carry a
device-reported cumulative distance; when present it is preferred over the
geometric distance.
"""

from __future__ import annotations

from lxml import etree
from loguru import logger

from trackmerge.core.errors import NoTrackPointsError
from trackmerge.ingestion.track_builder import (
    DistanceSource,
    RawPoint,
    build_activity,
    default_timestamp_policy,
)
from trackmerge.ingestion.xml_utils import find_text, load_xml_root, parse_float, parse_int
from trackmerge.models.activity import Activity

# Raw cadence at or below this is single-leg revolutions per minute and is
# doubled to steps per minute; above it the device already reports SPM.
SINGLE_LEG_CADENCE_MAX = 100


def parse_tcx(text: str, file_name: str) -> Activity:
    """Parse TCX text into an Activity.

    Args:
        text: Raw TCX file text
        file_name: Display file name, used when the Activity has no Sport

    Returns:
        Activity with derived distance, pace and stats

    Raises:
        MalformedXmlError: If the text is not well-formed XML
        NoTrackPointsError: If no Trackpoint carries both coordinates
    """
    root = load_xml_root(text, file_name=file_name)

    raw_points: list[RawPoint] = []
    skipped = 0
    for element in root.iter("{*}Trackpoint"):
        raw = _read_point(element)
        if raw is None:
            skipped += 1
            continue
        raw_points.append(raw)

    if skipped:
        logger.warning(f"Skipped {skipped} TCX trackpoints without coordinates in {file_name}")

    if not raw_points:
        raise NoTrackPointsError("No track points found in the TCX file.", file_name=file_name)

    activity_element = next(root.iter("{*}Activity"), None)
    sport = (activity_element.get("Sport") or "").strip() if activity_element is not None else ""
    name = sport or file_name

    device_name = find_text(root, ".//{*}Creator/{*}Name") or find_text(root, ".//{*}Author/{*}Name")

    activity = build_activity(name, device_name, raw_points)
    logger.debug(
        f"Parsed TCX {file_name}: points={len(activity.track_points)}, skipped={skipped}, "
        f"distance={activity.stats.total_distance:.3f}km, duration={activity.stats.duration}s"
    )
    return activity


def skip_incomplete_point_policy(latitude: float | None, longitude: float | None) -> bool:
    """A TCX point without both coordinates is dropped, not counted and not an error."""
    return latitude is None or longitude is None


def normalize_cadence(raw: int | None) -> int | None:
    """Normalize TCX cadence to steps per minute."""
    if raw is None:
        return None
    if raw > SINGLE_LEG_CADENCE_MAX:
        return raw
    return raw * 2


def _read_point(element: etree._Element) -> RawPoint | None:
    latitude = parse_float(find_text(element, ".//{*}LatitudeDegrees"))
    longitude = parse_float(find_text(element, ".//{*}LongitudeDegrees"))
    if skip_incomplete_point_policy(latitude, longitude):
        return None

    time, timestamp = default_timestamp_policy(find_text(element, "{*}Time"))
    cadence = find_text(element, "{*}Cadence") or find_text(element, ".//{*}RunCadence")

    return RawPoint(
        latitude=latitude,
        longitude=longitude,
        elevation=parse_float(find_text(element, "{*}AltitudeMeters")),
        time=time,
        timestamp=timestamp,
        heart_rate=parse_int(find_text(element, "{*}HeartRateBpm/{*}Value")),
        cadence=normalize_cadence(parse_int(cadence)),
        distance_source=_distance_source(find_text(element, "{*}DistanceMeters")),
    )


def _distance_source(distance_meters: str | None) -> DistanceSource:
    meters = parse_float(distance_meters)
    if meters is None:
        return DistanceSource.derived()
    return DistanceSource.reported(meters / 1000)
