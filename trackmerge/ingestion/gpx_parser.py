"""GPX 1.1 parser.

Converts GPX text into an Activity. Every ``trkpt`` in the document is read in
document order, regardless of how many tracks or segments hold them.
"""

from __future__ import annotations

from lxml import etree
from loguru import logger

from trackmerge.core.errors import NoTrackPointsError
from trackmerge.ingestion.track_builder import RawPoint, build_activity, default_timestamp_policy
from trackmerge.ingestion.xml_utils import find_text, load_xml_root, parse_float, parse_int
from trackmerge.models.activity import Activity

GARMIN_TPX_NS = "http://www.garmin.com/xmlschemas/TrackPointExtension/v1"


def parse_gpx(text: str, file_name: str) -> Activity:
    """Parse GPX text into an Activity.

    Args:
        text: Raw GPX file text
        file_name: Display file name, used when the file carries no name

    Returns:
        Activity with derived distance, pace and stats

    Raises:
        MalformedXmlError: If the text is not well-formed XML
        NoTrackPointsError: If the document contains no trkpt elements
    """
    root = load_xml_root(text, file_name=file_name)

    raw_points = [_read_point(element) for element in root.iter("{*}trkpt")]
    if not raw_points:
        raise NoTrackPointsError("No track points found in the GPX file.", file_name=file_name)

    name = find_text(root, "{*}metadata/{*}name") or find_text(root, "{*}trk/{*}name") or file_name
    device_name = (root.get("creator") or "").strip() or None

    activity = build_activity(name, device_name, raw_points)
    logger.debug(
        f"Parsed GPX {file_name}: points={len(activity.track_points)}, "
        f"distance={activity.stats.total_distance:.3f}km, duration={activity.stats.duration}s"
    )
    return activity


def _read_point(element: etree._Element) -> RawPoint:
    time, timestamp = default_timestamp_policy(find_text(element, "{*}time"))
    return RawPoint(
        latitude=_coordinate(element.get("lat")),
        longitude=_coordinate(element.get("lon")),
        elevation=parse_float(find_text(element, "{*}ele")),
        time=time,
        timestamp=timestamp,
        heart_rate=parse_int(_extension_text(element, "hr")),
        cadence=parse_int(_extension_text(element, "cad")),
    )


def _coordinate(value: str | None) -> float:
    """Read a lat/lon attribute; a bad coordinate degrades to 0, never fails the parse."""
    parsed = parse_float(value)
    return parsed if parsed is not None else 0.0


def _extension_text(element: etree._Element, name: str) -> str | None:
    """Find a heart-rate/cadence value under the Garmin extension or a plain tag."""
    return find_text(element, f".//{{{GARMIN_TPX_NS}}}{name}") or find_text(element, f".//{{*}}{name}")
