"""GPX 1.1 export for activities.

Renders an Activity as GPX with Garmin TrackPointExtension heart rate and
cadence. Built with lxml so names and timestamps are always escaped and the
output is well-formed even when every optional field is absent.
"""

from __future__ import annotations

from datetime import datetime, timezone

from lxml import etree
from loguru import logger

from trackmerge.config.settings import settings
from trackmerge.ingestion.track_builder import to_iso_z
from trackmerge.models.activity import Activity, TrackPoint

GPX_MIME_TYPE = "application/gpx+xml"

GPX_NS = "http://www.topografix.com/GPX/1/1"
GPXTPX_NS = "http://www.garmin.com/xmlschemas/TrackPointExtension/v1"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

SCHEMA_LOCATION = " ".join([
    GPX_NS,
    "http://www.topografix.com/GPX/1/1/gpx.xsd",
    "http://www.garmin.com/xmlschemas/GpxExtensions/v3",
    "http://www.garmin.com/xmlschemas/GpxExtensionsv3.xsd",
    GPXTPX_NS,
    "http://www.garmin.com/xmlschemas/TrackPointExtensionv1.xsd",
])


def _gpx(tag: str) -> str:
    return f"{{{GPX_NS}}}{tag}"


def _tpx(tag: str) -> str:
    return f"{{{GPXTPX_NS}}}{tag}"


def build_gpx(activity: Activity, now: datetime | None = None, creator: str | None = None) -> str:
    """Serialize an activity to GPX 1.1 text.

    Args:
        activity: Activity to serialize
        now: Metadata timestamp; defaults to the current instant
        creator: Value of the ``creator`` attribute; defaults to settings.gpx_creator

    Returns:
        GPX document as a string, including the XML declaration
    """
    root = etree.Element(
        _gpx("gpx"),
        nsmap={None: GPX_NS, "xsi": XSI_NS, "gpxtpx": GPXTPX_NS},
        creator=creator or settings.gpx_creator,
        version="1.1",
    )
    root.set(f"{{{XSI_NS}}}schemaLocation", SCHEMA_LOCATION)

    metadata = etree.SubElement(root, _gpx("metadata"))
    etree.SubElement(metadata, _gpx("name")).text = activity.name
    etree.SubElement(metadata, _gpx("time")).text = to_iso_z(now or datetime.now(timezone.utc))

    track = etree.SubElement(root, _gpx("trk"))
    etree.SubElement(track, _gpx("name")).text = activity.name
    segment = etree.SubElement(track, _gpx("trkseg"))

    for point in activity.track_points:
        _append_point(segment, point)

    logger.debug(f"Built GPX for {activity.name!r} with {len(activity.track_points)} points")
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True).decode("utf-8")


def _append_point(segment: etree._Element, point: TrackPoint) -> None:
    trkpt = etree.SubElement(
        segment,
        _gpx("trkpt"),
        lat=f"{point.latitude:.7f}",
        lon=f"{point.longitude:.7f}",
    )
    if point.elevation is not None:
        etree.SubElement(trkpt, _gpx("ele")).text = f"{point.elevation:.2f}"
    etree.SubElement(trkpt, _gpx("time")).text = point.time

    if point.heart_rate is None and point.cadence is None:
        return

    extensions = etree.SubElement(trkpt, _gpx("extensions"))
    tpx = etree.SubElement(extensions, _tpx("TrackPointExtension"))
    if point.heart_rate is not None:
        etree.SubElement(tpx, _tpx("hr")).text = str(point.heart_rate)
    if point.cadence is not None:
        etree.SubElement(tpx, _tpx("cad")).text = str(point.cadence)
