"""Activity file parser for GPX and TCX formats.

Pure parsing module with no I/O. Callers decode uploaded bytes to text and
receive either an Activity or an ActivityParseError.
"""

from __future__ import annotations

from loguru import logger

from trackmerge.ingestion.format_detector import ActivityFormat, detect_format
from trackmerge.ingestion.gpx_parser import parse_gpx
from trackmerge.ingestion.tcx_parser import parse_tcx
from trackmerge.models.activity import Activity

PARSERS = {
    ActivityFormat.GPX: parse_gpx,
    ActivityFormat.TCX: parse_tcx,
}


def parse_activity_text(text: str, file_name: str) -> Activity:
    """Parse activity text (GPX or TCX) into an Activity.

    Args:
        text: Raw file text (already decoded)
        file_name: Original file name, used as a fallback activity name

    Returns:
        Parsed Activity

    Raises:
        MalformedXmlError: If the text is not well-formed XML
        UnsupportedFormatError: If the XML is neither GPX nor TCX
        NoTrackPointsError: If the file holds no usable track points
    """
    activity_format = detect_format(text, file_name=file_name)
    logger.debug(f"Detected {activity_format.value.upper()} format for {file_name}")

    activity = PARSERS[activity_format](text, file_name)
    logger.info(
        f"Parsed activity {activity.name!r} from {file_name}: "
        f"format={activity_format.value}, points={len(activity.track_points)}"
    )
    return activity
