"""Detect whether raw activity text is GPX or TCX."""

from __future__ import annotations

from enum import StrEnum

from trackmerge.core.errors import UnsupportedFormatError
from trackmerge.ingestion.xml_utils import has_element, load_xml_root


class ActivityFormat(StrEnum):
    GPX = "gpx"
    TCX = "tcx"


TCX_ROOT_TAG = "TrainingCenterDatabase"
GPX_ROOT_TAG = "gpx"


def detect_format(text: str, *, file_name: str | None = None) -> ActivityFormat:
    """Detect the activity format of raw file text.

    The TCX marker is checked first. No model is built.

    Args:
        text: Raw file text
        file_name: Display name, carried on raised errors

    Returns:
        Detected format

    Raises:
        MalformedXmlError: If the text does not parse as XML
        UnsupportedFormatError: If neither a TCX nor a GPX root marker is present
    """
    root = load_xml_root(text, file_name=file_name)

    if has_element(root, TCX_ROOT_TAG):
        return ActivityFormat.TCX
    if has_element(root, GPX_ROOT_TAG):
        return ActivityFormat.GPX

    raise UnsupportedFormatError("Unsupported file. Please upload a GPX or TCX file.", file_name=file_name)
