"""Error taxonomy for activity parsing and merging.

Every parse failure carries a stable ``code`` so callers (API, CLI, the
comparison workspace) can report it without matching on message text.
"""

from __future__ import annotations


class ActivityParseError(ValueError):
    """Raised when raw activity text cannot be turned into an Activity.

    Terminal for a single parse call: no partial Activity is ever returned.
    """

    code = "parse_error"

    def __init__(self, message: str, *, file_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.file_name = file_name


class MalformedXmlError(ActivityParseError):
    """Raised when the input is not well-formed XML."""

    code = "malformed_xml"


class UnsupportedFormatError(ActivityParseError):
    """Raised when the XML has neither a GPX nor a TCX root marker."""

    code = "unsupported_format"


class NoTrackPointsError(ActivityParseError):
    """Raised when the format is recognized but no usable points were found."""

    code = "no_track_points"


class SlotNotLoadedError(Exception):
    """Raised when a merge is requested for a slot that holds no activity."""

    def __init__(self, slot: str) -> None:
        super().__init__(f"Slot {slot} has no loaded activity. Load both files before merging.")
        self.slot = slot


class ComparisonTooLongError(Exception):
    """Raised when two activities would align onto more seconds than allowed."""

    def __init__(self, seconds: int, limit: int) -> None:
        super().__init__(
            f"Comparison timeline spans {seconds} seconds, more than the allowed {limit}. "
            "Check that both files carry timestamps for every point."
        )
        self.seconds = seconds
        self.limit = limit
