"""Activity file ingestion: format detection and GPX/TCX parsing."""

from trackmerge.ingestion.file_parser import parse_activity_text

__all__ = ["parse_activity_text"]
