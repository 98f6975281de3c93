"""Trackmerge - GPX/TCX activity parsing, heart-rate merging and comparison.

This package provides:
- Parsers that normalize GPX and TCX recordings into one activity model
- A merge engine that grafts one recording's heart rate onto another's track
- A per-second aligner and smoothing filter for side-by-side comparison
- A GPX 1.1 serializer with Garmin TrackPointExtension fields
"""

__version__ = "0.1.0"
