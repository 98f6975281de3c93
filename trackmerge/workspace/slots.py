"""Two-slot comparison workspace.

Holds the "A" and "B" recordings a user is comparing. Each slot loads and
fails independently: a bad file in one slot records that slot's error and
leaves the other slot's activity untouched, and a slot can be reloaded
without disturbing the other.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from trackmerge.analysis.aligner import AlignedSample, align_activities, limit_pace, smooth_pace, timeline_seconds
from trackmerge.analysis.summary import summarize_activity
from trackmerge.core.errors import ActivityParseError, ComparisonTooLongError, SlotNotLoadedError
from trackmerge.export.gpx_builder import build_gpx
from trackmerge.ingestion.file_parser import parse_activity_text
from trackmerge.merge.merge_engine import merge_activities
from trackmerge.models.activity import Activity, ActivitySummary


class SlotName(StrEnum):
    A = "A"
    B = "B"


@dataclass
class ActivitySlot:
    """State of one upload slot.

    Attributes:
        name: Slot identifier ("A" or "B")
        activity: Loaded activity, or None
        file_name: Name of the last file loaded into the slot
        error: Message of the last load failure, or None
        error_code: Stable code of the last load failure, or None
        custom_label: User label; defaults to the activity's device name
    """

    name: SlotName
    activity: Activity | None = None
    file_name: str | None = None
    error: str | None = None
    error_code: str | None = None
    custom_label: str = ""

    @property
    def loaded(self) -> bool:
        return self.activity is not None

    @property
    def merge_label(self) -> str:
        """Label used when picking merge roles, e.g. ``File A (Forerunner 255)``."""
        if self.custom_label:
            return f"File {self.name} ({self.custom_label})"
        return f"File {self.name}"

    @property
    def chart_label(self) -> str:
        return self.custom_label or self.name.value


class ComparisonWorkspace:
    """Owns slots A and B and drives merge and comparison between them."""

    def __init__(self) -> None:
        self.slots: dict[SlotName, ActivitySlot] = {name: ActivitySlot(name=name) for name in SlotName}

    def __getitem__(self, name: SlotName | str) -> ActivitySlot:
        return self.slots[SlotName(name)]

    def load(self, name: SlotName | str, text: str, file_name: str) -> ActivitySlot:
        """Parse text into a slot.

        Parse failures are recorded on the slot rather than raised. On failure
        the slot's previous activity and label are cleared; the other slot is
        never touched.
        """
        slot = self[name]
        slot.file_name = file_name
        slot.error = None
        slot.error_code = None

        try:
            activity = parse_activity_text(text, file_name)
        except ActivityParseError as e:
            logger.warning(f"Slot {slot.name} failed to load {file_name}: [{e.code}] {e.message}")
            slot.activity = None
            slot.custom_label = ""
            slot.error = e.message
            slot.error_code = e.code
            return slot

        slot.activity = activity
        slot.custom_label = activity.device_name or ""
        return slot

    def set_label(self, name: SlotName | str, label: str) -> None:
        self[name].custom_label = label.strip()

    def _require(self, name: SlotName | str) -> Activity:
        slot = self[name]
        if slot.activity is None:
            raise SlotNotLoadedError(slot.name.value)
        return slot.activity

    def merge(self, base: SlotName | str, hr_source: SlotName | str) -> Activity:
        """Merge heart rate from the ``hr_source`` slot into the ``base`` slot's track.

        Raises:
            SlotNotLoadedError: If either selected slot has no activity
        """
        base_activity = self._require(base)
        hr_activity = self._require(hr_source)
        logger.info(f"Merging heart rate: base={SlotName(base)}, hr_source={SlotName(hr_source)}")
        return merge_activities(base_activity, hr_activity)

    def export_merged(self, base: SlotName | str, hr_source: SlotName | str) -> str:
        return build_gpx(self.merge(base, hr_source))

    def compare(
        self,
        window_size: int = 1,
        *,
        max_seconds: int | None = None,
        pace_range: tuple[float, float] | None = None,
    ) -> list[AlignedSample]:
        """Align both slots per second, with pace smoothed over ``window_size``.

        Args:
            window_size: Odd pace smoothing window
            max_seconds: Refuse timelines longer than this many seconds
            pace_range: Optional (slowest, fastest) pace in s/km; pace outside it is blanked

        Raises:
            ComparisonTooLongError: If the aligned timeline would exceed ``max_seconds``
        """
        activity_a = self[SlotName.A].activity
        activity_b = self[SlotName.B].activity

        seconds = timeline_seconds(activity_a, activity_b)
        if max_seconds is not None and seconds > max_seconds:
            raise ComparisonTooLongError(seconds, max_seconds)

        samples = smooth_pace(align_activities(activity_a, activity_b), window_size)
        if pace_range is not None:
            samples = limit_pace(samples, *pace_range)
        return samples

    def summaries(self) -> dict[SlotName, ActivitySummary | None]:
        return {
            name: summarize_activity(slot.activity, slot.merge_label) if slot.activity is not None else None
            for name, slot in self.slots.items()
        }
