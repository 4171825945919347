"""Track statistics for previews and summaries.

WHY: Before saving, editors want to know what a transformation did: how
many entries remain, how long they run, how many are still too long, how
many gaps are still tiny. The same numbers help choose merge/split
parameters.

HOW: compute_statistics() makes one pass over a sequence and returns a
TrackStatistics dataclass. count_delta() and describe_delta() express the
original-versus-processed entry count change.

RULES:
- Empty sequences give all-zero statistics (no division by zero)
- Gaps are measured between consecutive entries in sequence order, at
  millisecond precision, and may be negative for overlapping input
- "Long" means duration strictly above the threshold; "small gap" means a
  gap strictly below the threshold
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from srt_merger.config import LONG_ENTRY_SECONDS, SMALL_GAP_SECONDS
from srt_merger.core.models import Entry, ProcessingMode


@dataclass
class TrackStatistics:
    """Summary numbers for one entry sequence.

    Attributes:
        count: Number of entries.
        total_duration: Sum of entry durations (seconds).
        average_duration: Mean entry duration (seconds).
        average_gap: Mean gap between consecutive entries (seconds).
        long_entries: Entries longer than the long-entry threshold.
        small_gaps: Consecutive pairs closer than the small-gap threshold.
    """

    count: int = 0
    total_duration: float = 0.0
    average_duration: float = 0.0
    average_gap: float = 0.0
    long_entries: int = 0
    small_gaps: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_statistics(
    entries: Sequence[Entry],
    long_threshold: float = LONG_ENTRY_SECONDS,
    small_gap_threshold: float = SMALL_GAP_SECONDS,
) -> TrackStatistics:
    """Compute TrackStatistics for a sequence of entries."""
    if not entries:
        return TrackStatistics()

    total_duration = sum(entry.duration for entry in entries)
    gaps = [
        round(entries[i + 1].start - entries[i].stop, 3)
        for i in range(len(entries) - 1)
    ]

    return TrackStatistics(
        count=len(entries),
        total_duration=round(total_duration, 3),
        average_duration=round(total_duration / len(entries), 3),
        average_gap=round(sum(gaps) / len(gaps), 3) if gaps else 0.0,
        long_entries=sum(1 for entry in entries if entry.duration > long_threshold),
        small_gaps=sum(1 for gap in gaps if gap < small_gap_threshold),
    )


def count_delta(original: Sequence[Entry], processed: Sequence[Entry]) -> int:
    """Processed entry count minus original entry count."""
    return len(processed) - len(original)


def describe_delta(mode: ProcessingMode, delta: int) -> str:
    """Human-readable count change, e.g. ``"reduction: -3"``.

    Merge results are labelled as a reduction, split results as an
    increase; positive values carry an explicit '+'.
    """
    label = "reduction" if ProcessingMode(mode) == ProcessingMode.MERGE else "increase"
    value = "+{}".format(delta) if delta > 0 else str(delta)
    return "{}: {}".format(label, value)
