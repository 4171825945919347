"""Merge engine: collapse temporally close entries into longer ones.

WHY: Speech-to-text tools emit many short cues separated by tiny pauses,
which flicker on screen. Joining cues whose gap is below a threshold gives
steadier, easier-to-read subtitles.

HOW: One left-to-right sweep with a single accumulator entry. Each next
entry is either absorbed into the accumulator (start kept, stop and text
extended) or the accumulator is emitted and the next entry starts a new one.

RULES:
- Absorb when 0 <= gap < max_gap, or when the entries touch exactly
  (gap == 0), so max_gap = 0 merges touching entries only
- Negative gaps (overlapping entries) never merge
- Gaps are compared at millisecond precision
- Captions are joined with a single space
- Input order is used as is; output is renumbered 1..N
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from srt_merger.core.cancel import CancelToken, check_cancelled
from srt_merger.core.models import Entry, renumber


def should_merge(gap: float, max_gap: float) -> bool:
    """True if an entry separated by ``gap`` seconds must be absorbed."""
    return gap >= 0 and (gap < max_gap or gap == 0)


def merge_entries(
    entries: Sequence[Entry],
    max_gap: float,
    token: Optional[CancelToken] = None,
) -> List[Entry]:
    """Merge consecutive entries separated by less than ``max_gap`` seconds.

    Args:
        entries: Input sequence (not modified).
        max_gap: Gap threshold in seconds (>= 0).
        token: Optional cancel token checked once per entry.

    Returns:
        New list of merged entries numbered 1..N.

    Raises:
        ValueError: If max_gap is negative.
        RecomputeCancelled: If the token is cancelled mid-sweep.
    """
    if max_gap < 0:
        raise ValueError("max_gap must be >= 0, got {}".format(max_gap))

    check_cancelled(token)
    if not entries:
        return []

    merged: List[Entry] = []
    current = entries[0]

    for following in entries[1:]:
        check_cancelled(token)
        gap = round(following.start - current.stop, 3)

        if should_merge(gap, max_gap):
            current = Entry(
                ordinal=current.ordinal,
                start=current.start,
                stop=following.stop,
                caption=current.caption + " " + following.caption,
            )
        else:
            merged.append(current)
            current = following

    merged.append(current)
    return renumber(merged)
