"""Split engine: break over-long entries into shorter, contiguous fragments.

WHY: A single cue that stays on screen for 20 seconds with three sentences
of text is hard to follow. Splitting it at punctuation into several cues,
each with its own slice of the original time span, keeps reading speed
comfortable without changing the overall timing of the track.

HOW: For every entry longer than max_duration:
  1. find_cut_points() lists the positions right after split characters.
  2. partition_caption() greedily packs text into contiguous fragments of
     at most a character budget derived from max_duration / duration,
     cutting at the furthest cut point inside the budget (or forcing a cut
     when there is none inside it). Characters are counted with
     character_count(), so a run of whitespace counts once both in the
     budget and in the weights.
  3. allocate_times() shares [start, stop] among the fragments according to
     the SplitMethod weights, truncating boundaries to milliseconds and
     pinning the last boundary to the original stop.

RULES:
- Entries not longer than max_duration pass through unchanged
- A caption without any cut point is left unchanged
- Fewer than two non-empty fragments means the entry is left unchanged
- Fragments are contiguous: fragment[i + 1].start == fragment[i].stop
- First fragment starts at entry.start, last one stops at entry.stop
- With the characters method no fragment lasts longer than max_duration
  (plus at most 1 ms of truncation)
- Each entry is split independently; output is renumbered 1..N
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from srt_merger.config import DEFAULT_SPLIT_CHARACTERS
from srt_merger.core.cancel import CancelToken, check_cancelled
from srt_merger.core.models import Entry, SplitMethod, character_count, renumber
from srt_merger.core.timecode import truncate_ms

Span = Tuple[int, int]


def find_cut_points(caption: str, split_characters: str) -> List[int]:
    """Return the sorted positions where a caption may be cut.

    A cut sits right after a split character, extended over any split
    characters and whitespace that directly follow it, so "Wait... what"
    has a single cut before "what". Cuts at the very end are omitted.
    """
    if not split_characters:
        return []

    cuts = []
    length = len(caption)
    i = 0
    while i < length:
        if caption[i] not in split_characters:
            i += 1
            continue
        j = i + 1
        while j < length and (caption[j] in split_characters or caption[j].isspace()):
            j += 1
        if j < length:
            cuts.append(j)
        i = j
    return cuts


def character_budget(length: int, duration: float, max_duration: float) -> int:
    """Largest fragment length (characters) whose share of time fits max_duration."""
    budget = math.floor(length * max_duration / duration + 1e-9)
    return max(1, budget)


def _count_prefix(caption: str) -> List[int]:
    """prefix[i] = character_count(caption[:i]) for every position i."""
    prefix = [0]
    for i, char in enumerate(caption):
        repeated_space = char.isspace() and i > 0 and caption[i - 1].isspace()
        prefix.append(prefix[-1] + (0 if repeated_space else 1))
    return prefix


def _forced_cut(caption: str, prefix: Sequence[int], start: int, budget: int) -> int:
    """Cut position for a fragment starting at ``start`` when no cut point fits.

    Backs off to the last word start inside the budget so words stay whole;
    cuts mid-word at the budget only when the window is a single word.
    """
    end = start + 1
    while prefix[end + 1] - prefix[start] <= budget:
        end += 1
    for pos in range(end, start, -1):
        if caption[pos - 1].isspace() and not caption[pos].isspace():
            if caption[start:pos].strip():
                return pos
    return end


def partition_caption(caption: str, cuts: Sequence[int], budget: int) -> List[Span]:
    """Greedily partition a caption into contiguous spans of at most ``budget`` characters.

    Spans are measured with character_count(), so a run of whitespace at a
    cut costs one character. A cut that would leave a span holding only
    whitespace is never taken.
    """
    prefix = _count_prefix(caption)
    spans: List[Span] = []
    length = len(caption)
    start = 0

    while prefix[length] - prefix[start] > budget:
        best = None
        for cut in cuts:
            if cut <= start:
                continue
            if prefix[cut] - prefix[start] > budget:
                break
            if caption[start:cut].strip():
                best = cut
        if best is None:
            best = _forced_cut(caption, prefix, start, budget)
        spans.append((start, best))
        start = best

    spans.append((start, length))
    return spans


def _fold_blank_spans(caption: str, spans: Sequence[Span]) -> List[Span]:
    """Fold whitespace-only spans into the following span.

    Only a one-character budget can produce them.
    """
    result: List[Span] = []
    carried_start = None
    for start, end in spans:
        if carried_start is not None:
            start = carried_start
            carried_start = None
        if not caption[start:end].strip():
            carried_start = start
            continue
        result.append((start, end))
    if carried_start is not None and result:
        result[-1] = (result[-1][0], len(caption))
    return result


def allocate_times(
    start: float,
    stop: float,
    weights: Sequence[float],
) -> List[Tuple[float, float]]:
    """Share [start, stop] among fragments proportionally to ``weights``.

    Inner boundaries are truncated to milliseconds; the last boundary is
    exactly ``stop`` so truncation never drifts the end of the entry.
    """
    total = float(sum(weights))
    if total <= 0:
        weights = [1.0] * len(weights)
        total = float(len(weights))

    duration = stop - start
    boundaries = [start]
    cumulative = 0.0
    for weight in weights[:-1]:
        cumulative += weight
        boundary = truncate_ms(start + duration * cumulative / total)
        boundaries.append(min(max(boundary, boundaries[-1]), stop))
    boundaries.append(stop)

    return [(boundaries[i], boundaries[i + 1]) for i in range(len(weights))]


def split_entry(
    entry: Entry,
    max_duration: float,
    split_characters: str = DEFAULT_SPLIT_CHARACTERS,
    method: SplitMethod = SplitMethod.CHARACTERS,
) -> List[Entry]:
    """Split one entry; returns ``[entry]`` when no split applies."""
    if round(entry.duration, 3) <= max_duration:
        return [entry]

    caption = entry.caption.strip()
    cuts = find_cut_points(caption, split_characters)
    if not cuts:
        return [entry]

    budget = character_budget(character_count(caption), entry.duration, max_duration)
    spans = _fold_blank_spans(caption, partition_caption(caption, cuts, budget))
    if len(spans) < 2:
        return [entry]

    raw_fragments = [caption[a:b] for a, b in spans]
    times = allocate_times(entry.start, entry.stop, method.weights(raw_fragments))

    return [
        Entry(ordinal=entry.ordinal, start=frag_start, stop=frag_stop, caption=text.strip())
        for text, (frag_start, frag_stop) in zip(raw_fragments, times)
    ]


def split_entries(
    entries: Sequence[Entry],
    max_duration: float,
    split_characters: str = DEFAULT_SPLIT_CHARACTERS,
    method: SplitMethod = SplitMethod.CHARACTERS,
    token: Optional[CancelToken] = None,
) -> List[Entry]:
    """Split every entry longer than ``max_duration`` seconds.

    Args:
        entries: Input sequence (not modified).
        max_duration: Longest allowed fragment in seconds (> 0).
        split_characters: Characters after which a caption may be cut.
        method: Time redistribution policy (accepts the enum or its value).
        token: Optional cancel token checked once per entry.

    Returns:
        New list of entries numbered 1..N.

    Raises:
        ValueError: If max_duration is not positive or method is unknown.
        RecomputeCancelled: If the token is cancelled mid-run.
    """
    if max_duration <= 0:
        raise ValueError("max_duration must be > 0, got {}".format(max_duration))
    method = SplitMethod(method)

    check_cancelled(token)
    result: List[Entry] = []
    for entry in entries:
        check_cancelled(token)
        result.extend(split_entry(entry, max_duration, split_characters, method))
    return renumber(result)
