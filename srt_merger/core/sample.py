"""Built-in demonstration track.

Fifteen entries mixing near-touching cues (good merge candidates) with
long multi-sentence cues (good split candidates). Used by ``--sample`` in
the CLI and by the test suite.
"""

from __future__ import annotations

from typing import List

from srt_merger.core.models import Entry
from srt_merger.core.serializer import to_srt

SAMPLE_CUES = [
    (0.0, 2.5, "Welcome to the subtitle processor."),
    (2.6, 5.0, "This tool helps you merge and split subtitles."),
    (5.1, 7.8, "You can adjust the maximum gap between subtitles."),
    (7.85, 10.2, "Short gap here, should merge easily."),
    (12.5, 18.0, "This is a very long subtitle that should be split into multiple "
                 "parts when using split mode, especially with punctuation marks "
                 "like commas, periods, and other separators."),
    (18.5, 21.0, "Another normal subtitle here."),
    (21.05, 23.5, "Very close to previous one."),
    (25.0, 35.0, "First sentence is here. Second sentence follows. Third one too. "
                 "And finally, the fourth sentence completes this long subtitle."),
    (36.0, 38.5, "Regular subtitle again."),
    (38.6, 41.0, "Close gap for merging test."),
    (43.0, 45.5, "Larger gap before this one."),
    (45.6, 55.0, "Long duration subtitle: This one goes on for a while, with multiple "
                 "sentences. It should be split. Because it's too long. Even with "
                 "multiple points of division."),
    (56.0, 58.0, "Short one."),
    (58.05, 60.5, "Tiny gap merge candidate."),
    (61.0, 63.5, "Final subtitle in sequence."),
]


def sample_entries() -> List[Entry]:
    """Return the demonstration track as entries numbered 1..15."""
    return [
        Entry(ordinal=i, start=start, stop=stop, caption=caption)
        for i, (start, stop, caption) in enumerate(SAMPLE_CUES, 1)
    ]


def sample_srt() -> str:
    """Return the demonstration track as SRT text."""
    return to_srt(sample_entries())
