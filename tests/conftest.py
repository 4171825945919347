"""Shared test fixtures for the srt_merger test suite.

WHY: Most test modules need the same small tracks: the pair of nearly
touching entries used for the merge boundary cases, the three-sentence
entry used for the split case, and the built-in fifteen-entry sample
track. Centralizing them keeps the expected numbers in one place.

HOW: Plain pytest fixtures returning fresh lists of Entry values (entries
are immutable, but the lists are not) and SRT text.

RULES:
- Times are chosen so the expected results are exact at millisecond
  precision
- The sample track is the one shipped in srt_merger.core.sample
- Merging the sample track with max_gap 0.2 yields 8 entries
"""

from typing import List

import pytest

from srt_merger.core.models import Entry
from srt_merger.core.sample import sample_entries, sample_srt


# ---------------------------------------------------------------------------
# Small hand-built tracks
# ---------------------------------------------------------------------------


@pytest.fixture
def close_pair() -> List[Entry]:
    """Two entries separated by a 0.1 s gap."""
    return [
        Entry(ordinal=1, start=0.0, stop=2.5, caption="a"),
        Entry(ordinal=2, start=2.6, stop=5.0, caption="b"),
    ]


@pytest.fixture
def three_sentences() -> Entry:
    """One 10 s entry holding three short sentences."""
    return Entry(ordinal=1, start=0.0, stop=10.0, caption="One. Two. Three.")


# ---------------------------------------------------------------------------
# Sample track
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_track() -> List[Entry]:
    """The built-in 15-entry demonstration track."""
    return sample_entries()


@pytest.fixture
def sample_text() -> str:
    """The built-in demonstration track as SRT text."""
    return sample_srt()


@pytest.fixture
def messy_srt() -> str:
    """SRT text with a BOM, CRLF line endings, and two broken blocks."""
    return (
        "\ufeff7\r\n"
        "00:00:01,000 --> 00:00:02,000\r\n"
        "  First line  \r\n"
        "Second line\r\n"
        "\r\n"
        "\r\n"
        "8\r\n"
        "not a timing line\r\n"
        "Lost caption\r\n"
        "\r\n"
        "9\r\n"
        "00:00:05,000 --> 00:00:04,000\r\n"
        "Stop before start\r\n"
        "\r\n"
        "10\r\n"
        "00:00:06.500 --> 00:00:08.250\r\n"
        "Dot separators\r\n"
    )
