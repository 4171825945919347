"""Tests for the SRT and annotated serializers.

WHY: The two output shapes are consumed by other tools (video editors,
translation tools), so their exact layout matters: blank-line separators,
timecode format, marker syntax, trailing spaces.

HOW: Exact string comparisons on small hand-built tracks.

RULES:
- Standard form: index, timing line, caption, blank line between blocks
- Annotated form: header, then "#N#flattened caption " per entry
- Both forms renumber by position
"""

from srt_merger.core.models import Entry
from srt_merger.core.parser import parse_srt
from srt_merger.core.serializer import (
    ANNOTATED_HEADER,
    flatten_caption,
    to_annotated,
    to_srt,
    write_text_file,
)


# ---------------------------------------------------------------------------
# to_srt
# ---------------------------------------------------------------------------


class TestToSrt:
    """Tests for to_srt()."""

    def test_two_entries(self, close_pair):
        assert to_srt(close_pair) == (
            "1\n00:00:00,000 --> 00:00:02,500\na\n"
            "\n"
            "2\n00:00:02,600 --> 00:00:05,000\nb\n"
        )

    def test_empty(self):
        assert to_srt([]) == ""

    def test_renumbers_by_position(self):
        entries = [
            Entry(ordinal=5, start=0.0, stop=1.0, caption="x"),
            Entry(ordinal=9, start=1.0, stop=2.0, caption="y"),
        ]
        blocks = to_srt(entries).split("\n\n")
        assert blocks[0].startswith("1\n")
        assert blocks[1].startswith("2\n")

    def test_multiline_caption_kept(self):
        entry = Entry(ordinal=1, start=0.0, stop=1.0, caption="Hello\nthere")
        assert to_srt([entry]).endswith("Hello\nthere\n")

    def test_parses_back_to_same_entries(self, sample_track):
        assert parse_srt(to_srt(sample_track)) == sample_track


# ---------------------------------------------------------------------------
# to_annotated
# ---------------------------------------------------------------------------


class TestToAnnotated:
    """Tests for to_annotated() and flatten_caption()."""

    def test_markers_and_flattening(self):
        entries = [
            Entry(ordinal=1, start=0.0, stop=1.0, caption="Hello\nthere"),
            Entry(ordinal=2, start=1.0, stop=2.0, caption="Bye"),
        ]
        assert to_annotated(entries) == ANNOTATED_HEADER + "#1#Hello there #2#Bye "

    def test_custom_header(self, close_pair):
        assert to_annotated(close_pair, header="") == "#1#a #2#b "

    def test_empty_is_header_only(self):
        assert to_annotated([]) == ANNOTATED_HEADER

    def test_header_mentions_markers(self):
        assert "#1#" in ANNOTATED_HEADER

    def test_flatten_caption(self):
        assert flatten_caption("  a \n b\t c ") == "a b c"


# ---------------------------------------------------------------------------
# write_text_file
# ---------------------------------------------------------------------------


class TestWriteTextFile:
    """Tests for write_text_file()."""

    def test_writes_utf8_and_returns_path(self, tmp_path):
        target = tmp_path / "out.srt"
        result = write_text_file(str(target), "Café\n")
        assert result == target
        assert target.read_text(encoding="utf-8") == "Café\n"
