"""Tests for timecode parsing and formatting.

WHY: Every time value crosses the text/float boundary twice (parse on
load, format on save), so an off-by-one millisecond here shows up in every
output file. Truncation (not rounding) and float noise are the two classic
failure points.

HOW: Direct calls to parse_timecode(), format_timecode(), truncate_ms()
and parse_timing_line() with hand-picked values.

RULES:
- Formatting truncates to whole milliseconds
- Text -> float -> text is lossless for well-formed timecodes
- Malformed input raises FormatError (which is also a ValueError)
"""

import pytest

from srt_merger.core.errors import FormatError
from srt_merger.core.timecode import (
    format_timecode,
    parse_timecode,
    parse_timing_line,
    truncate_ms,
)


# ---------------------------------------------------------------------------
# parse_timecode
# ---------------------------------------------------------------------------


class TestParseTimecode:
    """Tests for parse_timecode()."""

    def test_comma_separator(self):
        assert parse_timecode("01:02:03,456") == pytest.approx(3723.456)

    def test_dot_separator(self):
        assert parse_timecode("00:00:02.5") == pytest.approx(2.5)

    def test_no_fraction(self):
        assert parse_timecode("0:0:1") == 1.0

    def test_hours_beyond_99(self):
        assert parse_timecode("100:00:00,000") == 360000.0

    def test_surrounding_whitespace_ignored(self):
        assert parse_timecode("  00:00:01,250 ") == pytest.approx(1.25)

    @pytest.mark.parametrize("text", ["1:2", "aa:bb:cc", "00:00:01,5x", "", "00:00:-1,000"])
    def test_malformed_raises(self, text):
        with pytest.raises(FormatError):
            parse_timecode(text)

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_timecode("nonsense")


# ---------------------------------------------------------------------------
# format_timecode / truncate_ms
# ---------------------------------------------------------------------------


class TestFormatTimecode:
    """Tests for format_timecode()."""

    def test_basic(self):
        assert format_timecode(3723.5) == "01:02:03,500"

    def test_zero(self):
        assert format_timecode(0.0) == "00:00:00,000"

    def test_float_noise_does_not_lose_a_millisecond(self):
        # 2.6 is stored as 2.5999999...
        assert format_timecode(2.6) == "00:00:02,600"

    def test_truncates_not_rounds(self):
        assert format_timecode(0.0019) == "00:00:00,001"
        assert format_timecode(59.9999) == "00:00:59,999"

    def test_hours_are_unbounded(self):
        assert format_timecode(360000.0) == "100:00:00,000"

    def test_negative_gets_sign(self):
        assert format_timecode(-1.5) == "-00:00:01,500"

    @pytest.mark.parametrize(
        "text", ["00:00:00,001", "12:34:56,789", "00:59:59,999", "02:00:07,850"]
    )
    def test_text_float_text_is_lossless(self, text):
        assert format_timecode(parse_timecode(text)) == text


class TestTruncateMs:
    """Tests for truncate_ms()."""

    def test_positive(self):
        assert truncate_ms(2.6789) == pytest.approx(2.678)

    def test_negative_truncates_toward_zero(self):
        assert truncate_ms(-2.6789) == pytest.approx(-2.678)

    def test_exact_value_kept(self):
        assert truncate_ms(3.125) == 3.125


# ---------------------------------------------------------------------------
# parse_timing_line
# ---------------------------------------------------------------------------


class TestParseTimingLine:
    """Tests for parse_timing_line()."""

    def test_valid(self):
        assert parse_timing_line("00:00:01,000 --> 00:00:02,500") == (1.0, 2.5)

    def test_missing_arrow(self):
        with pytest.raises(FormatError):
            parse_timing_line("00:00:01,000 00:00:02,500")

    def test_bad_side(self):
        with pytest.raises(FormatError):
            parse_timing_line("00:00:01,000 --> later")
