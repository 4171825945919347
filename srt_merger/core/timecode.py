"""Conversion between float seconds and the SRT ``HH:MM:SS,mmm`` timecode.

WHY: Every time value in the tool is a float number of seconds, but SRT
files carry fixed-width text timecodes. Both the parser and the serializer
(and the split engine's boundary arithmetic) need one shared definition of
that conversion so that text -> float -> text is lossless.

HOW: parse_timecode() matches three colon-separated numeric groups with an
optional comma or dot fraction. format_timecode() works on an integer
millisecond count so hours, minutes, seconds and milliseconds are all
truncated, never rounded.

RULES:
- Comma and dot are both accepted as the decimal separator on input
- Output always uses a comma and zero-pads H/M/S to 2 digits, ms to 3
- Hours are unbounded (100:00:00,000 is valid)
- Negative values format with a leading '-' (display only)
- Truncation carries a tiny epsilon so binary float error (2.6 stored as
  2.5999999...) does not lose a millisecond
"""

from __future__ import annotations

import math
import re
from typing import Tuple

from srt_merger.core.errors import FormatError

TIMECODE_RE = re.compile(r"^(\d+):(\d+):(\d+)(?:[,.](\d*))?$")

# Added before truncation; far below one millisecond.
_EPSILON_MS = 1e-6


def parse_timecode(text: str) -> float:
    """Parse an SRT timecode into float seconds.

    Args:
        text: Timecode such as ``"01:02:03,456"`` or ``"1:02:03.4"``.

    Returns:
        Seconds, rounded to millisecond precision.

    Raises:
        FormatError: If the text is not three colon-separated numeric groups
            with an optional numeric fraction.
    """
    match = TIMECODE_RE.match(text.strip())
    if match is None:
        raise FormatError("Invalid timecode: '{}'".format(text))

    hours, minutes, seconds, fraction = match.groups()
    total = int(hours) * 3600 + int(minutes) * 60 + int(seconds)
    if fraction:
        total += int(fraction) / (10 ** len(fraction))
    return round(total, 3)


def _total_millis(seconds: float) -> int:
    """Truncate a non-negative seconds value to whole milliseconds."""
    return int(math.floor(seconds * 1000 + _EPSILON_MS))


def truncate_ms(seconds: float) -> float:
    """Truncate seconds toward zero at millisecond precision."""
    sign = -1.0 if seconds < 0 else 1.0
    return sign * _total_millis(abs(seconds)) / 1000


def format_timecode(seconds: float) -> str:
    """Format float seconds as ``HH:MM:SS,mmm``.

    Example: ``format_timecode(3723.5)`` -> ``"01:02:03,500"``
    """
    sign = "-" if seconds < 0 else ""
    total_ms = _total_millis(abs(seconds))

    hours, remainder = divmod(total_ms, 3600 * 1000)
    minutes, remainder = divmod(remainder, 60 * 1000)
    secs, millis = divmod(remainder, 1000)
    return "{}{:02d}:{:02d}:{:02d},{:03d}".format(sign, hours, minutes, secs, millis)


def parse_timing_line(line: str) -> Tuple[float, float]:
    """Parse a ``start --> stop`` timing line.

    Raises:
        FormatError: If the arrow is missing or either side is not a valid
            timecode.
    """
    parts = line.split("-->")
    if len(parts) != 2:
        raise FormatError("Invalid timing line: '{}'".format(line))
    return parse_timecode(parts[0]), parse_timecode(parts[1])
