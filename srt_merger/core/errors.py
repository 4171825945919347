"""Exception hierarchy for the subtitle core."""

from __future__ import annotations


class SRTMergerError(Exception):
    """Base error for the srt_merger package."""


class FormatError(SRTMergerError, ValueError):
    """Raised when a timecode or timing line cannot be parsed."""


class RecomputeCancelled(SRTMergerError):
    """Raised inside a transformation whose recompute request was superseded.

    Never escapes the recompute scheduler; it is turned into a sentinel
    result that is not published.
    """
