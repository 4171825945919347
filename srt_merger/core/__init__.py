"""Core subtitle model, SRT codec, and transformation engines.

WHY: The core package is the stable heart of the tool: the Entry value
type, the parser and serializer for the SRT text format, and the merge and
split engines. Everything else (pipeline, CLI, HTTP API) is coordination
around these pure functions.

HOW: timecode.py converts between float seconds and HH:MM:SS,mmm text,
models.py defines Entry and the closed enums, parser.py and serializer.py
are the codec, merge.py and split.py are the engines, stats.py summarizes
a track.

RULES:
- No module in core performs I/O except the explicit read/write helpers
- Engines never mutate their input; they return new lists of Entry
- Malformed input degrades by omission; the parser never raises
"""

from srt_merger.core.errors import FormatError, RecomputeCancelled, SRTMergerError
from srt_merger.core.merge import merge_entries
from srt_merger.core.models import (
    Entry,
    ProcessingMode,
    ProcessingParams,
    SplitMethod,
    renumber,
)
from srt_merger.core.parser import parse_srt, read_srt_file
from srt_merger.core.serializer import to_annotated, to_srt, write_text_file
from srt_merger.core.split import split_entries
from srt_merger.core.stats import TrackStatistics, compute_statistics, count_delta
from srt_merger.core.timecode import format_timecode, parse_timecode

__all__ = [
    "Entry",
    "FormatError",
    "ProcessingMode",
    "ProcessingParams",
    "RecomputeCancelled",
    "SRTMergerError",
    "SplitMethod",
    "TrackStatistics",
    "compute_statistics",
    "count_delta",
    "format_timecode",
    "merge_entries",
    "parse_srt",
    "parse_timecode",
    "read_srt_file",
    "renumber",
    "split_entries",
    "to_annotated",
    "to_srt",
    "write_text_file",
]
