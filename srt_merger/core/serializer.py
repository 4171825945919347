"""Serializers: entries back into standard SRT and the annotated form.

WHY: Processed tracks are saved in two shapes. Standard SRT is what video
tools load. The annotated form flattens every caption behind a ``#N#``
marker so the whole track can be pasted into a translation tool as one
continuous text and later re-aligned by marker.

HOW: to_srt() writes index, timing line and caption per entry, separated
by blank lines. to_annotated() writes a fixed instruction header followed
by ``#N#caption `` for every entry with whitespace collapsed.

RULES:
- Both forms renumber entries 1..N by output position
- Standard form has no trailing blank line after the last block
- Annotated form has no block separators; each caption ends with one space
- Reassembly of a translated annotated text is not done here
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

from srt_merger.core.models import Entry
from srt_merger.core.timecode import format_timecode

ANNOTATED_HEADER = (
    "Translate the following text in full, making sure that:\n"
    "1. The markers (#1#, #2#, #3#, ...) are kept exactly where they are, "
    "never moved or removed.\n"
    "2. The translation is accurate, natural and fluent, in a spoken register "
    "suitable for video narration.\n"
    "3. Each translated passage takes roughly the same time to speak as the "
    "original, so every subtitle stays in sync with the video.\n"
    "4. Spelling, punctuation and capitalisation errors are corrected.\n"
    "5. No extra formatting, lists or line breaks are added; return one "
    "continuous text, exactly like the original, only translated.\n"
    "Return only the translated text, without comments.\n\n"
)


def flatten_caption(caption: str) -> str:
    """Collapse line breaks and whitespace runs into single spaces."""
    return " ".join(caption.split())


def format_block(ordinal: int, entry: Entry) -> str:
    """Format one SRT block (index, timing line, caption, newline)."""
    return "{}\n{} --> {}\n{}\n".format(
        ordinal,
        format_timecode(entry.start),
        format_timecode(entry.stop),
        entry.caption,
    )


def to_srt(entries: Iterable[Entry]) -> str:
    """Serialize entries to standard SRT text."""
    blocks = [format_block(ordinal, entry) for ordinal, entry in enumerate(entries, 1)]
    return "\n".join(blocks)


def to_annotated(entries: Iterable[Entry], header: str = ANNOTATED_HEADER) -> str:
    """Serialize entries to the marker-annotated translation form.

    Example: two entries "Hello\\nthere" and "Bye" become
    ``header + "#1#Hello there #2#Bye "``.
    """
    parts = [header]
    for ordinal, entry in enumerate(entries, 1):
        parts.append("#{}#{} ".format(ordinal, flatten_caption(entry.caption)))
    return "".join(parts)


def write_text_file(path: Union[str, Path], text: str) -> Path:
    """Write serialized text as UTF-8 and return the path.

    Raises:
        OSError: If the file cannot be written (propagated unchanged).
    """
    target = Path(path)
    target.write_text(text, encoding="utf-8")
    return target
