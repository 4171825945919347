"""SRT parser: raw subtitle text into an ordered list of Entry values.

WHY: Real-world SRT files are messy: stray blank lines, Windows line
endings, a BOM, blocks with broken timing lines. Editors still want every
good block out of such a file, so the parser must degrade by omission
instead of failing the whole load.

HOW: A single forward scan over lines. A digits-only line opens a block;
the next line must be a ``start --> stop`` timing line; the following
non-blank lines form the caption. Anything else is skipped.

RULES:
- Never raises for malformed content; bad blocks are dropped
- The index number in the file is ignored; ordinals are reassigned 1..N
- A block with a bad timing line is skipped without consuming the lines
  after the timing line as text
- A block whose caption is empty is dropped
- Caption lines are stripped and joined with "\\n"
- Input order is preserved; entries are never sorted
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from srt_merger.core.errors import FormatError
from srt_merger.core.models import Entry
from srt_merger.core.timecode import parse_timing_line

logger = logging.getLogger(__name__)


def _normalize(text: str) -> str:
    """Strip a BOM and normalize line endings to \\n."""
    if text.startswith("\ufeff"):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


def parse_srt(text: str) -> List[Entry]:
    """Parse SRT text into entries.

    Args:
        text: Full contents of a subtitle file.

    Returns:
        Entries in file order, numbered 1..N. Possibly empty.
    """
    lines = _normalize(text).split("\n")
    entries: List[Entry] = []
    skipped = 0
    i = 0

    while i < len(lines):
        line = lines[i].strip()

        # Look for an index line
        if not line or not line.isdigit():
            i += 1
            continue

        if i + 1 >= len(lines):
            break

        timing_line = lines[i + 1].strip()
        try:
            start, stop = parse_timing_line(timing_line)
            if stop < start:
                raise FormatError(
                    "Stop before start in timing line: '{}'".format(timing_line)
                )
        except FormatError as exc:
            logger.debug("Skipping block at line %d: %s", i + 1, exc)
            skipped += 1
            i += 2
            continue

        # Caption runs until the next blank line
        i += 2
        caption_lines = []
        while i < len(lines):
            caption_line = lines[i].strip()
            if not caption_line:
                break
            caption_lines.append(caption_line)
            i += 1

        caption = "\n".join(caption_lines)
        if not caption:
            skipped += 1
            continue

        entries.append(
            Entry(ordinal=len(entries) + 1, start=start, stop=stop, caption=caption)
        )

    if skipped:
        logger.debug("Parsed %d entries, skipped %d malformed blocks", len(entries), skipped)
    return entries


def read_srt_file(path: Union[str, Path]) -> List[Entry]:
    """Read and parse a UTF-8 subtitle file.

    Raises:
        OSError: If the file cannot be read (propagated unchanged).
    """
    content = Path(path).read_text(encoding="utf-8")
    return parse_srt(content)
