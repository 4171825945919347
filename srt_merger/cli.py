"""Command-line interface for SRT Merger.

WHY: Editors and batch scripts need to merge or split subtitle files from
the terminal without a GUI. The CLI is the thinnest collaborator around the
pipeline: it reads the file, passes parameters, and writes the two
serializations.

HOW: argparse collects the input path, one or more processing modes and
their parameters, and the output paths. Each --mode step is processed and
then applied (committed) before the next one, so ``--mode merge --mode
split`` first merges and then splits the merged track. Status messages go
to stderr; SRT goes to stdout when no --output is given.

RULES:
- Positional argument: input .srt file (or --sample for the built-in track)
- --mode is repeatable; default is a single merge step
- --split-chars understands the escapes \\n and \\t
- Exit codes: 0 = success, 1 = error (missing file, bad parameters,
  nothing parsed, write failure)
- Status output goes to stderr (not stdout)
- --stats compares the loaded track with the final result of the chain
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from srt_merger.config import (
    DEFAULT_MAX_DURATION,
    DEFAULT_MAX_GAP,
    DEFAULT_SPLIT_CHARACTERS,
    DEFAULT_SPLIT_METHOD,
    LOG_FORMAT,
    LOG_LEVEL,
)
from srt_merger.core.models import Entry, ProcessingMode, ProcessingParams, SplitMethod
from srt_merger.core.parser import read_srt_file
from srt_merger.core.sample import sample_entries
from srt_merger.core.serializer import write_text_file
from srt_merger.core.stats import (
    TrackStatistics,
    compute_statistics,
    count_delta,
    describe_delta,
)
from srt_merger.pipeline.processing import ProcessingPipeline


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _unescape(value: str) -> str:
    """Turn the literal escapes \\n and \\t typed on a shell into characters."""
    return value.replace("\\n", "\n").replace("\\t", "\t")


def _format_stats(title: str, stats: TrackStatistics) -> List[str]:
    return [
        "{}:".format(title),
        "  Entries:           {}".format(stats.count),
        "  Total duration:    {:.1f}s".format(stats.total_duration),
        "  Average duration:  {:.1f}s".format(stats.average_duration),
        "  Average gap:       {:.3f}s".format(stats.average_gap),
        "  Long entries:      {}".format(stats.long_entries),
        "  Small gaps:        {}".format(stats.small_gaps),
    ]


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="srt_merger",
        description="Merge close subtitle entries or split long ones in an SRT file.",
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="Path to the .srt file to process.",
    )

    parser.add_argument(
        "--sample",
        action="store_true",
        help="Process the built-in demonstration track instead of a file.",
    )

    parser.add_argument(
        "--mode",
        action="append",
        choices=[mode.value for mode in ProcessingMode],
        default=None,
        help="Processing step; repeat to chain steps (default: merge).",
    )

    parser.add_argument(
        "--max-gap",
        type=float,
        default=DEFAULT_MAX_GAP,
        help="Merge entries whose gap is below this many seconds (default: %(default)s).",
    )

    parser.add_argument(
        "--max-duration",
        type=float,
        default=DEFAULT_MAX_DURATION,
        help="Split entries longer than this many seconds (default: %(default)s).",
    )

    parser.add_argument(
        "--split-chars",
        default=DEFAULT_SPLIT_CHARACTERS,
        help="Characters after which a caption may be cut; \\n means line break.",
    )

    parser.add_argument(
        "--split-method",
        choices=[method.value for method in SplitMethod],
        default=DEFAULT_SPLIT_METHOD,
        help="How a split entry's time is shared (default: %(default)s).",
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the processed SRT here (default: stdout).",
    )

    parser.add_argument(
        "--annotated",
        default=None,
        help="Also write the marker-annotated translation text here.",
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print original and processed statistics to stderr.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def _load_entries(args: argparse.Namespace) -> List[Entry]:
    """Read the input track (or the built-in sample); exits 1 when nothing loads."""
    if args.sample:
        entries = sample_entries()
        _status("Loaded built-in sample track ({} entries)".format(len(entries)))
    else:
        if not args.input_file:
            _fail("No input file given (use --sample for the demonstration track)")
        input_path = Path(args.input_file)
        if not input_path.is_file():
            _fail("File not found: {}".format(input_path))
        try:
            entries = read_srt_file(input_path)
        except (OSError, UnicodeDecodeError) as e:
            _fail("Could not read {}: {}".format(input_path, e))
        if not entries:
            _fail("No subtitle entries found in {}".format(input_path))
        _status("Loaded {} entries from {}".format(len(entries), input_path.name))
    return entries


def run(args: argparse.Namespace, entries: List[Entry]) -> ProcessingPipeline:
    """Execute the processing steps described by parsed arguments.

    Returns:
        The pipeline after the last step (processed = final result,
        original = input of the last step).
    """
    modes = [ProcessingMode(m) for m in (args.mode or [ProcessingMode.MERGE.value])]

    try:
        params = ProcessingParams(
            max_gap=args.max_gap,
            max_duration=args.max_duration,
            split_characters=_unescape(args.split_chars),
            split_method=SplitMethod(args.split_method),
        )
    except ValueError as e:
        _fail(str(e))

    pipeline = ProcessingPipeline(entries, mode=modes[0], params=params)
    _status("  {}: {} -> {} entries".format(
        modes[0].value, len(pipeline.original), len(pipeline.processed)
    ))

    for mode in modes[1:]:
        pipeline.apply_processed()
        pipeline.update(mode=mode)
        pipeline.recompute()
        _status("  {}: {} -> {} entries".format(
            mode.value, len(pipeline.original), len(pipeline.processed)
        ))

    return pipeline


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format=LOG_FORMAT,
    )

    entries = _load_entries(args)
    pipeline = run(args, entries)
    try:
        srt = pipeline.to_srt()

        if args.output:
            path = write_text_file(args.output, srt)
            _status("Saved: {}".format(path))
        else:
            print(srt, end="")

        if args.annotated:
            path = write_text_file(args.annotated, pipeline.to_annotated())
            _status("Saved: {}".format(path))
    except OSError as e:
        _fail(str(e))
    finally:
        pipeline.close()

    if args.stats:
        # Compare against the loaded track, not the input of the last step
        delta = count_delta(entries, pipeline.processed)
        if args.mode and len(args.mode) > 1:
            label = "net: {:+d}".format(delta) if delta else "net: 0"
        else:
            label = describe_delta(pipeline.mode, delta)
        lines = _format_stats("Original", compute_statistics(entries))
        lines += _format_stats("Processed", compute_statistics(pipeline.processed))
        lines.append("Change ({})".format(label))
        for line in lines:
            _status(line)


if __name__ == "__main__":
    main()
