"""SRT Merger — merge and split subtitle tracks.

WHY: Caption files produced by transcription tools are often too granular
(many short, nearly touching cues) or too coarse (one cue running for half
a minute). Editors need to re-derive a well-formed track from the original
one without hand-editing timecodes.

HOW: Three-stage pipeline: parse (SRT text into Entry values), transform
(merge or split engine, chosen by ProcessingMode), serialize (standard SRT
and the marker-annotated form used for translation round trips). The
ProcessingPipeline object ties the stages together and owns the undo stack
and the debounced recompute.

RULES:
- Entries are immutable; every transformation returns new entries
- The engines are pure functions with no I/O, no shared state
- Presentation layers (CLI, HTTP API) only supply text and parameters
"""

__version__ = "0.1.0"
