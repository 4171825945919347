"""Coordination layer between the presentation surfaces and the engines.

WHY: The CLI and the HTTP API both need the same session behaviour
(load a track, change parameters, preview, commit, undo) without knowing
how the merge and split engines work.

HOW: processing.py holds the ProcessingPipeline and the pure process()
dispatcher; recompute.py holds the debounced, cancellable scheduler the
pipeline uses for live parameter changes.
"""

from srt_merger.pipeline.processing import (
    PipelineStatistics,
    ProcessingPipeline,
    process,
)
from srt_merger.pipeline.recompute import DebouncedRecompute

__all__ = [
    "DebouncedRecompute",
    "PipelineStatistics",
    "ProcessingPipeline",
    "process",
]
