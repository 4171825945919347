"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types and ranges at runtime, so a negative gap or a
zero duration is rejected with 422 before it reaches the pipeline.

HOW: Each endpoint pair (request + response) has its own model. The closed
sets (processing mode, split method) reuse the core enums. Converters from
core types live next to the models they build.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- ProcessingMode and SplitMethod are imported from core.models (single
  source of truth)
- Response models never expose internal implementation details
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from srt_merger.config import (
    DEFAULT_MAX_DURATION,
    DEFAULT_MAX_GAP,
    DEFAULT_SPLIT_CHARACTERS,
    DEFAULT_SPLIT_METHOD,
)
from srt_merger.core.models import Entry, ProcessingMode, ProcessingParams, SplitMethod
from srt_merger.core.stats import TrackStatistics
from srt_merger.core.timecode import format_timecode
from srt_merger.pipeline.processing import PipelineStatistics


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ExportKind(str, Enum):
    """Serializations a session can be exported as.

    RULES:
    - srt: standard SRT document (<stem>.srt)
    - annotated: translation-ready marker text (<stem>-annotated.txt)
    """

    srt = "srt"
    annotated = "annotated"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ParametersModel(BaseModel):
    """Full set of processing parameters.

    RULES:
    - max_gap >= 0, max_duration > 0
    - Parameters of the inactive mode are accepted and ignored
    """

    max_gap: float = Field(
        default=DEFAULT_MAX_GAP,
        ge=0,
        description="Merge entries whose gap is below this many seconds.",
    )
    max_duration: float = Field(
        default=DEFAULT_MAX_DURATION,
        gt=0,
        description="Split entries longer than this many seconds.",
    )
    split_characters: str = Field(
        default=DEFAULT_SPLIT_CHARACTERS,
        description="Characters after which a caption may be cut.",
    )
    split_method: SplitMethod = Field(
        default=SplitMethod(DEFAULT_SPLIT_METHOD),
        description="How a split entry's duration is shared among fragments.",
    )

    def to_params(self) -> ProcessingParams:
        return ProcessingParams(
            max_gap=self.max_gap,
            max_duration=self.max_duration,
            split_characters=self.split_characters,
            split_method=self.split_method,
        )

    @classmethod
    def from_params(cls, params: ProcessingParams) -> "ParametersModel":
        return cls(
            max_gap=params.max_gap,
            max_duration=params.max_duration,
            split_characters=params.split_characters,
            split_method=params.split_method,
        )


class TransformRequest(BaseModel):
    """Stateless one-shot transformation of SRT text."""

    srt: str = Field(description="SRT document text.")
    mode: ProcessingMode = Field(
        default=ProcessingMode.MERGE,
        description="Which engine to run: 'merge' or 'split'.",
    )
    parameters: ParametersModel = Field(
        default_factory=ParametersModel,
        description="Processing parameters.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "srt": "1\n00:00:00,000 --> 00:00:02,000\nHello\n\n"
                       "2\n00:00:02,500 --> 00:00:04,000\nworld\n",
                "mode": "merge",
                "parameters": {"max_gap": 1.0},
            }
        ]
    }}


class ParametersUpdate(BaseModel):
    """Partial parameter change for a session; omitted fields are kept.

    RULES:
    - Any combination of fields may be sent
    - The recompute is debounced; poll GET /sessions/{id} for the result
    """

    mode: Optional[ProcessingMode] = Field(default=None, description="New processing mode.")
    max_gap: Optional[float] = Field(default=None, ge=0, description="New merge gap (seconds).")
    max_duration: Optional[float] = Field(
        default=None, gt=0, description="New split threshold (seconds)."
    )
    split_characters: Optional[str] = Field(default=None, description="New split characters.")
    split_method: Optional[SplitMethod] = Field(default=None, description="New split method.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class EntryModel(BaseModel):
    """One caption entry as returned by the API."""

    index: int = Field(description="1-based position in the sequence.")
    start: float = Field(description="Start time in seconds.")
    stop: float = Field(description="Stop time in seconds.")
    start_timecode: str = Field(description="Start time as HH:MM:SS,mmm.")
    stop_timecode: str = Field(description="Stop time as HH:MM:SS,mmm.")
    caption: str = Field(description="Caption text (may contain line breaks).")

    @classmethod
    def from_entry(cls, index: int, entry: Entry) -> "EntryModel":
        return cls(
            index=index,
            start=entry.start,
            stop=entry.stop,
            start_timecode=format_timecode(entry.start),
            stop_timecode=format_timecode(entry.stop),
            caption=entry.caption,
        )


def entries_to_models(entries: Sequence[Entry]) -> List[EntryModel]:
    return [EntryModel.from_entry(i, entry) for i, entry in enumerate(entries, 1)]


class StatisticsModel(BaseModel):
    """Summary numbers for one entry sequence."""

    count: int = Field(description="Number of entries.")
    total_duration: float = Field(description="Sum of entry durations (seconds).")
    average_duration: float = Field(description="Mean entry duration (seconds).")
    average_gap: float = Field(description="Mean gap between consecutive entries (seconds).")
    long_entries: int = Field(description="Entries longer than the long-entry threshold.")
    small_gaps: int = Field(description="Gaps shorter than the small-gap threshold.")

    @classmethod
    def from_stats(cls, stats: TrackStatistics) -> "StatisticsModel":
        return cls(**stats.to_dict())


class ComparisonModel(BaseModel):
    """Original versus processed statistics."""

    original: StatisticsModel = Field(description="Statistics of the input sequence.")
    processed: StatisticsModel = Field(description="Statistics of the result sequence.")
    delta: int = Field(description="Processed count minus original count.")
    delta_label: str = Field(description="Human-readable count change.")

    @classmethod
    def from_pipeline(cls, stats: PipelineStatistics) -> "ComparisonModel":
        return cls(
            original=StatisticsModel.from_stats(stats.original),
            processed=StatisticsModel.from_stats(stats.processed),
            delta=stats.delta,
            delta_label=stats.delta_label,
        )


class TransformResponse(BaseModel):
    """Result of a stateless transformation."""

    mode: ProcessingMode = Field(description="Engine that produced the result.")
    entries: List[EntryModel] = Field(description="Processed entries.")
    srt: str = Field(description="Processed entries as SRT text.")
    annotated: str = Field(description="Processed entries as marker-annotated text.")
    statistics: ComparisonModel = Field(description="Original versus processed statistics.")


class SessionCreatedResponse(BaseModel):
    """Response returned when a track is uploaded into a new session."""

    id: str = Field(description="Unique session identifier (UUID hex).")
    filename: str = Field(description="Uploaded filename.")
    entry_count: int = Field(description="Number of entries parsed from the upload.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "filename": "episode01.srt",
                "entry_count": 412,
            }
        ]
    }}


class SessionResponse(BaseModel):
    """Current state of an editing session."""

    id: str = Field(description="Unique session identifier (UUID hex).")
    filename: str = Field(description="Uploaded filename.")
    mode: ProcessingMode = Field(description="Active processing mode.")
    parameters: ParametersModel = Field(description="Current processing parameters.")
    original_count: int = Field(description="Entries in the working original.")
    processed_count: int = Field(description="Entries in the processed preview.")
    pending: bool = Field(description="True while a recompute is scheduled or running.")
    can_restore: bool = Field(description="True if an applied result can be undone.")
    backup_depth: int = Field(description="Number of applied results that can be undone.")
    last_error: Optional[str] = Field(
        default=None,
        description="Error from the last background recompute, if it failed.",
    )
    statistics: ComparisonModel = Field(description="Original versus processed statistics.")
    entries: List[EntryModel] = Field(description="Processed preview entries.")


class UpdateAcceptedResponse(BaseModel):
    """Response to a parameter change; the recompute runs in the background."""

    id: str = Field(description="Session identifier.")
    generation: int = Field(description="Recompute generation scheduled by this change.")
    pending: bool = Field(description="True while the recompute has not published yet.")


class SplitMethodInfo(BaseModel):
    """Description of an available split method."""

    key: str = Field(description="Method identifier used in API requests.")
    name: str = Field(description="Human-readable method name.")
    description: str = Field(description="How the method shares time between fragments.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    sessions: int = Field(description="Number of live editing sessions.")
