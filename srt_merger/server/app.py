"""FastAPI application exposing the merge/split pipeline over HTTP.

WHY: Editors working in a browser front-end, and scripts in other
languages, need the same live-preview workflow the pipeline offers
in-process: upload a track, tweak parameters, watch the preview, commit or
undo, and download the result. FastAPI provides request validation and
automatic OpenAPI documentation for free.

HOW: One FastAPI app with endpoints grouped by tags. POST /transform is a
stateless one-shot call. The /sessions endpoints wrap one
ProcessingPipeline per session kept in an in-memory SessionStore;
parameter changes go through the pipeline's debounced recompute, so the
PATCH returns 202 immediately and clients poll GET /sessions/{id}.

RULES:
- All endpoints have OpenAPI descriptions and document their error codes
- Error responses use a consistent ErrorResponse schema
- Out-of-range parameters are rejected with 422; unknown sessions with 404
- apply/restore with nothing to commit or undo answer 409
- The session store is a module-level singleton, cleaned up periodically
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from srt_merger import __version__
from srt_merger.config import (
    DEFAULT_MAX_DURATION,
    DEFAULT_MAX_GAP,
    DEFAULT_SPLIT_CHARACTERS,
    DEFAULT_SPLIT_METHOD,
    LOG_FORMAT,
    LOG_LEVEL,
    SRT_EXTENSIONS,
)
from srt_merger.core.models import ProcessingMode, ProcessingParams, SplitMethod
from srt_merger.core.parser import parse_srt
from srt_merger.pipeline.processing import ProcessingPipeline
from srt_merger.server.models import (
    ComparisonModel,
    ErrorResponse,
    ExportKind,
    HealthResponse,
    ParametersModel,
    ParametersUpdate,
    SessionCreatedResponse,
    SessionResponse,
    SplitMethodInfo,
    TransformRequest,
    TransformResponse,
    UpdateAcceptedResponse,
    entries_to_models,
)
from srt_merger.server.sessions import Session, SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup; cancel it and close sessions on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    session_store.clear()


app = FastAPI(
    lifespan=lifespan,
    title="SRT Merger API",
    description=(
        "REST API for merging close subtitle entries and splitting long ones. "
        "Transform SRT text in one call, or upload a track into a session, "
        "tune parameters with a live preview, commit or undo results, and "
        "export SRT or translation-ready annotated text."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session_or_404(session_id: str) -> Session:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=404, detail="Session not found: {}".format(session_id)
        )
    return session


def _session_to_response(session: Session) -> SessionResponse:
    """Convert a live Session into a SessionResponse snapshot."""
    pipeline = session.pipeline
    error = pipeline.last_error
    return SessionResponse(
        id=session.id,
        filename=session.filename,
        mode=pipeline.mode,
        parameters=ParametersModel.from_params(pipeline.params),
        original_count=len(pipeline.original),
        processed_count=len(pipeline.processed),
        pending=pipeline.pending,
        can_restore=pipeline.can_restore,
        backup_depth=pipeline.backup_depth,
        last_error=str(error) if error is not None else None,
        statistics=ComparisonModel.from_pipeline(pipeline.statistics()),
        entries=entries_to_models(pipeline.processed),
    )


def _validate_file_extension(filename: str) -> None:
    """Raise HTTPException if the file extension is not accepted."""
    ext = Path(filename).suffix.lower()
    if ext not in SRT_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported: {}".format(
                ext, ", ".join(sorted(SRT_EXTENSIONS))
            ),
        )


def _parse_or_400(text: str):
    entries = parse_srt(text)
    if not entries:
        raise HTTPException(status_code=400, detail="No subtitle entries found")
    return entries


# ---------------------------------------------------------------------------
# Endpoints: Transform
# ---------------------------------------------------------------------------


@app.post(
    "/transform",
    response_model=TransformResponse,
    tags=["transform"],
    summary="Merge or split SRT text in one call",
    description=(
        "Parse the given SRT text, run the selected engine with the given "
        "parameters, and return the processed entries, both serializations, "
        "and before/after statistics. No state is kept."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "No entries could be parsed"},
        422: {"model": ErrorResponse, "description": "Invalid parameters"},
    },
)
async def transform(request: TransformRequest) -> TransformResponse:
    entries = _parse_or_400(request.srt)
    with ProcessingPipeline(
        entries, mode=request.mode, params=request.parameters.to_params()
    ) as pipeline:
        return TransformResponse(
            mode=pipeline.mode,
            entries=entries_to_models(pipeline.processed),
            srt=pipeline.to_srt(),
            annotated=pipeline.to_annotated(),
            statistics=ComparisonModel.from_pipeline(pipeline.statistics()),
        )


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionCreatedResponse,
    status_code=201,
    tags=["sessions"],
    summary="Upload a track into a new editing session",
    description=(
        "Upload an .srt file with initial processing parameters. The track "
        "is parsed and processed immediately; use the returned session ID "
        "for further changes."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file type or content"},
        422: {"model": ErrorResponse, "description": "Invalid parameters"},
        429: {"model": ErrorResponse, "description": "Too many concurrent sessions"},
    },
)
async def create_session(
    file: Annotated[
        UploadFile,
        File(description="SRT subtitle file (UTF-8)."),
    ],
    mode: Annotated[
        ProcessingMode,
        Form(description="Initial processing mode: 'merge' or 'split'."),
    ] = ProcessingMode.MERGE,
    max_gap: Annotated[
        float,
        Form(description="Merge entries whose gap is below this many seconds."),
    ] = DEFAULT_MAX_GAP,
    max_duration: Annotated[
        float,
        Form(description="Split entries longer than this many seconds."),
    ] = DEFAULT_MAX_DURATION,
    split_characters: Annotated[
        str,
        Form(description="Characters after which a caption may be cut."),
    ] = DEFAULT_SPLIT_CHARACTERS,
    split_method: Annotated[
        SplitMethod,
        Form(description="How a split entry's duration is shared."),
    ] = SplitMethod(DEFAULT_SPLIT_METHOD),
) -> SessionCreatedResponse:
    # Sanitize filename to prevent path traversal
    filename = Path(file.filename or "upload.srt").name
    _validate_file_extension(filename)

    try:
        params = ProcessingParams(
            max_gap=max_gap,
            max_duration=max_duration,
            split_characters=split_characters,
            split_method=split_method,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    content = await file.read()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8 text")

    entries = _parse_or_400(text)
    pipeline = ProcessingPipeline(entries, mode=mode, params=params)

    try:
        session = session_store.create_session(filename=filename, pipeline=pipeline)
    except ValueError as exc:
        pipeline.close()
        raise HTTPException(status_code=429, detail=str(exc))

    return SessionCreatedResponse(
        id=session.id,
        filename=session.filename,
        entry_count=len(pipeline.original),
    )


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session state and processed preview",
    description=(
        "Returns the active mode and parameters, entry counts, undo state, "
        "statistics, and the processed preview entries. 'pending' is true "
        "while a debounced recompute has not published yet."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_to_response(_get_session_or_404(session_id))


@app.patch(
    "/sessions/{session_id}/parameters",
    response_model=UpdateAcceptedResponse,
    status_code=202,
    tags=["sessions"],
    summary="Change mode or parameters",
    description=(
        "Change any subset of mode and parameters. The recompute is "
        "debounced and runs in the background; rapid successive changes "
        "only compute the last one. Poll GET /sessions/{id} for the result."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        422: {"model": ErrorResponse, "description": "Invalid parameters"},
    },
)
async def update_parameters(
    session_id: str,
    update: ParametersUpdate,
) -> UpdateAcceptedResponse:
    session = _get_session_or_404(session_id)
    changes = update.model_dump(exclude_none=True)
    mode = changes.pop("mode", None)

    try:
        generation = session.pipeline.update(mode=mode, **changes)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return UpdateAcceptedResponse(
        id=session.id,
        generation=generation,
        pending=session.pipeline.pending,
    )


@app.post(
    "/sessions/{session_id}/apply",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Commit the processed preview",
    description=(
        "Make the processed preview the new working original, keeping the "
        "previous original on the undo stack, and recompute."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Nothing to apply"},
    },
)
async def apply_processed(session_id: str) -> SessionResponse:
    session = _get_session_or_404(session_id)
    if not session.pipeline.apply_processed():
        raise HTTPException(status_code=409, detail="Nothing to apply")
    return _session_to_response(session)


@app.post(
    "/sessions/{session_id}/restore",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Undo the last commit",
    description="Restore the working original from before the last apply.",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Nothing to restore"},
    },
)
async def restore_backup(session_id: str) -> SessionResponse:
    session = _get_session_or_404(session_id)
    if not session.pipeline.restore_backup():
        raise HTTPException(status_code=409, detail="Nothing to restore")
    return _session_to_response(session)


@app.get(
    "/sessions/{session_id}/export/{kind}",
    tags=["sessions"],
    summary="Download the processed preview",
    description=(
        "Download the processed preview as an SRT document ('srt') or as "
        "translation-ready text with #N# markers ('annotated')."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def export_session(session_id: str, kind: ExportKind) -> Response:
    session = _get_session_or_404(session_id)
    stem = Path(session.filename).stem

    if kind == ExportKind.srt:
        content = session.pipeline.to_srt()
        filename = "{}.srt".format(stem)
    else:
        content = session.pipeline.to_annotated()
        filename = "{}-annotated.txt".format(stem)

    return Response(
        content=content,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Close an editing session",
    description="Cancel pending work and discard the session.",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(
            status_code=404, detail="Session not found: {}".format(session_id)
        )
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Metadata
# ---------------------------------------------------------------------------


@app.get(
    "/split-methods",
    response_model=List[SplitMethodInfo],
    tags=["metadata"],
    summary="List split time-redistribution methods",
    description="Returns every split method with its identifier, name, and description.",
)
async def list_split_methods() -> List[SplitMethodInfo]:
    return [
        SplitMethodInfo(key=method.value, name=method.label, description=method.description)
        for method in SplitMethod
    ]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        sessions=len(session_store.list_sessions()),
    )


def run_api(host: str = "0.0.0.0", port: int = 8000, log_level: Optional[str] = None) -> None:
    """Entry point for the srt-merger-api console script."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    uvicorn.run(app, host=host, port=port, log_level=(log_level or LOG_LEVEL).lower())
