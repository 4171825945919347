"""In-memory editing-session store with TTL cleanup.

WHY: The HTTP API lets a client upload a track once and then tweak
parameters, commit results, and undo commits over many requests. Each of
those requests needs the same ProcessingPipeline, so the API keeps one per
session. An in-memory store is sufficient for a single-team tool with no
persistence requirements.

HOW: Two components work together:
  Session       — dataclass holding the pipeline, filename, and timestamps
  SessionStore  — thread-safe dict-based store with create/get/list/delete
                  and TTL cleanup

RULES:
- All store mutations are protected by threading.Lock for thread safety
- Session IDs are UUID4 hex strings generated at creation time
- get_session() refreshes last_access; TTL is measured from last_access
- Removing a session (delete or expiry) closes its pipeline so no pending
  recompute outlives it
- create_session() raises ValueError when max_sessions is reached
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from srt_merger.config import MAX_SESSIONS, SESSION_TTL_SECONDS
from srt_merger.pipeline.processing import ProcessingPipeline

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One editing session: a pipeline plus bookkeeping.

    RULES:
    - id: UUID4 hex string, unique and immutable after creation
    - filename: uploaded filename (used for export file names)
    - pipeline: the live ProcessingPipeline for this session
    - created_at / last_access: epoch timestamps
    """

    id: str
    filename: str
    pipeline: ProcessingPipeline
    created_at: float
    last_access: float


class SessionStore:
    """Thread-safe in-memory store for editing sessions.

    WHY: Concurrent API requests and the periodic cleanup task access the
    session table simultaneously. A centralized store with locking keeps
    that consistent.

    HOW: Sessions are stored in a plain dict keyed by ID. Mutations acquire
    a threading.Lock; closing pipelines happens outside the lock.
    """

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(self, filename: str, pipeline: ProcessingPipeline) -> Session:
        """Store a pipeline under a new session ID.

        Raises:
            ValueError: If the store already holds max_sessions sessions.
        """
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                logger.warning("Session store full (%d sessions)", self.max_sessions)
                raise ValueError(
                    "Maximum number of concurrent sessions ({}) reached".format(
                        self.max_sessions
                    )
                )

            now = time.time()
            session = Session(
                id=uuid.uuid4().hex,
                filename=filename,
                pipeline=pipeline,
                created_at=now,
                last_access=now,
            )
            self._sessions[session.id] = session

        logger.info(
            "Created session %s for %s (%d entries)",
            session.id, filename, len(pipeline.original),
        )
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Return the session and refresh its last_access, or None if unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_access = time.time()
            return session

    def list_sessions(self) -> List[Session]:
        """Return all sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def delete_session(self, session_id: str) -> bool:
        """Remove a session and close its pipeline.

        Returns:
            True if the session existed, False otherwise.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False

        session.pipeline.close()
        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL.

        Returns:
            The number of removed sessions.
        """
        now = time.time()
        expired: List[Session] = []

        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if now - session.last_access > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            session.pipeline.close()
            logger.info(
                "Expired session %s (idle %.0fs)", session.id, now - session.last_access
            )

        return len(expired)

    def clear(self) -> None:
        """Remove every session (used on shutdown and in tests)."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.pipeline.close()
