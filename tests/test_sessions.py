"""Tests for the in-memory SessionStore.

WHY: The store is shared between concurrent API requests and the cleanup
task. Its limits (max_sessions, TTL) and its duty to close pipelines are
easy to regress without noticing.

HOW: SessionStore with MagicMock pipelines so the tests only observe
store behaviour (close() calls), plus one real pipeline for the happy path.
"""

import time
from unittest.mock import MagicMock

import pytest

from srt_merger.pipeline.processing import ProcessingPipeline
from srt_merger.server.sessions import Session, SessionStore


@pytest.fixture
def store():
    return SessionStore(ttl_seconds=60, max_sessions=3)


class TestCreateAndGet:
    """Tests for create_session() and get_session()."""

    def test_create_with_real_pipeline(self, store, sample_track):
        pipeline = ProcessingPipeline(sample_track)
        session = store.create_session("track.srt", pipeline)
        assert isinstance(session, Session)
        assert len(session.id) == 32
        assert store.get_session(session.id) is session
        pipeline.close()

    def test_unknown_id_returns_none(self, store):
        assert store.get_session("nope") is None

    def test_get_refreshes_last_access(self, store):
        session = store.create_session("a.srt", MagicMock())
        session.last_access = 0.0
        store.get_session(session.id)
        assert session.last_access > 0.0

    def test_max_sessions(self, store):
        for i in range(3):
            store.create_session("{}.srt".format(i), MagicMock())
        with pytest.raises(ValueError, match="Maximum number"):
            store.create_session("overflow.srt", MagicMock())

    def test_list_oldest_first(self, store):
        first = store.create_session("a.srt", MagicMock())
        second = store.create_session("b.srt", MagicMock())
        first.created_at, second.created_at = 2.0, 1.0
        assert [s.id for s in store.list_sessions()] == [second.id, first.id]


class TestRemoval:
    """Tests for delete_session(), cleanup_expired(), and clear()."""

    def test_delete_closes_pipeline(self, store):
        pipeline = MagicMock()
        session = store.create_session("a.srt", pipeline)
        assert store.delete_session(session.id) is True
        pipeline.close.assert_called_once_with()
        assert store.get_session(session.id) is None

    def test_delete_unknown(self, store):
        assert store.delete_session("nope") is False

    def test_cleanup_expired(self, store):
        stale_pipeline = MagicMock()
        stale = store.create_session("old.srt", stale_pipeline)
        fresh = store.create_session("new.srt", MagicMock())
        stale.last_access = time.time() - 120

        assert store.cleanup_expired() == 1
        stale_pipeline.close.assert_called_once_with()
        assert store.get_session(stale.id) is None
        assert store.get_session(fresh.id) is fresh

    def test_clear(self, store):
        pipelines = [MagicMock(), MagicMock()]
        for i, pipeline in enumerate(pipelines):
            store.create_session("{}.srt".format(i), pipeline)
        store.clear()
        assert store.list_sessions() == []
        for pipeline in pipelines:
            pipeline.close.assert_called_once_with()
