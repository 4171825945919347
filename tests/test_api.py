"""Tests for the FastAPI merge/split API.

WHY: Validates every endpoint: happy paths, the 404/409/422/429 error
contracts, and the debounced PATCH flow that clients poll.

HOW: Each test exercises one endpoint behaviour through the FastAPI
TestClient (synchronous, in-process). Sessions are created via the API;
after a PATCH the test waits on the session's pipeline instead of
sleeping.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- The session store is cleared before and after each test
- Tests cover: happy paths, 400 bad input, 404 not found, 409 conflict,
  422 invalid parameters, 429 too many sessions
"""

from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient

from srt_merger.server.app import app, session_store


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions before and after each test to ensure isolation."""
    session_store.clear()
    yield
    session_store.clear()


@pytest.fixture
def client():
    return TestClient(app)


def _srt_upload(text: str, name: str = "track.srt"):
    return {"file": (name, io.BytesIO(text.encode("utf-8")), "application/x-subrip")}


@pytest.fixture
def session_id(client, sample_text):
    """A session holding the sample track, merged with max_gap 0.2."""
    response = client.post(
        "/sessions", files=_srt_upload(sample_text), data={"max_gap": "0.2"}
    )
    assert response.status_code == 201
    return response.json()["id"]


# ---------------------------------------------------------------------------
# POST /transform
# ---------------------------------------------------------------------------


class TestTransform:
    """Tests for POST /transform."""

    def test_merge(self, client, sample_text):
        response = client.post(
            "/transform",
            json={"srt": sample_text, "mode": "merge", "parameters": {"max_gap": 0.2}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "merge"
        assert len(data["entries"]) == 8
        assert data["entries"][0]["stop_timecode"] == "00:00:10,200"
        assert data["srt"].startswith("1\n00:00:00,000 --> 00:00:10,200\n")
        assert "#8#" in data["annotated"]
        assert data["statistics"]["delta"] == -7
        assert data["statistics"]["delta_label"] == "reduction: -7"

    def test_split(self, client):
        srt = "1\n00:00:00,000 --> 00:00:10,000\nOne. Two. Three.\n"
        response = client.post(
            "/transform",
            json={"srt": srt, "mode": "split", "parameters": {"max_duration": 4}},
        )
        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [e["caption"] for e in entries] == ["One.", "Two.", "Three."]
        assert [e["stop"] for e in entries] == [3.125, 6.25, 10.0]

    def test_negative_gap_is_422(self, client, sample_text):
        response = client.post(
            "/transform", json={"srt": sample_text, "parameters": {"max_gap": -1}}
        )
        assert response.status_code == 422

    def test_unknown_mode_is_422(self, client, sample_text):
        response = client.post("/transform", json={"srt": sample_text, "mode": "shuffle"})
        assert response.status_code == 422

    def test_no_entries_is_400(self, client):
        response = client.post("/transform", json={"srt": "nothing here"})
        assert response.status_code == 400
        assert "No subtitle entries" in response.json()["detail"]


# ---------------------------------------------------------------------------
# POST /sessions
# ---------------------------------------------------------------------------


class TestCreateSession:
    """Tests for POST /sessions."""

    def test_created(self, client, sample_text):
        response = client.post("/sessions", files=_srt_upload(sample_text))
        assert response.status_code == 201
        data = response.json()
        assert data["filename"] == "track.srt"
        assert data["entry_count"] == 15
        assert len(data["id"]) == 32

    def test_path_is_stripped_from_filename(self, client, sample_text):
        response = client.post("/sessions", files=_srt_upload(sample_text, "../../etc/x.srt"))
        assert response.status_code == 201
        assert response.json()["filename"] == "x.srt"

    def test_unsupported_extension(self, client, sample_text):
        response = client.post("/sessions", files=_srt_upload(sample_text, "movie.mp4"))
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_invalid_parameter(self, client, sample_text):
        response = client.post(
            "/sessions", files=_srt_upload(sample_text), data={"max_duration": "0"}
        )
        assert response.status_code == 422

    def test_not_utf8(self, client):
        files = {"file": ("track.srt", io.BytesIO(b"\xff\xfe\x00bad"), "application/x-subrip")}
        response = client.post("/sessions", files=files)
        assert response.status_code == 400

    def test_no_entries(self, client):
        response = client.post("/sessions", files=_srt_upload("just text"))
        assert response.status_code == 400

    def test_too_many_sessions(self, client, sample_text):
        original_max = session_store.max_sessions
        session_store.max_sessions = 1
        try:
            assert client.post("/sessions", files=_srt_upload(sample_text)).status_code == 201
            response = client.post("/sessions", files=_srt_upload(sample_text))
            assert response.status_code == 429
        finally:
            session_store.max_sessions = original_max


# ---------------------------------------------------------------------------
# GET /sessions/{id} and PATCH /sessions/{id}/parameters
# ---------------------------------------------------------------------------


class TestSessionState:
    """Tests for reading and changing session state."""

    def test_get(self, client, session_id):
        response = client.get("/sessions/{}".format(session_id))
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "merge"
        assert data["parameters"]["max_gap"] == 0.2
        assert data["original_count"] == 15
        assert data["processed_count"] == 8
        assert data["can_restore"] is False
        assert data["statistics"]["original"]["count"] == 15
        assert len(data["entries"]) == 8

    def test_get_unknown(self, client):
        response = client.get("/sessions/nope")
        assert response.status_code == 404
        assert "Session not found" in response.json()["detail"]

    def test_patch_is_debounced(self, client, session_id):
        response = client.patch(
            "/sessions/{}/parameters".format(session_id),
            json={"mode": "split", "max_duration": 4},
        )
        assert response.status_code == 202
        assert response.json()["generation"] >= 1

        assert session_store.get_session(session_id).pipeline.wait(timeout=5)
        data = client.get("/sessions/{}".format(session_id)).json()
        assert data["mode"] == "split"
        assert data["pending"] is False
        assert data["processed_count"] > 15

    def test_patch_partial_keeps_other_fields(self, client, session_id):
        client.patch("/sessions/{}/parameters".format(session_id), json={"split_method": "words"})
        session_store.get_session(session_id).pipeline.wait(timeout=5)
        params = client.get("/sessions/{}".format(session_id)).json()["parameters"]
        assert params["split_method"] == "words"
        assert params["max_gap"] == 0.2

    def test_patch_invalid_is_422(self, client, session_id):
        response = client.patch(
            "/sessions/{}/parameters".format(session_id), json={"max_gap": -1}
        )
        assert response.status_code == 422

    def test_patch_unknown_session(self, client):
        response = client.patch("/sessions/nope/parameters", json={"max_gap": 1})
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# apply / restore
# ---------------------------------------------------------------------------


class TestApplyRestore:
    """Tests for POST /sessions/{id}/apply and /restore."""

    def test_apply_then_restore(self, client, session_id):
        response = client.post("/sessions/{}/apply".format(session_id))
        assert response.status_code == 200
        data = response.json()
        assert data["original_count"] == 8
        assert data["can_restore"] is True
        assert data["backup_depth"] == 1

        response = client.post("/sessions/{}/restore".format(session_id))
        assert response.status_code == 200
        data = response.json()
        assert data["original_count"] == 15
        assert data["can_restore"] is False

    def test_restore_with_empty_stack_is_409(self, client, session_id):
        response = client.post("/sessions/{}/restore".format(session_id))
        assert response.status_code == 409
        assert response.json()["detail"] == "Nothing to restore"

    def test_apply_unknown_session(self, client):
        assert client.post("/sessions/nope/apply").status_code == 404


# ---------------------------------------------------------------------------
# export / delete
# ---------------------------------------------------------------------------


class TestExportDelete:
    """Tests for export and delete endpoints."""

    def test_export_srt(self, client, session_id):
        response = client.get("/sessions/{}/export/srt".format(session_id))
        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="track.srt"'
        assert response.text.startswith("1\n00:00:00,000 --> 00:00:10,200\n")

    def test_export_annotated(self, client, session_id):
        response = client.get("/sessions/{}/export/annotated".format(session_id))
        assert response.status_code == 200
        assert 'filename="track-annotated.txt"' in response.headers["content-disposition"]
        assert "#1#Welcome" in response.text

    def test_export_unknown_kind(self, client, session_id):
        response = client.get("/sessions/{}/export/pdf".format(session_id))
        assert response.status_code == 422

    def test_delete(self, client, session_id):
        assert client.delete("/sessions/{}".format(session_id)).status_code == 204
        assert client.get("/sessions/{}".format(session_id)).status_code == 404
        assert client.delete("/sessions/{}".format(session_id)).status_code == 404


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMetadata:
    """Tests for /split-methods and /health."""

    def test_split_methods(self, client):
        response = client.get("/split-methods")
        assert response.status_code == 200
        keys = [m["key"] for m in response.json()]
        assert keys == ["characters", "words", "equal"]

    def test_health(self, client, session_id):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "0.1.0"
        assert data["sessions"] == 1
