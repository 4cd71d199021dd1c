from __future__ import annotations

import pytest

from shift_accounting.core.exceptions import PersistenceError
from shift_accounting.main import create_app


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def _login(client, user_id="u1"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def test_requires_authenticated_user(client):
    resp = client.post("/api/activity/start-session")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Unauthorized"}


def test_start_session_then_conflict(client):
    _login(client)

    first = client.post("/api/activity/start-session")
    assert first.status_code == 200
    body = first.get_json()
    assert body["success"] is True
    session_id = body["session_id"]

    second = client.post("/api/activity/start-session")
    assert second.status_code == 409
    assert second.get_json()["session_id"] == session_id
    assert second.get_json()["success"] is False


def test_end_session_without_session_is_not_found(client):
    _login(client)

    resp = client.post("/api/activity/end-session")

    assert resp.status_code == 404
    assert resp.get_json()["message"] == "No active session found."


def test_break_lifecycle_over_http(client, store):
    _login(client)
    client.post("/api/activity/start-session")

    resp = client.post("/api/activity/start-break", json={"reason": "Lunch", "notes": "  "})
    assert resp.status_code == 200
    break_id = resp.get_json()["break_id"]
    assert store.breaks[break_id].reason == "Lunch"
    assert store.breaks[break_id].notes is None

    dup = client.post("/api/activity/start-break")
    assert dup.status_code == 409
    assert dup.get_json()["break_id"] == break_id

    ended = client.post("/api/activity/end-break")
    assert ended.status_code == 200
    assert ended.get_json()["break_duration"] >= 0

    again = client.post("/api/activity/end-break")
    assert again.status_code == 404


def test_start_break_without_session(client):
    _login(client)

    resp = client.post("/api/activity/start-break", json={})

    assert resp.status_code == 404
    assert resp.get_json()["message"] == "No active session."


def test_start_break_rejects_non_text_reason(client):
    _login(client)
    client.post("/api/activity/start-session")

    resp = client.post("/api/activity/start-break", json={"reason": 5})

    assert resp.status_code == 400


def test_end_session_reports_accounting_fields(client):
    _login(client)
    client.post("/api/activity/start-session")

    resp = client.post("/api/activity/end-session")

    assert resp.status_code == 200
    body = resp.get_json()
    for key in (
        "session_id", "duration", "break_duration", "worked", "shift_hours",
        "overtime_early", "overtime_late", "total_overtime", "undertime",
    ):
        assert key in body
    assert body["shift_hours"] + body["overtime_early"] + body["overtime_late"] == body["worked"]


def test_check_ongoing_reports_state(client):
    _login(client)

    idle = client.get("/api/activity/check-ongoing").get_json()
    assert idle["success"] is True
    assert idle["has_ongoing_session"] is False
    assert idle["has_active_break"] is False

    client.post("/api/activity/start-session")
    client.post("/api/activity/start-break")

    busy = client.get("/api/activity/check-ongoing").get_json()
    assert busy["has_ongoing_session"] is True
    assert busy["has_active_break"] is True
    assert busy["active_break"]["session_id"] == busy["session"]["id"]
    assert busy["active_break"]["reason"] == "Personal"


def test_daily_summary(client):
    _login(client)

    empty = client.get("/api/activity/today?date=2001-01-01")
    assert empty.status_code == 200
    assert empty.get_json()["summary"] is None

    client.post("/api/activity/start-session")
    today = client.get("/api/activity/today").get_json()["summary"]
    assert today["login_count"] == 1
    assert today["status"] == "logged_in"


def test_daily_summary_rejects_bad_date(client):
    _login(client)

    resp = client.get("/api/activity/today?date=02/02/2026")

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_persistence_errors_become_500(client, monkeypatch, service):
    _login(client)

    def broken(user_id, *, now=None):
        raise PersistenceError("connection lost")

    monkeypatch.setattr(service, "start_session", broken)
    resp = client.post("/api/activity/start-session")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "connection lost"}


def test_unexpected_errors_become_500(client, monkeypatch, service):
    _login(client)

    def broken(user_id, *, now=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(service, "end_session", broken)
    resp = client.post("/api/activity/end-session")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Failed to end session."}
