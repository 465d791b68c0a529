"""HTTP-level tests for the agent API using FastAPI's TestClient."""
import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core import dependencies
from utils.jwt_utils import generate_access_token


@pytest.fixture
def client():
    # entering the context runs the lifespan, so every test gets fresh stores
    with TestClient(create_app()) as test_client:
        yield test_client


def _auth(user_id="user-1"):
    return {"Authorization": f"Bearer {generate_access_token(user_id)}"}


def _parse_sse(body: str):
    frames = []
    for block in body.strip().split("\n\n"):
        event_line, data_line = block.split("\n")
        assert event_line.startswith("event: ")
        frames.append((event_line[len("event: "):], json.loads(data_line[len("data: "):])))
    return frames


class TestHealthAndAuth:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["tools"] == 23

    def test_missing_token(self, client):
        response = client.post("/agent/turn", json={"message": "hi", "session_id": "s1"})
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.post(
            "/agent/turn",
            json={"message": "hi", "session_id": "s1"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401


class TestTurn:
    def test_request_needs_message_or_decision(self, client):
        response = client.post("/agent/turn", json={"session_id": "s1"}, headers=_auth())
        assert response.status_code == 422

    def test_propose_then_confirm(self, client):
        proposed = client.post(
            "/agent/turn",
            json={"message": "create a note titled Release Plan", "session_id": "s1"},
            headers=_auth(),
        ).json()
        assert proposed["pending_action"]["tool_name"] == "notes_create"
        assert "user_id" not in proposed["pending_action"]

        confirmed = client.post(
            "/agent/turn",
            json={
                "session_id": "s1",
                "action_decision": {"action_id": proposed["pending_action"]["id"], "approved": True},
            },
            headers=_auth(),
        ).json()
        assert confirmed["status"] == "ok"
        assert confirmed["used_modules"] == ["notes"]

        found = client.post(
            "/agent/tools/execute",
            json={"tool_name": "notes_search", "args": {"q": "release"}},
            headers=_auth(),
        ).json()
        assert [note["title"] for note in found["data"]] == ["Release Plan"]

    def test_unknown_action_is_error_result(self, client):
        body = client.post(
            "/agent/turn",
            json={"session_id": "s1", "action_decision": {"action_id": "nope", "approved": True}},
            headers=_auth(),
        ).json()
        assert body["status"] == "error"
        assert body["error_code"] == "action_not_found"

    def test_internal_failure_is_500_with_error_detail(self, client, monkeypatch):
        monkeypatch.setattr(dependencies.get_agent(), "run_turn", AsyncMock(side_effect=RuntimeError("boom")))
        response = client.post("/agent/turn", json={"message": "hi", "session_id": "s1"}, headers=_auth())
        assert response.status_code == 500
        assert response.json()["detail"] == {
            "message": "An internal error occurred. Please try again later.",
            "error_code": "internal_error",
            "retryable": False,
        }

    def test_timeout_is_503_and_retryable(self, client, monkeypatch):
        monkeypatch.setattr(dependencies.get_agent(), "run_turn", AsyncMock(side_effect=TimeoutError("slow")))
        response = client.post("/agent/turn", json={"message": "hi", "session_id": "s1"}, headers=_auth())
        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["error_code"] == "timeout"
        assert detail["retryable"] is True


class TestStream:
    def test_headers_and_frame_order(self, client):
        response = client.post(
            "/agent/stream",
            json={"message": "create a note titled Release Plan", "session_id": "s1"},
            headers=_auth(),
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache, no-transform"
        assert response.headers["x-accel-buffering"] == "no"

        frames = _parse_sse(response.text)
        kinds = [kind for kind, _ in frames]
        assert kinds[-2:] == ["action", "done"]
        assert set(kinds[:-2]) == {"token"}
        text = "".join(data["text"] for kind, data in frames if kind == "token")
        assert text.startswith("I suggest this action:")

    def test_navigation_stream(self, client):
        response = client.post(
            "/agent/stream",
            json={"message": "open calendar", "session_id": "s1"},
            headers=_auth(),
        )
        kinds = [kind for kind, _ in _parse_sse(response.text)]
        assert kinds[-2:] == ["navigate", "done"]

    def test_unknown_action_streams_single_error(self, client):
        response = client.post(
            "/agent/stream",
            json={"session_id": "s1", "action_decision": {"action_id": "nope", "approved": False}},
            headers=_auth(),
        )
        frames = _parse_sse(response.text)
        assert len(frames) == 1
        assert frames[0][0] == "error"
        assert frames[0][1]["code"] == "action_not_found"

    def test_internal_failure_streams_single_error(self, client, monkeypatch):
        monkeypatch.setattr(dependencies.get_agent(), "run_turn", AsyncMock(side_effect=RuntimeError("boom")))
        response = client.post("/agent/stream", json={"message": "hi", "session_id": "s1"}, headers=_auth())
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        frames = _parse_sse(response.text)
        assert len(frames) == 1
        kind, data = frames[0]
        assert kind == "error"
        assert data["code"] == "internal_error"
        assert "boom" not in data["message"]


class TestTools:
    def test_list_all(self, client):
        tools = client.get("/agent/tools", headers=_auth()).json()["tools"]
        assert len(tools) == 23
        assert all("inputSchema" in tool for tool in tools)

    def test_filter_by_module(self, client):
        tools = client.get("/agent/tools", params={"module": "notes"}, headers=_auth()).json()["tools"]
        assert tools
        assert {tool["module"] for tool in tools} == {"notes"}

    def test_unknown_module(self, client):
        response = client.get("/agent/tools", params={"module": "email"}, headers=_auth())
        assert response.status_code == 400

    def test_mutating_call_needs_confirmation(self, client):
        payload = {"tool_name": "notes_create", "args": {"title": "Direct"}}
        assert client.post("/agent/tools/execute", json=payload, headers=_auth()).status_code == 409

        payload["confirm_mutating"] = True
        body = client.post("/agent/tools/execute", json=payload, headers=_auth()).json()
        assert body["ok"] is True
        assert body["data"]["title"] == "Direct"

    def test_unknown_tool(self, client):
        response = client.post("/agent/tools/execute", json={"tool_name": "ghost"}, headers=_auth())
        assert response.status_code == 404

    def test_read_only_call(self, client):
        body = client.post(
            "/agent/tools/execute",
            json={"tool_name": "calendar_list_events", "args": {}},
            headers=_auth(),
        ).json()
        assert body == {"ok": True, "data": [], "error": None}


class TestSessions:
    def _propose_and_confirm(self, client):
        proposed = client.post(
            "/agent/turn",
            json={"message": "create a note titled Release Plan", "session_id": "s1"},
            headers=_auth(),
        ).json()
        client.post(
            "/agent/turn",
            json={
                "session_id": "s1",
                "action_decision": {"action_id": proposed["pending_action"]["id"], "approved": True},
            },
            headers=_auth(),
        )

    def test_events_and_actions(self, client):
        self._propose_and_confirm(client)

        events = client.get("/agent/sessions/s1/events", headers=_auth()).json()
        assert [(e["type"], e["item_type"]) for e in events["events"]] == [("created", "note")]

        actions = client.get("/agent/sessions/s1/actions", headers=_auth()).json()
        assert [a["reason"] for a in actions["actions"]] == ["proposed", "confirmed"]

    def test_foreign_and_unknown_sessions(self, client):
        self._propose_and_confirm(client)
        assert client.get("/agent/sessions/s1/events", headers=_auth("user-2")).status_code == 404
        assert client.get("/agent/sessions/s1/actions", headers=_auth("user-2")).status_code == 404
        assert client.get("/agent/sessions/nope/events", headers=_auth()).status_code == 404

    def test_other_users_turns_are_not_recorded_in_session(self, client):
        client.post("/agent/turn", json={"message": "hello", "session_id": "shared"}, headers=_auth("alice"))
        intruder = client.post(
            "/agent/turn",
            json={"message": "create a note titled Bob Secret Salary", "session_id": "shared"},
            headers=_auth("bob"),
        ).json()
        assert intruder["pending_action"]["tool_name"] == "notes_create"

        actions = client.get("/agent/sessions/shared/actions", headers=_auth("alice")).json()
        assert actions["actions"] == []
        events = client.get("/agent/sessions/shared/events", headers=_auth("alice")).json()
        assert events["events"] == []
        assert client.get("/agent/sessions/shared/actions", headers=_auth("bob")).status_code == 404


class TestLifecycle:
    def test_stores_live_only_inside_lifespan(self):
        with TestClient(create_app()):
            assert len(dependencies.get_pending_store()) == 0
            assert dependencies.get_workspace() is not None
        with pytest.raises(RuntimeError):
            dependencies.get_agent()

    def test_move_card_through_turns(self, client):
        board = asyncio.run(dependencies.get_workspace().kanban.create_board("user-1", "Sprint", ["Todo", "Done"]))
        created = client.post(
            "/agent/tools/execute",
            json={"tool_name": "kanban_create_card", "args": {"title": "Deploy"}, "confirm_mutating": True},
            headers=_auth(),
        ).json()

        proposed = client.post(
            "/agent/turn",
            json={"message": "move card Deploy to Done", "session_id": "s1"},
            headers=_auth(),
        ).json()
        assert proposed["pending_action"]["arguments"] == {
            "cardId": created["data"]["id"],
            "columnId": board.columns[1].id,
        }

        client.post(
            "/agent/turn",
            json={
                "session_id": "s1",
                "action_decision": {"action_id": proposed["pending_action"]["id"], "approved": True},
            },
            headers=_auth(),
        )
        cards = client.post(
            "/agent/tools/execute",
            json={"tool_name": "kanban_list_cards", "args": {}},
            headers=_auth(),
        ).json()["data"]
        assert cards[0]["column_id"] == board.columns[1].id
