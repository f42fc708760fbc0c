"""WebSocket integration tests for real-time play."""

from __future__ import annotations

import json

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from candy_snake.server.app import create_app
from candy_snake.server.session_manager import SessionManager


@pytest.fixture()
def tc():
    application = create_app()
    application.state.session_manager = SessionManager()
    return TestClient(application)


def _create_session(tc, **body) -> str:
    resp = tc.post("/sessions", json=body)
    assert resp.status_code == 201
    return resp.json()["session_id"]


def _receive(ws) -> dict:
    return json.loads(ws.receive_text())


def _receive_until(ws, predicate, limit=50) -> dict:
    """Read snapshots until one matches; tick broadcasts may interleave."""
    for _ in range(limit):
        msg = _receive(ws)
        if predicate(msg):
            return msg
    raise AssertionError("No matching snapshot received.")


class TestPlayWebSocket:
    def test_connect_and_receive_initial_state(self, tc):
        sid = _create_session(tc, seed=5)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            msg = _receive(ws)
            assert msg["session_id"] == sid
            assert msg["started"] is False
            assert msg["state"]["is_paused"] is True
            assert "timers" in msg["state"]

    def test_nonexistent_session_rejected(self, tc):
        with pytest.raises(WebSocketDisconnect) as exc, tc.websocket_connect(
            "/sessions/nonexistent/play",
        ) as ws:
            ws.receive_text()
        assert exc.value.code == 4004

    def test_direction_starts_game(self, tc):
        sid = _create_session(tc)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            _receive(ws)
            ws.send_text(json.dumps({"direction": "up"}))
            msg = _receive(ws)
            assert msg["started"] is True
            assert msg["state"]["is_paused"] is False
            assert msg["state"]["queued_direction"] == "up"

    def test_direction_is_case_insensitive(self, tc):
        sid = _create_session(tc)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            _receive(ws)
            ws.send_text(json.dumps({"direction": "DOWN"}))
            assert _receive(ws)["state"]["queued_direction"] == "down"

    def test_invalid_messages_ignored(self, tc):
        sid = _create_session(tc)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            _receive(ws)
            ws.send_text("not json")
            ws.send_text("[]")
            ws.send_text(json.dumps({"direction": "sideways"}))
            ws.send_text(json.dumps({"command": "explode"}))
            ws.send_text(json.dumps({"nothing": True}))
            ws.send_text(json.dumps({"command": "start"}))
            msg = _receive(ws)
            assert msg["started"] is True
            assert msg["state"]["is_paused"] is False

    def test_pause_command(self, tc):
        sid = _create_session(tc)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            _receive(ws)
            ws.send_text(json.dumps({"command": "start"}))
            _receive(ws)
            ws.send_text(json.dumps({"command": "pause"}))
            msg = _receive_until(ws, lambda m: m["state"]["is_paused"])
            assert msg["started"] is True

    def test_restart_command(self, tc):
        sid = _create_session(tc, food_count=9)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            _receive(ws)
            ws.send_text(json.dumps({"command": "restart"}))
            msg = _receive(ws)
            assert msg["started"] is False
            assert msg["state"]["score"] == 0
            assert msg["state"]["food_count"] == 9

    def test_ticks_are_broadcast(self, tc):
        sid = _create_session(tc, seed=2)
        with tc.websocket_connect(f"/sessions/{sid}/play") as ws:
            first = _receive(ws)
            ws.send_text(json.dumps({"command": "start"}))
            _receive(ws)
            ticked = _receive_until(
                ws, lambda m: m["state"]["snake"] != first["state"]["snake"],
            )
            assert ticked["state"]["snake"][0] != first["state"]["snake"][0]

    def test_new_connection_replaces_old(self, tc):
        sid = _create_session(tc)
        instance = tc.app.state.session_manager.get_session(sid)

        ws1_ctx = tc.websocket_connect(f"/sessions/{sid}/play")
        ws1 = ws1_ctx.__enter__()
        ws2_ctx = None
        try:
            _receive(ws1)
            ws2_ctx = tc.websocket_connect(f"/sessions/{sid}/play")
            ws2 = ws2_ctx.__enter__()
            _receive(ws2)

            with pytest.raises(WebSocketDisconnect) as exc:
                ws1.receive_text()
            assert exc.value.code == 4008
            assert instance.websocket is not None
        finally:
            if ws2_ctx is not None:
                ws2_ctx.__exit__(None, None, None)
            ws1_ctx.__exit__(None, None, None)
