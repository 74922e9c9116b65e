"""WebSocket integration tests for the channel transport."""

from __future__ import annotations

import time

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from snake_channel.config import ServerConfig
from snake_channel.loop import LoopState
from snake_channel.protocol import (
    ChangeDirection,
    JoinGame,
    PlayerJoined,
    StateUpdate,
    decode_channel_message,
    encode_player_message,
)
from snake_channel.server.app import create_app
from snake_channel.snake import Direction


@pytest.fixture()
def tc():
    """TestClient as a context manager so the lifespan runs the session loop."""
    application = create_app(ServerConfig(tick_interval_ms=20, seed=0))
    with TestClient(application) as client:
        yield client


def _receive_until(ws, kind, limit=50):
    for _ in range(limit):
        message = decode_channel_message(ws.receive_bytes())
        if isinstance(message, kind):
            return message
    raise AssertionError(f"No {kind.__name__} within {limit} frames.")


def _wait_for(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met in time.")
        time.sleep(0.01)


class TestChannelSocket:
    def test_receives_state_updates(self, tc):
        with tc.websocket_connect("/channel?user_id=a") as ws:
            message = _receive_until(ws, StateUpdate)
            assert message.session.grid_size == 16

    def test_join_acknowledged_and_snake_broadcast(self, tc):
        with tc.websocket_connect("/channel?user_id=a") as ws:
            ws.send_bytes(encode_player_message(JoinGame()))
            assert _receive_until(ws, PlayerJoined) == PlayerJoined()
            update = _receive_until(ws, StateUpdate)
            assert [s.snake_id for s in update.session.snakes] == [0]

    def test_direction_change_reaches_snake(self, tc):
        with tc.websocket_connect("/channel?user_id=a") as ws:
            ws.send_bytes(encode_player_message(JoinGame()))
            _receive_until(ws, PlayerJoined)
            ws.send_bytes(encode_player_message(ChangeDirection(Direction.DOWN)))
            for _ in range(50):
                update = _receive_until(ws, StateUpdate)
                if update.session.snakes[0].direction == Direction.DOWN:
                    break
            else:
                raise AssertionError("Direction change never observed.")

    def test_garbage_frames_ignored(self, tc):
        with tc.websocket_connect("/channel?user_id=a") as ws:
            ws.send_text("not-binary")
            ws.send_bytes(b"\xff\x00\x01")
            ws.send_bytes(encode_player_message(JoinGame()))
            assert _receive_until(ws, PlayerJoined) == PlayerJoined()

    def test_duplicate_identity_rejected(self, tc):
        with tc.websocket_connect("/channel?user_id=a") as ws:
            _receive_until(ws, StateUpdate)
            with pytest.raises(WebSocketDisconnect), tc.websocket_connect(
                "/channel?user_id=a",
            ) as dup:
                dup.receive_bytes()

    def test_anonymous_user_gets_identity(self, tc):
        with tc.websocket_connect("/channel") as ws:
            _receive_until(ws, StateUpdate)
            players = tc.get("/players").json()
            assert len(players["connected"]) == 1
            assert players["leader"] == players["connected"][0]

    def test_disconnect_removes_snake(self, tc):
        with tc.websocket_connect("/channel?user_id=a") as ws:
            ws.send_bytes(encode_player_message(JoinGame()))
            _receive_until(ws, PlayerJoined)
        with tc.websocket_connect("/channel?user_id=b") as ws:
            for _ in range(50):
                update = _receive_until(ws, StateUpdate)
                if not update.session.snakes:
                    break
            else:
                raise AssertionError("Snake of a departed user still live.")
            assert tc.get("/players").json()["snakes"] == {}


class TestDisconnectHandling:
    def test_reconnect_with_same_identity(self, tc):
        channel = tc.app.state.channel
        with tc.websocket_connect("/channel?user_id=a") as ws:
            ws.send_bytes(encode_player_message(JoinGame()))
            _receive_until(ws, PlayerJoined)
        _wait_for(lambda: not channel.is_attached("a"))

        with tc.websocket_connect("/channel?user_id=a") as ws:
            ws.send_bytes(encode_player_message(JoinGame()))
            assert _receive_until(ws, PlayerJoined) == PlayerJoined()
            update = _receive_until(ws, StateUpdate)
            assert [s.snake_id for s in update.session.snakes] == [1]

    def test_leadership_passes_on_disconnect(self, tc):
        ws_a_ctx = tc.websocket_connect("/channel?user_id=a")
        ws_a = ws_a_ctx.__enter__()
        ws_a_closed = False
        try:
            _receive_until(ws_a, StateUpdate)
            with tc.websocket_connect("/channel?user_id=b") as ws_b:
                _receive_until(ws_b, StateUpdate)
                assert tc.get("/players").json()["leader"] == "a"

                ws_a_ctx.__exit__(None, None, None)
                ws_a_closed = True
                _wait_for(lambda: tc.get("/players").json()["leader"] == "b")
                assert tc.get("/players").json()["connected"] == ["b"]
            _wait_for(lambda: tc.get("/players").json()["leader"] is None)
        finally:
            if not ws_a_closed:
                ws_a_ctx.__exit__(None, None, None)


class TestSessionEnd:
    def test_crashed_loop_closes_channel(self, tc):
        def boom():
            raise RuntimeError("boom")

        tc.app.state.engine.tick = boom
        _wait_for(lambda: tc.app.state.channel.closed)
        assert tc.app.state.session_loop.state == LoopState.TERMINATED

        with pytest.raises(WebSocketDisconnect), tc.websocket_connect(
            "/channel?user_id=late",
        ) as ws:
            ws.receive_bytes()
