"""Tests for connection tracking and session broadcasts."""

from unittest.mock import AsyncMock

import pytest
from fastapi import WebSocketDisconnect
from starlette.websockets import WebSocketState

from team_connections.realtime.connection_manager import SessionConnectionManager


def make_websocket():
    websocket = AsyncMock()
    websocket.send_json = AsyncMock()
    websocket.application_state = WebSocketState.CONNECTED
    return websocket


@pytest.fixture
def manager():
    return SessionConnectionManager()


class TestGroups:
    def test_join_is_idempotent(self, manager):
        assert manager.join_session_group("c1", "ABC123") is True
        assert manager.join_session_group("c1", "ABC123") is False
        assert manager.session_members("ABC123") == ["c1"]

    def test_disconnect_leaves_every_group(self, manager):
        manager.connect("c1", make_websocket())
        manager.join_session_group("c1", "ABC123")
        manager.join_session_group("c1", "XYZ789")
        manager.join_session_group("c2", "ABC123")

        left = manager.disconnect("c1")

        assert sorted(left) == ["ABC123", "XYZ789"]
        assert manager.session_members("ABC123") == ["c2"]
        assert "XYZ789" not in manager.session_subscriptions
        assert manager.get_active_connection_count() == 0

    def test_disconnect_twice_is_safe(self, manager):
        manager.connect("c1", make_websocket())
        manager.disconnect("c1")

        assert manager.disconnect("c1") == []

    def test_drop_session_group(self, manager):
        manager.join_session_group("c1", "ABC123")

        manager.drop_session_group("ABC123")

        assert manager.sessions_for("c1") == []


class TestSending:
    @pytest.mark.asyncio
    async def test_send_personal_message(self, manager):
        websocket = make_websocket()
        manager.connect("c1", websocket)

        assert await manager.send_personal_message("c1", {"event_type": "pong"}) is True
        websocket.send_json.assert_awaited_once_with({"event_type": "pong"})

    @pytest.mark.asyncio
    async def test_send_to_unknown_connection(self, manager):
        assert await manager.send_personal_message("ghost", {"event_type": "pong"}) is False

    @pytest.mark.asyncio
    async def test_send_skips_disconnected_socket(self, manager):
        websocket = make_websocket()
        websocket.application_state = WebSocketState.DISCONNECTED
        manager.connect("c1", websocket)

        assert await manager.send_personal_message("c1", {"event_type": "pong"}) is False
        websocket.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_failure_reported_not_raised(self, manager):
        websocket = make_websocket()
        websocket.send_json.side_effect = WebSocketDisconnect(code=1006)
        manager.connect("c1", websocket)

        assert await manager.send_personal_message("c1", {"event_type": "pong"}) is False

    @pytest.mark.asyncio
    async def test_broadcast_reaches_group_members_only(self, manager):
        members = {cid: make_websocket() for cid in ("c1", "c2", "c3")}
        for cid, websocket in members.items():
            manager.connect(cid, websocket)
        manager.join_session_group("c1", "ABC123")
        manager.join_session_group("c2", "ABC123")

        stats = await manager.broadcast_to_session("ABC123", {"event_type": "appState"})

        assert stats["successful_deliveries"] == 2
        members["c1"].send_json.assert_awaited_once()
        members["c2"].send_json.assert_awaited_once()
        members["c3"].send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broadcast_counts_failures(self, manager):
        good, bad = make_websocket(), make_websocket()
        bad.send_json.side_effect = RuntimeError("close message has been sent")
        manager.connect("good", good)
        manager.connect("bad", bad)
        manager.join_session_group("good", "ABC123")
        manager.join_session_group("bad", "ABC123")

        stats = await manager.broadcast_to_session("ABC123", {"event_type": "appState"})

        assert stats["successful_deliveries"] == 1
        assert stats["failed_deliveries"] == 1

    @pytest.mark.asyncio
    async def test_broadcast_to_empty_group(self, manager):
        stats = await manager.broadcast_to_session("ABC123", {"event_type": "appState"})

        assert stats["total_targets"] == 0

    @pytest.mark.asyncio
    async def test_close_all(self, manager):
        websocket = make_websocket()
        manager.connect("c1", websocket)
        manager.join_session_group("c1", "ABC123")

        await manager.close_all()

        websocket.close.assert_awaited_once_with(code=1001)
        assert manager.get_active_connection_count() == 0
        assert manager.session_subscriptions == {}


def test_sequence_numbers_increase(manager):
    assert manager.next_sequence() == 1
    assert manager.next_sequence() == 2
