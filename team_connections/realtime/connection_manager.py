"""
Connection and broadcast-group management for session WebSockets.

Tracks the live WebSocket of every connection identifier and which session
broadcast groups each connection has joined. Group membership lives here and
not in Session state: joining a session makes a connection a recipient of its
broadcasts without registering it.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class SessionConnectionManager:
    """
    Manages live connections and per-session broadcast groups.

    Sends to one connection are serialized through a per-connection lock, so
    every client observes frames in the order they were issued.
    """

    def __init__(self) -> None:
        # connection_id -> WebSocket
        self.active_websockets: dict[str, WebSocket] = {}
        # session code -> connection_ids (insertion ordered)
        self.session_subscriptions: dict[str, dict[str, None]] = {}
        self._send_locks: dict[str, asyncio.Lock] = {}
        self.sequence_counter = 0

    def next_sequence(self) -> int:
        self.sequence_counter += 1
        return self.sequence_counter

    def connect(self, connection_id: str, websocket: WebSocket) -> None:
        """Track an accepted WebSocket under its connection identifier."""
        self.active_websockets[connection_id] = websocket
        self._send_locks[connection_id] = asyncio.Lock()
        logger.debug("Connection tracked", connection_id=connection_id, active=len(self.active_websockets))

    def disconnect(self, connection_id: str) -> list[str]:
        """
        Forget a connection and remove it from every broadcast group.

        Safe to call more than once.

        Returns:
            Codes of the groups the connection was removed from
        """
        self.active_websockets.pop(connection_id, None)
        self._send_locks.pop(connection_id, None)
        left = [code for code in self.sessions_for(connection_id)]
        for code in left:
            self.leave_session_group(connection_id, code)
        logger.debug("Connection untracked", connection_id=connection_id, left_sessions=left)
        return left

    def join_session_group(self, connection_id: str, session_code: str) -> bool:
        """
        Add a connection to a session's broadcast group.

        Returns:
            True if the connection was not already a member
        """
        members = self.session_subscriptions.setdefault(session_code, {})
        if connection_id in members:
            return False
        members[connection_id] = None
        logger.debug("Connection joined session group", connection_id=connection_id, session_code=session_code)
        return True

    def leave_session_group(self, connection_id: str, session_code: str) -> None:
        members = self.session_subscriptions.get(session_code)
        if members is None:
            return
        members.pop(connection_id, None)
        if not members:
            del self.session_subscriptions[session_code]

    def drop_session_group(self, session_code: str) -> None:
        """Forget a whole broadcast group, e.g. after its session was reclaimed."""
        self.session_subscriptions.pop(session_code, None)

    def session_members(self, session_code: str) -> list[str]:
        return list(self.session_subscriptions.get(session_code, ()))

    def sessions_for(self, connection_id: str) -> list[str]:
        return [code for code, members in self.session_subscriptions.items() if connection_id in members]

    def get_active_connection_count(self) -> int:
        return len(self.active_websockets)

    async def send_personal_message(self, connection_id: str, event: dict[str, Any]) -> bool:
        """
        Send one event to one connection.

        Returns:
            True if the frame was handed to the WebSocket
        """
        websocket = self.active_websockets.get(connection_id)
        lock = self._send_locks.get(connection_id)
        if websocket is None or lock is None:
            logger.debug("No active WebSocket for connection", connection_id=connection_id)
            return False

        async with lock:
            if getattr(websocket, "application_state", None) == WebSocketState.DISCONNECTED:
                return False
            try:
                await websocket.send_json(event)
                return True
            except (RuntimeError, ConnectionError, WebSocketDisconnect) as ws_error:
                # Closed sockets are cleaned up by their own handler
                logger.warning(
                    "WebSocket send failed",
                    connection_id=connection_id,
                    event_type=event.get("event_type"),
                    error=str(ws_error),
                )
                return False

    async def broadcast_to_session(
        self, session_code: str, event: dict[str, Any], exclude_connection: str | None = None
    ) -> dict[str, Any]:
        """
        Send an event to every connection in a session's broadcast group.

        Recipients are fixed when the call is made.

        Returns:
            dict: Broadcast delivery statistics
        """
        targets = [cid for cid in self.session_members(session_code) if cid != exclude_connection]
        stats: dict[str, Any] = {
            "session_code": session_code,
            "total_targets": len(targets),
            "successful_deliveries": 0,
            "failed_deliveries": 0,
        }
        if not targets:
            return stats

        results = await asyncio.gather(
            *[self.send_personal_message(cid, event) for cid in targets],
            return_exceptions=True,
        )
        for cid, result in zip(targets, results, strict=True):
            if isinstance(result, Exception):
                logger.error(
                    "Error sending message in session broadcast",
                    connection_id=cid,
                    session_code=session_code,
                    error=str(result),
                )
                stats["failed_deliveries"] += 1
            elif result:
                stats["successful_deliveries"] += 1
            else:
                stats["failed_deliveries"] += 1

        logger.debug(
            "Session broadcast delivered",
            session_code=session_code,
            event_type=event.get("event_type"),
            successful=stats["successful_deliveries"],
            failed=stats["failed_deliveries"],
        )
        return stats

    async def close_all(self) -> None:
        """Close every tracked WebSocket (shutdown)."""
        for connection_id, websocket in list(self.active_websockets.items()):
            try:
                await websocket.close(code=1001)
            except (RuntimeError, ConnectionError) as e:
                logger.debug("WebSocket already closed at shutdown", connection_id=connection_id, error=str(e))
        self.active_websockets.clear()
        self._send_locks.clear()
        self.session_subscriptions.clear()
