"""
Handlers for the session synchronization protocol.

Each handler validates and mutates session state synchronously, builds the
outbound events from the resulting state, and only then awaits any sends, so
a broadcast always reflects the mutation that produced it.
"""

from __future__ import annotations

from typing import Any

from ..error_types import create_websocket_error_response
from ..exceptions import (
    InvalidConnectionTargetError,
    MissingSessionIdError,
    SessionNotFoundError,
    TeamConnectionsError,
    UnauthorizedActionError,
)
from ..models.session import Session
from ..schemas.realtime import (
    AppStatePayload,
    ConnectedPayload,
    ConnectionsUpdatePayload,
    JoinSessionData,
    MessagePayload,
    RegisterParticipantData,
    SessionCommandData,
    SessionIdPayload,
    StatusPayload,
    ToggleConnectionData,
)
from ..structured_logging.enhanced_logging_config import get_logger
from ..structured_logging.logging_context import bind_connection_context
from .context import RealtimeServices
from .envelope import build_event

logger = get_logger(__name__)


def app_state_event(services: RealtimeServices, session: Session) -> dict[str, Any]:
    return build_event(
        "appState",
        AppStatePayload.from_session(session),
        session_id=session.id,
        connection_manager=services.connection_manager,
    )


def first_user_status_event(services: RealtimeServices, session: Session) -> dict[str, Any]:
    return build_event(
        "firstUserStatus",
        StatusPayload(status=session.awaiting_first_user()),
        session_id=session.id,
        connection_manager=services.connection_manager,
    )


def admin_status_event(services: RealtimeServices, session_code: str) -> dict[str, Any]:
    return build_event(
        "adminStatus",
        StatusPayload(status=True),
        session_id=session_code,
        connection_manager=services.connection_manager,
    )


def error_event(error: TeamConnectionsError) -> dict[str, Any]:
    return create_websocket_error_response(
        error.error_type,
        error.message,
        error.user_friendly,
        error.details,
    )


async def send_connected(services: RealtimeServices, connection_id: str) -> None:
    event = build_event(
        "connected",
        ConnectedPayload(connectionId=connection_id),
        connection_manager=services.connection_manager,
    )
    await services.connection_manager.send_personal_message(connection_id, event)


async def handle_create_session(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """createSession: allocate a fresh code and hand it back to the caller."""
    code = services.session_service.create_session()
    logger.info("Session created on request", connection_id=connection_id, session_code=code)
    event = build_event(
        "sessionCreated",
        SessionIdPayload(sessionId=code),
        session_id=code,
        connection_manager=services.connection_manager,
    )
    await services.connection_manager.send_personal_message(connection_id, event)


async def handle_join_session(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """
    joinSession: attach the caller to a session's broadcast group.

    The caller receives the current snapshot, the first-user hint and a join
    confirmation. A missing session id is answered with sessionError.
    """
    payload = JoinSessionData.model_validate(data)
    manager = services.connection_manager
    try:
        session = services.session_service.join_session(payload.sessionId, connection_id)
    except MissingSessionIdError as e:
        event = build_event("sessionError", MessagePayload(message=e.message), connection_manager=manager)
        await manager.send_personal_message(connection_id, event)
        return

    manager.join_session_group(connection_id, session.id)
    bind_connection_context(session_code=session.id)
    events = [
        app_state_event(services, session),
        first_user_status_event(services, session),
        build_event(
            "sessionJoined", SessionIdPayload(sessionId=session.id), session_id=session.id, connection_manager=manager
        ),
    ]
    for event in events:
        await manager.send_personal_message(connection_id, event)


async def handle_register_participant(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """
    registerParticipant: add the caller to the roster or as admin-only.

    Rejections go to the caller only. On success the new snapshot is
    broadcast first, then the caller gets adminStatus (if it holds admin)
    and registrationSuccess.
    """
    payload = RegisterParticipantData.model_validate(data)
    manager = services.connection_manager
    result = services.session_service.register(payload.sessionId, connection_id, payload.name, payload.isAdminOnly)

    if not result.accepted:
        event = build_event(
            "registrationError",
            MessagePayload(message=result.error.user_friendly),
            session_id=payload.sessionId,
            connection_manager=manager,
        )
        await manager.send_personal_message(connection_id, event)
        return

    session = services.store.get(payload.sessionId)
    manager.join_session_group(connection_id, session.id)
    state_event = app_state_event(services, session)
    personal = []
    if session.is_admin(connection_id):
        personal.append(admin_status_event(services, session.id))
    personal.append(build_event("registrationSuccess", session_id=session.id, connection_manager=manager))

    await manager.broadcast_to_session(session.id, state_event)
    for event in personal:
        await manager.send_personal_message(connection_id, event)


async def handle_advance_page(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """advancePage: move one stage forward; broadcast only on change."""
    payload = SessionCommandData.model_validate(data)
    if not services.session_service.advance_page(payload.sessionId, connection_id):
        return
    session = services.store.get(payload.sessionId)
    await services.connection_manager.broadcast_to_session(session.id, app_state_event(services, session))


async def handle_back_to_connections(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """backToConnections: return to the connections stage; broadcast only on change."""
    payload = SessionCommandData.model_validate(data)
    if not services.session_service.back_to_connections(payload.sessionId, connection_id):
        return
    session = services.store.get(payload.sessionId)
    await services.connection_manager.broadcast_to_session(session.id, app_state_event(services, session))


async def handle_toggle_connection(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """toggleConnection: flip a mutual connection and broadcast the graph only."""
    payload = ToggleConnectionData.model_validate(data)
    manager = services.connection_manager
    connections = services.connection_service.toggle(payload.sessionId, connection_id, payload.targetParticipantId)
    event = build_event(
        "connectionsUpdate",
        ConnectionsUpdatePayload(connections=connections),
        session_id=payload.sessionId,
        connection_manager=manager,
    )
    await manager.broadcast_to_session(payload.sessionId, event)


async def handle_reset_all(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    """resetAll: clear the session and tell every member to start over."""
    payload = SessionCommandData.model_validate(data)
    manager = services.connection_manager
    services.session_service.reset(payload.sessionId, connection_id)
    session = services.store.get(payload.sessionId)
    events = [
        app_state_event(services, session),
        build_event("resetComplete", session_id=session.id, connection_manager=manager),
        first_user_status_event(services, session),
    ]
    for event in events:
        await manager.broadcast_to_session(session.id, event)


async def handle_ping(services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
    await services.connection_manager.send_personal_message(
        connection_id, build_event("pong", connection_manager=services.connection_manager)
    )


async def handle_command_error(services: RealtimeServices, connection_id: str, error: TeamConnectionsError) -> None:
    """
    Report a session-core error to the originating connection.

    Unauthorized actions and unknown sessions are silent no-ops; a missing
    session id is answered with sessionError and a bad toggle target with
    connectionError. Anything else gets a generic error frame.
    """
    manager = services.connection_manager
    if isinstance(error, (UnauthorizedActionError, SessionNotFoundError)):
        return
    if isinstance(error, MissingSessionIdError):
        event = build_event("sessionError", MessagePayload(message=error.message), connection_manager=manager)
    elif isinstance(error, InvalidConnectionTargetError):
        event = build_event(
            "connectionError",
            MessagePayload(message=error.user_friendly),
            session_id=error.context.session_code,
            connection_manager=manager,
        )
    else:
        event = error_event(error)
    await manager.send_personal_message(connection_id, event)


async def handle_disconnect(services: RealtimeServices, connection_id: str) -> None:
    """
    Clean up after a closed WebSocket.

    Removes the connection from every session that references it and from
    every broadcast group, then sends each affected session its new snapshot
    and notifies promoted admins. Idempotent.
    """
    manager = services.connection_manager
    results = services.session_service.disconnect(connection_id)
    manager.disconnect(connection_id)

    outbound = []
    for result in results:
        session = services.store.get(result.session_code)
        if session is None:
            continue
        outbound.append((session.id, app_state_event(services, session), result.promoted_admin_id))

    for session_code, state_event, promoted in outbound:
        await manager.broadcast_to_session(session_code, state_event)
        if promoted is not None:
            await manager.send_personal_message(promoted, admin_status_event(services, session_code))
            logger.info("Admin promoted after disconnect", session_code=session_code, promoted_admin_id=promoted)
