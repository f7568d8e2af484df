"""
WebSocket connection handling for the session protocol.

One coroutine serves each WebSocket for its whole life: it assigns the
connection identifier, runs the receive/validate/dispatch loop and performs
disconnect cleanup when the socket goes away for any reason.
"""

import uuid

from fastapi import WebSocket, WebSocketDisconnect

from ..error_types import ErrorMessages, ErrorType, create_websocket_error_response
from ..structured_logging.enhanced_logging_config import get_logger, log_exception_once
from ..structured_logging.logging_context import bind_connection_context, clear_connection_context
from . import session_handlers
from .context import RealtimeServices
from .message_handler_factory import message_handler_factory
from .message_validator import MessageValidationError, WebSocketMessageValidator

logger = get_logger(__name__)


def new_connection_id() -> str:
    """Opaque, per-attachment identifier; reconnects always get a new one."""
    return uuid.uuid4().hex


async def _handle_websocket_message_loop(
    websocket: WebSocket, connection_id: str, services: RealtimeServices, validator: WebSocketMessageValidator
) -> None:
    """Receive frames until the client goes away."""
    manager = services.connection_manager

    while True:
        try:
            data = await websocket.receive_text()

            try:
                message = validator.parse_and_validate(data, connection_id)
            except MessageValidationError as e:
                logger.warning(
                    "Message validation failed",
                    connection_id=connection_id,
                    error_type=e.error_type,
                    error_message=e.message,
                )
                error_response = create_websocket_error_response(
                    ErrorType.INVALID_FORMAT,
                    f"Message validation failed: {e.message}",
                    ErrorMessages.INVALID_FORMAT,
                    {"error_type": e.error_type},
                )
                await manager.send_personal_message(connection_id, error_response)
                continue

            await message_handler_factory.handle_message(services, connection_id, message.type, message.data)

        except WebSocketDisconnect:
            logger.info("WebSocket disconnected", connection_id=connection_id)
            break

        except RuntimeError as e:
            error_message = str(e)
            if "WebSocket is not connected" in error_message or 'Need to call "accept" first' in error_message:
                logger.warning("WebSocket connection lost (not connected)", connection_id=connection_id)
                break
            raise

        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: keep the connection alive after a handler bug
            log_exception_once(
                logger,
                "error",
                "Error handling WebSocket message",
                exc=e,
                connection_id=connection_id,
                exc_info=True,
            )
            error_response = create_websocket_error_response(
                ErrorType.INTERNAL_ERROR,
                f"Internal server error: {type(e).__name__}",
                ErrorMessages.INTERNAL_ERROR,
                {"connection_id": connection_id},
            )
            await manager.send_personal_message(connection_id, error_response)


async def handle_websocket_connection(
    websocket: WebSocket, services: RealtimeServices, max_message_size: int | None = None
) -> None:
    """
    Serve one WebSocket from accept to cleanup.

    Args:
        websocket: The WebSocket connection, not yet accepted
        services: Session core and connection manager
        max_message_size: Frame size limit in bytes
    """
    connection_id = new_connection_id()
    manager = services.connection_manager
    validator = WebSocketMessageValidator(max_message_size=max_message_size)

    await websocket.accept()
    manager.connect(connection_id, websocket)
    bind_connection_context(connection_id=connection_id)
    logger.info("WebSocket connected", connection_id=connection_id, active=manager.get_active_connection_count())

    try:
        await session_handlers.send_connected(services, connection_id)
        await _handle_websocket_message_loop(websocket, connection_id, services, validator)
    finally:
        await session_handlers.handle_disconnect(services, connection_id)
        logger.info("WebSocket cleaned up", connection_id=connection_id)
        clear_connection_context()
