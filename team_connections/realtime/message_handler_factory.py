"""
Message Handler Factory for WebSocket message routing.

Maps the ``type`` of an inbound frame to the handler for that command, so
adding a command means registering one handler instead of growing an if/elif
chain.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from ..error_types import ErrorMessages, ErrorType, create_websocket_error_response
from ..exceptions import TeamConnectionsError
from ..structured_logging.enhanced_logging_config import get_logger
from . import session_handlers
from .context import RealtimeServices

logger = get_logger(__name__)

HandlerFunc = Callable[[RealtimeServices, str, dict[str, Any]], Awaitable[None]]


class MessageHandler(ABC):
    """Abstract base class for message handlers."""

    @abstractmethod
    async def handle(self, services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
        """
        Handle a specific message type.

        Args:
            services: Session core and connection manager
            connection_id: The sender's connection identifier
            data: The message payload
        """


class SessionCommandHandler(MessageHandler):
    """Delegates a session command to its protocol function."""

    def __init__(self, func: HandlerFunc):
        self.func = func

    async def handle(self, services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
        await self.func(services, connection_id, data)


class PingMessageHandler(MessageHandler):
    """Handler for ping messages."""

    async def handle(self, services: RealtimeServices, connection_id: str, data: dict[str, Any]) -> None:
        await session_handlers.handle_ping(services, connection_id, data)


class MessageHandlerFactory:
    """Factory for creating and managing message handlers."""

    def __init__(self):
        self._handlers: dict[str, MessageHandler] = {
            "createSession": SessionCommandHandler(session_handlers.handle_create_session),
            "joinSession": SessionCommandHandler(session_handlers.handle_join_session),
            "registerParticipant": SessionCommandHandler(session_handlers.handle_register_participant),
            "advancePage": SessionCommandHandler(session_handlers.handle_advance_page),
            "backToConnections": SessionCommandHandler(session_handlers.handle_back_to_connections),
            "toggleConnection": SessionCommandHandler(session_handlers.handle_toggle_connection),
            "resetAll": SessionCommandHandler(session_handlers.handle_reset_all),
            "ping": PingMessageHandler(),
        }

    def register_handler(self, message_type: str, handler: MessageHandler) -> None:
        """
        Register a new message handler.

        Args:
            message_type: The message type to handle
            handler: The handler instance
        """
        self._handlers[message_type] = handler
        logger.debug("Registered handler for message type", message_type=message_type)

    def get_handler(self, message_type: str) -> MessageHandler | None:
        return self._handlers.get(message_type)

    async def handle_message(
        self, services: RealtimeServices, connection_id: str, message_type: str, data: dict[str, Any]
    ) -> None:
        """
        Route one validated frame to its handler.

        Unknown types and payloads that fail their schema get an error frame;
        session-core errors are reported by the protocol rules. None of these
        mutate state.
        """
        manager = services.connection_manager
        handler = self.get_handler(message_type)
        if handler is None:
            logger.warning("Unknown message type", message_type=message_type, connection_id=connection_id)
            error_response = create_websocket_error_response(
                ErrorType.INVALID_COMMAND,
                f"Unknown message type: {message_type}",
                ErrorMessages.INVALID_COMMAND,
                {"message_type": message_type},
            )
            await manager.send_personal_message(connection_id, error_response)
            return

        try:
            await handler.handle(services, connection_id, data)
        except ValidationError as e:
            logger.warning(
                "Command payload failed validation",
                message_type=message_type,
                connection_id=connection_id,
                errors=e.errors(include_url=False, include_context=False),
            )
            error_response = create_websocket_error_response(
                ErrorType.INVALID_FORMAT,
                f"Invalid payload for {message_type}",
                ErrorMessages.INVALID_FORMAT,
                {"message_type": message_type},
            )
            await manager.send_personal_message(connection_id, error_response)
        except TeamConnectionsError as e:
            await session_handlers.handle_command_error(services, connection_id, e)

    def get_supported_message_types(self) -> list[str]:
        return list(self._handlers.keys())


message_handler_factory = MessageHandlerFactory()
