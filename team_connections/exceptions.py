"""
Exception hierarchy for the Team Connections server.

Every error raised by the session core derives from TeamConnectionsError so the
realtime layer can translate it into a message for the originating connection.
Validation always happens before mutation, so raising one of these never
leaves a session half-updated.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .error_types import ErrorMessages, ErrorType
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Contextual information attached to every error for logging."""

    connection_id: str | None = None
    session_code: str | None = None
    command: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "connection_id": self.connection_id,
            "session_code": self.session_code,
            "command": self.command,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class TeamConnectionsError(Exception):
    """
    Base exception for all Team Connections errors.

    Provides structured error handling with context and metadata
    for proper error categorization and debugging.
    """

    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    log_level: str = "warning"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        """
        Initialize the error.

        Args:
            message: Technical error message
            context: Error context information
            details: Additional error details
            user_friendly: Message shown to the client
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.user_friendly = user_friendly or message
        self.timestamp = datetime.now(UTC)

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with structured context."""
        log_method = getattr(logger, self.log_level, logger.warning)
        log_method(
            "Team Connections error occurred",
            error_type=self.__class__.__name__,
            message=self.message,
            context=self.context.to_dict(),
            details=self.details,
        )
        self.already_logged = True

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class MissingSessionIdError(TeamConnectionsError):
    """A command arrived without the session code it needs."""

    error_type = ErrorType.MISSING_SESSION_ID

    def __init__(self, context: ErrorContext | None = None, **kwargs):
        super().__init__(ErrorMessages.MISSING_SESSION_ID, context, **kwargs)


class SessionNotFoundError(TeamConnectionsError):
    """A command referenced a code with no live session."""

    error_type = ErrorType.SESSION_NOT_FOUND
    log_level = "info"

    def __init__(self, session_code: str, context: ErrorContext | None = None, **kwargs):
        self.session_code = session_code
        super().__init__(
            f"Session {session_code} not found",
            context,
            details={"session_code": session_code},
            user_friendly=ErrorMessages.SESSION_NOT_FOUND,
            **kwargs,
        )


class AlreadyRegisteredError(TeamConnectionsError):
    """The connection already completed registration in this session."""

    error_type = ErrorType.ALREADY_REGISTERED

    def __init__(self, connection_id: str, context: ErrorContext | None = None, **kwargs):
        self.connection_id = connection_id
        super().__init__(
            f"Connection {connection_id} already registered",
            context,
            details={"connection_id": connection_id},
            user_friendly=ErrorMessages.ALREADY_REGISTERED,
            **kwargs,
        )


class NameTakenError(TeamConnectionsError):
    """Another participant in the session already uses this name."""

    error_type = ErrorType.NAME_TAKEN

    def __init__(self, name: str, context: ErrorContext | None = None, **kwargs):
        self.name = name
        super().__init__(
            f"Name {name!r} already in use",
            context,
            details={"name": name},
            user_friendly=ErrorMessages.NAME_TAKEN,
            **kwargs,
        )


class InvalidNameError(TeamConnectionsError):
    """The submitted name is empty after trimming or too long."""

    error_type = ErrorType.INVALID_NAME

    def __init__(self, reason: str, context: ErrorContext | None = None, **kwargs):
        super().__init__(reason, context, user_friendly=reason, **kwargs)


class UnauthorizedActionError(TeamConnectionsError):
    """A non-admin connection attempted an admin-only command."""

    error_type = ErrorType.UNAUTHORIZED_ACTION
    log_level = "debug"

    def __init__(self, action: str, context: ErrorContext | None = None, **kwargs):
        self.action = action
        super().__init__(
            f"Action {action!r} requires admin",
            context,
            details={"action": action},
            user_friendly=ErrorMessages.UNAUTHORIZED_ACTION,
            **kwargs,
        )


class InvalidConnectionTargetError(TeamConnectionsError):
    """A toggle targeted the calling connection itself."""

    error_type = ErrorType.INVALID_CONNECTION_TARGET

    def __init__(self, target_id: str, context: ErrorContext | None = None, **kwargs):
        self.target_id = target_id
        super().__init__(
            f"Invalid connection target {target_id!r}",
            context,
            details={"target_id": target_id},
            user_friendly=ErrorMessages.INVALID_CONNECTION_TARGET,
            **kwargs,
        )
