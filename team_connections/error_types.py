"""
Centralized error types and constants for the Team Connections server.

Defines the error categories and user-facing messages shared by the session
core, the WebSocket protocol and the HTTP endpoints.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorType(Enum):
    """Standardized error types for consistent categorization."""

    # Session protocol
    MISSING_SESSION_ID = "missing_session_id"
    SESSION_NOT_FOUND = "session_not_found"
    ALREADY_REGISTERED = "already_registered"
    NAME_TAKEN = "name_taken"
    INVALID_NAME = "invalid_name"
    UNAUTHORIZED_ACTION = "unauthorized_action"
    INVALID_CONNECTION_TARGET = "invalid_connection_target"

    # Message handling
    INVALID_FORMAT = "invalid_format"
    INVALID_COMMAND = "invalid_command"
    MESSAGE_PROCESSING_ERROR = "message_processing_error"

    # System
    INTERNAL_ERROR = "internal_error"


class ErrorMessages:
    """Common error messages for consistent user experience."""

    MISSING_SESSION_ID = "Session ID is required"
    SESSION_NOT_FOUND = "Session not found"
    ALREADY_REGISTERED = "You have already registered. Please wait for the admin to advance."
    NAME_TAKEN = "This name is already being used. Please choose another one."
    NAME_REQUIRED = "Please enter your name."
    NAME_TOO_LONG = "This name is too long. Please choose a shorter one."
    UNAUTHORIZED_ACTION = "Only the admin can do that."
    INVALID_CONNECTION_TARGET = "You cannot connect with yourself."

    INVALID_FORMAT = "Invalid format provided"
    INVALID_COMMAND = "Invalid command"
    MESSAGE_PROCESSING_ERROR = "Error processing message"
    INTERNAL_ERROR = "An internal error occurred"


def create_standard_error_response(
    error_type: ErrorType,
    message: str,
    user_friendly: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a standardized HTTP error response body.

    Args:
        error_type: The type of error
        message: Technical error message
        user_friendly: User-friendly error message (optional)
        details: Additional error details (optional)

    Returns:
        Standardized error response dictionary
    """
    return {
        "error": {
            "type": error_type.value,
            "message": message,
            "user_friendly": user_friendly or message,
            "details": details or {},
            "timestamp": datetime.now(UTC).isoformat(),
        }
    }


def create_websocket_error_response(
    error_type: ErrorType,
    message: str,
    user_friendly: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a standardized WebSocket error frame.

    Args:
        error_type: The type of error
        message: Technical error message
        user_friendly: User-friendly error message (optional)
        details: Additional error details (optional)

    Returns:
        WebSocket error response dictionary
    """
    return {
        "event_type": "error",
        "error_type": error_type.value,
        "message": message,
        "user_friendly": user_friendly or message,
        "details": details or {},
    }
