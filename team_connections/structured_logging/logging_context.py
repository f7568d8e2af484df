"""
Context management utilities for enhanced logging.

Each WebSocket handler binds its connection identifier (and, once known, the
session code) so every log entry emitted while serving it carries them.
"""

from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, unbind_contextvars


def bind_connection_context(
    connection_id: str | None = None,
    session_code: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Bind connection context to the current logging context.

    Args:
        connection_id: Transport-assigned connection identifier
        session_code: Session code the connection is acting on
        **kwargs: Additional context variables
    """
    context_vars = {
        "connection_id": connection_id,
        "session_code": session_code,
        **kwargs,
    }

    # Remove None values
    context_vars = {k: v for k, v in context_vars.items() if v is not None}

    bind_contextvars(**context_vars)


def unbind_session_context() -> None:
    """Drop the session code while keeping the connection identifier."""
    unbind_contextvars("session_code")


def clear_connection_context() -> None:
    """Clear the current connection context from logging."""
    clear_contextvars()


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    return structlog.contextvars.get_contextvars()
