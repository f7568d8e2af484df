"""Session core services: store, state machine, connection graph operations and statistics."""

from .connection_service import ConnectionService
from .integration_stats import compute_integration_stats
from .session_service import SessionService
from .session_store import SessionStore

__all__ = ["ConnectionService", "SessionService", "SessionStore", "compute_integration_stats"]
