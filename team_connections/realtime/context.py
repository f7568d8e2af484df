"""Bundle of services the WebSocket handlers act on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.connection_service import ConnectionService
    from ..services.session_service import SessionService
    from ..services.session_store import SessionStore
    from .connection_manager import SessionConnectionManager


@dataclass
class RealtimeServices:
    """Created once by the application lifespan and stored on ``app.state``."""

    store: SessionStore
    session_service: SessionService
    connection_service: ConnectionService
    connection_manager: SessionConnectionManager
