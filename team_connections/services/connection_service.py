"""Connection toggling between participants of one session."""

from __future__ import annotations

from ..exceptions import ErrorContext, InvalidConnectionTargetError, MissingSessionIdError, SessionNotFoundError
from ..structured_logging.enhanced_logging_config import get_logger
from .session_store import SessionStore

logger = get_logger(__name__)


class ConnectionService:
    """Applies toggleConnection commands to a session's connection graph."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def toggle(self, code: str | None, source_id: str, target_id: str) -> dict[str, list[str]]:
        """
        Flip the mutual connection between ``source_id`` and ``target_id``.

        Either endpoint without a graph entry gets an empty one first.

        Raises:
            MissingSessionIdError: If no code was given
            SessionNotFoundError: If the code has no session
            InvalidConnectionTargetError: If a participant targets itself

        Returns:
            Snapshot of the whole connections mapping after the toggle
        """
        context = ErrorContext(connection_id=source_id, session_code=code, command="toggleConnection")
        if not code:
            raise MissingSessionIdError(context)
        session = self.store.get(code)
        if session is None:
            raise SessionNotFoundError(code, context)
        if source_id == target_id:
            raise InvalidConnectionTargetError(target_id, context)

        connected = session.connections.toggle(source_id, target_id)
        logger.debug(
            "Connection toggled",
            session_code=code,
            source_id=source_id,
            target_id=target_id,
            connected=connected,
            edge_count=session.connections.edge_count(),
        )
        return session.connections.to_dict()
