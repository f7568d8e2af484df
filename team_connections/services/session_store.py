"""
Process-wide registry of live sessions.

The store is created by the application lifespan and handed to the services
that need it; nothing in the package reaches it through module globals.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable, Iterator

from ..config.models import SessionConfig
from ..models.session import Session
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class SessionStore:
    """
    Maps session codes to Session state.

    Owns creation, lookup and idle reclamation. All methods are synchronous
    and are only called from the event loop thread.
    """

    def __init__(self, config: SessionConfig | None = None, clock: Callable[[], float] = time.time) -> None:
        """
        Initialize the store.

        Args:
            config: Code format and retention settings
            clock: Time source in seconds; injectable for tests
        """
        self.config = config or SessionConfig()
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, code: object) -> bool:
        return code in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def codes(self) -> list[str]:
        return list(self._sessions)

    def now(self) -> float:
        return self._clock()

    def generate_code(self) -> str:
        """
        Draw a random code from the configured alphabet.

        Codes already in the store are redrawn; no other uniqueness guarantee
        is made.
        """
        alphabet = self.config.code_alphabet
        while True:
            code = "".join(secrets.choice(alphabet) for _ in range(self.config.code_length))
            if code not in self._sessions:
                return code
            logger.debug("Generated session code collided, redrawing", session_code=code)

    def get(self, code: str) -> Session | None:
        return self._sessions.get(code)

    def get_or_create(self, code: str) -> Session:
        """Return the session for ``code``, creating a zero-state one if absent."""
        session = self._sessions.get(code)
        if session is None:
            session = Session(id=code, created_at=self._clock())
            self._sessions[code] = session
            logger.info("Session created", session_code=code, active_sessions=len(self._sessions))
        return session

    def create_session(self) -> Session:
        return self.get_or_create(self.generate_code())

    def remove(self, code: str) -> bool:
        removed = self._sessions.pop(code, None) is not None
        if removed:
            logger.info("Session removed", session_code=code, active_sessions=len(self._sessions))
        return removed

    def sessions_for_connection(self, connection_id: str) -> list[Session]:
        """Every session whose state references the connection."""
        return [session for session in self._sessions.values() if session.references(connection_id)]

    def sweep_idle(self, now: float | None = None) -> list[str]:
        """
        Remove empty sessions older than the retention window.

        Sessions with at least one participant are kept regardless of age.

        Args:
            now: Reference time; defaults to the store's clock

        Returns:
            Codes of the removed sessions
        """
        reference = self._clock() if now is None else now
        retention = self.config.retention_seconds
        expired = [
            code
            for code, session in self._sessions.items()
            if session.is_empty() and reference - session.created_at > retention
        ]
        for code in expired:
            del self._sessions[code]

        if expired:
            logger.info(
                "Idle sessions reclaimed",
                removed=len(expired),
                session_codes=expired,
                active_sessions=len(self._sessions),
            )
        return expired

    def clear(self) -> None:
        count = len(self._sessions)
        self._sessions.clear()
        logger.info("Session store cleared", removed=count)
