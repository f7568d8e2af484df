"""
Session state machine.

Enforces admin semantics, stage transitions and roster rules on top of the
SessionStore. Every operation validates before it mutates and returns a plain
result; broadcasting the consequences is the realtime layer's job.
"""

from __future__ import annotations

from ..exceptions import (
    AlreadyRegisteredError,
    ErrorContext,
    InvalidNameError,
    MissingSessionIdError,
    NameTakenError,
    SessionNotFoundError,
    TeamConnectionsError,
    UnauthorizedActionError,
)
from ..error_types import ErrorMessages
from ..models.session import (
    NEXT_STAGE,
    DisconnectResult,
    Participant,
    RegistrationOutcome,
    RegistrationResult,
    Session,
    Stage,
)
from ..structured_logging.enhanced_logging_config import get_logger
from .session_store import SessionStore

logger = get_logger(__name__)


class SessionService:
    """
    Per-session state transitions.

    Admin-only operations raise UnauthorizedActionError for non-admins and
    SessionNotFoundError for unknown codes; callers treat both as no-ops.
    """

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    @property
    def max_name_length(self) -> int:
        return self.store.config.max_name_length

    def get_session(self, code: str | None, connection_id: str | None = None, command: str | None = None) -> Session:
        """
        Look up a session for a command.

        Raises:
            MissingSessionIdError: If no code was given
            SessionNotFoundError: If the code has no session
        """
        context = ErrorContext(connection_id=connection_id, session_code=code, command=command)
        if not code:
            raise MissingSessionIdError(context)
        session = self.store.get(code)
        if session is None:
            raise SessionNotFoundError(code, context)
        return session

    def create_session(self) -> str:
        """Create a session under a fresh code and return the code."""
        return self.store.create_session().id

    def join_session(self, code: str | None, connection_id: str | None = None) -> Session:
        """
        Resolve a session for joining, creating it on first reference.

        Joining never mutates an existing session.

        Raises:
            MissingSessionIdError: If no code was given
        """
        if not code:
            raise MissingSessionIdError(ErrorContext(connection_id=connection_id, command="joinSession"))
        return self.store.get_or_create(code)

    def register(self, code: str | None, connection_id: str, name: str, admin_only: bool = False) -> RegistrationResult:
        """
        Register a connection in a session.

        The first successful registrant becomes admin whether or not it joins
        the roster. Admin-only registrants are recorded as registered but get
        no roster or graph entry.

        Raises:
            MissingSessionIdError: If no code was given
            SessionNotFoundError: If the code has no session

        Returns:
            RegistrationResult; REJECTED results carry the validation error
        """
        session = self.get_session(code, connection_id, "registerParticipant")
        context = ErrorContext(connection_id=connection_id, session_code=session.id, command="registerParticipant")

        try:
            clean_name = self._validate_registration(session, connection_id, name, context)
        except TeamConnectionsError as error:
            return RegistrationResult(outcome=RegistrationOutcome.REJECTED, error=error)

        became_admin = False
        if session.admin_id is None:
            session.admin_id = connection_id
            became_admin = True

        participant = None
        if admin_only:
            outcome = RegistrationOutcome.ADMIN_ONLY
        else:
            participant = Participant(id=connection_id, name=clean_name, is_admin=session.admin_id == connection_id)
            session.participants.append(participant)
            session.connections.ensure(connection_id)
            outcome = RegistrationOutcome.PARTICIPANT

        session.registered_sockets.add(connection_id)

        logger.info(
            "Registration accepted",
            session_code=session.id,
            connection_id=connection_id,
            participant_name=clean_name,
            outcome=outcome.value,
            became_admin=became_admin,
            roster_size=len(session.participants),
        )
        return RegistrationResult(outcome=outcome, became_admin=became_admin, participant=participant)

    def _validate_registration(self, session: Session, connection_id: str, name: str, context: ErrorContext) -> str:
        if connection_id in session.registered_sockets:
            raise AlreadyRegisteredError(connection_id, context)

        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidNameError(ErrorMessages.NAME_REQUIRED, context)
        if len(clean_name) > self.max_name_length:
            raise InvalidNameError(ErrorMessages.NAME_TOO_LONG, context, details={"max_length": self.max_name_length})
        if session.name_in_use(clean_name):
            raise NameTakenError(clean_name, context)
        return clean_name

    def _require_admin(self, session: Session, connection_id: str, action: str) -> None:
        if not session.is_admin(connection_id):
            raise UnauthorizedActionError(
                action, ErrorContext(connection_id=connection_id, session_code=session.id, command=action)
            )

    def advance_page(self, code: str | None, connection_id: str) -> bool:
        """
        Move the session one stage forward (admin only).

        Returns:
            True if the stage changed. Advancing from visualization, or out
            of registration with an empty roster, leaves the state untouched.
        """
        session = self.get_session(code, connection_id, "advancePage")
        self._require_admin(session, connection_id, "advancePage")

        next_stage = NEXT_STAGE.get(session.current_page)
        if next_stage is None:
            logger.debug("advancePage ignored at final stage", session_code=session.id)
            return False
        if session.current_page is Stage.REGISTRATION and not session.participants:
            logger.info("advancePage rejected: no participants registered", session_code=session.id)
            return False

        previous = session.current_page
        session.current_page = next_stage
        logger.info("Stage advanced", session_code=session.id, from_stage=previous.value, to_stage=next_stage.value)
        return True

    def back_to_connections(self, code: str | None, connection_id: str) -> bool:
        """
        Force the connections stage from any stage (admin only).

        Returns:
            True if the stage changed
        """
        session = self.get_session(code, connection_id, "backToConnections")
        self._require_admin(session, connection_id, "backToConnections")

        if session.current_page is Stage.CONNECTIONS:
            return False
        previous = session.current_page
        session.current_page = Stage.CONNECTIONS
        logger.info("Stage moved back", session_code=session.id, from_stage=previous.value, to_stage="connections")
        return True

    def reset(self, code: str | None, connection_id: str) -> bool:
        """
        Clear roster, graph, registrations and admin (admin only).

        The code is kept and the idle clock restarts.
        """
        session = self.get_session(code, connection_id, "resetAll")
        self._require_admin(session, connection_id, "resetAll")

        cleared = len(session.participants)
        session.reset_state()
        session.created_at = self.store.now()
        logger.info("Session reset", session_code=session.id, cleared_participants=cleared)
        return True

    def disconnect(self, connection_id: str) -> list[DisconnectResult]:
        """
        Remove every trace of a connection from the sessions referencing it.

        If the connection held admin, the participant first in the remaining
        roster is promoted; with an empty roster admin becomes absent. Calling
        this again for the same connection is a no-op.
        """
        results = []
        for session in self.store.sessions_for_connection(connection_id):
            was_admin = session.admin_id == connection_id
            roster_before = len(session.participants)

            session.registered_sockets.discard(connection_id)
            session.participants = [p for p in session.participants if p.id != connection_id]
            session.connections.remove(connection_id)

            promoted = None
            if was_admin:
                if session.participants:
                    promoted = session.participants[0].id
                    session.admin_id = promoted
                else:
                    session.admin_id = None
            session.sync_admin_flags()

            result = DisconnectResult(
                session_code=session.id,
                removed_participant=len(session.participants) < roster_before,
                was_admin=was_admin,
                promoted_admin_id=promoted,
            )
            results.append(result)
            logger.info(
                "Connection removed from session",
                session_code=session.id,
                connection_id=connection_id,
                removed_participant=result.removed_participant,
                was_admin=was_admin,
                promoted_admin_id=promoted,
                roster_size=len(session.participants),
            )
        return results
