"""
Session state model.

A Session is the authoritative, in-memory state of one activity instance:
roster, connection graph, current stage, admin and registration bookkeeping.
Mutation rules live in services.session_service; this module only holds data
and read helpers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import TeamConnectionsError
from .connection_graph import ConnectionGraph


class Stage(str, Enum):
    """Workflow stages, in the order an admin advances through them."""

    REGISTRATION = "registration"
    CONNECTIONS = "connections"
    VISUALIZATION = "visualization"


# Forward transitions performed by advance_page
NEXT_STAGE: dict[Stage, Stage] = {
    Stage.REGISTRATION: Stage.CONNECTIONS,
    Stage.CONNECTIONS: Stage.VISUALIZATION,
}


class RegistrationOutcome(str, Enum):
    """Result of a registration attempt."""

    PARTICIPANT = "participant"
    ADMIN_ONLY = "admin_only"
    REJECTED = "rejected"


@dataclass
class Participant:
    """A registered, roster-visible member of a session."""

    id: str
    name: str
    is_admin: bool = False


@dataclass
class Session:
    """
    State of one session, keyed by its code.

    Attributes:
        id: Session code
        participants: Roster in registration order
        connections: Symmetric connection graph over participant ids
        current_page: Current workflow stage
        admin_id: Connection id of the admin, if any
        registered_sockets: Connection ids that completed registration,
            including admin-only registrants; never sent to clients
        created_at: Creation time from the store's clock
    """

    id: str
    created_at: float
    participants: list[Participant] = field(default_factory=list)
    connections: ConnectionGraph = field(default_factory=ConnectionGraph)
    current_page: Stage = Stage.REGISTRATION
    admin_id: str | None = None
    registered_sockets: set[str] = field(default_factory=set)

    def find_participant(self, connection_id: str) -> Participant | None:
        for participant in self.participants:
            if participant.id == connection_id:
                return participant
        return None

    def has_participant(self, connection_id: str) -> bool:
        return self.find_participant(connection_id) is not None

    def name_in_use(self, name: str) -> bool:
        """Case-insensitive, whitespace-insensitive name lookup."""
        folded = name.strip().casefold()
        return any(p.name.strip().casefold() == folded for p in self.participants)

    def references(self, connection_id: str) -> bool:
        """True when the connection is registered, on the roster or in the graph."""
        return (
            connection_id in self.registered_sockets
            or connection_id in self.connections
            or self.has_participant(connection_id)
            or self.admin_id == connection_id
        )

    def is_admin(self, connection_id: str) -> bool:
        return self.admin_id is not None and self.admin_id == connection_id

    def is_empty(self) -> bool:
        return not self.participants

    def awaiting_first_user(self) -> bool:
        """No admin and nobody on the roster: the next registrant becomes admin."""
        return self.admin_id is None and not self.participants

    def sync_admin_flags(self) -> None:
        """Recompute every participant's is_admin from admin_id."""
        for participant in self.participants:
            participant.is_admin = participant.id == self.admin_id

    def reset_state(self) -> None:
        """Return to the initial empty state, keeping the code."""
        self.participants = []
        self.connections.clear()
        self.current_page = Stage.REGISTRATION
        self.admin_id = None
        self.registered_sockets = set()


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of SessionService.register."""

    outcome: RegistrationOutcome
    became_admin: bool = False
    participant: Participant | None = None
    error: TeamConnectionsError | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is not RegistrationOutcome.REJECTED


@dataclass(frozen=True)
class DisconnectResult:
    """Per-session effect of a connection going away."""

    session_code: str
    removed_participant: bool
    was_admin: bool
    promoted_admin_id: str | None = None
