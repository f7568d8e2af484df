"""Data models for sessions, participants and the connection graph."""

from .connection_graph import ConnectionGraph
from .session import (
    NEXT_STAGE,
    DisconnectResult,
    Participant,
    RegistrationOutcome,
    RegistrationResult,
    Session,
    Stage,
)

__all__ = [
    "NEXT_STAGE",
    "ConnectionGraph",
    "DisconnectResult",
    "Participant",
    "RegistrationOutcome",
    "RegistrationResult",
    "Session",
    "Stage",
]
