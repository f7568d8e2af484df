"""
Pydantic schemas for WebSocket messages.

Inbound command payloads are validated here before they reach the session
core; outbound snapshots are built here from Session objects so the wire
shape is fixed in one place. Field names follow the client's camelCase.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.session import Session, Stage


class InboundMessage(BaseModel):
    """Outer frame of every client message: ``{"type": ..., "data": {...}}``."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    type: str = Field(..., min_length=1, max_length=64, description="Command name")
    data: dict[str, Any] = Field(default_factory=dict, description="Command payload")

    @field_validator("data", mode="before")
    @classmethod
    def default_data(cls, v: Any) -> Any:
        # Clients send `data: null` for commands without arguments
        return {} if v is None else v


class SessionCommandData(BaseModel):
    """Payload shared by every command that targets an existing session."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    sessionId: str | None = Field(None, max_length=32, description="Session code")

    @field_validator("sessionId")
    @classmethod
    def normalize_session_id(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.upper()
        return v or None


class JoinSessionData(SessionCommandData):
    """Payload of joinSession."""


class RegisterParticipantData(SessionCommandData):
    """Payload of registerParticipant."""

    name: str = Field(default="", max_length=200, description="Display name")
    isAdminOnly: bool = Field(default=False, description="Register as admin without joining the roster")


class ToggleConnectionData(SessionCommandData):
    """Payload of toggleConnection."""

    targetParticipantId: str = Field(..., min_length=1, max_length=128, description="Participant to (dis)connect")


class ParticipantPayload(BaseModel):
    """Roster entry as seen by clients."""

    id: str
    name: str
    isAdmin: bool


class AppStatePayload(BaseModel):
    """Full session snapshot broadcast as ``appState``."""

    id: str
    participants: list[ParticipantPayload]
    connections: dict[str, list[str]]
    currentPage: Stage
    adminId: str | None

    @classmethod
    def from_session(cls, session: Session) -> AppStatePayload:
        return cls(
            id=session.id,
            participants=[
                ParticipantPayload(id=p.id, name=p.name, isAdmin=p.id == session.admin_id)
                for p in session.participants
            ],
            connections=session.connections.to_dict(),
            currentPage=session.current_page,
            adminId=session.admin_id,
        )


class ConnectionsUpdatePayload(BaseModel):
    """Connections-only broadcast sent after a toggle."""

    connections: dict[str, list[str]]


class SessionIdPayload(BaseModel):
    sessionId: str


class StatusPayload(BaseModel):
    status: bool


class MessagePayload(BaseModel):
    message: str


class ConnectedPayload(BaseModel):
    connectionId: str
