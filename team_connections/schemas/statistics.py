"""Response schemas for the HTTP read endpoints."""

from pydantic import BaseModel, Field


class ParticipantIntegration(BaseModel):
    """Integration figures for one participant."""

    id: str
    name: str
    connections: int = Field(..., ge=0, description="Number of mutual connections")
    integrationRate: float = Field(..., ge=0.0, le=100.0, description="Share of possible connections, in percent")
    level: str = Field(..., description="Bucket: very_low, low, medium, high or very_high")


class IntegrationStatistics(BaseModel):
    """Team-level integration statistics for the visualization stage."""

    sessionId: str
    participantCount: int
    possibleConnections: int
    actualConnections: int
    teamIntegrationRate: float
    teamLevel: str
    participants: list[ParticipantIntegration]


class HealthResponse(BaseModel):
    status: str
    active_sessions: int
    active_connections: int
