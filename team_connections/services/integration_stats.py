"""
Integration statistics for the visualization stage.

Only edges between roster participants are counted, so stray graph entries
left by non-participants never inflate the figures.
"""

from __future__ import annotations

from ..models.session import Session
from ..schemas.statistics import IntegrationStatistics, ParticipantIntegration

# Lower bounds in percent, checked from the top down
INTEGRATION_LEVELS: tuple[tuple[float, str], ...] = (
    (80.0, "very_high"),
    (60.0, "high"),
    (40.0, "medium"),
    (20.0, "low"),
)


def integration_level(rate: float) -> str:
    """Map an integration rate in percent to its level bucket."""
    for threshold, level in INTEGRATION_LEVELS:
        if rate >= threshold:
            return level
    return "very_low"


def compute_integration_stats(session: Session) -> IntegrationStatistics:
    """
    Compute team and per-participant integration for a session.

    Args:
        session: Session whose roster and connection graph are measured

    Returns:
        IntegrationStatistics with participants ordered by rate, highest first
    """
    roster_ids = {participant.id for participant in session.participants}
    count = len(session.participants)
    possible = count * (count - 1) // 2

    entries = []
    degree_total = 0
    for participant in session.participants:
        degree = sum(1 for neighbour in session.connections.neighbours(participant.id) if neighbour in roster_ids)
        degree_total += degree
        rate = degree / (count - 1) * 100 if count > 1 else 0.0
        entries.append(
            ParticipantIntegration(
                id=participant.id,
                name=participant.name,
                connections=degree,
                integrationRate=rate,
                level=integration_level(rate),
            )
        )

    actual = degree_total // 2
    team_rate = actual / possible * 100 if possible else 0.0
    # sorted() is stable, so ties keep roster order
    entries = sorted(entries, key=lambda entry: entry.integrationRate, reverse=True)

    return IntegrationStatistics(
        sessionId=session.id,
        participantCount=count,
        possibleConnections=possible,
        actualConnections=actual,
        teamIntegrationRate=team_rate,
        teamLevel=integration_level(team_rate),
        participants=entries,
    )
