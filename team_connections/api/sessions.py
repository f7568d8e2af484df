"""
Read-only HTTP endpoints for session state.

These never mutate a session; all mutation goes through the WebSocket
protocol.
"""

from fastapi import APIRouter

from ..dependencies import RealtimeServicesDep, SessionServiceDep
from ..schemas.realtime import AppStatePayload
from ..schemas.statistics import HealthResponse, IntegrationStatistics
from ..services.integration_stats import compute_integration_stats
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

session_router = APIRouter(prefix="/api/sessions", tags=["sessions"])
health_router = APIRouter(tags=["health"])


@session_router.get("/{session_code}", response_model=AppStatePayload)
async def get_session_state(session_code: str, session_service: SessionServiceDep) -> AppStatePayload:
    """Current snapshot of a session, in the same shape as ``appState``."""
    session = session_service.get_session(session_code.strip().upper(), command="GET session")
    return AppStatePayload.from_session(session)


@session_router.get("/{session_code}/statistics", response_model=IntegrationStatistics)
async def get_session_statistics(session_code: str, session_service: SessionServiceDep) -> IntegrationStatistics:
    """Team and per-participant integration figures."""
    session = session_service.get_session(session_code.strip().upper(), command="GET statistics")
    return compute_integration_stats(session)


@health_router.get("/health", response_model=HealthResponse)
async def get_health_status(services: RealtimeServicesDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        active_sessions=len(services.store),
        active_connections=services.connection_manager.get_active_connection_count(),
    )
