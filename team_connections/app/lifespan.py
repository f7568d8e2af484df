"""Application lifecycle management.

Creates the session core at startup, stores it on ``app.state`` and tears it
down at shutdown. Nothing outlives the application instance.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..config import get_config
from ..realtime.connection_manager import SessionConnectionManager
from ..realtime.context import RealtimeServices
from ..services.connection_service import ConnectionService
from ..services.session_service import SessionService
from ..services.session_store import SessionStore
from ..structured_logging.enhanced_logging_config import get_logger
from .session_sweeper import PeriodicSessionSweeper

logger = get_logger("team_connections.lifespan")

__all__ = ["lifespan", "build_realtime_services"]


def build_realtime_services(store: SessionStore | None = None) -> RealtimeServices:
    """Wire the store, services and connection manager together."""
    store = store or SessionStore(get_config().session)
    return RealtimeServices(
        store=store,
        session_service=SessionService(store),
        connection_service=ConnectionService(store),
        connection_manager=SessionConnectionManager(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup builds the services bundle and starts the idle sweeper; shutdown
    stops the sweeper, closes remaining WebSockets and clears the store.
    """
    logger.info("Starting Team Connections server")
    config = get_config()

    services = build_realtime_services(SessionStore(config.session))
    sweeper = PeriodicSessionSweeper(
        services.store,
        services.connection_manager,
        interval_seconds=config.session.sweep_interval_seconds,
    )
    app.state.realtime = services
    app.state.session_sweeper = sweeper
    sweeper.start()
    logger.info("Team Connections server started", retention_seconds=config.session.retention_seconds)

    try:
        yield
    finally:
        logger.info("Shutting down Team Connections server")
        await sweeper.stop()
        await services.connection_manager.close_all()
        services.store.clear()
        logger.info("Team Connections server shutdown complete")
