"""
FastAPI application factory.

Handles app creation, CORS, exception handlers, router registration and the
static asset mount for the presentation layer.
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ..api.real_time import realtime_router
from ..api.sessions import health_router, session_router
from ..config import get_config
from ..error_handlers import register_error_handlers
from ..structured_logging.enhanced_logging_config import get_logger
from .lifespan import lifespan

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured application instance
    """
    config = get_config()
    app = FastAPI(
        title="Team Connections",
        description="Real-time team introduction and connection mapping sessions",
        version="0.1.0",
        lifespan=lifespan,
    )

    cors_cfg = config.cors
    logger.info(
        "CORS configuration",
        allow_origins=cors_cfg.allow_origins,
        allow_methods=cors_cfg.allow_methods,
        allow_headers=cors_cfg.allow_headers,
        allow_credentials=cors_cfg.allow_credentials,
        max_age=cors_cfg.max_age,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_cfg.allow_origins,
        allow_credentials=cors_cfg.allow_credentials,
        allow_methods=cors_cfg.allow_methods,
        allow_headers=cors_cfg.allow_headers,
        max_age=cors_cfg.max_age,
    )

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(session_router)
    app.include_router(realtime_router)

    # Mounted last so API routes take precedence over "/"
    static_dir = Path(config.server.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info("Serving static assets", static_dir=str(static_dir))
    else:
        logger.info("Static asset directory not found, skipping mount", static_dir=str(static_dir))

    return app
