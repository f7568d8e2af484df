"""
Team Connections server entry point.

Sets up logging before anything else logs, builds the FastAPI application and
runs it under uvicorn when executed as a script or via the console script.
"""

from .app.factory import create_app
from .config import get_config
from .structured_logging.enhanced_logging_config import get_logger, setup_enhanced_logging

# Logging must be configured before the first logger is created
config = get_config()
setup_enhanced_logging(config.to_legacy_dict())

logger = get_logger(__name__)
logger.info("Logging setup completed", environment=config.logging.environment)

app = create_app()


def main() -> None:
    """Run the server on the configured host and port."""
    import uvicorn

    run_config = get_config()
    logger.info("Starting Team Connections server", host=run_config.server.host, port=run_config.server.port)
    uvicorn.run(
        "team_connections.main:app",
        host=run_config.server.host,
        port=run_config.server.port,
        reload=False,
        access_log=True,
        use_colors=False,
    )


if __name__ == "__main__":
    main()
