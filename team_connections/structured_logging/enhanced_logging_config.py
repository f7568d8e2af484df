"""
Enhanced structlog-based logging configuration for the Team Connections server.

This module is the entry point for the logging system: it configures structlog
on top of the standard library, routes uvicorn's loggers through the same
handlers, and exposes get_logger() for the rest of the code base.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.stdlib import BoundLogger, LoggerFactory

from team_connections.structured_logging.logging_processors import normalize_session_code, sanitize_sensitive_data
from team_connections.structured_logging.logging_utilities import (
    detect_environment,
    ensure_log_directory,
    parse_size,
    resolve_log_base,
)

# Infrastructure code may use structlog.get_logger() directly; everything
# else goes through get_logger() below.
logger = structlog.get_logger(__name__)


class _LoggingState:  # pylint: disable=too-few-public-methods
    """State container for logging initialization to avoid global statements."""

    initialized: bool = False
    signature: str | None = None


_logging_state = _LoggingState()


def _select_renderer(log_format: str) -> Any:
    """Pick the final structlog renderer for the configured format."""
    if log_format == "json":
        return structlog.processors.JSONRenderer(default=str)
    if log_format == "human":
        return structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "logger", "event"])
    return structlog.dev.ConsoleRenderer(colors=True)


def _build_handlers(environment: str, log_config: dict[str, Any]) -> list[logging.Handler]:
    """Create the console handler and, when enabled, the rotating file handler."""
    formatter = logging.Formatter("%(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if log_config.get("log_to_file"):
        rotation = log_config.get("rotation", {})
        log_path = resolve_log_base(log_config.get("log_base", "logs")) / environment / "server.log"
        ensure_log_directory(log_path)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=parse_size(rotation.get("max_size", "100MB")),
            backupCount=int(rotation.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def configure_enhanced_structlog(
    environment: str | None = None,
    log_level: str = "INFO",
    log_config: dict[str, Any] | None = None,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        environment: Environment name (auto-detected if None)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_config: Logging configuration dictionary
    """
    if environment is None:
        environment = detect_environment()
    log_config = log_config or {}

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if log_config.get("disable_logging", False):
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.CRITICAL + 1)
    else:
        for handler in _build_handlers(environment, log_config):
            root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            # Security first - sanitize sensitive data
            sanitize_sensitive_data,
            merge_contextvars,
            normalize_session_code,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _select_renderer(log_config.get("format", "colored")),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_enhanced_logging(config: dict[str, Any], *, force_reconfigure: bool = False) -> None:
    """
    Set up logging from the application configuration.

    Args:
        config: Configuration dictionary (AppConfig.to_legacy_dict())
        force_reconfigure: When True, reconfigure even if already initialized
    """
    config_signature = json.dumps(config, sort_keys=True, default=str)

    if _logging_state.initialized and not force_reconfigure:
        get_logger("team_connections.structured_logging.setup").debug(
            "setup_enhanced_logging skipped; logging system already initialized",
            config_signature=_logging_state.signature,
        )
        return

    logging_config = config.get("logging", {})
    environment = logging_config.get("environment", detect_environment())
    log_level = logging_config.get("level", "INFO")

    configure_enhanced_structlog(environment, log_level, logging_config)
    _configure_uvicorn_logging()

    get_logger("team_connections.structured_logging.enhanced").info(
        "Enhanced logging system initialized",
        environment=environment,
        log_level=log_level,
        log_format=logging_config.get("format", "colored"),
        log_to_file=bool(logging_config.get("log_to_file")),
    )

    _logging_state.initialized = True
    _logging_state.signature = config_signature


def _configure_uvicorn_logging() -> None:
    """Route uvicorn's loggers through the root handlers."""
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a structlog logger with the specified name.

    This is the public API for obtaining loggers. All application code
    should use this function rather than calling structlog.get_logger()
    directly.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def log_exception_once(
    bound_logger: BoundLogger,
    level: str,
    message: str,
    *,
    exc: Exception | None = None,
    **kwargs: Any,
) -> None:
    """
    Log an exception once, skipping exceptions that already logged themselves.

    Args:
        bound_logger: Structlog bound logger instance.
        level: Logging level to use (for example, "error" or "warning").
        message: Log message to emit.
        exc: Optional exception to include in the log entry.
        **kwargs: Additional key-value pairs for structured logging.
    """
    if exc is not None:
        if getattr(exc, "already_logged", False):
            return
        kwargs.setdefault("error_type", type(exc).__name__)
        kwargs.setdefault("error", str(exc))

    log_method = getattr(bound_logger, level.lower(), bound_logger.error)
    log_method(message, **kwargs)

    if exc is not None:
        exc.already_logged = True  # type: ignore[attr-defined]
