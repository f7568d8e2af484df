"""
Configuration for the Team Connections server.

Sections are pydantic-settings models (see models.py) read from environment
variables and an optional .env file.

Usage:
    from team_connections.config import get_config

    config = get_config()
    logger.info("Session limits", retention_seconds=config.session.retention_seconds)
"""

import sys
import threading
from os import getenv

from .models import AppConfig, CORSConfig, LoggingConfig, ServerConfig, SessionConfig

__all__ = [
    "AppConfig",
    "CORSConfig",
    "LoggingConfig",
    "ServerConfig",
    "SessionConfig",
    "get_config",
    "reset_config",
]

_config_instance: AppConfig | None = None
_config_lock = threading.Lock()


def _is_test_mode() -> bool:
    """True when running under pytest."""
    return "pytest" in sys.modules or bool(getenv("PYTEST_CURRENT_TEST"))


def get_config() -> AppConfig:
    """
    Get the application configuration.

    Production callers share one instance built on first use. Under pytest
    every call builds a fresh instance so monkeypatched environment variables
    take effect.

    Raises:
        ValidationError: If configuration is invalid
    """
    global _config_instance  # pylint: disable=global-statement

    if _is_test_mode():
        return AppConfig()
    with _config_lock:
        if _config_instance is None:
            _config_instance = AppConfig()
        return _config_instance


def reset_config() -> None:
    """Drop the shared instance so the next get_config() reloads from the environment."""
    global _config_instance  # pylint: disable=global-statement

    with _config_lock:
        _config_instance = None
