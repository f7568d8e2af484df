"""Tests for the configuration models."""

import pytest

from team_connections.config import get_config
from team_connections.config.models import CORSConfig, LoggingConfig, ServerConfig, SessionConfig


def test_get_config_returns_app_config():
    config = get_config()

    assert config.server is not None
    assert config.session.code_length == 6
    assert config.logging.environment == "unit_test"


def test_server_defaults(monkeypatch):
    monkeypatch.delenv("SERVER_HOST", raising=False)
    monkeypatch.delenv("SERVER_PORT", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    config = ServerConfig()

    assert config.host == "0.0.0.0"
    assert config.port == 3000


def test_port_environment_variable_honoured(monkeypatch):
    monkeypatch.delenv("SERVER_PORT", raising=False)
    monkeypatch.setenv("PORT", "8080")

    assert ServerConfig().port == 8080


@pytest.mark.parametrize("port", [0, 70000])
def test_invalid_port_rejected(port):
    with pytest.raises(ValueError):
        ServerConfig(port=port)


def test_session_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("SESSION_RETENTION_SECONDS", "60")
    monkeypatch.setenv("SESSION_CODE_ALPHABET", "abcdefgh")

    config = SessionConfig()

    assert config.retention_seconds == 60.0
    assert config.code_alphabet == "ABCDEFGH"


def test_non_positive_durations_rejected():
    with pytest.raises(ValueError):
        SessionConfig(sweep_interval_seconds=0)


def test_logging_rejects_unknown_environment():
    with pytest.raises(ValueError):
        LoggingConfig(environment="staging")


def test_logging_legacy_dict():
    data = LoggingConfig(environment="unit_test", level="debug").to_legacy_dict()

    assert data["level"] == "DEBUG"
    assert data["rotation"]["backup_count"] == 5


def test_cors_origins_parsed_from_csv(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.example, http://b.example")

    assert CORSConfig().allow_origins == ["http://a.example", "http://b.example"]
