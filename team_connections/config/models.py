"""
Pydantic-based configuration models for the Team Connections server.

Every section is a BaseSettings model with its own environment prefix so that
deployments can override individual values without touching code.
"""

import json
import os
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

# Uppercase letters and digits minus the look-alikes I, O, 0 and 1.
DEFAULT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
AMBIGUOUS_CODE_CHARACTERS = frozenset("IO01")


def _parse_env_list(candidate: Any) -> list[str]:
    """Parse a string from the environment as JSON list or CSV."""
    if candidate is None:
        return []
    s = str(candidate).strip()
    if not s:
        return []
    try:
        loaded = json.loads(s)
        if isinstance(loaded, list):
            return [str(item).strip() for item in loaded if str(item).strip()]
    except json.JSONDecodeError:
        pass
    return [item.strip() for item in s.split(",") if item.strip()]


def _default_cors_origins() -> list[str]:
    """Derive default CORS origins with environment taking precedence."""
    parsed = _parse_env_list(os.getenv("CORS_ALLOW_ORIGINS") or os.getenv("CORS_ORIGINS"))
    if parsed:
        return parsed
    return ["*"]


class ServerConfig(BaseSettings):
    """Server network configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("server_port", "port"),
        description="Server port",
    )
    static_dir: str = Field(default="public", description="Directory holding the presentation assets")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            logger.error("Invalid server port", port=v, valid_range="1-65535")
            raise ValueError("Port must be between 1 and 65535")
        return v

    model_config = {"env_prefix": "SERVER_", "case_sensitive": False, "extra": "ignore", "populate_by_name": True}


class SessionConfig(BaseSettings):
    """Session lifecycle and protocol limits."""

    code_length: int = Field(default=6, description="Number of symbols in a session code")
    code_alphabet: str = Field(default=DEFAULT_CODE_ALPHABET, description="Symbols used for session codes")
    retention_seconds: float = Field(default=3600.0, description="Idle age after which empty sessions are reclaimed")
    sweep_interval_seconds: float = Field(default=900.0, description="Seconds between idle-session sweeps")
    max_name_length: int = Field(default=50, description="Maximum participant name length")
    max_message_size: int = Field(default=10 * 1024, description="Maximum inbound WebSocket frame size in bytes")

    @field_validator("code_alphabet")
    @classmethod
    def validate_code_alphabet(cls, v: str) -> str:
        """Reject alphabets with duplicates or visually ambiguous symbols."""
        v = v.strip().upper()
        if len(v) < 2:
            raise ValueError("Code alphabet must contain at least two symbols")
        if len(set(v)) != len(v):
            raise ValueError("Code alphabet must not contain duplicate symbols")
        ambiguous = sorted(AMBIGUOUS_CODE_CHARACTERS.intersection(v))
        if ambiguous:
            logger.error("Ambiguous characters in code alphabet", ambiguous=ambiguous)
            raise ValueError(f"Code alphabet must not contain look-alike characters: {ambiguous}")
        return v

    @field_validator("code_length", "max_name_length", "max_message_size")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate value is positive."""
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @field_validator("retention_seconds", "sweep_interval_seconds")
    @classmethod
    def validate_positive_duration(cls, v: float) -> float:
        """Validate durations are positive."""
        if v <= 0:
            raise ValueError("Durations must be positive")
        return v

    model_config = {"env_prefix": "SESSION_", "case_sensitive": False, "extra": "ignore"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="colored", description="Log format")
    log_base: str = Field(default="logs", description="Base log directory")
    rotation_max_size: str = Field(default="100MB", description="Log rotation max size")
    rotation_backup_count: int = Field(default=5, description="Number of backup log files")
    log_to_file: bool = Field(default=False, description="Write logs to a rotating file under log_base")
    disable_logging: bool = Field(default=False, description="Disable all logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "e2e_test", "production"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "human", "colored"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}, got '{v}'")
        return v

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}

    def to_legacy_dict(self) -> dict:
        """Convert to the dict shape consumed by setup_enhanced_logging."""
        return {
            "environment": self.environment,
            "level": self.level,
            "format": self.format,
            "log_base": self.log_base,
            "rotation": {
                "max_size": self.rotation_max_size,
                "backup_count": self.rotation_backup_count,
            },
            "log_to_file": self.log_to_file,
            "disable_logging": self.disable_logging,
        }


class CORSConfig(BaseSettings):
    """Cross-origin resource sharing configuration."""

    allow_origins: list[str] = Field(
        default_factory=_default_cors_origins,
        validation_alias=AliasChoices("allow_origins", "origins"),
        description="Origins permitted to access the API",
    )
    allow_credentials: bool = Field(default=False, description="Whether credentialed requests are accepted")
    allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "OPTIONS"],
        description="HTTP methods permitted by CORS responses",
    )
    allow_headers: list[str] = Field(
        default_factory=lambda: ["Content-Type", "Accept"],
        description="Request headers permitted by CORS responses",
    )
    max_age: int = Field(default=600, description="Seconds browsers may cache CORS preflight responses")

    @field_validator("allow_origins", "allow_methods", "allow_headers", mode="before")
    @classmethod
    def parse_list(cls, v: Any) -> Any:
        """Accept CSV strings as well as JSON lists."""
        if isinstance(v, str):
            return _parse_env_list(v)
        return v

    model_config = {"env_prefix": "CORS_", "case_sensitive": False, "extra": "ignore", "populate_by_name": True}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Aggregates every section; obtain it through get_config().
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cors: CORSConfig = Field(default_factory=CORSConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}

    def to_legacy_dict(self) -> dict:
        """Flatten the configuration into a plain dict (used for logging setup)."""
        return {
            "host": self.server.host,
            "port": self.server.port,
            "static_dir": self.server.static_dir,
            "session": {
                "code_length": self.session.code_length,
                "retention_seconds": self.session.retention_seconds,
                "sweep_interval_seconds": self.session.sweep_interval_seconds,
            },
            "logging": self.logging.to_legacy_dict(),
            "cors": {
                "allow_origins": self.cors.allow_origins,
                "allow_credentials": self.cors.allow_credentials,
                "allow_methods": self.cors.allow_methods,
                "allow_headers": self.cors.allow_headers,
                "max_age": self.cors.max_age,
            },
        }
