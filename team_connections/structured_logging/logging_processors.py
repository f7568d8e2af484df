"""
Logging processors for structlog event processing.

This module provides processors for sanitizing sensitive data and for
normalising connection-scoped context fields.
"""

import re
from typing import Any

# These patterns match whole words or specific suffixes
_SENSITIVE_PATTERNS = [
    re.compile(r"\bpassword\b"),
    re.compile(r"\btoken\b"),
    re.compile(r"\bsecret\b"),
    re.compile(r"_key\b"),
    re.compile(r"\bcredential\b"),
    re.compile(r"\bauthorization\b"),
]


def sanitize_sensitive_data(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive data from log entries.

    Args:
        _logger: Logger instance (unused)
        _name: Logger name (unused)
        event_dict: Event dictionary to sanitize

    Returns:
        Sanitized event dictionary
    """

    def sanitize_dict(d: dict[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, dict):
                sanitized[key] = sanitize_dict(value)
            elif any(pattern.search(str(key).lower()) for pattern in _SENSITIVE_PATTERNS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        return sanitized

    return sanitize_dict(event_dict)


def normalize_session_code(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Upper-case session codes so log searches match regardless of client input.

    Args:
        _logger: Logger instance (unused)
        _name: Logger name (unused)
        event_dict: Event dictionary to enhance

    Returns:
        Event dictionary with a normalised session_code field
    """
    code = event_dict.get("session_code")
    if isinstance(code, str):
        event_dict["session_code"] = code.strip().upper()
    return event_dict
