"""
Utility functions for the logging system.

Environment detection, log directory resolution and size parsing.
"""

import os
import re
import sys
from pathlib import Path

VALID_ENVIRONMENTS = ["e2e_test", "unit_test", "production", "local"]

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([KMG]?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}


def ensure_log_directory(log_path: Path) -> None:
    """
    Ensure the parent directory of a log file exists.

    Args:
        log_path: Path to the log file
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)


def resolve_log_base(log_base: str) -> Path:
    """
    Resolve the log base directory.

    Relative paths are resolved against the current working directory.

    Args:
        log_base: Configured log base

    Returns:
        Absolute path to the log base directory
    """
    path = Path(log_base)
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def parse_size(value: str | int) -> int:
    """
    Parse a human readable size such as '100MB' into bytes.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, int):
        return value
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size: {value!r}")
    number, unit = match.groups()
    return int(number) * _SIZE_UNITS[(unit or "B").upper()]


def detect_environment() -> str:
    """
    Detect the current environment based on various indicators.

    Returns:
        Environment name: "e2e_test", "unit_test", "local", or "production"
    """
    if "pytest" in sys.modules or "pytest" in sys.argv[0]:
        return "unit_test"

    logging_env = os.getenv("LOGGING_ENVIRONMENT", "")
    if logging_env in VALID_ENVIRONMENTS:
        return logging_env

    return "local"
