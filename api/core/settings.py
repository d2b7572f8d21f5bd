"""
Process settings read from environment variables.
"""

from __future__ import annotations

import os

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def bind_host() -> str:
    return os.environ.get("APP_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST


def bind_port() -> int:
    port = _env_int("APP_PORT", DEFAULT_PORT)
    if not 0 < port < 65536:
        return DEFAULT_PORT
    return port


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL


def command_timeout_s() -> float | None:
    """
    Per-statement timeout for the database connection.

    Unset (or non-positive) means statements may run forever.
    """
    timeout = _env_float("DB_COMMAND_TIMEOUT_S", None)
    if timeout is None or timeout <= 0:
        return None
    return timeout
