"""
Environment-backed settings helpers.

Every knob is read at call time so tests and long-running workers pick up
changes without a restart. Bad values fall back to the default.
"""

from __future__ import annotations

import os


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def cron_secret() -> str:
    return env_str("CRON_SECRET", "change-this-secret")


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def cors_allow_origins() -> list[str]:
    return env_list(
        "CORS_ALLOW_ORIGINS",
        ["http://localhost:3000", "http://127.0.0.1:3000"],
    )


def max_upload_bytes() -> int:
    value = env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)
    return value if value > 0 else 10 * 1024 * 1024


def scan_http_timeout_s() -> float:
    return env_float("SCAN_HTTP_TIMEOUT_S", 20.0)


def archive_after_days() -> int:
    return env_int("ARCHIVE_AFTER_DAYS", 45)


def stale_after_days() -> int:
    return env_int("STALE_AFTER_DAYS", 30)
