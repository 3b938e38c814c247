"""
richedit configuration — all environment variables in one place.

Read from environment at import time.
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise RuntimeError(f"{name} must be at least {minimum}")
    return value


class Settings:
    """Editor settings from environment variables."""

    # History
    HISTORY_CAPACITY: int = _env_int("RICHEDIT_HISTORY_CAPACITY", 30)

    # Settle watcher (ms between height measurements)
    SETTLE_INTERVAL_MS: int = _env_int("RICHEDIT_SETTLE_INTERVAL_MS", 350)

    # Editing
    EDITABLE: bool = os.environ.get("RICHEDIT_EDITABLE", "true").lower() == "true"


# Singleton instance
settings = Settings()
