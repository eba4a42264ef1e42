"""Platform and log-level constants."""

from __future__ import annotations

from typing import Literal

Platform = Literal["discord", "revolt"]
PLATFORMS: tuple[Platform, ...] = ("discord", "revolt")

LogLevel = Literal["error", "warn", "info", "debug"]

# Lower rank = more verbose. An entry is stored when its rank >= the configured rank.
LOG_LEVEL_RANK: dict[str, int] = {"debug": 0, "info": 1, "warn": 2, "error": 3}

# loguru level names for journal levels
LOGURU_LEVELS: dict[str, str] = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "error": "ERROR",
}

# Discord and Revolt both cap message bodies at 2000 characters
MAX_CONTENT_LEN = 2000


def opposite(platform: Platform) -> Platform:
    """Return the other side of the bridge."""
    return "revolt" if platform == "discord" else "discord"
