"""Discord adapter package."""

from revcord.adapters.discord.adapter import DiscordAdapter
from revcord.adapters.discord.webhook import _ensure_valid_username

__all__ = ["DiscordAdapter", "_ensure_valid_username"]
