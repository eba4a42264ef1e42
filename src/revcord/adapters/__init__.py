"""Platform adapters."""

from revcord.adapters.base import AdapterBase, MessageHandler
from revcord.adapters.discord import DiscordAdapter
from revcord.adapters.revolt import RevoltAdapter

__all__ = ["AdapterBase", "DiscordAdapter", "MessageHandler", "RevoltAdapter"]
