"""Bridge router: Discord channel <-> Revolt channel lookups against the store."""

from __future__ import annotations

from revcord.core.constants import Platform
from revcord.storage import Bridge, ConfigStore


class BridgeRouter:
    """Routes inbound channels to enabled bridges. Reads the store on every call."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    def get_bridge_for_discord(self, discord_channel_id: str) -> Bridge | None:
        """First enabled bridge whose Discord endpoint is this channel."""
        for b in self._store.get_bridges():
            if b.enabled and b.discord_channel_id == discord_channel_id:
                return b
        return None

    def get_bridge_for_revolt(self, revolt_channel_id: str) -> Bridge | None:
        """First enabled bridge whose Revolt endpoint is this channel."""
        for b in self._store.get_bridges():
            if b.enabled and b.revolt_channel_id == revolt_channel_id:
                return b
        return None

    def get_bridge(self, origin: Platform, channel_id: str) -> Bridge | None:
        if origin == "discord":
            return self.get_bridge_for_discord(channel_id)
        return self.get_bridge_for_revolt(channel_id)

    def all_bridges(self) -> list[Bridge]:
        return self._store.get_bridges()
