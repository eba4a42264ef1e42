"""Per-bridge identity overrides (masquerades)."""

from __future__ import annotations

from loguru import logger

from revcord.events import Identity, InboundMessage
from revcord.storage import ConfigStore, Masquerade


def native_identity(message: InboundMessage) -> Identity:
    """Sender's own display name and avatar, used verbatim."""
    return Identity(display_name=message.author_display, avatar_url=message.avatar_url)


def masqueraded_identity(message: InboundMessage, masquerade: Masquerade) -> Identity:
    """Override name; override avatar when set, otherwise the sender's native avatar."""
    return Identity(
        display_name=masquerade.username,
        avatar_url=masquerade.avatar or message.avatar_url,
    )


class MasqueradeResolver:
    """Looks up enabled masquerades by (bridge id, platform user id)."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    def find(self, bridge_id: int, user_id: str) -> Masquerade | None:
        for m in self._store.get_masquerades(bridge_id):
            if m.enabled and m.user_id == user_id:
                return m
        return None

    def resolve(self, bridge_id: int, message: InboundMessage) -> Identity:
        masquerade = self.find(bridge_id, message.author_id)
        if masquerade is None:
            return native_identity(message)
        logger.debug(
            "Masquerade {} applies to {} user {} on bridge {}",
            masquerade.id,
            message.origin,
            message.author_id,
            bridge_id,
        )
        return masqueraded_identity(message, masquerade)
