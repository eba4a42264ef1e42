"""Base adapter: ready flag, handler registration, serialized inbound dispatch."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from revcord.core.constants import Platform
from revcord.core.errors import NotReadyError
from revcord.events import Attachment, Identity, InboundMessage, MessageHandle

if TYPE_CHECKING:
    from revcord.gateway.router import BridgeRouter
    from revcord.storage import Bridge, EventJournal

MessageHandler = Callable[[InboundMessage, "Bridge"], Awaitable[object]]


class AdapterBase(ABC):
    """Owns one platform connection. Subclasses normalize platform events and call _dispatch."""

    def __init__(self, router: BridgeRouter, journal: EventJournal) -> None:
        self._router = router
        self._journal = journal
        self._handlers: list[MessageHandler] = []
        self._dispatch_lock = asyncio.Lock()
        self._ready = False

    @property
    @abstractmethod
    def name(self) -> Platform:
        """Adapter identifier ('discord' or 'revolt')."""
        ...

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def ready(self) -> bool:
        """True once the platform has confirmed the connection."""
        return self._ready

    def on_message(self, handler: MessageHandler) -> None:
        """Subscribe to bridged inbound messages: handler(message, bridge)."""
        self._handlers.append(handler)

    def _require_ready(self, channel_id: str) -> None:
        if not self._ready:
            self._journal.debug(
                f"Attempted to send message before {self.label} bot was ready",
                channel_id=channel_id,
            )
            raise NotReadyError(
                f"{self.label} bot not ready",
                code="not_ready",
                details={"platform": self.name, "channel_id": channel_id},
            )

    async def _dispatch(self, message: InboundMessage) -> Bridge | None:
        """Resolve the bridge for this message and run handlers, one message at a time.

        Messages on channels with no enabled bridge are dropped silently. Handler
        failures are journaled and never stop the subscription.
        """
        async with self._dispatch_lock:
            bridge = self._router.get_bridge(self.name, message.channel_id)
            if bridge is None:
                return None
            for handler in list(self._handlers):
                try:
                    await handler(message, bridge)
                except Exception as exc:
                    self._journal.error(
                        f"Failed to process {self.label} message",
                        error=str(exc),
                        message_id=message.message_id,
                        bridge_id=bridge.id,
                    )
            return bridge

    @abstractmethod
    async def send_message(
        self,
        channel_id: str,
        content: str,
        identity: Identity | None = None,
        uploads: Sequence[Attachment] = (),
    ) -> MessageHandle:
        """Send content to a channel, impersonating identity when given.

        ``uploads`` are downloaded and re-uploaded as files on the target platform.
        Raises NotReadyError before the platform is ready.
        """
        ...

    @abstractmethod
    async def start(self) -> None:
        """Start connecting. Returns without waiting for the platform to become ready."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Close the connection and cancel background tasks."""
        ...
