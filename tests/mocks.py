"""Mock adapters and builders for testing the bridge without real platform connections."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from revcord.adapters.base import AdapterBase
from revcord.core.constants import Platform
from revcord.events import Attachment, Identity, InboundMessage, MessageHandle, message_in
from revcord.gateway import BridgeRouter, Relay
from revcord.identity import MasqueradeResolver
from revcord.storage import EventJournal, MemoryStore


@dataclass
class SentMessage:
    channel_id: str
    content: str
    identity: Identity | None
    uploads: list[Attachment] = field(default_factory=list)


class MockAdapter(AdapterBase):
    """Mock adapter that captures sends without real connections."""

    def __init__(self, name: Platform, router: BridgeRouter, journal: EventJournal) -> None:
        super().__init__(router, journal)
        self._name: Platform = name
        self.sent_messages: list[SentMessage] = []
        self.fail_with: Exception | None = None
        self.started = False
        self.stopped = False

    @property
    def name(self) -> Platform:
        return self._name

    async def send_message(
        self,
        channel_id: str,
        content: str,
        identity: Identity | None = None,
        uploads: Sequence[Attachment] = (),
    ) -> MessageHandle:
        self._require_ready(channel_id)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent_messages.append(SentMessage(channel_id, content, identity, list(uploads)))
        return MessageHandle(
            platform=self._name,
            channel_id=channel_id,
            message_id=f"sent-{len(self.sent_messages)}",
            via="webhook" if identity else "bot",
        )

    async def start(self) -> None:
        """Mock start: ready immediately."""
        self.started = True
        self._ready = True

    async def stop(self) -> None:
        """Mock stop."""
        self.stopped = True
        self._ready = False

    async def deliver(self, message: InboundMessage) -> Any:
        """Simulate an inbound platform event."""
        return await self._dispatch(message)


class MockDiscordAdapter(MockAdapter):
    """Mock Discord adapter."""

    def __init__(self, router: BridgeRouter, journal: EventJournal) -> None:
        super().__init__("discord", router, journal)


class MockRevoltAdapter(MockAdapter):
    """Mock Revolt adapter."""

    def __init__(self, router: BridgeRouter, journal: EventJournal) -> None:
        super().__init__("revolt", router, journal)


@dataclass
class Harness:
    """Store, journal, relay and both mock adapters wired together."""

    store: MemoryStore
    journal: EventJournal
    router: BridgeRouter
    relay: Relay
    discord: MockDiscordAdapter
    revolt: MockRevoltAdapter

    def logs(self, level: str | None = None) -> list:
        entries = self.store.get_logs(1000)
        return [e for e in entries if level is None or e.level == level]


async def build_harness(*, rehost_images: bool = False, log_level: str = "debug") -> Harness:
    from revcord.storage import SettingsUpdate

    store = MemoryStore()
    store.update_settings(SettingsUpdate(log_level=log_level))
    journal = EventJournal(store)
    router = BridgeRouter(store)
    relay = Relay(journal, MasqueradeResolver(store), rehost_images=rehost_images)
    discord = MockDiscordAdapter(router, journal)
    revolt = MockRevoltAdapter(router, journal)
    relay.attach(discord, revolt)
    await discord.start()
    await revolt.start()
    return Harness(store, journal, router, relay, discord, revolt)


def discord_message(
    content: str = "hello",
    *,
    channel_id: str = "d1",
    author_id: str = "u1",
    author_display: str = "Bob",
    message_id: str = "m1",
    avatar_url: str | None = "http://native/a.png",
    attachments: list[Attachment] | None = None,
) -> InboundMessage:
    return message_in(
        "discord",
        channel_id,
        author_id,
        author_display,
        content,
        message_id,
        avatar_url=avatar_url,
        attachments=attachments,
    )


def revolt_message(
    content: str = "hello",
    *,
    channel_id: str = "r1",
    author_id: str = "01HREVOLTUSER0000000000000",
    author_display: str = "Carol",
    message_id: str = "01HREVOLTMSG00000000000000",
    avatar_url: str | None = "https://autumn.revolt.chat/avatars/av1",
    attachments: list[Attachment] | None = None,
) -> InboundMessage:
    return message_in(
        "revolt",
        channel_id,
        author_id,
        author_display,
        content,
        message_id,
        avatar_url=avatar_url,
        attachments=attachments,
    )
