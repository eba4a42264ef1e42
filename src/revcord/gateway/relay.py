"""Relay: inbound message on one platform -> send on the other side of its bridge."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from revcord.core.errors import NotReadyError
from revcord.events import InboundMessage, OutboundContent
from revcord.formatting import append_image_links, append_links, image_attachments

if TYPE_CHECKING:
    from revcord.adapters import AdapterBase
    from revcord.identity import MasqueradeResolver
    from revcord.storage import Bridge, EventJournal


class RelayState(str, Enum):
    """Per-message relay progress. DELIVERED, FAILED and SKIPPED are terminal."""

    IDLE = "idle"
    RESOLVING = "resolving"
    TRANSFORMING = "transforming"
    DISPATCHING = "dispatching"
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


def discord_to_revolt(message: InboundMessage, *, rehost_images: bool = False) -> OutboundContent:
    """Keep image attachments only: as a link block, or as files to upload when rehosting."""
    images = image_attachments(message.attachments)
    if rehost_images:
        return OutboundContent(text=message.content, uploads=images, attachment_count=len(images))
    return OutboundContent(text=append_image_links(message.content, images), attachment_count=len(images))


def revolt_to_discord(message: InboundMessage) -> OutboundContent:
    """Append every attachment URL, unfiltered."""
    return OutboundContent(
        text=append_links(message.content, message.attachments),
        attachment_count=len(message.attachments),
    )


class Relay:
    """Relays bridged messages between the Discord and Revolt adapters.

    Adapters are attached by the lifecycle supervisor and may be swapped on
    re-initialization. Every failure is journaled and swallowed; nothing is retried.
    """

    def __init__(
        self,
        journal: EventJournal,
        resolver: MasqueradeResolver,
        *,
        rehost_images: bool = False,
    ) -> None:
        self._journal = journal
        self._resolver = resolver
        self.rehost_images = rehost_images
        self.discord: AdapterBase | None = None
        self.revolt: AdapterBase | None = None

    def attach(self, discord: AdapterBase | None, revolt: AdapterBase | None) -> None:
        """Use these adapters as send targets and subscribe to their inbound streams."""
        self.discord = discord
        self.revolt = revolt
        if discord is not None:
            discord.on_message(self.handle_discord)
        if revolt is not None:
            revolt.on_message(self.handle_revolt)

    def detach(self) -> None:
        self.discord = None
        self.revolt = None

    async def handle_discord(self, message: InboundMessage, bridge: Bridge) -> RelayState:
        return await self._relay(
            message,
            bridge,
            target=self.revolt,
            target_channel_id=bridge.revolt_channel_id,
            transform=lambda m: discord_to_revolt(m, rehost_images=self.rehost_images),
            source_label="Discord",
            target_label="Revolt",
        )

    async def handle_revolt(self, message: InboundMessage, bridge: Bridge) -> RelayState:
        return await self._relay(
            message,
            bridge,
            target=self.discord,
            target_channel_id=bridge.discord_channel_id,
            transform=revolt_to_discord,
            source_label="Revolt",
            target_label="Discord",
        )

    async def _relay(
        self,
        message: InboundMessage,
        bridge: Bridge,
        *,
        target: AdapterBase | None,
        target_channel_id: str,
        transform: Callable[[InboundMessage], OutboundContent],
        source_label: str,
        target_label: str,
    ) -> RelayState:
        if not bridge.enabled:
            logger.debug("Bridge {} disabled; skipping message {}", bridge.id, message.message_id)
            return RelayState.SKIPPED
        if not message.content and not message.attachments:
            logger.debug("Empty {} message {}; skipping", source_label, message.message_id)
            return RelayState.SKIPPED

        state = RelayState.RESOLVING
        try:
            identity = self._resolver.resolve(bridge.id, message)

            state = RelayState.TRANSFORMING
            outbound = transform(message)
            if not outbound.text and not outbound.uploads:
                # Only non-image attachments on a Discord message
                logger.debug("Nothing to relay for {} message {}", source_label, message.message_id)
                return RelayState.SKIPPED

            state = RelayState.DISPATCHING
            if target is None:
                raise NotReadyError(f"{target_label} adapter is not running", code="not_ready")
            await target.send_message(target_channel_id, outbound.text, identity, uploads=outbound.uploads)
        except Exception as exc:
            self._journal.error(
                f"Failed to relay {source_label} message to {target_label}",
                error=str(exc),
                message_id=message.message_id,
                bridge_id=bridge.id,
                state=state.value,
                stack=traceback.format_exc(),
            )
            return RelayState.FAILED

        self._journal.info(
            f"Successfully relayed {source_label} message to {target_label}",
            message_id=message.message_id,
            bridge_id=bridge.id,
            attachment_count=outbound.attachment_count,
        )
        return RelayState.DELIVERED
