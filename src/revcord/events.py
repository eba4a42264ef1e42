"""Normalized message types shared by adapters and the relay."""

from __future__ import annotations

from dataclasses import dataclass, field

from revcord.core.constants import Platform


@dataclass(frozen=True)
class Attachment:
    """One inbound attachment, already resolved to a fetchable URL."""

    url: str
    content_type: str | None = None
    filename: str | None = None


@dataclass
class InboundMessage:
    """Inbound message event, platform-agnostic."""

    origin: Platform
    channel_id: str
    author_id: str
    author_display: str
    content: str
    message_id: str
    avatar_url: str | None = None
    attachments: list[Attachment] = field(default_factory=list)


@dataclass(frozen=True)
class Identity:
    """Display identity a relayed message is sent under."""

    display_name: str
    avatar_url: str | None = None


@dataclass
class OutboundContent:
    """Text plus attachments the target adapter must upload itself."""

    text: str
    uploads: list[Attachment] = field(default_factory=list)
    attachment_count: int = 0


@dataclass(frozen=True)
class MessageHandle:
    """Result of a successful send."""

    platform: Platform
    channel_id: str
    message_id: str
    via: str  # "webhook" | "masquerade" | "bot"


def message_in(
    origin: Platform,
    channel_id: str,
    author_id: str,
    author_display: str,
    content: str,
    message_id: str,
    *,
    avatar_url: str | None = None,
    attachments: list[Attachment] | None = None,
) -> InboundMessage:
    return InboundMessage(
        origin=origin,
        channel_id=channel_id,
        author_id=author_id,
        author_display=author_display,
        content=content,
        message_id=message_id,
        avatar_url=avatar_url,
        attachments=list(attachments or []),
    )
