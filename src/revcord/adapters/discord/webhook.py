"""Discord webhook utilities: get/create one webhook per channel, send as an identity."""

from __future__ import annotations

from discord import AllowedMentions, ClientUser, File, Message, TextChannel
from discord.webhook import Webhook
from loguru import logger

from revcord.events import Identity

# Webhook username: 2-32 chars
MIN_USERNAME_LEN = 2
MAX_USERNAME_LEN = 32
WEBHOOK_NAME = "Revcord Bridge"
# Relayed text must never ping anyone on Discord
ALLOWED_MENTIONS = AllowedMentions.none()


def _ensure_valid_username(name: str) -> str:
    """Truncate or pad username to fit Discord webhook limits."""
    name = str(name)[:MAX_USERNAME_LEN]
    if len(name) < MIN_USERNAME_LEN:
        name = name + "_" * (MIN_USERNAME_LEN - len(name))
    return name


def _owned_by(webhook: Webhook, bot_user: ClientUser | None) -> bool:
    return bot_user is not None and webhook.user is not None and webhook.user.id == bot_user.id


async def get_or_create_webhook(
    channel: TextChannel,
    bot_user: ClientUser | None,
    webhook_cache: dict[str, Webhook],
    *,
    name: str = WEBHOOK_NAME,
) -> Webhook:
    """Cached webhook, else one this bot already owns in the channel, else a new one.

    Caller must hold the webhook lock so concurrent sends create at most one webhook.
    """
    channel_id = str(channel.id)
    webhook = webhook_cache.get(channel_id)
    if webhook is not None:
        return webhook

    for wh in await channel.webhooks():
        if _owned_by(wh, bot_user):
            webhook = wh
            logger.debug("Reusing webhook '{}' for channel {}", wh.name, channel_id)
            break
    if webhook is None:
        webhook = await channel.create_webhook(name=name, reason="Revolt bridge relay")
        logger.info("Created webhook '{}' for channel {}", name, channel_id)

    webhook_cache[channel_id] = webhook
    return webhook


async def webhook_send(
    webhook: Webhook,
    content: str,
    identity: Identity,
    *,
    files: list[File] | None = None,
) -> Message:
    """Send as identity through the channel webhook and wait for the created message."""
    send_kw: dict = {
        "username": _ensure_valid_username(identity.display_name),
        "avatar_url": identity.avatar_url,
        "allowed_mentions": ALLOWED_MENTIONS,
        "wait": True,
    }
    if content:
        send_kw["content"] = content
    if files:
        send_kw["files"] = files
    return await webhook.send(**send_kw)
