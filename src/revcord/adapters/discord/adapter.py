"""Discord adapter: bot connection, webhooks per identity, inbound normalization."""

from __future__ import annotations

import asyncio
import contextlib
import io
from collections.abc import Sequence
from typing import TYPE_CHECKING

import aiohttp
import discord
from discord import File, Intents, Message, TextChannel
from discord.ext import commands
from discord.webhook import Webhook
from loguru import logger

from revcord.adapters.base import AdapterBase
from revcord.adapters.discord import webhook as discord_webhook
from revcord.adapters.media import DEFAULT_MAX_BYTES, fetch_attachment
from revcord.core.constants import MAX_CONTENT_LEN, Platform
from revcord.core.errors import InvalidChannelError, LoginFailedError, NotReadyError
from revcord.events import Attachment, Identity, MessageHandle, message_in

if TYPE_CHECKING:
    from revcord.gateway.router import BridgeRouter
    from revcord.storage import EventJournal


class DiscordAdapter(AdapterBase):
    """Discord adapter: receives messages, sends via a per-channel webhook or as the bot."""

    def __init__(
        self,
        token: str,
        router: BridgeRouter,
        journal: EventJournal,
        *,
        webhook_name: str = discord_webhook.WEBHOOK_NAME,
        max_attachment_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        super().__init__(router, journal)
        self._token = token
        self._webhook_name = webhook_name
        self._max_attachment_bytes = max_attachment_bytes
        # One webhook per channel for the life of this adapter
        self._webhook_cache: dict[str, Webhook] = {}
        self._webhook_lock = asyncio.Lock()
        self._bot: commands.Bot | None = None
        self._bot_task: asyncio.Task | None = None
        self._session: aiohttp.ClientSession | None = None
        self.login_error: LoginFailedError | None = None

    @property
    def name(self) -> Platform:
        return "discord"

    async def _get_channel(self, channel_id: str) -> TextChannel:
        if not self._bot:
            raise NotReadyError("Discord bot not ready", code="not_ready")
        try:
            cid = int(channel_id)
        except ValueError as exc:
            raise InvalidChannelError(
                f"Invalid Discord channel id {channel_id!r}",
                code="invalid_channel",
                details={"channel_id": channel_id},
                original_error=exc,
            ) from exc
        channel = self._bot.get_channel(cid)
        if channel is None:
            try:
                channel = await self._bot.fetch_channel(cid)
            except discord.HTTPException as exc:
                raise InvalidChannelError(
                    f"Discord channel {channel_id} not found or not accessible",
                    code="invalid_channel",
                    details={"channel_id": channel_id},
                    original_error=exc,
                ) from exc
        if not isinstance(channel, TextChannel):
            raise InvalidChannelError(
                f"Discord channel {channel_id} is not a text channel",
                code="invalid_channel_type",
                details={"channel_id": channel_id},
            )
        return channel

    async def _get_webhook(self, channel: TextChannel) -> Webhook | None:
        """Channel webhook, or None when it cannot be listed or created (caller falls back to the bot)."""
        async with self._webhook_lock:
            try:
                return await discord_webhook.get_or_create_webhook(
                    channel,
                    self._bot.user if self._bot else None,
                    self._webhook_cache,
                    name=self._webhook_name,
                )
            except discord.HTTPException as exc:
                self._journal.warn(
                    "Failed to get webhook, sending as bot",
                    channel_id=str(channel.id),
                    error=str(exc),
                )
                return None

    async def _files(self, uploads: Sequence[Attachment]) -> list[File]:
        if not uploads:
            return []
        if self._session is None:
            self._session = aiohttp.ClientSession()
        files = []
        for attachment in uploads:
            data, filename = await fetch_attachment(
                self._session, attachment, max_bytes=self._max_attachment_bytes
            )
            files.append(File(io.BytesIO(data), filename=filename))
        return files

    async def send_message(
        self,
        channel_id: str,
        content: str,
        identity: Identity | None = None,
        uploads: Sequence[Attachment] = (),
    ) -> MessageHandle:
        """Send to a Discord text channel.

        With an identity the message goes through the channel webhook under that
        name and avatar; without one, or when no webhook is available, it is sent
        as the bot. Mentions are never resolved.
        """
        self._require_ready(channel_id)
        content = content[:MAX_CONTENT_LEN]
        try:
            channel = await self._get_channel(channel_id)
            files = await self._files(uploads)
            webhook = await self._get_webhook(channel) if identity else None
            if webhook is not None and identity is not None:
                try:
                    message = await discord_webhook.webhook_send(webhook, content, identity, files=files)
                except discord.NotFound:
                    # Webhook was deleted out from under us; next send creates a new one
                    self._webhook_cache.pop(channel_id, None)
                    raise
                via = "webhook"
            else:
                message = await channel.send(
                    content=content or None,
                    files=files or None,
                    allowed_mentions=discord_webhook.ALLOWED_MENTIONS,
                )
                via = "bot"
        except Exception as exc:
            self._journal.debug("Failed to send Discord message", channel_id=channel_id, error=str(exc))
            raise

        self._journal.debug(
            f"Sent Discord message via {via}",
            channel_id=channel_id,
            message_id=str(message.id),
            username=identity.display_name if identity else None,
        )
        return MessageHandle(platform="discord", channel_id=channel_id, message_id=str(message.id), via=via)

    async def _on_ready(self) -> None:
        self._ready = True
        user = self._bot.user if self._bot else None
        self._journal.info(
            "Discord bot ready",
            username=str(user) if user else None,
            id=str(user.id) if user else None,
        )

    async def _on_message(self, message: Message) -> None:
        """Normalize a Discord message and dispatch it when its channel is bridged."""
        # Skip webhook-originated messages first (our own bridge output)
        if getattr(message, "webhook_id", None):
            return
        if message.author.bot:
            return

        avatar_url = str(message.author.display_avatar.url) if message.author.display_avatar else None
        attachments = [
            Attachment(url=a.url, content_type=a.content_type, filename=a.filename) for a in message.attachments
        ]
        evt = message_in(
            origin="discord",
            channel_id=str(message.channel.id),
            author_id=str(message.author.id),
            author_display=message.author.display_name or message.author.name,
            content=message.content or "",
            message_id=str(message.id),
            avatar_url=avatar_url,
            attachments=attachments,
        )
        await self._dispatch(evt)

    async def _run(self, bot: commands.Bot) -> None:
        try:
            await bot.start(self._token)
        except discord.LoginFailure as exc:
            self.login_error = LoginFailedError("Discord bot login failed", code="login_failed", original_error=exc)
            self._journal.error("Discord bot login failed", error=str(exc))
        except (discord.DiscordException, aiohttp.ClientError, OSError) as exc:
            self._journal.error("Discord bot connection failed", error=str(exc))
        except Exception as exc:
            self.login_error = LoginFailedError(
                "Discord bot stopped unexpectedly", code="unexpected_error", original_error=exc
            )
            self._journal.error("Discord bot stopped unexpectedly", error=str(exc), error_type=type(exc).__name__)
        finally:
            self._ready = False

    async def start(self) -> None:
        """Create the bot and start connecting in the background."""
        intents = Intents.default()
        intents.message_content = True
        intents.messages = True
        intents.guilds = True

        bot = commands.Bot(command_prefix="!", intents=intents)

        @bot.event
        async def on_ready() -> None:
            await self._on_ready()

        @bot.event
        async def on_message(message: Message) -> None:
            await self._on_message(message)

        self._bot = bot
        self.login_error = None
        self._journal.info("Attempting Discord bot login")
        self._bot_task = asyncio.create_task(self._run(bot))

    async def stop(self) -> None:
        """Stop Discord bot and close the download session."""
        self._ready = False
        if self._bot:
            await self._bot.close()
        if self._bot_task:
            self._bot_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._bot_task
        if self._session:
            await self._session.close()
        self._bot = None
        self._bot_task = None
        self._session = None
        self._webhook_cache.clear()
        logger.debug("Discord adapter stopped")
