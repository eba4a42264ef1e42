"""Revolt adapter: websocket client, masquerade sends, Autumn file URLs."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import aiohttp
import revolt
from cachetools import TTLCache
from loguru import logger

from revcord.adapters.base import AdapterBase
from revcord.adapters.media import DEFAULT_MAX_BYTES, fetch_attachment
from revcord.core.constants import MAX_CONTENT_LEN, Platform
from revcord.core.errors import InvalidChannelError, LoginFailedError
from revcord.events import Attachment, Identity, MessageHandle, message_in
from revcord.formatting import autumn_url, defuse_revolt_mentions

if TYPE_CHECKING:
    from revcord.gateway.router import BridgeRouter
    from revcord.storage import EventJournal

REVOLT_API_URL = "https://api.revolt.chat"
AUTUMN_URL = "https://autumn.revolt.chat"
# Masquerade name: 1-32 chars
MAX_MASQUERADE_NAME_LEN = 32
FALLBACK_NAME = "Unknown User"


def _masquerade_name(name: str) -> str:
    return str(name).strip()[:MAX_MASQUERADE_NAME_LEN] or FALLBACK_NAME


class _RevoltClient(revolt.Client):
    """revolt.py client forwarding gateway events to the adapter."""

    def __init__(self, adapter: RevoltAdapter, session: aiohttp.ClientSession, token: str, **kwargs: Any) -> None:
        super().__init__(session, token, **kwargs)
        self._adapter = adapter

    async def on_ready(self) -> None:
        await self._adapter._on_ready()

    async def on_message(self, message: revolt.Message) -> None:
        await self._adapter._on_message(message)


class RevoltAdapter(AdapterBase):
    """Revolt adapter: receives messages, sends as the bot or under a masquerade."""

    def __init__(
        self,
        token: str,
        router: BridgeRouter,
        journal: EventJournal,
        *,
        api_url: str = REVOLT_API_URL,
        autumn_url: str = AUTUMN_URL,
        max_attachment_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        super().__init__(router, journal)
        self._token = token
        self._api_url = api_url
        self._autumn_url = autumn_url
        self._max_attachment_bytes = max_attachment_bytes
        self._client: revolt.Client | None = None
        self._client_task: asyncio.Task | None = None
        self._session: aiohttp.ClientSession | None = None
        self._channel_cache: TTLCache[str, Any] = TTLCache(maxsize=256, ttl=3600)
        self.login_error: LoginFailedError | None = None

    @property
    def name(self) -> Platform:
        return "revolt"

    async def _get_channel(self, channel_id: str) -> Any:
        channel = self._channel_cache.get(channel_id)
        if channel is not None:
            return channel
        if self._client is None:
            raise InvalidChannelError("Revolt client not started", code="invalid_channel")
        try:
            channel = self._client.get_channel(channel_id)
        except LookupError:
            try:
                channel = await self._client.fetch_channel(channel_id)
            except revolt.errors.HTTPError as exc:
                raise InvalidChannelError(
                    f"Revolt channel {channel_id} not found or not accessible",
                    code="invalid_channel",
                    details={"channel_id": channel_id},
                    original_error=exc,
                ) from exc
        if channel is None or not hasattr(channel, "send"):
            raise InvalidChannelError(
                f"Revolt channel {channel_id} is invalid or the bot lacks permissions",
                code="invalid_channel_type",
                details={"channel_id": channel_id},
            )
        self._channel_cache[channel_id] = channel
        return channel

    async def _rehost(self, uploads: Sequence[Attachment]) -> list[revolt.File]:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        files = []
        for attachment in uploads:
            data, filename = await fetch_attachment(
                self._session, attachment, max_bytes=self._max_attachment_bytes
            )
            files.append(revolt.File(data, filename=filename))
        return files

    async def send_message(
        self,
        channel_id: str,
        content: str,
        identity: Identity | None = None,
        uploads: Sequence[Attachment] = (),
    ) -> MessageHandle:
        """Send to a Revolt channel, under a masquerade when an identity is given.

        Mention syntax is defused before sending. ``uploads`` are downloaded and
        uploaded to Autumn as message attachments.
        """
        self._require_ready(channel_id)
        content = defuse_revolt_mentions(content)[:MAX_CONTENT_LEN]
        try:
            channel = await self._get_channel(channel_id)
            send_kw: dict = {"content": content or None}
            if identity is not None:
                send_kw["masquerade"] = revolt.Masquerade(
                    name=_masquerade_name(identity.display_name),
                    avatar=identity.avatar_url,
                )
            if uploads:
                send_kw["attachments"] = await self._rehost(uploads)
            message = await channel.send(**send_kw)
        except Exception as exc:
            self._journal.debug("Failed to send Revolt message", channel_id=channel_id, error=str(exc))
            raise

        via = "masquerade" if identity is not None else "bot"
        self._journal.debug(
            f"Sent Revolt message via {via}",
            channel_id=channel_id,
            message_id=str(message.id),
            username=identity.display_name if identity else None,
        )
        return MessageHandle(platform="revolt", channel_id=channel_id, message_id=str(message.id), via=via)

    async def _on_ready(self) -> None:
        self._ready = True
        user = self._client.user if self._client else None
        self._journal.info(
            "Revolt bot ready",
            username=getattr(user, "name", None),
            id=getattr(user, "id", None),
        )

    def _own_user_id(self) -> str | None:
        if self._client is None:
            return None
        try:
            return self._client.user.id
        except (AttributeError, LookupError):
            return None

    async def _on_message(self, message: Any) -> None:
        """Normalize a Revolt message and dispatch it when its channel is bridged."""
        author = message.author
        if author is None or getattr(author, "bot", None):
            return
        if author.id == self._own_user_id():
            return

        avatar = getattr(author, "avatar", None)
        avatar_url = autumn_url(self._autumn_url, "avatars", avatar.id) if avatar else None
        attachments = [
            Attachment(
                url=autumn_url(self._autumn_url, "attachments", a.id),
                content_type=getattr(a, "content_type", None),
                filename=getattr(a, "filename", None),
            )
            for a in (message.attachments or [])
        ]
        display = getattr(author, "display_name", None) or getattr(author, "name", None) or FALLBACK_NAME
        evt = message_in(
            origin="revolt",
            channel_id=str(message.channel.id),
            author_id=str(author.id),
            author_display=display,
            content=message.content or "",
            message_id=str(message.id),
            avatar_url=avatar_url,
            attachments=attachments,
        )
        await self._dispatch(evt)

    async def _run(self, client: revolt.Client) -> None:
        try:
            await client.start()
        except (revolt.errors.RevoltError, aiohttp.ClientError, OSError) as exc:
            if not self._ready:
                self.login_error = LoginFailedError("Revolt bot login failed", code="login_failed", original_error=exc)
                self._journal.error("Revolt bot login failed", error=str(exc))
            else:
                self._journal.error("Revolt bot connection failed", error=str(exc))
        except Exception as exc:
            self.login_error = LoginFailedError(
                "Revolt bot stopped unexpectedly", code="unexpected_error", original_error=exc
            )
            self._journal.error("Revolt bot stopped unexpectedly", error=str(exc), error_type=type(exc).__name__)
        finally:
            self._ready = False

    async def start(self) -> None:
        """Open the HTTP session and start the websocket client in the background."""
        self._session = aiohttp.ClientSession()
        self._client = _RevoltClient(self, self._session, self._token, api_url=self._api_url)
        self.login_error = None
        self._journal.info("Attempting Revolt bot login")
        self._client_task = asyncio.create_task(self._run(self._client))

    async def stop(self) -> None:
        """Cancel the websocket client and close the session."""
        self._ready = False
        if self._client_task:
            self._client_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._client_task
        if self._session:
            await self._session.close()
        self._client = None
        self._client_task = None
        self._session = None
        self._channel_cache.clear()
        logger.debug("Revolt adapter stopped")
