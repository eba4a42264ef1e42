"""Error notifications to the webhook configured in Settings."""

from __future__ import annotations

import asyncio

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from revcord.storage.models import LogEntry

DEFAULT_RETRY = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(
        (
            httpx.ConnectError,
            httpx.ConnectTimeout,
            httpx.ReadTimeout,
            httpx.WriteTimeout,
            httpx.PoolTimeout,
            httpx.HTTPStatusError,
        )
    ),
    reraise=True,
)

MAX_NOTIFY_LEN = 1900


def format_notification(entry: LogEntry) -> str:
    text = f"[{entry.level.upper()}] {entry.message}"
    error = (entry.metadata or {}).get("error")
    if error:
        text += f"\n{error}"
    return text[:MAX_NOTIFY_LEN]


class FailureNotifier:
    """Posts error entries to a Discord-compatible webhook URL. Best effort only."""

    def __init__(self, *, username: str = "Revcord Bridge", timeout: float = 10.0) -> None:
        self._username = username
        self._timeout = timeout
        self._tasks: set[asyncio.Task] = set()

    @DEFAULT_RETRY
    async def _post(self, url: str, payload: dict[str, str]) -> None:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(url, json=payload)
            resp.raise_for_status()

    async def notify(self, url: str, entry: LogEntry) -> bool:
        """Send one notification. Failures are logged to loguru only, never to the journal."""
        payload = {"content": format_notification(entry), "username": self._username}
        try:
            await self._post(url, payload)
        except Exception as exc:
            logger.warning("Failure notification to webhook failed: {}", exc)
            return False
        logger.debug("Sent failure notification for log entry {}", entry.id)
        return True

    def schedule(self, url: str, entry: LogEntry) -> None:
        """Fire-and-forget notify; skipped when no event loop is running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; skipping failure notification for entry {}", entry.id)
            return
        task = loop.create_task(self.notify(url, entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for pending notifications (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
