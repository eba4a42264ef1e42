"""Tests for failure notifications."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from revcord.notify import FailureNotifier, format_notification
from revcord.storage.models import LogEntry

URL = "https://hooks.example/webhook"


def _entry(message: str = "Failed to relay Discord message to Revolt", **metadata) -> LogEntry:
    return LogEntry(
        id=7,
        timestamp="2024-01-01T00:00:00.000Z",
        level="error",
        message=message,
        metadata=metadata or None,
    )


class TestFormatNotification:
    def test_includes_level_and_message(self):
        assert format_notification(_entry()) == "[ERROR] Failed to relay Discord message to Revolt"

    def test_appends_error_detail(self):
        text = format_notification(_entry(error="Missing Permissions"))

        assert text.endswith("\nMissing Permissions")

    def test_truncated(self):
        text = format_notification(_entry(message="x" * 5000))

        assert len(text) == 1900


class TestFailureNotifier:
    @pytest.mark.asyncio
    async def test_notify_posts_payload(self):
        # Arrange
        notifier = FailureNotifier(username="Bridge Alerts")

        # Act
        with patch.object(FailureNotifier, "_post", new=AsyncMock()) as post:
            ok = await notifier.notify(URL, _entry(error="boom"))

        # Assert
        assert ok is True
        post.assert_awaited_once()
        url, payload = post.await_args.args
        assert url == URL
        assert payload["username"] == "Bridge Alerts"
        assert "boom" in payload["content"]

    @pytest.mark.asyncio
    async def test_notify_failure_returns_false(self):
        notifier = FailureNotifier()
        error = httpx.ConnectError("refused")

        with patch.object(FailureNotifier, "_post", new=AsyncMock(side_effect=error)):
            ok = await notifier.notify(URL, _entry())

        assert ok is False

    @pytest.mark.asyncio
    async def test_schedule_then_drain(self):
        notifier = FailureNotifier()

        with patch.object(FailureNotifier, "_post", new=AsyncMock()) as post:
            notifier.schedule(URL, _entry())
            await notifier.drain()

        post.assert_awaited_once()

    def test_schedule_without_loop_is_skipped(self):
        notifier = FailureNotifier()

        with patch.object(FailureNotifier, "_post", new=AsyncMock()) as post:
            notifier.schedule(URL, _entry())

        post.assert_not_called()
