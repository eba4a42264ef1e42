"""Tests for attachment downloads."""

from __future__ import annotations

from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from revcord.adapters.media import attachment_filename, fetch_attachment
from revcord.core.errors import UploadFailedError
from revcord.events import Attachment

PNG = b"\x89PNG" + b"\x00" * 60


async def _png(request: web.Request) -> web.Response:
    return web.Response(body=PNG, content_type="image/png")


async def _forbidden(request: web.Request) -> web.Response:
    return web.Response(status=403, text="Access denied")


@pytest_asyncio.fixture
async def server() -> AsyncIterator[test_utils.TestServer]:
    app = web.Application()
    app.router.add_get("/files/a.png", _png)
    app.router.add_get("/files/secret.png", _forbidden)
    async with test_utils.TestServer(app) as srv:
        yield srv


def test_attachment_filename() -> None:
    assert attachment_filename(Attachment(url="https://x/y/z.png", filename="given.png")) == "given.png"
    assert attachment_filename(Attachment(url="https://x/y/z.png?size=1")) == "z.png"
    assert attachment_filename(Attachment(url="https://x/")) == "attachment"


class TestFetchAttachment:
    @pytest.mark.asyncio
    async def test_downloads_bytes(self, server: test_utils.TestServer) -> None:
        # Arrange
        attachment = Attachment(url=str(server.make_url("/files/a.png")))

        # Act
        async with aiohttp.ClientSession() as session:
            data, filename = await fetch_attachment(session, attachment)

        # Assert
        assert data == PNG
        assert filename == "a.png"

    @pytest.mark.asyncio
    async def test_non_200_includes_status_and_body(self, server: test_utils.TestServer) -> None:
        attachment = Attachment(url=str(server.make_url("/files/secret.png")))

        async with aiohttp.ClientSession() as session:
            with pytest.raises(UploadFailedError) as exc_info:
                await fetch_attachment(session, attachment)

        assert exc_info.value.code == "download_failed"
        assert exc_info.value.details["status"] == 403
        assert exc_info.value.details["body"] == "Access denied"

    @pytest.mark.asyncio
    async def test_too_large(self, server: test_utils.TestServer) -> None:
        attachment = Attachment(url=str(server.make_url("/files/a.png")))

        async with aiohttp.ClientSession() as session:
            with pytest.raises(UploadFailedError) as exc_info:
                await fetch_attachment(session, attachment, max_bytes=10)

        assert exc_info.value.code == "attachment_too_large"

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self) -> None:
        attachment = Attachment(url="http://127.0.0.1:1/a.png")

        async with aiohttp.ClientSession() as session:
            with pytest.raises(UploadFailedError) as exc_info:
                await fetch_attachment(session, attachment)

        assert exc_info.value.code == "download_failed"
        assert isinstance(exc_info.value.original_error, aiohttp.ClientError)
