"""Attachment download for rehosting files on the target platform."""

from __future__ import annotations

import posixpath
from urllib.parse import urlsplit

import aiohttp
from loguru import logger

from revcord.core.errors import UploadFailedError
from revcord.events import Attachment

DEFAULT_MAX_BYTES = 20 * 1024 * 1024
_ERROR_BODY_LIMIT = 200


def attachment_filename(attachment: Attachment) -> str:
    """Declared filename, else the last path segment of the URL."""
    if attachment.filename:
        return attachment.filename
    name = posixpath.basename(urlsplit(attachment.url).path)
    return name or "attachment"


async def fetch_attachment(
    session: aiohttp.ClientSession,
    attachment: Attachment,
    *,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> tuple[bytes, str]:
    """Download one attachment. Returns (data, filename).

    Raises UploadFailedError with the HTTP status and a body excerpt on a non-200
    response, and when the file exceeds max_bytes.
    """
    filename = attachment_filename(attachment)
    try:
        async with session.get(attachment.url) as resp:
            if resp.status != 200:
                body = (await resp.text(errors="replace"))[:_ERROR_BODY_LIMIT]
                raise UploadFailedError(
                    f"Failed to download attachment {filename}: HTTP {resp.status}",
                    code="download_failed",
                    details={"url": attachment.url, "status": resp.status, "body": body},
                )
            if resp.content_length is not None and resp.content_length > max_bytes:
                raise UploadFailedError(
                    f"Attachment {filename} is too large ({resp.content_length} bytes)",
                    code="attachment_too_large",
                    details={"url": attachment.url, "size": resp.content_length, "max_bytes": max_bytes},
                )
            data = await resp.read()
    except aiohttp.ClientError as exc:
        raise UploadFailedError(
            f"Failed to download attachment {filename}: {exc}",
            code="download_failed",
            details={"url": attachment.url},
            original_error=exc,
        ) from exc

    if len(data) > max_bytes:
        raise UploadFailedError(
            f"Attachment {filename} is too large ({len(data)} bytes)",
            code="attachment_too_large",
            details={"url": attachment.url, "size": len(data), "max_bytes": max_bytes},
        )
    logger.debug("Downloaded attachment {} ({} bytes)", filename, len(data))
    return data, filename
