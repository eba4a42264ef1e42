"""Attachment selection and link rendering for relayed content."""

from __future__ import annotations

import re
from collections.abc import Iterable

from revcord.events import Attachment

_IMAGE_EXT_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)

IMAGE_HEADER = "Attached images:"


def is_image(attachment: Attachment) -> bool:
    """Image by declared content type, or by file extension when the type is missing."""
    if attachment.content_type and attachment.content_type.startswith("image/"):
        return True
    path = attachment.url.split("?", 1)[0]
    return bool(_IMAGE_EXT_RE.search(path))


def image_attachments(attachments: Iterable[Attachment]) -> list[Attachment]:
    return [a for a in attachments if is_image(a)]


def append_image_links(content: str, images: list[Attachment]) -> str:
    """Discord -> Revolt: blank line, header, one image URL per line."""
    if not images:
        return content
    block = IMAGE_HEADER + "\n" + "\n".join(a.url for a in images)
    return f"{content}\n\n{block}" if content else block


def append_links(content: str, attachments: list[Attachment]) -> str:
    """Revolt -> Discord: every attachment URL on its own line, unfiltered."""
    if not attachments:
        return content
    links = "\n".join(a.url for a in attachments)
    return f"{content}\n{links}" if content else links


def autumn_url(base: str, tag: str, file_id: str) -> str:
    """Durable Revolt file URL, e.g. ``https://autumn.revolt.chat/attachments/<id>``."""
    return f"{base.rstrip('/')}/{tag}/{file_id}"
