"""Content formatting for cross-platform relay."""

from revcord.formatting.attachments import (
    IMAGE_HEADER,
    append_image_links,
    append_links,
    autumn_url,
    image_attachments,
    is_image,
)
from revcord.formatting.mentions import defuse_revolt_mentions

__all__ = [
    "IMAGE_HEADER",
    "append_image_links",
    "append_links",
    "autumn_url",
    "defuse_revolt_mentions",
    "image_attachments",
    "is_image",
]
