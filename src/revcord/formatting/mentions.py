"""Neutralize mention syntax in text relayed to Revolt."""

from __future__ import annotations

import re

ZWSP = "\u200b"

_MASS_MENTION_RE = re.compile(r"@(everyone|online|here)\b", re.IGNORECASE)
# <@01ARZ3NDEKTSV4RRFFQ69G5FAV> (user), <%01ARZ3...> (role)
_ID_MENTION_RE = re.compile(r"<([@%])([0-9A-Z]{26})>")


def defuse_revolt_mentions(content: str) -> str:
    """Insert a zero-width space so Revolt renders mentions as plain text without pinging."""
    content = _MASS_MENTION_RE.sub(lambda m: f"@{ZWSP}{m.group(1)}", content)
    return _ID_MENTION_RE.sub(lambda m: f"<{m.group(1)}{ZWSP}{m.group(2)}>", content)
