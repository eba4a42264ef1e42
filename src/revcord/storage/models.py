"""Record schemas for bridges, masquerades, settings and log entries.

Input models (``*Create`` / ``*Update``) are strict: the admin API feeds them parsed
JSON, so a number where a channel id string is expected is a validation error, not a
silent coercion. Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic.alias_generators import to_camel

from revcord.core.constants import LogLevel

LogMetadata = dict[str, JsonValue]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _Input(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)


class _Patch(_Input):
    """Partial update: unset fields are left alone, explicit nulls only clear nullable fields."""

    _nullable: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k in self._nullable}


# --- Bridge ---


class BridgeCreate(_Input):
    discord_channel_id: str = Field(min_length=1)
    revolt_channel_id: str = Field(min_length=1)
    enabled: bool = True


class BridgeUpdate(_Patch):
    discord_channel_id: str | None = Field(default=None, min_length=1)
    revolt_channel_id: str | None = Field(default=None, min_length=1)
    enabled: bool | None = None


class Bridge(_Record):
    id: int
    discord_channel_id: str
    revolt_channel_id: str
    enabled: bool = True


# --- Masquerade (per-bridge identity override) ---


class MasqueradeCreate(_Input):
    bridge_id: int
    user_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    avatar: str | None = None
    enabled: bool = True


class MasqueradeUpdate(_Patch):
    _nullable: ClassVar[frozenset[str]] = frozenset({"avatar"})

    bridge_id: int | None = None
    user_id: str | None = Field(default=None, min_length=1)
    username: str | None = Field(default=None, min_length=1)
    avatar: str | None = None
    enabled: bool | None = None


class Masquerade(_Record):
    id: int
    bridge_id: int
    user_id: str
    username: str
    avatar: str | None = None
    enabled: bool = True


# --- Settings (singleton) ---


class SettingsUpdate(_Patch):
    _nullable: ClassVar[frozenset[str]] = frozenset({"webhook_url"})

    discord_token: str | None = None
    revolt_token: str | None = None
    webhook_url: str | None = None
    log_level: LogLevel | None = None


class Settings(_Record):
    id: int
    discord_token: str = ""
    revolt_token: str = ""
    webhook_url: str | None = None
    log_level: LogLevel = "info"


# --- Log entries ---


class LogEntryCreate(_Record):
    timestamp: str = Field(default_factory=utc_now_iso)
    level: LogLevel
    message: str
    metadata: LogMetadata | None = None


class LogEntry(_Record):
    id: int
    timestamp: str
    level: LogLevel
    message: str
    metadata: LogMetadata | None = None
