"""In-memory config store: bridges, masquerades, settings, and the log ring."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Protocol

from loguru import logger

from revcord.core.errors import NotFoundError
from revcord.storage.models import (
    Bridge,
    BridgeCreate,
    BridgeUpdate,
    LogEntry,
    LogEntryCreate,
    Masquerade,
    MasqueradeCreate,
    MasqueradeUpdate,
    Settings,
    SettingsUpdate,
)

MAX_LOG_ENTRIES = 1000
LOG_WINDOW = timedelta(hours=24)
DEFAULT_LOG_LIMIT = 100


class ConfigStore(Protocol):
    """Data access used by the relay, the lifecycle supervisor and the admin API."""

    def get_bridges(self) -> list[Bridge]: ...
    def get_bridge(self, bridge_id: int) -> Bridge | None: ...
    def create_bridge(self, data: BridgeCreate) -> Bridge: ...
    def update_bridge(self, bridge_id: int, data: BridgeUpdate) -> Bridge: ...
    def delete_bridge(self, bridge_id: int) -> None: ...

    def get_masquerades(self, bridge_id: int) -> list[Masquerade]: ...
    def get_masquerade(self, masquerade_id: int) -> Masquerade | None: ...
    def create_masquerade(self, data: MasqueradeCreate) -> Masquerade: ...
    def update_masquerade(self, masquerade_id: int, data: MasqueradeUpdate) -> Masquerade: ...
    def delete_masquerade(self, masquerade_id: int) -> None: ...

    def get_settings(self) -> Settings: ...
    def update_settings(self, data: SettingsUpdate) -> Settings: ...

    def get_logs(self, limit: int = DEFAULT_LOG_LIMIT) -> list[LogEntry]: ...
    def create_log(self, data: LogEntryCreate) -> LogEntry: ...
    def clear_error_logs(self) -> None: ...


def _parse_timestamp(value: str) -> datetime | None:
    try:
        ts = datetime.fromisoformat(value)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class MemoryStore:
    """Dict-backed ConfigStore. Records are replaced whole and handed out as copies."""

    def __init__(self, *, max_logs: int = MAX_LOG_ENTRIES) -> None:
        self._bridges: dict[int, Bridge] = {}
        self._masquerades: dict[int, Masquerade] = {}
        self._settings: Settings | None = None
        self._logs: deque[LogEntry] = deque(maxlen=max_logs)
        self._bridge_ids = count(1)
        self._masquerade_ids = count(1)
        self._settings_ids = count(1)
        self._log_ids = count(1)

    # --- Bridges ---

    def get_bridges(self) -> list[Bridge]:
        return [b.model_copy() for b in self._bridges.values()]

    def get_bridge(self, bridge_id: int) -> Bridge | None:
        bridge = self._bridges.get(bridge_id)
        return bridge.model_copy() if bridge else None

    def create_bridge(self, data: BridgeCreate) -> Bridge:
        bridge = Bridge(id=next(self._bridge_ids), **data.model_dump())
        self._bridges[bridge.id] = bridge
        logger.debug("Store: created bridge {} ({} <-> {})", bridge.id, bridge.discord_channel_id, bridge.revolt_channel_id)
        return bridge.model_copy()

    def update_bridge(self, bridge_id: int, data: BridgeUpdate) -> Bridge:
        existing = self._bridges.get(bridge_id)
        if existing is None:
            raise NotFoundError("Bridge not found", code="bridge_not_found", details={"id": bridge_id})
        updated = existing.model_copy(update=data.changes())
        self._bridges[bridge_id] = updated
        return updated.model_copy()

    def delete_bridge(self, bridge_id: int) -> None:
        self._bridges.pop(bridge_id, None)

    # --- Masquerades ---

    def get_masquerades(self, bridge_id: int) -> list[Masquerade]:
        return [m.model_copy() for m in self._masquerades.values() if m.bridge_id == bridge_id]

    def get_masquerade(self, masquerade_id: int) -> Masquerade | None:
        masquerade = self._masquerades.get(masquerade_id)
        return masquerade.model_copy() if masquerade else None

    def create_masquerade(self, data: MasqueradeCreate) -> Masquerade:
        masquerade = Masquerade(id=next(self._masquerade_ids), **data.model_dump())
        self._masquerades[masquerade.id] = masquerade
        return masquerade.model_copy()

    def update_masquerade(self, masquerade_id: int, data: MasqueradeUpdate) -> Masquerade:
        existing = self._masquerades.get(masquerade_id)
        if existing is None:
            raise NotFoundError(
                "Masquerade not found",
                code="masquerade_not_found",
                details={"id": masquerade_id},
            )
        updated = existing.model_copy(update=data.changes())
        self._masquerades[masquerade_id] = updated
        return updated.model_copy()

    def delete_masquerade(self, masquerade_id: int) -> None:
        self._masquerades.pop(masquerade_id, None)

    # --- Settings ---

    def get_settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings(id=next(self._settings_ids))
        return self._settings.model_copy()

    def update_settings(self, data: SettingsUpdate) -> Settings:
        current = self._settings or Settings(id=next(self._settings_ids))
        self._settings = current.model_copy(update=data.changes())
        return self._settings.model_copy()

    # --- Logs ---

    def get_logs(self, limit: int = DEFAULT_LOG_LIMIT) -> list[LogEntry]:
        """Most recent ``limit`` entries from the last 24 hours, oldest first."""
        if limit <= 0:
            return []
        cutoff = datetime.now(timezone.utc) - LOG_WINDOW
        recent = []
        for entry in self._logs:
            ts = _parse_timestamp(entry.timestamp)
            if ts is not None and ts >= cutoff:
                recent.append(entry)
        return [e.model_copy(deep=True) for e in recent[-limit:]]

    def create_log(self, data: LogEntryCreate) -> LogEntry:
        entry = LogEntry(id=next(self._log_ids), **data.model_dump())
        # deque(maxlen) evicts the oldest entry on overflow
        self._logs.append(entry)
        return entry.model_copy(deep=True)

    def clear_error_logs(self) -> None:
        kept = [e for e in self._logs if e.level != "error"]
        self._logs = deque(kept, maxlen=self._logs.maxlen)