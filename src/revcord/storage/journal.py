"""Event journal: log to loguru and append LogEntry records to the store."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from loguru import logger

from revcord.core.constants import LOG_LEVEL_RANK, LOGURU_LEVELS, LogLevel
from revcord.storage.models import LogEntry, LogEntryCreate

if TYPE_CHECKING:
    from revcord.notify import FailureNotifier
    from revcord.storage.memory import ConfigStore


def _jsonable(value: Any) -> Any:
    """Coerce metadata values into JSON-compatible scalars, lists and objects."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    return str(value)


class EventJournal:
    """Records observable bridge events.

    Every event goes to loguru. It is also stored as a LogEntry when its level is at
    or above ``Settings.log_level``. Error entries are forwarded to the failure
    notifier when a notification webhook is configured.
    """

    def __init__(self, store: ConfigStore, notifier: FailureNotifier | None = None) -> None:
        self._store = store
        self._notifier = notifier

    def record(
        self,
        level: LogLevel,
        message: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> LogEntry | None:
        meta = _jsonable(dict(metadata)) if metadata else None
        if meta:
            logger.opt(depth=2).log(LOGURU_LEVELS[level], "{} {}", message, meta)
        else:
            logger.opt(depth=2).log(LOGURU_LEVELS[level], "{}", message)

        settings = self._store.get_settings()
        if LOG_LEVEL_RANK[level] < LOG_LEVEL_RANK[settings.log_level]:
            return None
        entry = self._store.create_log(LogEntryCreate(level=level, message=message, metadata=meta))
        if level == "error" and self._notifier and settings.webhook_url:
            self._notifier.schedule(settings.webhook_url, entry)
        return entry

    def debug(self, message: str, **metadata: Any) -> LogEntry | None:
        return self.record("debug", message, metadata)

    def info(self, message: str, **metadata: Any) -> LogEntry | None:
        return self.record("info", message, metadata)

    def warn(self, message: str, **metadata: Any) -> LogEntry | None:
        return self.record("warn", message, metadata)

    def error(self, message: str, **metadata: Any) -> LogEntry | None:
        return self.record("error", message, metadata)
