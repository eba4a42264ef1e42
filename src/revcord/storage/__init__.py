"""Config store, record models and the event journal."""

from revcord.storage.journal import EventJournal
from revcord.storage.memory import ConfigStore, MemoryStore
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

__all__ = [
    "Bridge",
    "BridgeCreate",
    "BridgeUpdate",
    "ConfigStore",
    "EventJournal",
    "LogEntry",
    "LogEntryCreate",
    "Masquerade",
    "MasqueradeCreate",
    "MasqueradeUpdate",
    "MemoryStore",
    "Settings",
    "SettingsUpdate",
]
