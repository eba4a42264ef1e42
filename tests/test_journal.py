"""Tests for the event journal."""

from __future__ import annotations

from unittest.mock import MagicMock

from revcord.storage import EventJournal, MemoryStore, SettingsUpdate
from revcord.storage.journal import _jsonable


class TestJsonable:
    def test_scalars_pass_through(self):
        assert _jsonable(None) is None
        assert _jsonable(3) == 3
        assert _jsonable("x") == "x"

    def test_nested_containers(self):
        # Act
        result = _jsonable({"a": (1, 2), 3: {"b": ValueError("boom")}})

        # Assert
        assert result == {"a": [1, 2], "3": {"b": "boom"}}


class TestEventJournal:
    def test_entry_stored_at_or_above_threshold(self):
        # Arrange
        store = MemoryStore()
        journal = EventJournal(store)

        # Act
        journal.debug("too quiet")
        journal.info("kept", bridge_id=1)
        journal.warn("also kept")

        # Assert
        entries = store.get_logs()
        assert [(e.level, e.message) for e in entries] == [("info", "kept"), ("warn", "also kept")]
        assert entries[0].metadata == {"bridge_id": 1}

    def test_debug_threshold_stores_everything(self):
        store = MemoryStore()
        store.update_settings(SettingsUpdate(log_level="debug"))
        journal = EventJournal(store)

        entry = journal.debug("verbose")

        assert entry is not None
        assert entry.level == "debug"

    def test_error_threshold_drops_warnings(self):
        store = MemoryStore()
        store.update_settings(SettingsUpdate(log_level="error"))
        journal = EventJournal(store)

        assert journal.warn("ignored") is None
        assert journal.error("stored") is not None
        assert [e.message for e in store.get_logs()] == ["stored"]

    def test_no_metadata_stored_as_none(self):
        store = MemoryStore()

        entry = EventJournal(store).info("plain")

        assert entry.metadata is None

    def test_error_scheduled_to_notifier_when_webhook_set(self):
        # Arrange
        store = MemoryStore()
        store.update_settings(SettingsUpdate(webhook_url="https://hooks.example/x"))
        notifier = MagicMock()
        journal = EventJournal(store, notifier)

        # Act
        entry = journal.error("Failed to relay Discord message to Revolt", error="boom")

        # Assert
        notifier.schedule.assert_called_once_with("https://hooks.example/x", entry)

    def test_no_notification_without_webhook(self):
        store = MemoryStore()
        notifier = MagicMock()
        journal = EventJournal(store, notifier)

        journal.error("boom")

        notifier.schedule.assert_not_called()

    def test_no_notification_for_warnings(self):
        store = MemoryStore()
        store.update_settings(SettingsUpdate(webhook_url="https://hooks.example/x"))
        notifier = MagicMock()
        journal = EventJournal(store, notifier)

        journal.warn("just a warning")

        notifier.schedule.assert_not_called()
