"""Test bridge routing."""

from __future__ import annotations

import pytest

from revcord.gateway import BridgeRouter
from revcord.storage import BridgeCreate, BridgeUpdate, MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


class TestBridgeRouter:
    """Channel -> enabled Bridge lookups."""

    def test_lookup_both_directions(self, store: MemoryStore) -> None:
        # Arrange
        bridge = store.create_bridge(BridgeCreate(discord_channel_id="d1", revolt_channel_id="r1"))
        router = BridgeRouter(store)

        # Act / Assert
        assert router.get_bridge_for_discord("d1") == bridge
        assert router.get_bridge_for_revolt("r1") == bridge
        assert router.get_bridge("discord", "d1") == bridge
        assert router.get_bridge("revolt", "r1") == bridge

    def test_unbridged_channel(self, store: MemoryStore) -> None:
        store.create_bridge(BridgeCreate(discord_channel_id="d1", revolt_channel_id="r1"))
        router = BridgeRouter(store)

        assert router.get_bridge_for_discord("r1") is None
        assert router.get_bridge_for_revolt("d1") is None
        assert router.get_bridge("discord", "d9") is None

    def test_disabled_bridge_not_routed(self, store: MemoryStore) -> None:
        bridge = store.create_bridge(BridgeCreate(discord_channel_id="d1", revolt_channel_id="r1"))
        store.update_bridge(bridge.id, BridgeUpdate(enabled=False))
        router = BridgeRouter(store)

        assert router.get_bridge_for_discord("d1") is None

    def test_first_enabled_match_wins(self, store: MemoryStore) -> None:
        first = store.create_bridge(BridgeCreate(discord_channel_id="d1", revolt_channel_id="r1"))
        store.create_bridge(BridgeCreate(discord_channel_id="d1", revolt_channel_id="r2"))
        router = BridgeRouter(store)

        assert router.get_bridge_for_discord("d1").id == first.id

    def test_sees_store_changes_immediately(self, store: MemoryStore) -> None:
        router = BridgeRouter(store)
        assert router.get_bridge_for_revolt("r1") is None

        store.create_bridge(BridgeCreate(discord_channel_id="d1", revolt_channel_id="r1"))

        assert router.get_bridge_for_revolt("r1") is not None
        assert len(router.all_bridges()) == 1
