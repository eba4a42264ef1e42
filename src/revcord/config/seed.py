"""Startup seeding of the in-memory store from config and environment."""

from __future__ import annotations

from loguru import logger

from revcord.config.schema import Config
from revcord.storage import BridgeCreate, ConfigStore, SettingsUpdate


def seed_store(store: ConfigStore, config: Config) -> int:
    """Fill empty tokens and create configured bridges. Returns bridges created."""
    settings = store.get_settings()
    update: dict[str, str] = {}
    if not settings.discord_token and config.discord_token:
        update["discord_token"] = config.discord_token
    if not settings.revolt_token and config.revolt_token:
        update["revolt_token"] = config.revolt_token
    if update:
        store.update_settings(SettingsUpdate(**update))
        logger.info("Seeded settings tokens from config: {}", ", ".join(sorted(update)))

    existing = {(b.discord_channel_id, b.revolt_channel_id) for b in store.get_bridges()}
    created = 0
    for item in config.bridges:
        pair = (str(item["discord_channel_id"]), str(item["revolt_channel_id"]))
        if pair in existing:
            continue
        store.create_bridge(
            BridgeCreate(
                discord_channel_id=pair[0],
                revolt_channel_id=pair[1],
                enabled=bool(item.get("enabled", True)),
            )
        )
        existing.add(pair)
        created += 1
    if created:
        logger.info("Seeded {} bridges from config", created)
    return created
