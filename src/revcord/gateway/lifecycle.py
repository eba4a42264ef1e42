"""Bridge supervisor: (re)builds both adapters from the current settings."""

from __future__ import annotations

import asyncio
import traceback
from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger

from revcord.adapters import AdapterBase, DiscordAdapter, RevoltAdapter
from revcord.config import Config, cfg

if TYPE_CHECKING:
    from revcord.gateway.relay import Relay
    from revcord.gateway.router import BridgeRouter
    from revcord.storage import ConfigStore, EventJournal

AdapterFactory = Callable[[str], AdapterBase]


class BridgeSupervisor:
    """Owns at most one adapter per platform and swaps both on initialize()."""

    def __init__(
        self,
        store: ConfigStore,
        journal: EventJournal,
        relay: Relay,
        router: BridgeRouter,
        *,
        config: Config | None = None,
        discord_factory: AdapterFactory | None = None,
        revolt_factory: AdapterFactory | None = None,
    ) -> None:
        self._store = store
        self._journal = journal
        self._relay = relay
        self._router = router
        self._config = config or cfg
        self._discord_factory = discord_factory or self._default_discord
        self._revolt_factory = revolt_factory or self._default_revolt
        self._lock = asyncio.Lock()
        self.discord: AdapterBase | None = None
        self.revolt: AdapterBase | None = None

    def _default_discord(self, token: str) -> AdapterBase:
        return DiscordAdapter(
            token,
            self._router,
            self._journal,
            webhook_name=self._config.webhook_name,
            max_attachment_bytes=self._config.max_attachment_bytes,
        )

    def _default_revolt(self, token: str) -> AdapterBase:
        return RevoltAdapter(
            token,
            self._router,
            self._journal,
            api_url=self._config.revolt_api_url,
            autumn_url=self._config.autumn_url,
            max_attachment_bytes=self._config.max_attachment_bytes,
        )

    @property
    def active(self) -> bool:
        return self.discord is not None and self.revolt is not None

    async def initialize(self) -> bool:
        """Stop running adapters, then start new ones from the stored tokens.

        Returns True when both adapters were started. Missing tokens and any
        startup exception are journaled; the relay stays inactive.
        """
        async with self._lock:
            try:
                settings = self._store.get_settings()
                self._journal.info(
                    "Attempting to initialize bridge with settings",
                    discord_token_present=bool(settings.discord_token),
                    revolt_token_present=bool(settings.revolt_token),
                )
                await self._stop_adapters()

                if not settings.discord_token or not settings.revolt_token:
                    self._journal.error(
                        "Bot tokens not configured",
                        discord_token_set=bool(settings.discord_token),
                        revolt_token_set=bool(settings.revolt_token),
                    )
                    return False

                self.discord = self._discord_factory(settings.discord_token)
                self.revolt = self._revolt_factory(settings.revolt_token)
                self._relay.attach(self.discord, self.revolt)
                await self.discord.start()
                await self.revolt.start()

                self._store.clear_error_logs()
                self._journal.info("Bridge initialized successfully")
                return True
            except Exception as exc:
                self._journal.error(
                    "Failed to initialize bridge",
                    error=str(exc),
                    stack=traceback.format_exc(),
                )
                await self._stop_adapters()
                return False

    async def _stop_adapters(self) -> None:
        self._relay.detach()
        for adapter in (self.discord, self.revolt):
            if adapter is not None:
                await adapter.stop()
                logger.info("Stopped {} adapter", adapter.name)
        self.discord = None
        self.revolt = None

    async def shutdown(self) -> None:
        """Stop both adapters; the supervisor can be initialized again afterwards."""
        async with self._lock:
            await self._stop_adapters()
