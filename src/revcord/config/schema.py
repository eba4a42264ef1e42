"""Config schema and accessor."""

from __future__ import annotations

import os
from typing import Any

from loguru import logger

from revcord.core.errors import BridgeConfigurationError

# Env keys that override config (loaded once per reload)
_ENV_OVERRIDE_KEYS = (
    "PORT",
    "BRIDGE_API_HOST",
    "BRIDGE_REHOST_IMAGES",
    "BRIDGE_DISCORD_TOKEN",
    "BRIDGE_REVOLT_TOKEN",
)

DEFAULT_MAX_ATTACHMENT_BYTES = 20 * 1024 * 1024


def _load_env_overrides() -> dict[str, str]:
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


def _parse_bool_env(val: str) -> bool | None:
    """Parse env string to bool; None if not a recognized bool."""
    v = val.lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    return None


class Config:
    """Config accessor with attribute-style access for nested keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data."""
        self._data = data or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug("Config reloaded: {} seed bridges", len(self.bridges))

    def _validate(self) -> None:
        """Validate config structure; raise BridgeConfigurationError on failure."""
        bridges = self._data.get("bridges")
        if bridges is not None and not isinstance(bridges, list):
            raise BridgeConfigurationError(
                "bridges must be a list",
                code="invalid_bridges",
                details={"type": type(bridges).__name__},
            )
        for i, item in enumerate(self.bridges):
            if not isinstance(item, dict):
                raise BridgeConfigurationError(
                    f"bridges[{i}] must be a dict",
                    code="invalid_bridge_item",
                    details={"index": i},
                )
            for key in ("discord_channel_id", "revolt_channel_id"):
                if not item.get(key):
                    raise BridgeConfigurationError(
                        f"bridges[{i}] missing {key}",
                        code=f"missing_{key}",
                        details={"index": i},
                    )
        port = self._data.get("api_port")
        if port is not None and not str(port).isdigit():
            raise BridgeConfigurationError(
                "api_port must be an integer",
                code="invalid_api_port",
                details={"value": str(port)},
            )

    @property
    def bridges(self) -> list[dict[str, Any]]:
        """Bridges created in the store at startup."""
        b = self._data.get("bridges")
        return b if isinstance(b, list) else []

    @property
    def api_host(self) -> str:
        return self._env.get("BRIDGE_API_HOST") or str(self._data.get("api_host", "0.0.0.0"))

    @property
    def api_port(self) -> int:
        env_val = self._env.get("PORT", "")
        if env_val.isdigit():
            return int(env_val)
        return int(self._data.get("api_port", 5000))

    @property
    def revolt_api_url(self) -> str:
        return str(self._data.get("revolt_api_url", "https://api.revolt.chat")).rstrip("/")

    @property
    def autumn_url(self) -> str:
        """Revolt file server; attachment and avatar URLs are built from it."""
        return str(self._data.get("autumn_url", "https://autumn.revolt.chat")).rstrip("/")

    @property
    def rehost_images(self) -> bool:
        """Upload Discord images to Revolt as files instead of linking them."""
        parsed = _parse_bool_env(self._env.get("BRIDGE_REHOST_IMAGES", ""))
        if parsed is not None:
            return parsed
        return bool(self._data.get("rehost_images", False))

    @property
    def max_attachment_bytes(self) -> int:
        return int(self._data.get("max_attachment_bytes", DEFAULT_MAX_ATTACHMENT_BYTES))

    @property
    def webhook_name(self) -> str:
        """Name of the Discord webhook created per channel, and of failure notifications."""
        return str(self._data.get("webhook_name", "Revcord Bridge"))

    @property
    def discord_token(self) -> str:
        return self._env.get("BRIDGE_DISCORD_TOKEN") or str(self._data.get("discord_token", ""))

    @property
    def revolt_token(self) -> str:
        return self._env.get("BRIDGE_REVOLT_TOKEN") or str(self._data.get("revolt_token", ""))


cfg: Config = Config({})
