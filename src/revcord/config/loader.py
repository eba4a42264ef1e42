"""Read config.yaml (bridge seeds, API bind, Revolt endpoints) and the .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger


def load_config(path: str | Path) -> dict[str, Any]:
    """Parse the bridge config file.

    A missing or empty file, or one whose top level is not a mapping, yields ``{}``
    so the bridge can still start from env tokens and the admin API. Malformed YAML
    is logged and re-raised.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Bridge config {} not found; starting with defaults", path)
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        logger.error("Bridge config {} is not valid YAML: {}", path, exc)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Bridge config {} must be a mapping, got {}", path, type(data).__name__)
        return {}
    return data


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load .env first so BRIDGE_* tokens and PORT are visible to Config."""
    from dotenv import load_dotenv

    load_dotenv()
    return load_config(path)
