"""Configuration: YAML + env overlay."""

from revcord.config.loader import load_config, load_config_with_env
from revcord.config.schema import Config, cfg
from revcord.config.seed import seed_store

__all__ = ["Config", "cfg", "load_config", "load_config_with_env", "seed_store"]
