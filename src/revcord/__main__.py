"""Bridge entrypoint. Loads config, seeds the store, serves the admin API, runs the bridge."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from revcord import __version__
from revcord.api import AdminServer
from revcord.config import Config, cfg, load_config_with_env, seed_store
from revcord.gateway import BridgeRouter, BridgeSupervisor, Relay
from revcord.identity import MasqueradeResolver
from revcord.notify import FailureNotifier
from revcord.storage import EventJournal, MemoryStore

# Third-party libraries to intercept and route through loguru
_INTERCEPTED_LIBRARIES = ["discord", "revolt", "aiohttp.access", "aiohttp.server"]


def _intercept_logging(level: str) -> None:
    """Route third-party library logs to loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                log_level = logger.level(record.levelname).name
            except ValueError:
                log_level = str(record.levelno)
            msg = record.getMessage().replace("{", "{{").replace("}", "}}")
            logger.patch(
                lambda r: r.update(
                    name=record.name,
                    function=record.funcName,
                    line=record.lineno,
                ),
            ).opt(exception=record.exc_info).log(log_level, msg)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for lib in _INTERCEPTED_LIBRARIES:
        lib_logger = logging.getLogger(lib)
        lib_logger.handlers = [InterceptHandler()]
        lib_logger.propagate = False
        # Library loggers stay at WARNING unless running at DEBUG
        lib_logger.setLevel(level if level == "DEBUG" else "WARNING")


def _safe_message_filter(record: Any) -> bool:
    """Escape braces/angles in log messages to prevent format/tag errors."""
    if isinstance(record.get("message"), str):
        msg = record["message"]
        msg = msg.replace("{", "{{").replace("}", "}}").replace("<", "\\<")
        record["message"] = msg
    return True


def _log_level(verbose: bool) -> str:
    if verbose:
        return "DEBUG"
    env_level = (os.environ.get("LOG_LEVEL") or "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        return env_level
    return "INFO"


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging.
    Level: verbose=True or LOG_LEVEL=DEBUG enables DEBUG; otherwise INFO."""
    level = _log_level(verbose)
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"),
        filter=_safe_message_filter,
    )
    _intercept_logging(level)


def reload_config(config_path: Path) -> Config:
    """Load config from path and update global cfg."""
    data = load_config_with_env(config_path)
    cfg.reload(data)
    return cfg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Revcord Bridge: Discord <-> Revolt relay")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entrypoint."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)

    config = reload_config(args.config)
    logger.info("Config loaded from {}", args.config)

    # Run async main (uvloop if available)
    try:
        import uvloop

        uvloop.run(_run(config))
    except ImportError:
        asyncio.run(_run(config))


async def _run(config: Config) -> None:
    """Async run loop. Serve the API, initialize the bridge and wait."""
    store = MemoryStore()
    notifier = FailureNotifier(username=config.webhook_name)
    journal = EventJournal(store, notifier)
    router = BridgeRouter(store)
    relay = Relay(journal, MasqueradeResolver(store), rehost_images=config.rehost_images)
    supervisor = BridgeSupervisor(store, journal, relay, router, config=config)

    seed_store(store, config)
    logger.info("Bridge ready: {} bridges configured", len(router.all_bridges()))

    server = AdminServer(store, supervisor, host=config.api_host, port=config.api_port)
    await server.start()
    await supervisor.initialize()

    try:
        while True:
            await asyncio.sleep(60)
    except asyncio.CancelledError:
        logger.info("Bridge shutting down")
        await supervisor.shutdown()
        await server.stop()
        await notifier.drain()


if __name__ == "__main__":
    main()
