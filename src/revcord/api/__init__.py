"""Admin HTTP API."""

from revcord.api.server import AdminServer, create_app

__all__ = ["AdminServer", "create_app"]
