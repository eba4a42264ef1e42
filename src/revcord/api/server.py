"""Admin HTTP API: bridges, masquerades, settings, logs."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from aiohttp import web
from aiohttp.web import Request
from loguru import logger
from pydantic import BaseModel, ValidationError

from revcord.storage import (
    BridgeCreate,
    BridgeUpdate,
    MasqueradeCreate,
    MasqueradeUpdate,
    SettingsUpdate,
)
from revcord.storage.memory import DEFAULT_LOG_LIMIT

if TYPE_CHECKING:
    from revcord.gateway import BridgeSupervisor
    from revcord.storage import ConfigStore

M = TypeVar("M", bound=BaseModel)

STORE_KEY: web.AppKey[ConfigStore] = web.AppKey("store")
SUPERVISOR_KEY: web.AppKey[BridgeSupervisor] = web.AppKey("supervisor")


class InvalidRequest(Exception):
    """Request body, path or query failed validation (400)."""

    def __init__(self, issues: list[dict[str, Any]]) -> None:
        super().__init__("Invalid request")
        self.issues = issues


def _issue(loc: Sequence[str | int], msg: str, kind: str = "value_error") -> dict[str, Any]:
    return {"type": kind, "loc": list(loc), "msg": msg}


def _dump(value: BaseModel | Sequence[BaseModel]) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return [v.model_dump(mode="json", by_alias=True) for v in value]


def _int_param(raw: str, loc: Sequence[str]) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidRequest([_issue(loc, "Input should be a valid integer", "int_parsing")]) from None


async def _parse_body(request: Request, model: type[M]) -> M:
    try:
        data = await request.json()
    except ValueError:
        raise InvalidRequest([_issue(["body"], "Request body must be valid JSON", "json_invalid")]) from None
    if not isinstance(data, dict):
        raise InvalidRequest([_issue(["body"], "Request body must be a JSON object", "model_type")])
    return model.model_validate(data)


@web.middleware
async def error_middleware(request: Request, handler):
    """400 for validation failures; 500 with the exception message for anything else."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as exc:
        issues = json.loads(exc.json(include_url=False))
        return web.json_response({"error": {"issues": issues}}, status=400)
    except InvalidRequest as exc:
        return web.json_response({"error": {"issues": exc.issues}}, status=400)
    except Exception as exc:
        logger.exception("Unhandled error in {} {}: {}", request.method, request.path, exc)
        return web.json_response({"message": str(exc)}, status=500)


# --- Bridges ---


async def list_bridges(request: Request) -> web.Response:
    return web.json_response(_dump(request.app[STORE_KEY].get_bridges()))


async def create_bridge(request: Request) -> web.Response:
    data = await _parse_body(request, BridgeCreate)
    return web.json_response(_dump(request.app[STORE_KEY].create_bridge(data)))


async def update_bridge(request: Request) -> web.Response:
    bridge_id = _int_param(request.match_info["id"], ["path", "id"])
    data = await _parse_body(request, BridgeUpdate)
    return web.json_response(_dump(request.app[STORE_KEY].update_bridge(bridge_id, data)))


async def delete_bridge(request: Request) -> web.Response:
    bridge_id = _int_param(request.match_info["id"], ["path", "id"])
    request.app[STORE_KEY].delete_bridge(bridge_id)
    return web.Response(status=204)


# --- Masquerades ---


async def list_masquerades(request: Request) -> web.Response:
    bridge_id = _int_param(request.match_info["bridge_id"], ["path", "bridge_id"])
    return web.json_response(_dump(request.app[STORE_KEY].get_masquerades(bridge_id)))


async def create_masquerade(request: Request) -> web.Response:
    data = await _parse_body(request, MasqueradeCreate)
    return web.json_response(_dump(request.app[STORE_KEY].create_masquerade(data)))


async def update_masquerade(request: Request) -> web.Response:
    masquerade_id = _int_param(request.match_info["id"], ["path", "id"])
    data = await _parse_body(request, MasqueradeUpdate)
    return web.json_response(_dump(request.app[STORE_KEY].update_masquerade(masquerade_id, data)))


async def delete_masquerade(request: Request) -> web.Response:
    masquerade_id = _int_param(request.match_info["id"], ["path", "id"])
    request.app[STORE_KEY].delete_masquerade(masquerade_id)
    return web.Response(status=204)


# --- Settings ---


async def get_settings(request: Request) -> web.Response:
    return web.json_response(_dump(request.app[STORE_KEY].get_settings()))


async def update_settings(request: Request) -> web.Response:
    """Merge settings, then re-initialize the bridge before responding."""
    data = await _parse_body(request, SettingsUpdate)
    settings = request.app[STORE_KEY].update_settings(data)
    logger.info("Updating settings and reinitializing bridge")
    await request.app[SUPERVISOR_KEY].initialize()
    return web.json_response(_dump(settings))


# --- Logs / health ---


async def get_logs(request: Request) -> web.Response:
    limit = _int_param(request.query.get("limit", str(DEFAULT_LOG_LIMIT)), ["query", "limit"])
    return web.json_response(_dump(request.app[STORE_KEY].get_logs(limit)))


async def health(request: Request) -> web.Response:
    return web.json_response({"status": "healthy"})


def create_app(store: ConfigStore, supervisor: BridgeSupervisor) -> web.Application:
    """Build the admin application."""
    app = web.Application(middlewares=[error_middleware])
    app[STORE_KEY] = store
    app[SUPERVISOR_KEY] = supervisor
    app.router.add_get("/api/bridges", list_bridges)
    app.router.add_post("/api/bridges", create_bridge)
    app.router.add_patch("/api/bridges/{id}", update_bridge)
    app.router.add_delete("/api/bridges/{id}", delete_bridge)
    app.router.add_get("/api/bridges/{bridge_id}/masquerades", list_masquerades)
    app.router.add_post("/api/masquerades", create_masquerade)
    app.router.add_patch("/api/masquerades/{id}", update_masquerade)
    app.router.add_delete("/api/masquerades/{id}", delete_masquerade)
    app.router.add_get("/api/settings", get_settings)
    app.router.add_patch("/api/settings", update_settings)
    app.router.add_get("/api/logs", get_logs)
    app.router.add_get("/health", health)
    return app


class AdminServer:
    """Runs the admin application on a TCP site."""

    def __init__(self, store: ConfigStore, supervisor: BridgeSupervisor, *, host: str, port: int) -> None:
        self.host = host
        self.port = port
        self.app = create_app(store, supervisor)
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None

    async def start(self) -> None:
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()
        logger.info("Admin API listening on http://{}:{}", self.host, self.port)

    async def stop(self) -> None:
        if self.site:
            await self.site.stop()
        if self.runner:
            await self.runner.cleanup()
        self.site = None
        self.runner = None
        logger.info("Admin API stopped")
