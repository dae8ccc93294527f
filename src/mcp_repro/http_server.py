#!/usr/bin/env python
from __future__ import annotations

import json
import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route
import uvicorn

from .config_loader import ServerConfig, configure_logging, load_config_from_env
from .core.dispatcher import RequestDispatcher
from .core.errors import INVALID_REQUEST, ParseError
from .core.tool_registry import ToolRegistry
from .framing import ResponseFramer
from .mcp_protocol import make_error_response
from .tools.echo_tool import create_registry

log = logging.getLogger(__name__)

BANNER = "MCP Repro Server is running. See console for logs."


class TrafficLoggingASGIMiddleware:
    """Dump method, headers and response status for requests to one path."""

    def __init__(self, app, path: str) -> None:
        self._app = app
        self._path = path

    async def __call__(self, scope, receive, send) -> None:
        if scope.get("type") != "http" or (scope.get("path") or "") != self._path:
            await self._app(scope, receive, send)
            return

        log.info("Received request to MCP endpoint: %s", scope.get("method"))
        log.info("Headers:")
        for key, value in scope.get("headers", []):
            log.info("- %s: %s", key.decode("latin-1"), value.decode("latin-1"))

        async def send_with_logging(message) -> None:
            if message.get("type") == "http.response.start":
                log.info("Response status: %s", message.get("status"))
                log.info("Response headers:")
                for key, value in message.get("headers", []):
                    log.info("- %s: %s", key.decode("latin-1"), value.decode("latin-1"))
            await send(message)

        await self._app(scope, receive, send_with_logging)


def log_registered_tools(registry: ToolRegistry) -> None:
    log.info("Found %d registered tool(s):", len(registry))
    for descriptor in registry.list():
        properties = descriptor.input_schema.get("properties") or {}
        parameters = ", ".join(f"{spec.get('type', 'any')} {name}" for name, spec in properties.items())
        log.info("- %s", descriptor.name)
        log.info("    Parameters: %s", parameters or "(none)")


def create_app(config: ServerConfig | None = None, registry: ToolRegistry | None = None) -> Starlette:
    # Wire registry, dispatcher and framer behind a single POST endpoint.
    cfg = config or load_config_from_env()
    tool_registry = registry if registry is not None else create_registry()
    if not tool_registry.sealed:
        tool_registry.seal()
    log_registered_tools(tool_registry)

    dispatcher = RequestDispatcher(tool_registry, legacy_direct_methods=cfg.legacy_direct_methods, logger=log)
    framer = ResponseFramer(streaming=cfg.streaming)

    async def handle_mcp(request: Request) -> Response:
        accept = request.headers.get("accept")
        body = await request.body()
        if cfg.log_traffic:
            log.info("Request body: %s", body.decode("utf-8", errors="replace"))

        try:
            payload = json.loads(body)
        except ValueError as exc:
            error = ParseError(str(exc))
            return framer.to_response(make_error_response(None, error.message, code=error.code), accept, status_code=400)

        response = await dispatcher.dispatch_payload(payload)
        status_code = 200
        if response.error is not None and response.error.get("code") == INVALID_REQUEST:
            status_code = 400
        return framer.to_response(response.to_wire(), accept, status_code=status_code)

    async def index(request: Request) -> Response:
        return PlainTextResponse(BANNER)

    async def health(request: Request) -> Response:
        return PlainTextResponse("ok")

    app = Starlette(
        routes=[
            Route(cfg.endpoint_path, handle_mcp, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
            Route("/", index, methods=["GET"]),
        ],
    )
    if cfg.log_traffic:
        app.add_middleware(TrafficLoggingASGIMiddleware, path=cfg.endpoint_path)
    app.state.config = cfg
    app.state.dispatcher = dispatcher
    log.info("MCP endpoint mapped to %s (streaming=%s legacy=%s)", cfg.endpoint_path, cfg.streaming, cfg.legacy_direct_methods)
    return app


def run_from_env() -> None:
    # Read host/port from environment and serve via Uvicorn.
    cfg = load_config_from_env()
    configure_logging(cfg.log_level)
    app = create_app(cfg)
    uvicorn.run(app, host=cfg.server_host, port=cfg.server_port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    run_from_env()
