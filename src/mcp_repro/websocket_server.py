#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""WebSocket transport for the request dispatcher.

One JSON envelope per text frame in each direction. WebSocket frames are
already message-delimited, so responses are always plain JSON.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from websockets.asyncio.server import Server, ServerConnection, serve

from .config_loader import ServerConfig, configure_logging, load_config_from_env
from .core.dispatcher import RequestDispatcher
from .core.errors import ParseError
from .mcp_protocol import make_error_response
from .tools.echo_tool import create_registry

log = logging.getLogger(__name__)


class MCPWebSocketServer:
    """Serve the dispatcher over WebSocket."""

    def __init__(self, config: ServerConfig, dispatcher: Optional[RequestDispatcher] = None):
        self.config = config
        self._server: Optional[Server] = None
        self._dispatcher = dispatcher or RequestDispatcher(
            create_registry(),
            legacy_direct_methods=config.legacy_direct_methods,
            logger=log,
        )

    @property
    def bound_port(self) -> Optional[int]:
        if self._server is None:
            return None
        for sock in self._server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self) -> None:
        cfg = self.config
        log.info("Starting MCP WebSocket server on ws://%s:%s", cfg.server_host, cfg.server_port)
        try:
            self._server = await serve(self._handle_client, cfg.server_host, cfg.server_port)
        except OSError as exc:
            raise RuntimeError(f"Could not bind port {cfg.server_port}: {exc}") from exc

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def _handle_client(self, websocket: ServerConnection) -> None:
        async for message in websocket:
            try:
                payload = json.loads(message)
            except ValueError as exc:
                error = ParseError(str(exc))
                await websocket.send(json.dumps(make_error_response(None, error.message, code=error.code)))
                continue

            response = await self._dispatcher.dispatch_payload(payload)
            await websocket.send(json.dumps(response.to_wire()))


async def run_async(config: Optional[ServerConfig] = None) -> None:
    cfg = config or load_config_from_env()
    server = MCPWebSocketServer(cfg)
    await server.start()
    try:
        await asyncio.Future()  # run forever
    finally:
        await server.stop()


def run_from_env() -> None:
    cfg = load_config_from_env()
    configure_logging(cfg.log_level)
    try:
        asyncio.run(run_async(cfg))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run_from_env()
