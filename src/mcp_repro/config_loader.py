#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""Environment-driven configuration for the server and the probe client."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


@dataclass
class ServerConfig:
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    endpoint_path: str = "/mcp"
    streaming: bool = True
    legacy_direct_methods: bool = False
    log_traffic: bool = True
    log_level: str = "INFO"


@dataclass
class ProbeConfig:
    server_url: str = "http://127.0.0.1:8000/mcp"
    verify_tls: bool = True
    timeout_seconds: float = 10.0


def env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


def load_config_from_env() -> ServerConfig:
    host = (os.environ.get("MCP_SERVER_HOST") or "127.0.0.1").strip()
    port = int((os.environ.get("MCP_SERVER_PORT") or "8000").strip())
    endpoint = (os.environ.get("MCP_ENDPOINT_PATH") or "/mcp").strip()
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    return ServerConfig(
        server_host=host,
        server_port=port,
        endpoint_path=endpoint,
        streaming=env_flag("MCP_STREAMING", True),
        legacy_direct_methods=env_flag("MCP_LEGACY_METHODS", False),
        log_traffic=env_flag("MCP_LOG_TRAFFIC", True),
        log_level=(os.environ.get("MCP_LOG_LEVEL") or "INFO").strip().upper(),
    )


def load_probe_config_from_env() -> ProbeConfig:
    url = (os.environ.get("MCP_PROBE_URL") or "http://127.0.0.1:8000/mcp").strip()
    timeout = float((os.environ.get("MCP_PROBE_TIMEOUT") or "10").strip())
    return ProbeConfig(
        server_url=url,
        verify_tls=env_flag("MCP_PROBE_VERIFY_TLS", True),
        timeout_seconds=timeout,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr, level=level)
