import pytest

from mcp_repro.config_loader import ServerConfig
from mcp_repro.core.dispatcher import RequestDispatcher
from mcp_repro.core.tool_registry import ToolRegistry
from mcp_repro.tools.echo_tool import build_echo_bindings


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def registry():
    return ToolRegistry(build_echo_bindings())


@pytest.fixture
def dispatcher(registry):
    return RequestDispatcher(registry)


@pytest.fixture
def legacy_dispatcher(registry):
    return RequestDispatcher(registry, legacy_direct_methods=True)


@pytest.fixture
def server_config():
    return ServerConfig(log_traffic=False)
