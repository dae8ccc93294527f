import pytest

from mcp_repro.config_loader import ProbeConfig, ServerConfig, load_config_from_env, load_probe_config_from_env

_ENV_NAMES = [
    "MCP_SERVER_HOST",
    "MCP_SERVER_PORT",
    "MCP_ENDPOINT_PATH",
    "MCP_STREAMING",
    "MCP_LEGACY_METHODS",
    "MCP_LOG_TRAFFIC",
    "MCP_LOG_LEVEL",
    "MCP_PROBE_URL",
    "MCP_PROBE_VERIFY_TLS",
    "MCP_PROBE_TIMEOUT",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_server_defaults():
    assert load_config_from_env() == ServerConfig()


def test_server_values_from_env(monkeypatch):
    monkeypatch.setenv("MCP_SERVER_HOST", "0.0.0.0")
    monkeypatch.setenv("MCP_SERVER_PORT", "7269")
    monkeypatch.setenv("MCP_ENDPOINT_PATH", "rpc")
    monkeypatch.setenv("MCP_STREAMING", "off")
    monkeypatch.setenv("MCP_LEGACY_METHODS", "Yes")
    monkeypatch.setenv("MCP_LOG_LEVEL", "debug")

    cfg = load_config_from_env()

    assert cfg.server_host == "0.0.0.0"
    assert cfg.server_port == 7269
    assert cfg.endpoint_path == "/rpc"
    assert cfg.streaming is False
    assert cfg.legacy_direct_methods is True
    assert cfg.log_level == "DEBUG"


def test_invalid_flag_names_variable(monkeypatch):
    monkeypatch.setenv("MCP_STREAMING", "maybe")

    with pytest.raises(ValueError, match="MCP_STREAMING"):
        load_config_from_env()


def test_probe_defaults_and_overrides(monkeypatch):
    assert load_probe_config_from_env() == ProbeConfig()

    monkeypatch.setenv("MCP_PROBE_URL", "https://localhost:7269/mcp")
    monkeypatch.setenv("MCP_PROBE_VERIFY_TLS", "0")
    monkeypatch.setenv("MCP_PROBE_TIMEOUT", "2.5")

    cfg = load_probe_config_from_env()
    assert cfg.server_url == "https://localhost:7269/mcp"
    assert cfg.verify_tls is False
    assert cfg.timeout_seconds == 2.5
