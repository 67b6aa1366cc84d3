import json
import logging

import pytest

from mcp_toolkit.config.settings import Protocol, get_settings
from mcp_toolkit.logging import configure_logging
from mcp_toolkit.mcp.server import McpServer

_ENV_KEYS = [
    "MCP_SERVER_NAME",
    "MCP_NAMESPACE",
    "MCP_GROUP",
    "MCP_HOST",
    "MCP_PORT",
    "MCP_PROTOCOL",
    "LOG_LEVEL",
    "SCHEMA_DESC_STRING",
    "SCHEMA_DESC_INTEGER",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.json"))


def test_default_settings_values():
    s = get_settings()
    assert s.server.name == "mcp-toolkit"
    assert s.server.group == "DEFAULT_GROUP"
    assert s.server.host == "127.0.0.1"
    assert s.server.port == 8080
    assert s.server.protocol is Protocol.SSE
    assert s.schema_descriptions.string == "String parameter"
    assert s.log_level == "INFO"


def test_env_override(monkeypatch):
    monkeypatch.setenv("MCP_PORT", "9090")
    monkeypatch.setenv("MCP_PROTOCOL", "stdio")
    monkeypatch.setenv("MCP_NAMESPACE", "public")
    monkeypatch.setenv("SCHEMA_DESC_STRING", "Text")
    s = get_settings()
    assert s.server.port == 9090
    assert s.server.protocol is Protocol.STDIO
    assert s.server.namespace == "public"
    assert s.schema_descriptions.string == "Text"
    assert s.schema_descriptions.integer == "Integer parameter"


def test_config_file_then_env(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "server": {"name": "from-file", "group": "G1", "metadata": {"team": "core"}},
                "schema_descriptions": {"integer": "Whole number"},
            }
        )
    )
    monkeypatch.setenv("CONFIG_PATH", str(path))
    monkeypatch.setenv("MCP_GROUP", "G2")
    s = get_settings()
    assert s.server.name == "from-file"
    assert s.server.group == "G2"
    assert s.server.metadata == {"team": "core"}
    assert s.schema_descriptions.integer == "Whole number"


def test_malformed_config_file_is_ignored(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    monkeypatch.setenv("CONFIG_PATH", str(path))
    assert get_settings().server.name == "mcp-toolkit"


def test_server_from_settings_uses_descriptions(monkeypatch):
    monkeypatch.setenv("MCP_SERVER_NAME", "configured")
    monkeypatch.setenv("SCHEMA_DESC_INTEGER", "Whole number")
    server = McpServer.from_settings()
    d = server.register_tool(lambda count: count)
    assert server.info()["name"] == "configured"
    assert d.to_dict()["inputSchema"]["properties"]["param1"]["description"] == "Complex parameter"

    def count(n: int) -> int:
        return n

    d = server.register_tool(count)
    assert d.to_dict()["inputSchema"]["properties"]["param1"]["description"] == "Whole number"


def test_config_file_log_level_reaches_root_logger(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"log_level": "DEBUG"}))
    monkeypatch.setenv("CONFIG_PATH", str(path))
    server = McpServer.from_settings()
    assert server.log_level == "DEBUG"
    try:
        server.apply_logging()
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("INFO")
