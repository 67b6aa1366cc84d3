import json

import pytest
from click.testing import CliRunner

from mcp_toolkit.cli.main import cli, load_target
from mcp_toolkit.mcp.server import McpServer


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.json"))
    return CliRunner()


def test_list_service(runner):
    result = runner.invoke(cli, ["list", "sample_service:service"])
    assert result.exit_code == 0, result.output
    names = [t["name"] for t in json.loads(result.output)["tools"]]
    assert names == ["get_time", "search", "echo_message", "find", "fail"]


def test_call_tool(runner):
    result = runner.invoke(
        cli, ["call", "sample_service:service", "echo_message", "--args", '{"message": "hi"}']
    )
    assert result.exit_code == 0, result.output
    assert result.output == "Echo: hi\n"


def test_call_function_list(runner):
    result = runner.invoke(
        cli, ["call", "sample_service:tools", "add", "--args", '{"param1": 1, "param2": 2}']
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "3"


def test_call_reports_engine_errors(runner):
    result = runner.invoke(
        cli, ["call", "sample_service:service", "search", "--args", '{"keyword": "a", "limit": 5.5}']
    )
    assert result.exit_code == 1
    assert "limit" in result.output

    result = runner.invoke(cli, ["call", "sample_service:service", "nope"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_bad_arguments_and_targets(runner):
    result = runner.invoke(cli, ["call", "sample_service:service", "get_time", "--args", "{oops"])
    assert result.exit_code == 2
    result = runner.invoke(cli, ["list", "no_such_module_xyz:thing"])
    assert result.exit_code == 2
    result = runner.invoke(cli, ["list", "sample_service:MyMCPService"])
    assert result.exit_code == 1


def test_load_target_returns_existing_server():
    import sample_service

    assert load_target("sample_service:server") is sample_service.server
    server = load_target("sample_service:service.echo")
    assert isinstance(server, McpServer)
    assert [t["name"] for t in server.tools()] == ["echo"]
