import pytest
from fastapi.testclient import TestClient

import sample_service
from mcp_toolkit.mcp.server import McpServer


@pytest.fixture
def client():
    server = McpServer("demo", namespace="public", metadata={"env": "test"})
    server.register_service(sample_service.MyMCPService())
    return TestClient(server.create_app())


def test_list_tools(client):
    resp = client.get("/mcp/tools")
    assert resp.status_code == 200
    tools = resp.json()["tools"]
    assert [t["name"] for t in tools] == ["get_time", "search", "echo_message", "find", "fail"]
    assert tools[1]["inputSchema"]["required"] == ["keyword", "limit"]


def test_invoke_tool(client):
    resp = client.post("/mcp/tools/echo_message/invoke", json={"arguments": {"message": "hi"}})
    assert resp.status_code == 200
    assert resp.json() == {"content": [{"type": "text", "text": "Echo: hi"}]}


def test_invoke_without_arguments(client):
    assert client.post("/mcp/tools/get_time/invoke", json={}).status_code == 200
    assert client.post("/mcp/tools/get_time/invoke").status_code == 200
    resp = client.post("/mcp/tools/get_time/invoke", json={"arguments": None})
    assert resp.json()["content"][0]["text"] == "2024-01-01 12:00:00"


def test_call_tool_endpoint(client):
    resp = client.post("/mcp/call_tool", json={"name": "find", "arguments": {"keyword": "ann"}})
    assert resp.status_code == 200
    assert resp.json()["content"][0]["text"] == "ann:0"

    resp = client.post("/mcp/call_tool", json={"arguments": {}})
    assert resp.status_code == 400
    assert resp.json()["code"] == "missing_tool_name"


def test_unknown_tool_is_404(client):
    resp = client.post("/mcp/tools/nope/invoke", json={"arguments": {}})
    assert resp.status_code == 404
    assert resp.json() == {"error": "tool 'nope' not found", "code": "tool_not_found"}


def test_conversion_error_is_400(client):
    resp = client.post(
        "/mcp/tools/search/invoke", json={"arguments": {"keyword": "a", "limit": 5.5}}
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "argument_conversion"
    assert body["parameter"] == "limit"

    resp = client.post("/mcp/tools/search/invoke", json={"arguments": [1, 2]})
    assert resp.status_code == 400
    assert resp.json()["parameter"] == "arguments"


def test_handler_error_is_500(client):
    resp = client.post("/mcp/tools/fail/invoke", json={"arguments": {}})
    assert resp.status_code == 500
    assert resp.json()["code"] == "tool_execution"
    assert "boom" in resp.json()["error"]


def test_info(client):
    assert client.get("/mcp/info").json() == {
        "name": "demo",
        "protocol": "sse",
        "namespace": "public",
        "group": "DEFAULT_GROUP",
        "metadata": {"env": "test"},
        "toolCount": 5,
    }


def test_float_out_of_range_is_400():
    def half(x: float) -> float:
        return x / 2

    server = McpServer("floats")
    server.register_tool(half)
    client = TestClient(server.create_app())
    assert client.post("/mcp/tools/half/invoke", json={"arguments": {"param1": 3}}).json() == {
        "content": [{"type": "text", "text": "1.5"}]
    }
    resp = client.post("/mcp/tools/half/invoke", json={"arguments": {"param1": 10**400}})
    assert resp.status_code == 400
    assert resp.json()["parameter"] == "param1"
