import threading

import pytest

import sample_service
from mcp_toolkit.core.errors import DuplicateToolError, ToolNotFoundError
from mcp_toolkit.mcp.registry import ToolRegistry


def echo_message(message: str) -> str:
    return message


def test_register_and_lookup():
    reg = ToolRegistry()
    d = reg.register_tool(sample_service.add)
    assert len(reg) == 1
    assert "add" in reg
    assert reg.get("add") is d
    assert reg.find("nope") is None
    with pytest.raises(ToolNotFoundError) as exc:
        reg.get("nope")
    assert str(exc.value) == "tool 'nope' not found"


def test_list_tools_preserves_registration_order():
    reg = ToolRegistry()
    reg.register_tool(sample_service.total)
    reg.register_tool(sample_service.add)
    reg.register_method(sample_service.Calculator(), "greet")
    listed = reg.list_tools()
    assert [t["name"] for t in listed] == ["total", "add", "greet"]
    assert set(listed[0]) == {"name", "description", "inputSchema"}


def test_duplicate_names_are_rejected():
    reg = ToolRegistry()
    reg.register_tool(sample_service.add)
    with pytest.raises(DuplicateToolError):
        reg.register_tool(sample_service.add)
    assert len(reg) == 1


def test_composite_batch_is_atomic():
    reg = ToolRegistry()
    reg.register_tool(echo_message)
    with pytest.raises(DuplicateToolError):
        reg.register_composite(sample_service.MyMCPService())
    assert [d.name for d in reg.list()] == ["echo_message"]


def test_concurrent_lookups():
    reg = ToolRegistry()
    reg.register_composite(sample_service.MyMCPService())
    errors = []

    def worker():
        for _ in range(200):
            if reg.find("search") is None or len(reg.list()) != 5:
                errors.append("inconsistent view")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
