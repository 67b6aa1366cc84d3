"""MCP protocol server over stdio, built on the official MCP SDK.

The low-level ``Server`` is used rather than FastMCP because tool schemas
come from the registry as-is instead of being derived from Python
signatures a second time.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from ..logging import get_logger
from .invoker import ToolInvoker
from .registry import ToolRegistry

LOG = get_logger(__name__)


def list_tool_entries(registry: ToolRegistry) -> List[types.Tool]:
    return [
        types.Tool(
            name=d.name,
            description=d.description,
            inputSchema=d.input_schema.to_json(),
        )
        for d in registry.list()
    ]


async def call_tool_text(
    invoker: ToolInvoker, name: str, arguments: Optional[Dict[str, Any]]
) -> List[types.TextContent]:
    # Handlers are synchronous; keep them off the event loop.
    result = await asyncio.to_thread(invoker.invoke, name, arguments)
    return [types.TextContent(type="text", text=result.text)]


def build_server(
    registry: ToolRegistry, invoker: Optional[ToolInvoker] = None, name: str = "mcp-toolkit"
) -> Server:
    invoker = invoker or ToolInvoker(registry)
    server: Server = Server(name)

    @server.list_tools()
    async def _list_tools() -> List[types.Tool]:
        return list_tool_entries(registry)

    # Arguments are coerced by the invoker, so the SDK must not reject
    # e.g. "5" for an integer parameter first. Raised engine errors are
    # reported to the client as tool errors by the SDK.
    @server.call_tool(validate_input=False)
    async def _call_tool(tool_name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        return await call_tool_text(invoker, tool_name, arguments)

    return server


async def run_stdio(server: Server) -> None:
    LOG.info("serving MCP over stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


__all__ = ["build_server", "call_tool_text", "list_tool_entries", "run_stdio"]
