from __future__ import annotations

"""Serve a small demo service.

    python scripts/run_example.py                 # HTTP on 127.0.0.1:8080
    MCP_PROTOCOL=stdio python scripts/run_example.py
"""

import time

from mcp_toolkit.core.tags import tool
from mcp_toolkit.mcp.server import McpServer


class MyMCPService:
    @tool("tool;name=get_time;description=Get current time")
    def get_time(self) -> str:
        return time.strftime("%Y-%m-%d %H:%M:%S")

    @tool("tool;name=search;description=Search for information;paramNames=keyword,limit")
    def search(self, keyword: str, limit: int) -> list[str]:
        return [f"Result {i + 1} for {keyword}" for i in range(min(limit, 10))]

    @tool(name="echo_message", description="Echo message", param_names=["message"])
    def echo(self, message: str) -> str:
        return f"Echo: {message}"


def main() -> None:
    server = McpServer.from_settings()
    server.register_service(MyMCPService())
    server.serve()


if __name__ == "__main__":  # pragma: no cover
    main()
