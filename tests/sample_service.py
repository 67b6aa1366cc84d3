"""Tool targets shared by the test modules (and the CLI tests as a TARGET)."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Optional

from pydantic import BaseModel, Field

from mcp_toolkit.core.tags import tool
from mcp_toolkit.mcp.server import McpServer


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Priority(enum.IntEnum):
    LOW = 1
    HIGH = 2


@dataclass
class SearchQuery:
    keyword: str = field(metadata={"mcp": "desc=Search keyword,required"})
    max_results: int = field(metadata={"alias": "limit", "mcp": "desc=Maximum results"})


class UserFilter(BaseModel):
    name: str = Field(alias="userName", description="User name", json_schema_extra={"mcp": "required"})
    age: Optional[int] = None
    tags: list[str] = Field(default_factory=list)


class MyMCPService:
    @tool("tool;name=get_time;description=Get current time")
    def get_time(self) -> str:
        return "2024-01-01 12:00:00"

    @tool("tool;name=search;description=Search for information;paramNames=keyword,limit")
    def search(self, keyword: str, limit: int) -> list[str]:
        return [f"Result {i + 1} for {keyword}" for i in range(limit)]

    @tool("tool;name=echo_message;description=Echo message;paramNames=message")
    def echo(self, message: str) -> str:
        return f"Echo: {message}"

    @tool(name="find", description="Find by query")
    def find(self, query: SearchQuery) -> str:
        return f"{query.keyword}:{query.max_results}"

    @tool
    def fail(self) -> str:
        raise RuntimeError("boom")

    def helper(self) -> str:
        return "not a tool"


class Calculator:
    def add(self, a: int, b: int) -> int:
        return a + b

    def greet(self, name: str) -> str:
        return f"Hello, {name}"

    def _internal(self) -> None:
        return None


@dataclass
class FieldService:
    greet: Callable[[str], str] = field(metadata={"mcp": "tool;name=greet;paramNames=name"})


def add(a: int, b: int) -> int:
    return a + b


def describe(value) -> str:
    return f"value={value!r}"


def get_time() -> str:
    return "noon"


def paint(color: Color) -> Color:
    return color


def lookup(flt: UserFilter) -> UserFilter:
    return flt


def total(values: list[int]) -> int:
    return sum(values)


def scale(value: int, factor: int = 3) -> int:
    return value * factor


service = MyMCPService()
tools = [add, describe]

server = McpServer("sample", namespace="public")
server.register_service(service)
