from __future__ import annotations

import functools
import importlib
import inspect
import json
from typing import Any

import click

from ..config.settings import Protocol
from ..core.errors import ToolkitError
from ..mcp.server import McpServer


def load_target(target: str) -> McpServer:
    """Resolve ``module:attribute`` into a server with its tools registered.

    The attribute may be an ``McpServer``, a function, a service object or
    module, or a list/tuple of functions and services.
    """
    module_name, sep, attr = target.partition(":")
    if not module_name:
        raise click.BadParameter(f"expected module:attribute, got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}") from e
    if not sep:
        obj: Any = module
    else:
        try:
            obj = functools.reduce(getattr, attr.split("."), module)
        except AttributeError as e:
            raise click.BadParameter(f"{module_name} has no attribute {attr!r}") from e

    if isinstance(obj, McpServer):
        return obj
    server = McpServer.from_settings()
    for item in obj if isinstance(obj, (list, tuple)) else [obj]:
        if inspect.isroutine(item) or isinstance(item, functools.partial):
            server.register_tool(item)
        else:
            server.register_service(item)
    return server


def _load(target: str) -> McpServer:
    try:
        return load_target(target)
    except ToolkitError as e:
        raise click.ClickException(str(e)) from e


@click.group()
def cli():
    """MCP Toolkit CLI"""


@cli.command("list")
@click.argument("target", type=str)
def list_tools(target: str):
    """Print the tool catalog of TARGET as JSON."""
    server = _load(target)
    click.echo(json.dumps({"tools": server.tools()}, indent=2))


@cli.command()
@click.argument("target", type=str)
@click.argument("name", type=str)
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object")
def call(target: str, name: str, raw_args: str):
    """Invoke tool NAME of TARGET once and print the result."""
    try:
        arguments = json.loads(raw_args)
    except ValueError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--args") from e
    server = _load(target)
    try:
        result = server.call(name, arguments)
    except ToolkitError as e:
        raise click.ClickException(str(e)) from e
    click.echo(result.text)


@cli.command()
@click.argument("target", type=str)
@click.option("--host", default=None, help="Bind address (HTTP protocols)")
@click.option("--port", default=None, type=int, help="Bind port (HTTP protocols)")
@click.option(
    "--protocol",
    default=None,
    type=click.Choice([p.value for p in Protocol]),
    help="Transport protocol",
)
def serve(target: str, host: str | None, port: int | None, protocol: str | None):
    """Serve the tools of TARGET."""
    server = _load(target)
    if host:
        server.host = host
    if port:
        server.port = port
    if protocol:
        server.protocol = Protocol(protocol)
    server.serve()


if __name__ == "__main__":
    cli()
