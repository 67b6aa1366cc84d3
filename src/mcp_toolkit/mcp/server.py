from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI

from ..config.settings import Protocol, Settings, get_settings
from ..core.extractor import ToolDescriptor, ToolExtractor
from ..core.schema import TypeMapper
from ..logging import configure_logging, get_logger, uvicorn_level
from .http_api import create_app
from .invoker import InvocationResult, ToolInvoker
from .registry import ToolRegistry
from .sdk_server import build_server, run_stdio

LOG = get_logger(__name__)


class McpServer:
    """A named tool server: registry, invoker and transports in one place."""

    def __init__(
        self,
        name: str,
        namespace: str = "",
        group: str = "DEFAULT_GROUP",
        host: str = "127.0.0.1",
        port: int = 8080,
        protocol: Protocol | str = Protocol.SSE,
        metadata: Optional[Dict[str, str]] = None,
        mapper: Optional[TypeMapper] = None,
        log_level: Optional[str] = None,
    ):
        self.name = name
        self.namespace = namespace
        self.group = group
        self.host = host
        self.port = port
        self.protocol = Protocol(protocol)
        self.metadata = dict(metadata or {})
        self.log_level = log_level
        self.registry = ToolRegistry(ToolExtractor(mapper))
        self.invoker = ToolInvoker(self.registry)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "McpServer":
        settings = settings or get_settings()
        s = settings.server
        return cls(
            s.name,
            namespace=s.namespace,
            group=s.group,
            host=s.host,
            port=s.port,
            protocol=s.protocol,
            metadata=s.metadata,
            mapper=TypeMapper(settings.schema_descriptions),
            log_level=settings.log_level,
        )

    # Registration
    def register_tool(self, handler: Any) -> ToolDescriptor:
        return self.registry.register_tool(handler)

    def register_method(self, receiver: Any, method: Any) -> ToolDescriptor:
        return self.registry.register_method(receiver, method)

    def register_service(self, service: Any) -> List[ToolDescriptor]:
        return self.registry.register_composite(service)

    # Introspection
    def tools(self) -> List[Dict[str, Any]]:
        return self.registry.list_tools()

    def info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "protocol": self.protocol.value,
            "namespace": self.namespace,
            "group": self.group,
            "metadata": dict(self.metadata),
            "toolCount": len(self.registry),
        }

    def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> InvocationResult:
        return self.invoker.invoke(name, arguments)

    # Transports
    def apply_logging(self) -> None:
        configure_logging(self.log_level)

    def create_app(self) -> FastAPI:
        return create_app(self.registry, self.invoker, info=self.info, title=self.name)

    def serve(self) -> None:
        """Block serving the registry on the configured protocol."""
        self.apply_logging()
        LOG.info(
            "starting %s (%s) with %d tools", self.name, self.protocol.value, len(self.registry)
        )
        if self.protocol is Protocol.STDIO:
            asyncio.run(run_stdio(build_server(self.registry, self.invoker, self.name)))
            return
        config = uvicorn.Config(
            self.create_app(), host=self.host, port=self.port, log_level=uvicorn_level(self.log_level)
        )
        uvicorn.Server(config).run()


__all__ = ["McpServer", "Protocol"]
