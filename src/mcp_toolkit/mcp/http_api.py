"""HTTP API exposing the tool registry.

Endpoints:
    GET  /mcp/tools                      -> {"tools": [{name, description, inputSchema}]}
    POST /mcp/tools/{name}/invoke        {"arguments": {}} -> {"content": [{"type": "text", "text": ...}]}
    POST /mcp/call_tool                  {"name": str, "arguments": {}} -> same as invoke
    GET  /mcp/info                       -> server identity and tool count

Engine errors map to 404 (unknown tool), 400 (bad arguments) and 500
(tool failure) with a ``{"error", "code"}`` body.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Body, FastAPI
from fastapi.responses import JSONResponse

from ..core.errors import ArgumentConversionError, ToolExecutionError, ToolNotFoundError
from ..logging import get_logger
from .invoker import ToolInvoker
from .registry import ToolRegistry

LOG = get_logger(__name__)


def _error(status: int, code: str, message: str, **extra: Any) -> JSONResponse:
    content: Dict[str, Any] = {"error": message, "code": code}
    content.update(extra)
    return JSONResponse(status_code=status, content=content)


def _text_content(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def create_app(
    registry: ToolRegistry,
    invoker: Optional[ToolInvoker] = None,
    info: Optional[Callable[[], Dict[str, Any]]] = None,
    title: str = "MCP Toolkit API",
) -> FastAPI:
    invoker = invoker or ToolInvoker(registry)
    app = FastAPI(title=title, version="0.1.0")
    router = APIRouter()

    # Plain def routes: FastAPI runs each on a worker thread, so a slow
    # tool only holds up its own request.
    def _invoke(name: str, arguments: Any):
        try:
            result = invoker.invoke(name, arguments)
        except ToolNotFoundError as e:
            return _error(404, "tool_not_found", str(e))
        except ArgumentConversionError as e:
            LOG.debug("bad arguments for %s: %s", name, e)
            return _error(400, "argument_conversion", str(e), parameter=e.parameter)
        except ToolExecutionError as e:
            return _error(500, "tool_execution", str(e))
        return _text_content(result.text)

    @router.get("/mcp/tools")
    def list_tools():
        return {"tools": registry.list_tools()}

    @router.post("/mcp/tools/{name}/invoke")
    def invoke_tool(name: str, payload: Optional[Dict[str, Any]] = Body(default=None)):
        arguments = (payload or {}).get("arguments")
        return _invoke(name, arguments)

    @router.post("/mcp/call_tool")
    def call_tool(payload: Optional[Dict[str, Any]] = Body(default=None)):
        payload = payload or {}
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            return _error(400, "missing_tool_name", "Missing tool name")
        return _invoke(name, payload.get("arguments"))

    @router.get("/mcp/info")
    def server_info():
        if info is not None:
            return info()
        return {"toolCount": len(registry)}

    app.include_router(router)
    return app


__all__ = ["create_app"]
