from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from ..core.schema import SchemaDescriptions


class Protocol(str, Enum):
    STDIO = "stdio"
    SSE = "sse"
    STREAM_HTTP = "streamable-http"


class ServerSettings(BaseModel):
    name: str = Field(default="mcp-toolkit")
    namespace: str = Field(default="")
    group: str = Field(default="DEFAULT_GROUP")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080)
    protocol: Protocol = Field(default=Protocol.SSE)
    metadata: dict[str, str] = Field(default_factory=dict)


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    schema_descriptions: SchemaDescriptions = Field(default_factory=SchemaDescriptions)
    log_level: str = Field(default="INFO")


# env var -> key in the "schema_descriptions" block
_DESCRIPTION_ENV = {
    "SCHEMA_DESC_STRING": "string",
    "SCHEMA_DESC_INTEGER": "integer",
    "SCHEMA_DESC_NUMBER": "number",
    "SCHEMA_DESC_BOOLEAN": "boolean",
    "SCHEMA_DESC_ARRAY": "array",
    "SCHEMA_DESC_COMPLEX": "complex",
}


def get_settings() -> Settings:
    # Base values from the config file when present
    config_path = os.environ.get("CONFIG_PATH", "config.json")
    data: dict = {}
    p = Path(config_path)
    if p.exists():
        try:
            data = json.loads(p.read_text())
        except (OSError, ValueError):
            data = {}  # malformed file: fall back to env + defaults
    if not isinstance(data, dict):
        data = {}

    server_block = data.get("server", {}) if isinstance(data.get("server"), dict) else {}
    if os.environ.get("MCP_SERVER_NAME"):
        server_block["name"] = os.environ["MCP_SERVER_NAME"]
    if os.environ.get("MCP_NAMESPACE"):
        server_block["namespace"] = os.environ["MCP_NAMESPACE"]
    if os.environ.get("MCP_GROUP"):
        server_block["group"] = os.environ["MCP_GROUP"]
    if os.environ.get("MCP_HOST"):
        server_block["host"] = os.environ["MCP_HOST"]
    if os.environ.get("MCP_PORT"):
        server_block["port"] = int(os.environ["MCP_PORT"])
    if os.environ.get("MCP_PROTOCOL"):
        server_block["protocol"] = os.environ["MCP_PROTOCOL"]

    desc_block = (
        data.get("schema_descriptions", {})
        if isinstance(data.get("schema_descriptions"), dict)
        else {}
    )
    for env_key, field_name in _DESCRIPTION_ENV.items():
        if os.environ.get(env_key):
            desc_block[field_name] = os.environ[env_key]

    return Settings(
        server=ServerSettings(**server_block),
        schema_descriptions=SchemaDescriptions(**desc_block),
        log_level=os.environ.get("LOG_LEVEL", data.get("log_level", "INFO")),
    )
