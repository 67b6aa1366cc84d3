"""Metadata tags that mark callables as tools and annotate composite fields.

Tool tag::

    tool[;name=<id>][;description=<text>][;paramNames=<n1>,<n2>,...]

Field tag (composite fields)::

    desc=<text>,required

Tool tags are attached either with the :func:`tool` decorator or through a
dataclass field's ``metadata={"mcp": "..."}``. Field tags live in dataclass
``metadata={"mcp": "..."}`` or pydantic ``json_schema_extra={"mcp": "..."}``.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..logging import get_logger
from .errors import TagGrammarError

LOG = get_logger(__name__)

TAG_KEY = "mcp"
TAG_ATTRIBUTE = "__mcp_tag__"
TOOL_TOKEN = "tool"

_NAME = "name="
_DESCRIPTION = "description="
_PARAM_NAMES = "paramNames="


@dataclass(frozen=True)
class ToolMetadata:
    name: Optional[str] = None
    description: Optional[str] = None
    param_names: tuple[str, ...] = ()

    def param_name(self, index: int) -> Optional[str]:
        """Explicit wire name for the parameter at ``index`` (0-based), if any."""
        if index < len(self.param_names) and self.param_names[index]:
            return self.param_names[index]
        return None


@dataclass(frozen=True)
class FieldTag:
    description: Optional[str] = None
    required: bool = False


def is_tool_tag(tag: Optional[str]) -> bool:
    if not tag:
        return False
    return any(part.strip() == TOOL_TOKEN for part in tag.split(";"))


def parse_tool_tag(tag: str, strict: bool = False) -> ToolMetadata:
    """Parse a tool tag into :class:`ToolMetadata`.

    Lenient by default: segments with unknown keys or without ``=`` are
    ignored. With ``strict=True`` they raise :class:`TagGrammarError`, as does
    a tag that lacks the ``tool`` token.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    param_names: tuple[str, ...] = ()
    saw_tool = False

    for raw in tag.split(";"):
        part = raw.strip()
        if not part:
            continue
        if part == TOOL_TOKEN:
            saw_tool = True
        elif part.startswith(_NAME):
            name = part[len(_NAME):] or None
        elif part.startswith(_DESCRIPTION):
            description = part[len(_DESCRIPTION):] or None
        elif part.startswith(_PARAM_NAMES):
            value = part[len(_PARAM_NAMES):]
            if value:
                param_names = tuple(p.strip() for p in value.split(","))
        elif strict:
            raise TagGrammarError(f"unrecognized tag segment {part!r} in {tag!r}")
        else:
            LOG.debug("ignoring tag segment %r in %r", part, tag)

    if strict and not saw_tool:
        raise TagGrammarError(f"tag {tag!r} does not contain the '{TOOL_TOKEN}' token")
    return ToolMetadata(name=name, description=description, param_names=param_names)


def format_tool_tag(
    name: Optional[str] = None,
    description: Optional[str] = None,
    param_names: Optional[Sequence[str]] = None,
) -> str:
    parts = [TOOL_TOKEN]
    if name:
        parts.append(_NAME + name)
    if description:
        parts.append(_DESCRIPTION + description)
    if param_names:
        parts.append(_PARAM_NAMES + ",".join(param_names))
    return ";".join(parts)


def parse_field_tag(tag: Optional[str]) -> FieldTag:
    if not tag:
        return FieldTag()
    description: Optional[str] = None
    required = False
    for raw in tag.split(","):
        token = raw.strip()
        if token.startswith("desc="):
            description = token[len("desc="):]
        elif token == "required":
            required = True
    return FieldTag(description=description, required=required)


def tool(
    tag: Any = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    param_names: Optional[Sequence[str]] = None,
) -> Any:
    """Mark a function or method as a tool.

    Accepts a raw tag string or keyword arguments::

        @tool
        def ping() -> str: ...

        @tool("tool;name=echo_message;paramNames=message")
        def echo(self, message: str) -> str: ...

        @tool(name="search_users", param_names=["keyword", "limit"])
        def search(self, keyword: str, limit: int) -> list[str]: ...
    """
    if callable(tag) or isinstance(tag, (staticmethod, classmethod)):
        return _attach(tag, TOOL_TOKEN)

    if tag is None:
        text = format_tool_tag(name, description, param_names)
    elif not is_tool_tag(tag):
        text = f"{TOOL_TOKEN};{tag}"
    else:
        text = tag

    def decorator(fn: Any) -> Any:
        return _attach(fn, text)

    return decorator


def _attach(fn: Any, text: str) -> Any:
    bound = isinstance(fn, (staticmethod, classmethod)) or inspect.ismethod(fn)
    target = fn.__func__ if bound else fn
    setattr(target, TAG_ATTRIBUTE, text)
    return fn


def tag_of(member: Any) -> Optional[str]:
    """Return the tool tag carried by ``member`` (or its wrapped function)."""
    if isinstance(member, (staticmethod, classmethod)):
        member = member.__func__
    tag = getattr(member, TAG_ATTRIBUTE, None)
    return tag if isinstance(tag, str) else None


__all__ = [
    "ToolMetadata",
    "FieldTag",
    "TAG_KEY",
    "is_tool_tag",
    "parse_tool_tag",
    "format_tool_tag",
    "parse_field_tag",
    "tool",
    "tag_of",
]

