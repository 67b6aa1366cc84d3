"""Exception hierarchy shared by the engine and its transports."""

from __future__ import annotations

from typing import Any, Optional


class ToolkitError(Exception):
    """Base exception for every error raised by mcp_toolkit."""


class UnsupportedTypeError(ToolkitError):
    """Raised inside the type mapper when a type has no schema rule.

    Never escapes `TypeMapper.map_type`; the mapper degrades to the generic
    complex node instead.
    """


class ExtractionError(ToolkitError):
    """Raised when a registration target has the wrong shape."""


class TagGrammarError(ExtractionError):
    """Raised by strict tag parsing for unknown or malformed segments."""


class ToolRegistrationError(ToolkitError):
    """Raised when a descriptor cannot be added to the registry."""


class DuplicateToolError(ToolRegistrationError):
    """Raised when a tool name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"tool '{name}' is already registered")
        self.name = name


class ToolNotFoundError(ToolkitError, LookupError):
    """Raised when an invocation names an unregistered tool."""

    def __init__(self, name: str):
        super().__init__(f"tool '{name}' not found")
        self.name = name

    def __str__(self) -> str:
        # LookupError subclasses would otherwise repr() the message
        return self.args[0]


class ArgumentConversionError(ToolkitError, ValueError):
    """Raised when a raw argument cannot be coerced to its parameter type."""

    def __init__(self, parameter: str, expected: str, value: Any, reason: Optional[str] = None):
        detail = reason or f"cannot convert {type(value).__name__} {value!r} to {expected}"
        super().__init__(f"parameter '{parameter}': {detail}")
        self.parameter = parameter
        self.expected = expected
        self.value = value


class ToolExecutionError(ToolkitError, RuntimeError):
    """Raised when the tool's handler itself fails."""

    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"tool '{name}' failed: {cause}")
        self.name = name
        self.cause = cause


__all__ = [
    "ToolkitError",
    "UnsupportedTypeError",
    "ExtractionError",
    "TagGrammarError",
    "ToolRegistrationError",
    "DuplicateToolError",
    "ToolNotFoundError",
    "ArgumentConversionError",
    "ToolExecutionError",
]
