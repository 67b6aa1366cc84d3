"""Invocation engine: untyped argument map -> live call -> rendered result.

Each invocation runs ``lookup -> bind -> coerce -> call -> render`` on the
caller's thread. Binding and coercion finish for every parameter before the
handler is called, so a conversion failure never produces a partial call.
"""

from __future__ import annotations

import dataclasses
import enum
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from ..core.coercion import Coercer
from ..core.errors import ArgumentConversionError, ToolExecutionError
from ..core.extractor import CallingConvention, ParameterBinding, ToolDescriptor, synthesized_name
from ..core.introspection import composite_fields, unwrap_optional
from ..logging import get_logger
from .registry import ToolRegistry

LOG = get_logger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class InvocationResult:
    tool: str
    value: Any
    text: str


class ToolInvoker:
    def __init__(self, registry: ToolRegistry, coercer: Optional[Coercer] = None):
        self.registry = registry
        self.coercer = coercer or Coercer()

    def invoke(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> InvocationResult:
        descriptor = self.registry.get(name)
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise ArgumentConversionError("arguments", "object", arguments)

        args, kwargs = self.bind(descriptor, arguments)
        try:
            value = descriptor.handler(*args, **kwargs)
        except Exception as e:
            LOG.warning("tool %s raised %s: %s", name, type(e).__name__, e)
            raise ToolExecutionError(name, e) from e
        return InvocationResult(tool=name, value=value, text=render_result(value))

    def bind(
        self, descriptor: ToolDescriptor, arguments: Mapping[str, Any]
    ) -> tuple[List[Any], Dict[str, Any]]:
        """Resolve and coerce every parameter of ``descriptor`` from ``arguments``."""
        if descriptor.convention is CallingConvention.SINGLE_COMPOSITE:
            binding = descriptor.parameters[0]
            source = _composite_source(binding, arguments)
            value = self.coercer.coerce(source, binding.annotation, "")
            return _place([(binding, value)])

        folded: Dict[str, Any] = {}
        for key, val in arguments.items():
            if isinstance(key, str):
                folded.setdefault(key.lower(), val)

        sole = len(descriptor.parameters) == 1
        resolved = []
        for binding in descriptor.parameters:
            raw = _lookup(binding, arguments, folded, sole)
            if raw is _MISSING or raw is None:
                if binding.has_default:
                    value = binding.default
                else:
                    value = self.coercer.zero_value(binding.annotation, binding.name)
            else:
                value = self.coercer.coerce(raw, binding.annotation, binding.name)
            resolved.append((binding, value))
        return _place(resolved)


def _place(resolved: List[tuple[ParameterBinding, Any]]) -> tuple[List[Any], Dict[str, Any]]:
    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    for binding, value in resolved:
        if binding.keyword_only and binding.identifier:
            kwargs[binding.identifier] = value
        else:
            args.append(value)
    return args, kwargs


def _lookup(
    binding: ParameterBinding, arguments: Mapping[str, Any], folded: Dict[str, Any], sole: bool
) -> Any:
    # explicit paramNames entry, then paramN, then case-insensitive, then the Python name
    names = [binding.name] if binding.explicit else []
    names.append(synthesized_name(binding.position))
    for n in names:
        if n in arguments:
            return arguments[n]
    for n in names:
        if n.lower() in folded:
            return folded[n.lower()]
    if binding.identifier:
        if binding.identifier in arguments:
            return arguments[binding.identifier]
        if binding.identifier.lower() in folded:
            return folded[binding.identifier.lower()]
    if sole and len(arguments) == 1:
        return next(iter(arguments.values()))
    return _MISSING


def _composite_source(binding: ParameterBinding, arguments: Mapping[str, Any]) -> Mapping[str, Any]:
    """The map a single composite parameter is built from.

    Normally the whole argument map. ``{"param1": {...}}`` (or the explicit
    name / Python name) is unwrapped when the composite has no field by
    that name.
    """
    if len(arguments) != 1:
        return arguments
    key, value = next(iter(arguments.items()))
    if not isinstance(value, Mapping):
        return arguments
    if key not in (binding.name, synthesized_name(binding.position), binding.identifier):
        return arguments
    inner, _ = unwrap_optional(binding.annotation)
    field_names = set()
    for spec in composite_fields(inner):
        field_names.update((spec.wire_name, spec.identifier))
    return arguments if key in field_names else value


def render_result(value: Any) -> str:
    """Text form of a tool result: strings as-is, ``None`` as empty, scalars
    formatted, everything else as JSON."""
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, default=_json_default)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return str(obj)


__all__ = ["InvocationResult", "ToolInvoker", "render_result"]
