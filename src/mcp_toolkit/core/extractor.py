"""Descriptor extraction: callables and tagged composites -> ToolDescriptors.

Two modes:

* bare callable - ``extract_callable(fn)``. The tool is named after the
  callable (lower-cased) and its parameters are exposed as ``param1..paramN``.
* tagged composite - ``extract_composite(obj)``. Every member carrying a tool
  tag (``@tool(...)`` or a dataclass field with ``metadata={"mcp": "tool;..."}``)
  becomes a tool. When nothing is tagged, every public method is exposed with
  bare-callable naming instead.

Each descriptor carries its call plan (calling convention plus one
``ParameterBinding`` per parameter) so invocation never re-inspects the
callable.
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import inspect
import types
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, get_args

from pydantic import BaseModel

from ..logging import get_logger
from .errors import ExtractionError
from .introspection import callable_hints, is_composite, resolve_hints, unwrap_optional
from .schema import SchemaNode, TypeMapper
from .tags import TAG_KEY, ToolMetadata, is_tool_tag, parse_tool_tag, tag_of

LOG = get_logger(__name__)

_EMPTY = inspect.Parameter.empty
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_FRAMEWORK_BASES = (object, BaseModel)
_SCALARS = (str, bytes, int, float, bool)


class CallingConvention(str, enum.Enum):
    POSITIONAL = "positional"
    SINGLE_COMPOSITE = "single_composite"


@dataclass(frozen=True)
class ParameterBinding:
    """How one callable parameter is fed from the argument map."""

    position: int
    name: str
    annotation: Any = _EMPTY
    identifier: Optional[str] = None
    explicit: bool = False
    keyword_only: bool = False
    default: Any = _EMPTY

    @property
    def has_default(self) -> bool:
        return self.default is not _EMPTY


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: SchemaNode
    handler: Callable[..., Any] = field(repr=False, compare=False)
    convention: CallingConvention = CallingConvention.POSITIONAL
    parameters: tuple[ParameterBinding, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_json(),
        }


@dataclass(frozen=True)
class _Member:
    identifier: str
    value: Any
    tag: str
    annotation: Any = None


def synthesized_name(position: int) -> str:
    return f"param{position + 1}"


def callable_label(fn: Any) -> str:
    """Human-facing name of a callable: ``__name__``, or the class name for
    callable objects. ``<lambda>`` becomes ``lambda``."""
    target = fn
    while isinstance(target, functools.partial):
        target = target.func
    label = getattr(target, "__name__", None) or type(target).__name__
    return label.strip("<>")


class ToolExtractor:
    def __init__(self, mapper: Optional[TypeMapper] = None):
        self.mapper = mapper or TypeMapper()

    # ------------------------------------------------------------------ #
    # Bare callable mode
    # ------------------------------------------------------------------ #
    def extract_callable(self, fn: Any) -> ToolDescriptor:
        if not callable(fn) or isinstance(fn, type):
            raise ExtractionError(f"tool handler must be a function, got {type(fn).__name__}")
        label = callable_label(fn)
        return self.build(fn, name=label.lower(), description=f"Auto-generated tool for {label}")

    def extract_method(self, receiver: Any, fn: Any) -> ToolDescriptor:
        """Extract ``fn`` as a method of ``receiver``.

        ``fn`` may be a plain function whose first parameter is the receiver,
        or a method name on ``receiver``. The receiver is bound before
        inspection, so it never shows up as a tool parameter. Static methods
        are registered unbound and class methods are bound to the class.
        """
        owner = type(receiver)
        if isinstance(fn, str):
            try:
                fn = inspect.getattr_static(owner, fn)
            except AttributeError:
                raise ExtractionError(f"{owner.__name__} has no method {fn!r}") from None
        elif inspect.isfunction(fn):
            # Owner.static_fn arrives already unwrapped
            declared = inspect.getattr_static(owner, fn.__name__, None)
            if isinstance(declared, staticmethod) and declared.__func__ is fn:
                fn = declared
        if isinstance(fn, staticmethod):
            return self.extract_callable(fn.__func__)
        if isinstance(fn, classmethod):
            return self.extract_callable(types.MethodType(fn.__func__, owner))
        if inspect.ismethod(fn):
            fn = fn.__func__
        if not inspect.isfunction(fn):
            raise ExtractionError(f"method for {owner.__name__} must be a function, got {fn!r}")
        return self.extract_callable(types.MethodType(fn, receiver))

    # ------------------------------------------------------------------ #
    # Tagged composite mode
    # ------------------------------------------------------------------ #
    def extract_composite(self, obj: Any) -> List[ToolDescriptor]:
        if obj is None or isinstance(obj, _SCALARS) or isinstance(obj, type):
            raise ExtractionError(
                f"service must be an object instance or module, got {type(obj).__name__}"
            )
        if inspect.isfunction(obj) or inspect.ismethod(obj):
            raise ExtractionError("service must be an object instance or module, got a function")

        members = list(self._tagged_members(obj))
        if not members:
            LOG.debug("no tagged tools on %s; exposing public methods", _owner_label(obj))
            return list(self._method_tools(obj))

        descriptors: List[ToolDescriptor] = []
        for member in members:
            try:
                descriptors.append(self._from_member(member))
            except ExtractionError as e:
                LOG.warning("skipping member %s of %s: %s", member.identifier, _owner_label(obj), e)
        return descriptors

    def _from_member(self, member: _Member) -> ToolDescriptor:
        if not callable(member.value):
            raise ExtractionError(f"tagged member {member.identifier} is not callable")
        meta = parse_tool_tag(member.tag)
        return self.build(
            member.value,
            name=meta.name or member.identifier.lower(),
            description=meta.description or f"Auto-generated tool for {member.identifier}",
            metadata=meta,
            callable_annotation=member.annotation,
        )

    def _tagged_members(self, obj: Any) -> Iterator[_Member]:
        seen: set[str] = set()
        if dataclasses.is_dataclass(obj):
            hints = resolve_hints(type(obj))
            for f in dataclasses.fields(obj):
                tag = f.metadata.get(TAG_KEY)
                if not is_tool_tag(tag):
                    continue
                seen.add(f.name)
                yield _Member(f.name, getattr(obj, f.name, None), tag, hints.get(f.name))
        for name, static in _public_attributes(obj):
            if name in seen:
                continue
            tag = tag_of(static)
            if is_tool_tag(tag):
                yield _Member(name, getattr(obj, name), tag)

    def _method_tools(self, obj: Any) -> Iterator[ToolDescriptor]:
        for name, static in sorted(_public_attributes(obj), key=lambda kv: kv[0]):
            if isinstance(obj, types.ModuleType):
                if not inspect.isfunction(static) or static.__module__ != obj.__name__:
                    continue
            elif not (inspect.isfunction(static) or isinstance(static, (staticmethod, classmethod))):
                continue
            try:
                yield self.build(
                    getattr(obj, name),
                    name=name.lower(),
                    description=f"Auto-generated tool for method {name}",
                )
            except ExtractionError as e:
                LOG.warning("skipping method %s of %s: %s", name, _owner_label(obj), e)

    # ------------------------------------------------------------------ #
    # Shared construction
    # ------------------------------------------------------------------ #
    def build(
        self,
        fn: Callable[..., Any],
        name: str,
        description: str,
        metadata: Optional[ToolMetadata] = None,
        callable_annotation: Any = None,
    ) -> ToolDescriptor:
        """Resolve the call plan and input schema of ``fn``."""
        try:
            sig = inspect.signature(fn)
        except (TypeError, ValueError) as e:
            raise ExtractionError(f"cannot inspect signature of {name}: {e}") from e

        hints = callable_hints(fn)
        declared = _callable_arg_types(callable_annotation)
        meta = metadata or ToolMetadata()

        bindings: List[ParameterBinding] = []
        for param in sig.parameters.values():
            if param.kind in _VARIADIC:
                LOG.debug("tool %s: variadic parameter %s is not bindable", name, param.name)
                continue
            position = len(bindings)
            explicit = meta.param_name(position)
            bindings.append(
                ParameterBinding(
                    position=position,
                    name=explicit or synthesized_name(position),
                    annotation=_parameter_type(param, hints, declared, position),
                    identifier=param.name,
                    explicit=explicit is not None,
                    keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
                    default=param.default,
                )
            )

        wire_names = [b.name for b in bindings]
        duplicates = sorted({n for n in wire_names if wire_names.count(n) > 1})
        if duplicates:
            raise ExtractionError(f"tool {name}: duplicate parameter names {duplicates}")

        inner = unwrap_optional(bindings[0].annotation)[0] if len(bindings) == 1 else None
        if is_composite(inner):
            convention = CallingConvention.SINGLE_COMPOSITE
            schema = self.mapper.map_composite(inner)
        else:
            convention = CallingConvention.POSITIONAL
            schema = SchemaNode.object_node(
                {b.name: self.mapper.map_type(b.annotation) for b in bindings},
                [b.name for b in bindings if not b.has_default],
            )

        return ToolDescriptor(
            name=name,
            description=description,
            input_schema=schema,
            handler=fn,
            convention=convention,
            parameters=tuple(bindings),
        )


def _parameter_type(param: inspect.Parameter, hints: Dict[str, Any], declared: List[Any], position: int) -> Any:
    if param.name in hints:
        return hints[param.name]
    if param.annotation is not _EMPTY:
        return param.annotation
    if position < len(declared):
        return declared[position]
    if param.default is not _EMPTY and param.default is not None:
        return type(param.default)
    return _EMPTY


def _callable_arg_types(annotation: Any) -> List[Any]:
    """Parameter types from a ``Callable[[A, B], R]`` annotation."""
    if annotation is None:
        return []
    inner, _ = unwrap_optional(annotation)
    args = get_args(inner)
    if args and isinstance(args[0], list):
        return list(args[0])
    return []


def _public_attributes(obj: Any) -> List[tuple[str, Any]]:
    """Public attribute names of ``obj`` in definition order, paired with
    their statically looked-up values (properties are not triggered)."""
    if isinstance(obj, types.ModuleType):
        return [(n, v) for n, v in vars(obj).items() if not n.startswith("_")]

    names: Dict[str, None] = {}
    for klass in reversed(type(obj).__mro__):
        if klass in _FRAMEWORK_BASES:
            continue
        for n in vars(klass):
            names.setdefault(n, None)
    for n in getattr(obj, "__dict__", {}):
        names.setdefault(n, None)

    pydantic_model = isinstance(obj, BaseModel)
    out: List[tuple[str, Any]] = []
    for n in names:
        if n.startswith("_") or (pydantic_model and hasattr(BaseModel, n)):
            continue
        try:
            out.append((n, inspect.getattr_static(obj, n)))
        except AttributeError:
            continue
    return out


def _owner_label(obj: Any) -> str:
    if isinstance(obj, types.ModuleType):
        return obj.__name__
    return type(obj).__name__


__all__ = [
    "CallingConvention",
    "ParameterBinding",
    "ToolDescriptor",
    "ToolExtractor",
    "callable_label",
    "synthesized_name",
]
