"""Type introspection helpers shared by schema mapping and argument coercion."""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import functools
import inspect
import types
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, Callable, Dict, Optional, Union, get_args, get_origin

from pydantic import BaseModel

from .tags import TAG_KEY, FieldTag, parse_field_tag

NoneType = type(None)
ALIAS_KEY = "alias"
NOT_EXPORTED = "-"

# origin -> concrete container used when coercing
SEQUENCE_ORIGINS: Dict[Any, type] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
}


@dataclass(frozen=True)
class FieldSpec:
    """One exported field of a composite type."""

    identifier: str
    wire_name: str
    annotation: Any
    tag: FieldTag
    has_default: bool


def strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return ``(inner, was_optional)`` for ``Optional[T]`` / ``T | None``.

    Only one level is removed; unions of several concrete types are returned
    unchanged.
    """
    tp = strip_annotated(tp)
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        concrete = [a for a in args if a is not NoneType]
        if len(concrete) == 1 and len(concrete) < len(args):
            return strip_annotated(concrete[0]), True
    return tp, False


def is_composite(tp: Any) -> bool:
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_enum(tp: Any) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, enum.Enum)


def is_pydantic_model(tp: Any) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, BaseModel)


def sequence_parts(tp: Any) -> Optional[tuple[type, Any]]:
    """Return ``(container, item_type)`` if ``tp`` is a sequence type, else None."""
    origin = get_origin(tp) or tp
    if not isinstance(origin, type) or origin not in SEQUENCE_ORIGINS:
        return None
    args = get_args(tp)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            item = args[0]
        elif args and all(a == args[0] for a in args):
            item = args[0]
        else:
            item = Any
    else:
        item = args[0] if args else Any
    return SEQUENCE_ORIGINS[origin], item


def type_label(tp: Any) -> str:
    tp = strip_annotated(tp)
    if tp is Any or tp is inspect.Parameter.empty:
        return "Any"
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return str(tp).replace("typing.", "")


def resolve_hints(obj: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except Exception:  # unresolved forward references, exotic objects
        return dict(getattr(obj, "__annotations__", {}) or {})


def callable_hints(fn: Callable[..., Any]) -> Dict[str, Any]:
    """Resolve parameter annotations of any callable (functions, methods,
    partials and objects implementing ``__call__``)."""
    target: Any = fn
    while isinstance(target, functools.partial):
        target = target.func
    if inspect.ismethod(target):
        target = target.__func__
    if isinstance(target, type):
        target = target.__init__
    elif not (inspect.isfunction(target) or inspect.isbuiltin(target)):
        call = getattr(type(target), "__call__", None)
        if call is not None:
            target = call
    return resolve_hints(target)


@lru_cache(maxsize=256)
def composite_fields(tp: type) -> tuple[FieldSpec, ...]:
    """Exported fields of a dataclass or pydantic model, in declaration order."""
    if is_pydantic_model(tp):
        return tuple(_pydantic_fields(tp))
    if dataclasses.is_dataclass(tp):
        return tuple(_dataclass_fields(tp))
    return ()


def _dataclass_fields(tp: type) -> list[FieldSpec]:
    hints = resolve_hints(tp)
    specs: list[FieldSpec] = []
    for f in dataclasses.fields(tp):
        if not f.init or f.name.startswith("_"):
            continue
        alias = f.metadata.get(ALIAS_KEY)
        if alias == NOT_EXPORTED:
            continue
        has_default = (
            f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING
        )
        specs.append(
            FieldSpec(
                identifier=f.name,
                wire_name=alias or f.name,
                annotation=hints.get(f.name, f.type),
                tag=parse_field_tag(f.metadata.get(TAG_KEY)),
                has_default=has_default,
            )
        )
    return specs


def _pydantic_fields(tp: type[BaseModel]) -> list[FieldSpec]:
    specs: list[FieldSpec] = []
    for name, info in tp.model_fields.items():
        if name.startswith("_") or info.alias == NOT_EXPORTED:
            continue
        extra = info.json_schema_extra
        tag = parse_field_tag(extra.get(TAG_KEY) if isinstance(extra, dict) else None)
        if tag.description is None and info.description:
            tag = FieldTag(description=info.description, required=tag.required)
        specs.append(
            FieldSpec(
                identifier=name,
                wire_name=info.alias or name,
                annotation=info.annotation,
                tag=tag,
                has_default=not info.is_required(),
            )
        )
    return specs
