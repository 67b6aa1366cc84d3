"""Coercion of JSON-origin values into the Python types tools declare.

Mirrors the type mapper rule for rule. A value that is absent (or JSON
``null``) becomes the target type's zero value; a value that is present but
incompatible raises :class:`ArgumentConversionError` naming the offending
parameter path (``param1``, ``query.limit``, ``ids[2]``).
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import types
from typing import Any, Dict, Mapping, Union, get_args, get_origin

import pydantic

from .errors import ArgumentConversionError
from .introspection import (
    NoneType,
    composite_fields,
    is_composite,
    is_enum,
    is_pydantic_model,
    sequence_parts,
    resolve_hints,
    strip_annotated,
    type_label,
    unwrap_optional,
)

_MISSING = object()
_TRUE = "true"
_FALSE = "false"
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _is_untyped(tp: Any) -> bool:
    return tp is Any or tp is inspect.Parameter.empty or isinstance(tp, str)


class Coercer:
    def coerce(self, value: Any, tp: Any, path: str) -> Any:
        if value is None:
            return self.zero_value(tp, path)
        tp = strip_annotated(tp)
        if _is_untyped(tp):
            return value
        tp, _ = unwrap_optional(tp)

        if is_enum(tp):
            return self._to_enum(value, tp, path)
        if tp is bool:
            return self._to_bool(value, path)
        if tp is int:
            return self._to_int(value, path)
        if tp is float:
            return self._to_float(value, path)
        if tp is str:
            return self._to_str(value, path)

        seq = sequence_parts(tp)
        if seq is not None:
            return self._to_sequence(value, tp, seq[0], seq[1], path)
        if is_composite(tp):
            return self.build_composite(value, tp, path)
        if tp is dict or get_origin(tp) in _MAPPING_ORIGINS:
            return self._to_mapping(value, tp, path)
        if get_origin(tp) in (Union, types.UnionType):
            return self._to_union(value, tp, path)
        if isinstance(tp, type) and get_origin(tp) is None:
            if isinstance(value, tp):
                return value
            raise ArgumentConversionError(path, type_label(tp), value)
        return value

    def zero_value(self, tp: Any, path: str = "") -> Any:
        """The value a parameter of type ``tp`` takes when its argument is absent."""
        tp = strip_annotated(tp)
        if _is_untyped(tp):
            return None
        tp, optional = unwrap_optional(tp)
        if optional:
            return None
        if is_enum(tp):
            return next(iter(tp), None)
        if tp is bool:
            return False
        if tp is int:
            return 0
        if tp is float:
            return 0.0
        if tp is str:
            return ""
        seq = sequence_parts(tp)
        if seq is not None:
            return seq[0]()
        if tp is dict or get_origin(tp) in _MAPPING_ORIGINS:
            return {}
        if is_composite(tp):
            return self.build_composite({}, tp, path)
        return None

    def build_composite(self, value: Any, tp: type, path: str) -> Any:
        """Build a dataclass / pydantic instance field by field.

        Each field is looked up by its alias (or identifier), then by its
        identifier. Missing fields fall back to the declared default, or to
        the zero value when there is none.
        """
        if isinstance(value, tp):
            return value
        if not isinstance(value, Mapping):
            raise ArgumentConversionError(path, type_label(tp), value)

        converted: Dict[str, Any] = {}
        wire_names: Dict[str, str] = {}
        for spec in composite_fields(tp):
            wire_names[spec.identifier] = spec.wire_name
            raw = value.get(spec.wire_name, _MISSING)
            if raw is _MISSING:
                raw = value.get(spec.identifier, _MISSING)
            field_path = f"{path}.{spec.wire_name}" if path else spec.wire_name
            if raw is _MISSING or raw is None:
                if spec.has_default:
                    continue
                converted[spec.identifier] = self.zero_value(spec.annotation, field_path)
            else:
                converted[spec.identifier] = self.coerce(raw, spec.annotation, field_path)

        if is_pydantic_model(tp):
            return self._construct_model(tp, converted, wire_names, path)
        return self._construct_dataclass(tp, converted, path)

    # ------------------------------------------------------------------ #
    # Scalars
    # ------------------------------------------------------------------ #
    def _to_bool(self, value: Any, path: str) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in (_TRUE, _FALSE):
            return value.strip().lower() == _TRUE
        raise ArgumentConversionError(path, "bool", value)

    def _to_int(self, value: Any, path: str) -> int:
        if isinstance(value, bool):
            raise ArgumentConversionError(path, "int", value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ArgumentConversionError(
                path, "int", value, reason=f"{value!r} has a fractional part; refusing to truncate"
            )
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                raise ArgumentConversionError(path, "int", value) from None
            return self._to_int(number, path)
        raise ArgumentConversionError(path, "int", value)

    def _to_float(self, value: Any, path: str) -> float:
        if isinstance(value, bool):
            raise ArgumentConversionError(path, "float", value)
        if not isinstance(value, (int, float, str)):
            raise ArgumentConversionError(path, "float", value)
        try:
            return float(value.strip() if isinstance(value, str) else value)
        except (OverflowError, ValueError):
            # ints beyond the float range overflow
            raise ArgumentConversionError(path, "float", value) from None

    def _to_str(self, value: Any, path: str) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return _TRUE if value else _FALSE
        if isinstance(value, (int, float)):
            return str(value)
        raise ArgumentConversionError(path, "str", value)

    def _to_enum(self, value: Any, tp: Any, path: str) -> Any:
        if isinstance(value, tp):
            return value
        try:
            return tp(value)
        except ValueError:
            pass
        if isinstance(value, str) and value in tp.__members__:
            return tp[value]
        raise ArgumentConversionError(path, tp.__name__, value)

    # ------------------------------------------------------------------ #
    # Containers
    # ------------------------------------------------------------------ #
    def _to_sequence(self, value: Any, tp: Any, container: type, item: Any, path: str) -> Any:
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(
            value, (list, tuple, set, frozenset)
        ):
            raise ArgumentConversionError(path, type_label(tp), value)
        items = [self.coerce(v, item, f"{path}[{i}]") for i, v in enumerate(value)]
        try:
            return container(items)
        except TypeError as e:  # unhashable members for set targets
            raise ArgumentConversionError(path, type_label(tp), value, reason=str(e)) from e

    def _to_mapping(self, value: Any, tp: Any, path: str) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            raise ArgumentConversionError(path, type_label(tp), value)
        args = get_args(tp)
        value_type = args[1] if len(args) == 2 else Any
        return {k: self.coerce(v, value_type, f"{path}.{k}") for k, v in value.items()}

    def _to_union(self, value: Any, tp: Any, path: str) -> Any:
        for option in get_args(tp):
            if option is NoneType:
                continue
            try:
                return self.coerce(value, option, path)
            except ArgumentConversionError:
                continue
        raise ArgumentConversionError(path, type_label(tp), value)

    # ------------------------------------------------------------------ #
    # Composite construction
    # ------------------------------------------------------------------ #
    def _construct_dataclass(self, tp: type, converted: Dict[str, Any], path: str) -> Any:
        # init fields hidden from the wire still need a value when they have no default
        hints = resolve_hints(tp)
        for f in dataclasses.fields(tp):
            if not f.init or f.name in converted:
                continue
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                converted[f.name] = self.zero_value(hints.get(f.name, f.type), path)
        try:
            return tp(**converted)
        except Exception as e:  # __init__ and __post_init__ checks
            raise ArgumentConversionError(path or tp.__name__, tp.__name__, converted, reason=str(e)) from e

    def _construct_model(
        self, tp: type[pydantic.BaseModel], converted: Dict[str, Any], wire_names: Dict[str, str], path: str
    ) -> Any:
        data = {wire_names.get(name, name): v for name, v in converted.items()}
        try:
            return tp.model_validate(data)
        except pydantic.ValidationError as e:
            raise ArgumentConversionError(path or tp.__name__, tp.__name__, data, reason=str(e)) from e


__all__ = ["Coercer"]
