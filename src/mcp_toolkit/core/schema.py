"""Type mapper: Python type annotations -> JSON-Schema nodes.

``TypeMapper.map_type`` is total. Anything it has no rule for becomes a
generic ``{"type": "object", "description": "Complex parameter"}`` node, so a
tool with an odd parameter type still registers.
"""

from __future__ import annotations

import enum
import inspect
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..logging import get_logger
from .errors import UnsupportedTypeError
from .introspection import (
    composite_fields,
    is_composite,
    is_enum,
    sequence_parts,
    type_label,
    unwrap_optional,
)

LOG = get_logger(__name__)


class SchemaKind(str, enum.Enum):
    OBJECT = "object"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


class SchemaNode(BaseModel):
    """A JSON-Schema node restricted to the kinds tools can declare."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: SchemaKind = Field(alias="type")
    properties: Optional[Dict[str, "SchemaNode"]] = None
    items: Optional["SchemaNode"] = None
    description: Optional[str] = None
    required: Optional[List[str]] = None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def object_node(
        cls,
        properties: Optional[Dict[str, "SchemaNode"]] = None,
        required: Optional[List[str]] = None,
        description: Optional[str] = None,
    ) -> "SchemaNode":
        """Object node; ``required`` is dropped when empty and filtered to known properties."""
        props = dict(properties or {})
        req = [name for name in (required or []) if name in props]
        return cls(
            kind=SchemaKind.OBJECT,
            properties=props,
            required=req or None,
            description=description,
        )

    def with_description(self, description: Optional[str]) -> "SchemaNode":
        if description is None:
            return self
        return self.model_copy(update={"description": description})


SchemaNode.model_rebuild()


class SchemaDescriptions(BaseModel):
    """Generic descriptions attached to leaf nodes that carry none of their own."""

    string: str = Field(default="String parameter")
    integer: str = Field(default="Integer parameter")
    number: str = Field(default="Number parameter")
    boolean: str = Field(default="Boolean parameter")
    array: str = Field(default="Array parameter")
    complex: str = Field(default="Complex parameter")


class TypeMapper:
    def __init__(self, descriptions: Optional[SchemaDescriptions] = None):
        self.descriptions = descriptions or SchemaDescriptions()

    def map_type(self, tp: Any) -> SchemaNode:
        try:
            return self._map(tp)
        except UnsupportedTypeError as e:
            LOG.debug("schema fallback for %s: %s", type_label(tp), e)
            return self.complex_node()

    def complex_node(self) -> SchemaNode:
        return SchemaNode(kind=SchemaKind.OBJECT, description=self.descriptions.complex)

    def map_composite(self, tp: type) -> SchemaNode:
        """Object node for a dataclass or pydantic model.

        Properties follow field declaration order and use the field's alias
        when it has one. Field tags supply descriptions and ``required``.
        """
        properties: Dict[str, SchemaNode] = {}
        required: List[str] = []
        for spec in composite_fields(tp):
            properties[spec.wire_name] = self.map_type(spec.annotation).with_description(
                spec.tag.description
            )
            if spec.tag.required:
                required.append(spec.wire_name)
        return SchemaNode.object_node(properties, required)

    # ------------------------------------------------------------------ #
    def _map(self, tp: Any) -> SchemaNode:
        if tp is inspect.Parameter.empty or tp is Any or isinstance(tp, str):
            raise UnsupportedTypeError(f"no concrete type for {tp!r}")

        tp, _ = unwrap_optional(tp)
        d = self.descriptions

        if is_enum(tp):
            return self._map_enum(tp)
        if tp is bool:
            return SchemaNode(kind=SchemaKind.BOOLEAN, description=d.boolean)
        if tp is int:
            return SchemaNode(kind=SchemaKind.INTEGER, description=d.integer)
        if tp is float:
            return SchemaNode(kind=SchemaKind.NUMBER, description=d.number)
        if tp is str:
            return SchemaNode(kind=SchemaKind.STRING, description=d.string)

        seq = sequence_parts(tp)
        if seq is not None:
            _, item = seq
            return SchemaNode(kind=SchemaKind.ARRAY, items=self.map_type(item), description=d.array)

        if is_composite(tp):
            return self.map_composite(tp)

        raise UnsupportedTypeError(f"unsupported type {type_label(tp)}")

    def _map_enum(self, tp: type[enum.Enum]) -> SchemaNode:
        values = [member.value for member in tp]
        if values and all(isinstance(v, str) for v in values):
            return SchemaNode(kind=SchemaKind.STRING, description=self.descriptions.string)
        if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return SchemaNode(kind=SchemaKind.INTEGER, description=self.descriptions.integer)
        raise UnsupportedTypeError(f"enum {tp.__name__} mixes value types")


__all__ = ["SchemaKind", "SchemaNode", "SchemaDescriptions", "TypeMapper"]
