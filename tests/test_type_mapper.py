from dataclasses import dataclass
from typing import Any, Optional

from jsonschema import Draft202012Validator

from mcp_toolkit.core.schema import SchemaDescriptions, TypeMapper

from sample_service import Color, Priority, SearchQuery, UserFilter


def _schema(tp, mapper=None):
    return (mapper or TypeMapper()).map_type(tp).to_json()


def test_scalar_mappings():
    assert _schema(str) == {"type": "string", "description": "String parameter"}
    assert _schema(int) == {"type": "integer", "description": "Integer parameter"}
    assert _schema(float) == {"type": "number", "description": "Number parameter"}
    assert _schema(bool) == {"type": "boolean", "description": "Boolean parameter"}


def test_optional_maps_to_inner_type():
    assert _schema(Optional[int])["type"] == "integer"
    assert _schema(str | None)["type"] == "string"


def test_sequence_maps_to_array_with_items():
    assert _schema(list[int]) == {
        "type": "array",
        "items": {"type": "integer", "description": "Integer parameter"},
        "description": "Array parameter",
    }
    assert _schema(tuple[str, ...])["items"]["type"] == "string"
    assert _schema(list[list[bool]])["items"]["items"]["type"] == "boolean"


def test_unsupported_types_degrade_to_complex_node():
    complex_node = {"type": "object", "description": "Complex parameter"}
    assert _schema(dict[str, int]) == complex_node
    assert _schema(Any) == complex_node
    assert _schema(bytes) == complex_node
    # untyped list items degrade, the array itself does not
    assert _schema(list)["items"] == complex_node


def test_enums_map_by_value_type():
    assert _schema(Color)["type"] == "string"
    assert _schema(Priority)["type"] == "integer"


def test_dataclass_composite_uses_aliases_and_field_tags():
    schema = _schema(SearchQuery)
    assert schema["type"] == "object"
    assert list(schema["properties"]) == ["keyword", "limit"]
    assert schema["properties"]["keyword"] == {"type": "string", "description": "Search keyword"}
    assert schema["properties"]["limit"] == {"type": "integer", "description": "Maximum results"}
    assert schema["required"] == ["keyword"]


def test_pydantic_composite():
    schema = _schema(UserFilter)
    props = schema["properties"]
    assert list(props) == ["userName", "age", "tags"]
    assert props["userName"]["description"] == "User name"
    assert props["age"] == {"type": "integer", "description": "Integer parameter"}
    assert props["tags"]["type"] == "array"
    assert schema["required"] == ["userName"]


def test_nested_composite_and_hidden_fields():
    from dataclasses import field

    @dataclass
    class Outer:
        query: SearchQuery
        note: str = field(default="", metadata={"alias": "-"})

    schema = _schema(Outer)
    assert list(schema["properties"]) == ["query"]
    assert schema["properties"]["query"]["properties"]["limit"]["type"] == "integer"
    assert "required" not in schema


def test_custom_descriptions():
    mapper = TypeMapper(SchemaDescriptions(string="Text", complex="Anything"))
    assert _schema(str, mapper)["description"] == "Text"
    assert _schema(dict, mapper)["description"] == "Anything"
    assert _schema(int, mapper)["description"] == "Integer parameter"


def test_generated_schemas_are_valid_json_schema():
    for tp in (int, list[str], SearchQuery, UserFilter, dict, Color):
        Draft202012Validator.check_schema(_schema(tp))
