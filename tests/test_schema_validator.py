import logging

import pytest

from streaming_mcp_client.llm_core import SchemaValidator, ToolRegistrationError

RECURSIVE = {
    "$defs": {
        "Node": {
            "type": "object",
            "properties": {"child": {"$ref": "#/$defs/Node"}},
        }
    },
    "type": "object",
    "properties": {"root": {"$ref": "#/$defs/Node"}},
}


def test_assert_no_recursive_refs_no_recursion() -> None:
    schema = {
        "type": "object",
        "properties": {
            "prop1": {"type": "string"},
            "prop2": {"type": "object", "properties": {"subprop": {"type": "integer"}}},
        },
    }
    # Should not raise
    SchemaValidator.assert_no_recursive_refs(schema)


def test_assert_no_recursive_refs_with_recursion() -> None:
    with pytest.raises(ToolRegistrationError, match="Recursive structure detected"):
        SchemaValidator.assert_no_recursive_refs(RECURSIVE)


def test_sanitize_schema_removes_metadata() -> None:
    schema = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "$id": "http://example.com/schema",
        "title": "MySchema",
        "type": "object",
        "properties": {"field": {"type": "string", "title": "FieldTitle"}},
        "definitions": {"SomeDef": {}},
    }
    sanitized = SchemaValidator.sanitize_schema(schema)

    assert "$schema" not in sanitized
    assert "$id" not in sanitized
    assert "title" not in sanitized
    assert "definitions" not in sanitized
    assert "title" not in sanitized["properties"]["field"]


def test_sanitize_schema_keeps_property_named_title() -> None:
    schema = {"type": "object", "properties": {"title": {"type": "string"}}, "required": ["title"]}

    sanitized = SchemaValidator.sanitize_schema(schema)

    assert sanitized["properties"] == {"title": {"type": "string"}}
    assert sanitized["required"] == ["title"]


def test_sanitize_schema_simplifies_optional() -> None:
    # Optional[int] -> anyOf: [type: integer, type: null]
    schema = {
        "type": "object",
        "properties": {
            "optional_field": {
                "anyOf": [{"type": "integer", "description": "An integer"}, {"type": "null"}],
                "description": "Parent description",
            }
        },
    }
    field = SchemaValidator.sanitize_schema(schema)["properties"]["optional_field"]

    assert "anyOf" not in field
    assert field["type"] == "integer"
    assert field["description"] == "Parent description"


@pytest.mark.parametrize("raw", [None, {}, "not a schema"])
def test_prepare_parameters_defaults_to_empty_object(raw: object) -> None:
    assert SchemaValidator.prepare_parameters(raw) == {"type": "object", "properties": {}}


def test_prepare_parameters_inlines_refs() -> None:
    schema = {
        "type": "object",
        "properties": {"point": {"$ref": "#/$defs/Point"}},
        "$defs": {"Point": {"type": "object", "properties": {"x": {"type": "number"}}}},
    }

    prepared = SchemaValidator.prepare_parameters(schema, "plot")

    assert prepared == {
        "type": "object",
        "properties": {"point": {"type": "object", "properties": {"x": {"type": "number"}}}},
    }


def test_prepare_parameters_keeps_recursive_schema(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        prepared = SchemaValidator.prepare_parameters(RECURSIVE, "tree")

    assert prepared == RECURSIVE
    assert "recursive" in caplog.text
