"""Tests for the schema module - Schema model and OpenAPI parsing."""

import pytest

from mocksmith.errors import SchemaReferenceError
from mocksmith.schema import Schema, SchemaKind, SchemaParser, get_ref_name, parse_schema


PETSTORE_DOCUMENT = {
    "openapi": "3.0.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {},
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "name": {"type": "string", "minLength": 1},
                    "tag": {"type": "string", "nullable": True},
                    "category": {"$ref": "#/components/schemas/Category"},
                },
            },
            "Category": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                },
            },
            "TreeNode": {
                "type": "object",
                "properties": {
                    "value": {"type": "integer"},
                    "children": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/TreeNode"},
                    },
                },
            },
            "a/b": {"type": "string"},
        }
    },
}


class TestSchemaParser:
    """Tests for SchemaParser."""

    def test_parse_object(self):
        """Object schemas carry properties and required names."""
        schema = parse_schema(
            {
                "type": "object",
                "required": ["name", "name"],
                "properties": {
                    "name": {"type": "string", "minLength": 3, "maxLength": 10},
                    "age": {"type": "integer", "minimum": 0},
                },
                "additionalProperties": False,
            }
        )

        assert schema.kind == SchemaKind.OBJECT
        assert schema.required == ["name"]
        assert schema.properties["name"].kind == SchemaKind.STRING
        assert schema.properties["name"].min_length == 3
        assert schema.properties["name"].max_length == 10
        assert schema.properties["age"].minimum == 0
        assert schema.additional_properties is False

    def test_parse_additional_properties_schema(self):
        """A schema-valued additionalProperties is parsed recursively."""
        schema = parse_schema(
            {"type": "object", "additionalProperties": {"type": "integer"}}
        )

        assert isinstance(schema.additional_properties, Schema)
        assert schema.additional_properties.kind == SchemaKind.INTEGER

    def test_parse_array(self):
        """Array schemas carry item schema and item constraints."""
        schema = parse_schema(
            {
                "type": "array",
                "items": {"type": "string"},
                "minItems": 1,
                "maxItems": 4,
                "uniqueItems": True,
            }
        )

        assert schema.kind == SchemaKind.ARRAY
        assert schema.items.kind == SchemaKind.STRING
        assert schema.min_items == 1
        assert schema.max_items == 4
        assert schema.unique_items

    def test_missing_type_is_inferred(self):
        """Type is inferred from properties, items and composition."""
        assert parse_schema({"properties": {"a": {}}}).kind == SchemaKind.OBJECT
        assert parse_schema({"items": {"type": "string"}}).kind == SchemaKind.ARRAY
        assert (
            parse_schema({"oneOf": [{"type": "string"}, {"type": "integer"}]}).kind
            == SchemaKind.COMPOSED
        )
        assert parse_schema({}).kind == SchemaKind.UNKNOWN

    def test_list_type_with_null(self):
        """3.1-style list types pick the first non-null type and allow null."""
        schema = parse_schema({"type": ["string", "null"]})

        assert schema.kind == SchemaKind.STRING
        assert schema.nullable

    def test_boolean_exclusive_bounds(self):
        """3.0-style boolean exclusivity only sets the flag."""
        schema = parse_schema(
            {"type": "number", "minimum": 0, "exclusiveMinimum": True, "maximum": 1}
        )

        assert schema.minimum == 0
        assert schema.exclusive_minimum
        assert not schema.exclusive_maximum

    def test_numeric_exclusive_bounds(self):
        """3.1-style numeric exclusivity sets the bound and the flag."""
        schema = parse_schema({"type": "integer", "exclusiveMaximum": 10})

        assert schema.maximum == 10
        assert schema.exclusive_maximum

    def test_composition_lists(self):
        """oneOf/anyOf/allOf are parsed into branch lists."""
        schema = parse_schema(
            {
                "allOf": [{"type": "object"}],
                "anyOf": [{"type": "string"}],
                "oneOf": [{"type": "integer"}, {"type": "boolean"}],
            }
        )

        assert schema.is_composed
        assert len(schema.all_of) == 1
        assert len(schema.any_of) == 1
        assert [b.kind for b in schema.one_of] == [SchemaKind.INTEGER, SchemaKind.BOOLEAN]

    def test_example_presence(self):
        """An explicit null example is still an example."""
        assert parse_schema({"type": "string", "example": None}).has_example
        assert parse_schema({"type": "string", "example": "x"}).example == "x"
        assert not parse_schema({"type": "string"}).has_example

    def test_boolean_schemas(self):
        """`true` accepts anything, `false` accepts nothing."""
        parser = SchemaParser()

        assert parser.parse(True).kind == SchemaKind.UNKNOWN
        assert parser.parse(False).enum == []


class TestRefResolution:
    """Tests for $ref handling."""

    def test_resolve_ref(self):
        """Local refs resolve to the raw component."""
        parser = SchemaParser(PETSTORE_DOCUMENT)
        raw = parser.resolve_ref("#/components/schemas/Pet")

        assert raw["type"] == "object"
        assert "name" in raw["properties"]

    def test_resolve_escaped_ref(self):
        """JSON pointer escapes are decoded."""
        parser = SchemaParser(PETSTORE_DOCUMENT)

        assert parser.resolve_ref("#/components/schemas/a~1b") == {"type": "string"}

    def test_parse_component_sets_ref_name(self):
        """Schemas reached through $ref remember the component name."""
        parser = SchemaParser(PETSTORE_DOCUMENT)
        pet = parser.parse_component("Pet")

        assert pet.ref_name == "Pet"
        assert pet.kind == SchemaKind.OBJECT
        assert pet.properties["category"].ref_name == "Category"
        assert pet.properties["tag"].nullable
        assert pet.properties["id"].ref_name is None

    def test_component_cache_shares_instances(self):
        """The same ref parsed twice yields the same Schema object."""
        parser = SchemaParser(PETSTORE_DOCUMENT)
        first = parser.parse({"$ref": "#/components/schemas/Category"})
        second = parser.parse({"$ref": "#/components/schemas/Category"})

        assert first is second

    def test_self_reference_builds_cycle(self):
        """A self-referential component produces a cyclic graph."""
        parser = SchemaParser(PETSTORE_DOCUMENT)
        node = parser.parse_component("TreeNode")

        assert node.properties["children"].items is node
        # repr must not recurse forever
        assert "TreeNode" in repr(node)

    def test_external_ref_rejected(self):
        """Non-local refs raise SchemaReferenceError."""
        parser = SchemaParser(PETSTORE_DOCUMENT)

        with pytest.raises(SchemaReferenceError):
            parser.parse({"$ref": "other.yaml#/components/schemas/Pet"})

    def test_missing_ref_rejected(self):
        """Refs to missing components raise a ValueError subclass."""
        parser = SchemaParser(PETSTORE_DOCUMENT)

        with pytest.raises(ValueError) as exc_info:
            parser.parse({"$ref": "#/components/schemas/Missing"})

        assert isinstance(exc_info.value, SchemaReferenceError)
        assert exc_info.value.ref == "#/components/schemas/Missing"

    def test_get_definitions(self):
        """All component schemas are exposed."""
        parser = SchemaParser(PETSTORE_DOCUMENT)

        assert set(parser.get_definitions()) == {"Pet", "Category", "TreeNode", "a/b"}

    def test_get_ref_name(self):
        assert get_ref_name("#/components/schemas/Pet") == "Pet"
