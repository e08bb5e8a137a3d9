"""
Recursive schema model and OpenAPI schema parsing.

This module provides:
1. ``Schema``: the node shared by the validator, the generator and the resolver
2. ``SchemaParser``: converts raw OpenAPI 3.0 schema dicts into ``Schema`` trees,
   resolving local ``$ref`` pointers against the document
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from mocksmith.errors import SchemaReferenceError


# Type alias for a raw OpenAPI schema/document dict
OpenAPISchema = dict[str, Any]


class SchemaKind(str, Enum):
    """The shape a schema node describes."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    COMPOSED = "composed"
    UNKNOWN = "unknown"


class StringFormat(str, Enum):
    """String formats with dedicated validation and generation."""

    DATE = "date"
    DATE_TIME = "date-time"
    TIME = "time"
    EMAIL = "email"
    URI = "uri"
    UUID = "uuid"
    HOSTNAME = "hostname"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


class Schema(BaseModel):
    """
    A node of the schema tree.

    Only the constraint fields relevant to ``kind`` are meaningful. When any
    composition list is non-empty it takes precedence over kind-directed logic.
    """

    kind: SchemaKind = SchemaKind.UNKNOWN
    format: str | None = None

    # string
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    # any kind, mostly strings
    enum: list[Any] | None = None

    # number / integer
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: int | float | None = None

    # array
    items: Schema | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False

    # object
    properties: dict[str, Schema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    additional_properties: bool | Schema | None = None
    min_properties: int | None = None
    max_properties: int | None = None

    # composition
    one_of: list[Schema] = Field(default_factory=list)
    any_of: list[Schema] = Field(default_factory=list)
    all_of: list[Schema] = Field(default_factory=list)

    nullable: bool = False
    example: Any = None

    # Component name when this node was reached through a $ref
    ref_name: str | None = None

    @property
    def has_example(self) -> bool:
        """True when an example was declared, even ``example: null``."""
        return "example" in self.model_fields_set

    @property
    def is_composed(self) -> bool:
        return bool(self.one_of or self.any_of or self.all_of)

    def __repr__(self) -> str:
        # The default repr recurses and would loop on self-referential schemas
        details = [f"kind={self.kind.value!r}"]
        if self.ref_name:
            details.append(f"ref_name={self.ref_name!r}")
        if self.format:
            details.append(f"format={self.format!r}")
        if self.properties:
            details.append(f"properties={list(self.properties)!r}")
        return f"Schema({', '.join(details)})"

    __str__ = __repr__


Schema.model_rebuild()


_TYPE_TO_KIND = {
    "string": SchemaKind.STRING,
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.INTEGER,
    "boolean": SchemaKind.BOOLEAN,
    "array": SchemaKind.ARRAY,
    "object": SchemaKind.OBJECT,
}


def get_ref_name(ref: str) -> str:
    """Extract the component name from a $ref string."""
    return ref.split("/")[-1]


class SchemaParser:
    """
    Parses raw OpenAPI 3.0 schema dicts into ``Schema`` trees.

    Named component schemas are cached per parser, so a self-referential
    component yields a cyclic ``Schema`` graph instead of recursing forever.
    """

    def __init__(self, document: OpenAPISchema | None = None):
        """
        Initialize the parser.

        Args:
            document: The parsed OpenAPI document used to resolve $ref pointers
        """
        self.document = document or {}
        components = self.document.get("components", {})
        self._definitions: dict[str, OpenAPISchema] = components.get("schemas", {})
        self._ref_cache: dict[str, Schema] = {}

    def get_definitions(self) -> dict[str, OpenAPISchema]:
        """Get all raw component schemas from the document."""
        return self._definitions

    def resolve_ref(self, ref: str) -> OpenAPISchema:
        """
        Resolve a local $ref pointer to its raw definition.

        Args:
            ref: The $ref string (e.g., "#/components/schemas/Pet")

        Returns:
            The raw definition

        Raises:
            SchemaReferenceError: For external refs or missing targets
        """
        if not ref.startswith("#/"):
            raise SchemaReferenceError(ref, "external refs not supported")

        current: Any = self.document
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(current, dict) or part not in current:
                raise SchemaReferenceError(ref)
            current = current[part]

        if not isinstance(current, dict):
            raise SchemaReferenceError(ref, "reference does not point at a schema")
        return current

    def parse_component(self, name: str) -> Schema:
        """Parse a named component schema."""
        return self.parse({"$ref": f"#/components/schemas/{name}"})

    def parse(self, raw: OpenAPISchema | bool | None) -> Schema:
        """
        Convert a raw schema into a ``Schema``.

        Args:
            raw: The raw schema dict (``True``/``None``/``{}`` mean "anything")

        Returns:
            The parsed schema tree
        """
        if raw is None or raw is True:
            return Schema()
        if raw is False:
            # Nothing validates against `false`; an empty enum expresses that
            return Schema(enum=[])

        if "$ref" in raw:
            ref = raw["$ref"]
            if ref in self._ref_cache:
                return self._ref_cache[ref]

            # Placeholder first so recursive references find it
            placeholder = Schema(ref_name=get_ref_name(ref))
            self._ref_cache[ref] = placeholder
            resolved = self._build(self.resolve_ref(ref))
            for name in resolved.model_fields_set:
                setattr(placeholder, name, getattr(resolved, name))
            placeholder.ref_name = get_ref_name(ref)
            return placeholder

        return self._build(raw)

    def _build(self, raw: OpenAPISchema) -> Schema:
        fields: dict[str, Any] = {}

        kind, nullable = self._kind_from_raw(raw)
        fields["kind"] = kind
        if nullable or raw.get("nullable"):
            fields["nullable"] = True

        if "format" in raw:
            fields["format"] = raw["format"]
        if "example" in raw:
            fields["example"] = raw["example"]
        if "enum" in raw:
            fields["enum"] = list(raw["enum"])

        # String constraints
        if "minLength" in raw:
            fields["min_length"] = raw["minLength"]
        if "maxLength" in raw:
            fields["max_length"] = raw["maxLength"]
        if raw.get("pattern"):
            fields["pattern"] = raw["pattern"]

        # Numeric constraints (3.0 boolean and 3.1 numeric exclusivity)
        if "minimum" in raw:
            fields["minimum"] = raw["minimum"]
        if "maximum" in raw:
            fields["maximum"] = raw["maximum"]
        exclusive_min = raw.get("exclusiveMinimum")
        if isinstance(exclusive_min, bool):
            fields["exclusive_minimum"] = exclusive_min
        elif isinstance(exclusive_min, (int, float)):
            fields["minimum"] = exclusive_min
            fields["exclusive_minimum"] = True
        exclusive_max = raw.get("exclusiveMaximum")
        if isinstance(exclusive_max, bool):
            fields["exclusive_maximum"] = exclusive_max
        elif isinstance(exclusive_max, (int, float)):
            fields["maximum"] = exclusive_max
            fields["exclusive_maximum"] = True
        if "multipleOf" in raw:
            fields["multiple_of"] = raw["multipleOf"]

        # Array constraints
        if "items" in raw:
            fields["items"] = self.parse(raw["items"])
        if "minItems" in raw:
            fields["min_items"] = raw["minItems"]
        if "maxItems" in raw:
            fields["max_items"] = raw["maxItems"]
        if raw.get("uniqueItems"):
            fields["unique_items"] = True

        # Object constraints
        if "properties" in raw:
            fields["properties"] = {
                name: self.parse(prop) for name, prop in raw["properties"].items()
            }
        if "required" in raw:
            fields["required"] = list(dict.fromkeys(raw["required"]))
        if "additionalProperties" in raw:
            additional = raw["additionalProperties"]
            if isinstance(additional, bool):
                fields["additional_properties"] = additional
            else:
                fields["additional_properties"] = self.parse(additional)
        if "minProperties" in raw:
            fields["min_properties"] = raw["minProperties"]
        if "maxProperties" in raw:
            fields["max_properties"] = raw["maxProperties"]

        # Composition
        if raw.get("oneOf"):
            fields["one_of"] = [self.parse(sub) for sub in raw["oneOf"]]
        if raw.get("anyOf"):
            fields["any_of"] = [self.parse(sub) for sub in raw["anyOf"]]
        if raw.get("allOf"):
            fields["all_of"] = [self.parse(sub) for sub in raw["allOf"]]

        return Schema(**fields)

    @staticmethod
    def _kind_from_raw(raw: OpenAPISchema) -> tuple[SchemaKind, bool]:
        """Work out the kind, and whether a list type also allowed null."""
        schema_type = raw.get("type")
        nullable = False

        if isinstance(schema_type, list):
            nullable = "null" in schema_type
            non_null = [t for t in schema_type if t != "null"]
            schema_type = non_null[0] if non_null else None

        if schema_type in _TYPE_TO_KIND:
            return _TYPE_TO_KIND[schema_type], nullable

        # Common omissions of `type`
        if "properties" in raw or "additionalProperties" in raw:
            return SchemaKind.OBJECT, nullable
        if "items" in raw:
            return SchemaKind.ARRAY, nullable
        if raw.get("oneOf") or raw.get("anyOf") or raw.get("allOf"):
            return SchemaKind.COMPOSED, nullable

        return SchemaKind.UNKNOWN, nullable


def parse_schema(raw: OpenAPISchema, document: OpenAPISchema | None = None) -> Schema:
    """Parse a raw schema dict, resolving refs against ``document``."""
    return SchemaParser(document).parse(raw)
