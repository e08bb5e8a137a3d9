"""mocksmith: schema-driven validation and mock data for OpenAPI 3.0 documents."""

__version__ = "0.1.0"

from mocksmith.errors import ErrorKind, MockEngineError
from mocksmith.generator import SchemaGenerator
from mocksmith.openapi import (
    DocumentValidator,
    MockDataGenerator,
    OpenAPIDocument,
    ValidationResult,
)
from mocksmith.pattern import PatternGenerator, generate_from_pattern
from mocksmith.resolver import ResourceDependency, Resolver, SeedConfig, resolve
from mocksmith.schema import Schema, SchemaKind, SchemaParser, parse_schema
from mocksmith.semantic import SemanticType, classify
from mocksmith.validation import ValidationError, validate

__all__ = [
    "DocumentValidator",
    "ErrorKind",
    "MockDataGenerator",
    "MockEngineError",
    "OpenAPIDocument",
    "PatternGenerator",
    "ResourceDependency",
    "Resolver",
    "Schema",
    "SchemaGenerator",
    "SchemaKind",
    "SchemaParser",
    "SeedConfig",
    "SemanticType",
    "ValidationError",
    "ValidationResult",
    "classify",
    "generate_from_pattern",
    "parse_schema",
    "resolve",
    "validate",
]
