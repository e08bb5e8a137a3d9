"""
Error taxonomy shared by the validator, the generators and the resolver.

Validation problems are reported as values (see ``mocksmith.validation``),
while generation problems are raised as ``MockEngineError`` subclasses.
Both use the same ``ErrorKind`` codes so callers can render them uniformly.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable error codes."""

    # Validation
    INVALID_TYPE = "invalid_type"
    MISSING_REQUIRED_PROPERTY = "missing_required_property"
    ADDITIONAL_PROPERTY_NOT_ALLOWED = "additional_property_not_allowed"
    MIN_MAX_PROPERTIES = "min_max_properties"
    MIN_MAX_ITEMS = "min_max_items"
    DUPLICATE_ITEMS = "duplicate_items"
    MIN_MAX_LENGTH = "min_max_length"
    PATTERN_MISMATCH = "pattern_mismatch"
    INVALID_FORMAT = "invalid_format"
    INVALID_ENUM = "invalid_enum"
    MIN_MAX_VALUE = "min_max_value"
    MULTIPLE_OF_VIOLATION = "multiple_of_violation"
    NULL_NOT_ALLOWED = "null_not_allowed"

    # Generation
    EMPTY_PATTERN = "empty_pattern"
    UNCLOSED_GROUP = "unclosed_group"
    UNCLOSED_CHARACTER_CLASS = "unclosed_character_class"
    UNSUPPORTED_SCHEMA = "unsupported_schema"
    REQUIRED_PARENT_UNAVAILABLE = "required_parent_unavailable"


class MockEngineError(Exception):
    """Base class for errors raised while generating data."""

    kind: ErrorKind = ErrorKind.UNSUPPORTED_SCHEMA

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PatternError(MockEngineError):
    """A pattern could not be turned into a string."""

    def __init__(self, message: str, pattern: str, position: int | None = None):
        super().__init__(message)
        self.pattern = pattern
        self.position = position


class EmptyPatternError(PatternError):
    kind = ErrorKind.EMPTY_PATTERN

    def __init__(self):
        super().__init__("empty pattern", "")


class UnclosedGroupError(PatternError):
    kind = ErrorKind.UNCLOSED_GROUP

    def __init__(self, pattern: str, position: int):
        super().__init__(f"unclosed group at position {position}", pattern, position)


class UnclosedCharacterClassError(PatternError):
    kind = ErrorKind.UNCLOSED_CHARACTER_CLASS

    def __init__(self, pattern: str, position: int):
        super().__init__(
            f"unclosed character class at position {position}", pattern, position
        )


class UnsupportedSchemaError(MockEngineError):
    """Raised when a schema gives the generator nothing to work with."""

    kind = ErrorKind.UNSUPPORTED_SCHEMA


class SchemaReferenceError(MockEngineError, ValueError):
    """A ``$ref`` could not be resolved against the document."""

    kind = ErrorKind.UNSUPPORTED_SCHEMA

    def __init__(self, ref: str, reason: str = "unresolvable reference"):
        super().__init__(f"{reason}: {ref}")
        self.ref = ref


class RequiredParentUnavailableError(MockEngineError):
    """A required foreign key has no generated parent to point at."""

    kind = ErrorKind.REQUIRED_PARENT_UNAVAILABLE

    def __init__(self, resource: str, depends_on: str, field: str):
        super().__init__(
            f"no {depends_on} available for required reference "
            f"{resource}.{field}"
        )
        self.resource = resource
        self.depends_on = depends_on
        self.field = field
