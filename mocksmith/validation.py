"""
Validation of JSON-shaped values against ``Schema`` trees.

``validate`` walks the schema and the value side by side and accumulates
every problem it finds. The only short-circuit is a type mismatch: once the
value has the wrong shape, its sub-checks are skipped.
"""

from __future__ import annotations

import ipaddress
import json
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any
from urllib.parse import urlparse
from uuid import UUID

from pydantic import BaseModel

from mocksmith.errors import ErrorKind
from mocksmith.schema import Schema, SchemaKind, StringFormat


class ValidationError(BaseModel):
    """A single validation problem."""

    field: str = ""
    message: str
    code: ErrorKind

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TIME_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?$")
_DATE_TIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?"
    r"(?:[Zz]|([+-])(\d{2}):(\d{2}))$"
)
_HOSTNAME_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")

MULTIPLE_OF_TOLERANCE = 1e-9


def canonical_json(value: Any) -> str:
    """Stable serialization used for uniqueness and enum comparisons."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def join_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _matches_kind(kind: SchemaKind, value: Any) -> bool:
    if kind == SchemaKind.STRING:
        return isinstance(value, str)
    if kind in (SchemaKind.NUMBER, SchemaKind.INTEGER):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == SchemaKind.BOOLEAN:
        return isinstance(value, bool)
    if kind == SchemaKind.ARRAY:
        return isinstance(value, (list, tuple))
    if kind == SchemaKind.OBJECT:
        return isinstance(value, Mapping)
    return True


def validate(schema: Schema, value: Any, path: str = "") -> list[ValidationError]:
    """
    Validate a value against a schema.

    Args:
        schema: The schema to validate against
        value: JSON-shaped data (dict, list, str, int, float, bool or None)
        path: Dotted/bracketed location of ``value``, used in error fields

    Returns:
        Every validation error found, in discovery order; empty when valid
    """
    if value is None:
        if schema.nullable:
            return []
        return [
            ValidationError(
                field=path,
                message="value cannot be null",
                code=ErrorKind.NULL_NOT_ALLOWED,
            )
        ]

    errors: list[ValidationError] = []

    if schema.is_composed:
        errors.extend(_validate_composition(schema, value, path))

    if schema.kind in (SchemaKind.COMPOSED, SchemaKind.UNKNOWN):
        errors.extend(_validate_enum(schema, value, path))
        return errors

    if not _matches_kind(schema.kind, value):
        errors.append(
            ValidationError(
                field=path,
                message=f"expected {schema.kind.value}, got {_type_name(value)}",
                code=ErrorKind.INVALID_TYPE,
            )
        )
        return errors

    if schema.kind == SchemaKind.OBJECT:
        errors.extend(_validate_object(schema, value, path))
    elif schema.kind == SchemaKind.ARRAY:
        errors.extend(_validate_array(schema, value, path))
    elif schema.kind == SchemaKind.STRING:
        errors.extend(_validate_string(schema, value, path))
    elif schema.kind in (SchemaKind.NUMBER, SchemaKind.INTEGER):
        errors.extend(_validate_number(schema, value, path))

    if schema.kind != SchemaKind.STRING:
        errors.extend(_validate_enum(schema, value, path))

    return errors


def is_valid(schema: Schema, value: Any) -> bool:
    return not validate(schema, value)


def _validate_composition(
    schema: Schema, value: Any, path: str
) -> list[ValidationError]:
    errors: list[ValidationError] = []

    for branch in schema.all_of:
        errors.extend(validate(branch, value, path))

    # oneOf is treated like anyOf: one matching branch is enough
    for branches in (schema.one_of, schema.any_of):
        if not branches:
            continue
        closest: list[ValidationError] | None = None
        for branch in branches:
            branch_errors = validate(branch, value, path)
            if not branch_errors:
                closest = None
                break
            if closest is None or len(branch_errors) < len(closest):
                closest = branch_errors
        if closest:
            errors.extend(closest)

    return errors


def _validate_object(
    schema: Schema, value: Mapping[str, Any], path: str
) -> list[ValidationError]:
    errors: list[ValidationError] = []

    for name in schema.required:
        if name not in value:
            errors.append(
                ValidationError(
                    field=join_path(path, name),
                    message=f"missing required property: {name}",
                    code=ErrorKind.MISSING_REQUIRED_PROPERTY,
                )
            )

    additional = schema.additional_properties
    for name, prop_value in value.items():
        prop_path = join_path(path, name)
        if name in schema.properties:
            errors.extend(validate(schema.properties[name], prop_value, prop_path))
        elif additional is False:
            errors.append(
                ValidationError(
                    field=prop_path,
                    message=f"additional property {name} not allowed",
                    code=ErrorKind.ADDITIONAL_PROPERTY_NOT_ALLOWED,
                )
            )
        elif isinstance(additional, Schema):
            errors.extend(validate(additional, prop_value, prop_path))

    count = len(value)
    if schema.min_properties is not None and count < schema.min_properties:
        errors.append(
            ValidationError(
                field=path,
                message=f"object must have >= {schema.min_properties} properties",
                code=ErrorKind.MIN_MAX_PROPERTIES,
            )
        )
    if schema.max_properties is not None and count > schema.max_properties:
        errors.append(
            ValidationError(
                field=path,
                message=f"object must have <= {schema.max_properties} properties",
                code=ErrorKind.MIN_MAX_PROPERTIES,
            )
        )

    return errors


def _validate_array(
    schema: Schema, value: list[Any] | tuple[Any, ...], path: str
) -> list[ValidationError]:
    errors: list[ValidationError] = []

    if schema.min_items is not None and len(value) < schema.min_items:
        errors.append(
            ValidationError(
                field=path,
                message=f"array length must be >= {schema.min_items}",
                code=ErrorKind.MIN_MAX_ITEMS,
            )
        )
    if schema.max_items is not None and len(value) > schema.max_items:
        errors.append(
            ValidationError(
                field=path,
                message=f"array length must be <= {schema.max_items}",
                code=ErrorKind.MIN_MAX_ITEMS,
            )
        )

    if schema.items is not None:
        for index, item in enumerate(value):
            errors.extend(validate(schema.items, item, f"{path}[{index}]"))

    if schema.unique_items:
        seen: set[str] = set()
        for index, item in enumerate(value):
            key = canonical_json(item)
            if key in seen:
                errors.append(
                    ValidationError(
                        field=path,
                        message=f"array items must be unique (duplicate at index {index})",
                        code=ErrorKind.DUPLICATE_ITEMS,
                    )
                )
                break
            seen.add(key)

    return errors


def _validate_string(schema: Schema, value: str, path: str) -> list[ValidationError]:
    errors: list[ValidationError] = []

    if schema.min_length is not None and len(value) < schema.min_length:
        errors.append(
            ValidationError(
                field=path,
                message=f"string length must be >= {schema.min_length}",
                code=ErrorKind.MIN_MAX_LENGTH,
            )
        )
    if schema.max_length is not None and len(value) > schema.max_length:
        errors.append(
            ValidationError(
                field=path,
                message=f"string length must be <= {schema.max_length}",
                code=ErrorKind.MIN_MAX_LENGTH,
            )
        )

    if schema.pattern:
        try:
            matched = re.search(schema.pattern, value) is not None
            message = f"must match pattern: {schema.pattern}"
        except re.error as e:
            matched = False
            message = f"invalid pattern {schema.pattern!r}: {e}"
        if not matched:
            errors.append(
                ValidationError(
                    field=path, message=message, code=ErrorKind.PATTERN_MISMATCH
                )
            )

    if schema.format:
        format_error = check_format(schema.format, value)
        if format_error:
            errors.append(
                ValidationError(
                    field=path, message=format_error, code=ErrorKind.INVALID_FORMAT
                )
            )

    errors.extend(_validate_enum(schema, value, path))
    return errors


def _validate_number(
    schema: Schema, value: int | float, path: str
) -> list[ValidationError]:
    errors: list[ValidationError] = []

    if schema.kind == SchemaKind.INTEGER and isinstance(value, float):
        if not value.is_integer():
            errors.append(
                ValidationError(
                    field=path,
                    message=f"expected integer, got {value}",
                    code=ErrorKind.INVALID_TYPE,
                )
            )

    if schema.minimum is not None:
        if schema.exclusive_minimum and value <= schema.minimum:
            errors.append(
                ValidationError(
                    field=path,
                    message=f"value must be > {schema.minimum}",
                    code=ErrorKind.MIN_MAX_VALUE,
                )
            )
        elif not schema.exclusive_minimum and value < schema.minimum:
            errors.append(
                ValidationError(
                    field=path,
                    message=f"value must be >= {schema.minimum}",
                    code=ErrorKind.MIN_MAX_VALUE,
                )
            )

    if schema.maximum is not None:
        if schema.exclusive_maximum and value >= schema.maximum:
            errors.append(
                ValidationError(
                    field=path,
                    message=f"value must be < {schema.maximum}",
                    code=ErrorKind.MIN_MAX_VALUE,
                )
            )
        elif not schema.exclusive_maximum and value > schema.maximum:
            errors.append(
                ValidationError(
                    field=path,
                    message=f"value must be <= {schema.maximum}",
                    code=ErrorKind.MIN_MAX_VALUE,
                )
            )

    if schema.multiple_of:
        if not is_multiple_of(value, schema.multiple_of):
            errors.append(
                ValidationError(
                    field=path,
                    message=f"value must be a multiple of {schema.multiple_of}",
                    code=ErrorKind.MULTIPLE_OF_VIOLATION,
                )
            )

    return errors


def is_multiple_of(value: int | float, divisor: int | float) -> bool:
    if isinstance(value, int) and isinstance(divisor, int):
        return value % divisor == 0
    quotient = value / divisor
    if math.isinf(quotient) or math.isnan(quotient):
        return False
    return abs(quotient - round(quotient)) <= MULTIPLE_OF_TOLERANCE * max(
        1.0, abs(quotient)
    )


def _validate_enum(schema: Schema, value: Any, path: str) -> list[ValidationError]:
    if schema.enum is None:
        return []
    key = canonical_json(value)
    if any(canonical_json(member) == key for member in schema.enum):
        return []
    return [
        ValidationError(
            field=path,
            message=f"value must be one of: {schema.enum}",
            code=ErrorKind.INVALID_ENUM,
        )
    ]


def check_format(fmt: str, value: str) -> str | None:
    """
    Check a string against a format tag.

    Returns:
        An error message, or None when the value is valid (unknown formats
        are always valid)
    """
    checker = _FORMAT_CHECKERS.get(fmt)
    if checker is None or checker(value):
        return None
    return _FORMAT_MESSAGES.get(fmt, f"invalid {fmt} format")


def _is_date(value: str) -> bool:
    match = _DATE_RE.match(value)
    if not match:
        return False
    try:
        date(*(int(part) for part in match.groups()))
    except ValueError:
        return False
    return True


def _is_time(value: str) -> bool:
    match = _TIME_RE.match(value)
    if not match:
        return False
    hour, minute, second = (int(part) for part in match.groups()[:3])
    try:
        # Leap seconds are valid RFC 3339 partial times
        time(hour, minute, min(second, 59))
    except ValueError:
        return False
    return second <= 60


def _is_date_time(value: str) -> bool:
    match = _DATE_TIME_RE.match(value)
    if not match:
        return False
    year, month, day, hour, minute, second = (int(p) for p in match.groups()[:6])
    try:
        datetime(year, month, day, hour, minute, min(second, 59))
    except ValueError:
        return False
    if second > 60:
        return False
    if match.group(8):
        offset_hours, offset_minutes = int(match.group(9)), int(match.group(10))
        if offset_hours > 23 or offset_minutes > 59:
            return False
    return True


def _is_email(value: str) -> bool:
    return "@" in value


def _is_ip(version: int):
    def check(value: str) -> bool:
        try:
            return ipaddress.ip_address(value).version == version
        except ValueError:
            return False

    return check


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _is_uri(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and " " not in value


def _is_hostname(value: str) -> bool:
    if not value or len(value) > 253:
        return False
    labels = value[:-1].split(".") if value.endswith(".") else value.split(".")
    return all(_HOSTNAME_LABEL_RE.match(label) for label in labels)


_FORMAT_CHECKERS = {
    StringFormat.DATE_TIME.value: _is_date_time,
    StringFormat.DATE.value: _is_date,
    StringFormat.TIME.value: _is_time,
    StringFormat.EMAIL.value: _is_email,
    StringFormat.IPV4.value: _is_ip(4),
    StringFormat.IPV6.value: _is_ip(6),
    StringFormat.UUID.value: _is_uuid,
    StringFormat.URI.value: _is_uri,
    StringFormat.HOSTNAME.value: _is_hostname,
}

_FORMAT_MESSAGES = {
    StringFormat.DATE_TIME.value: "invalid date-time format (expected RFC3339)",
    StringFormat.DATE.value: "invalid date format (expected YYYY-MM-DD)",
    StringFormat.TIME.value: "invalid time format (expected HH:MM:SS[.fraction])",
    StringFormat.EMAIL.value: "invalid email format",
    StringFormat.IPV4.value: "invalid IPv4 address",
    StringFormat.IPV6.value: "invalid IPv6 address",
    StringFormat.UUID.value: "invalid UUID format",
    StringFormat.URI.value: "invalid URI format",
    StringFormat.HOSTNAME.value: "invalid hostname",
}
