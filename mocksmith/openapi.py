"""
Operation-level access to an OpenAPI 3.0 document.

Paths here are the document's path templates (``/pets/{petId}``); matching a
concrete URL to a template is the routing layer's job.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, Field

from mocksmith.errors import ErrorKind
from mocksmith.generator import SchemaGenerator
from mocksmith.schema import OpenAPISchema, Schema, SchemaKind, SchemaParser
from mocksmith.validation import ValidationError, validate

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Media types tried in order before falling back to any ``+json`` type
PREFERRED_CONTENT_TYPES = ("application/json", "*/*")

PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")


class ValidationResult(BaseModel):
    """Result of validating part of a request or response."""

    valid: bool
    errors: list[ValidationError] = Field(default_factory=list)


class OpenAPIDocument:
    """Looks up operations, bodies and parameters in a parsed document."""

    def __init__(self, document: OpenAPISchema):
        """
        Initialize with a parsed OpenAPI document.

        Args:
            document: The OpenAPI 3.0 document as a dict
        """
        self.document = document
        self.parser = SchemaParser(document)

    def get_operation(self, path: str, method: str) -> dict[str, Any]:
        paths = self.document.get("paths", {}) or {}
        path_item = paths.get(path) or {}
        return path_item.get(method.lower()) or {}

    def iter_operations(self) -> Iterator[tuple[str, str, dict[str, Any]]]:
        """Yield ``(path, method, operation)`` for every declared operation."""
        paths = self.document.get("paths", {}) or {}
        for path, path_item in paths.items():
            for method in HTTP_METHODS:
                operation = (path_item or {}).get(method)
                if operation is not None:
                    yield path, method, operation

    def get_request_body_schema(self, path: str, method: str) -> Schema | None:
        """
        Get the request body schema for an endpoint.

        Args:
            path: The endpoint path template
            method: The HTTP method

        Returns:
            The parsed schema, or None when the operation takes no body
        """
        request_body = self._resolve(self.get_operation(path, method).get("requestBody"))
        raw = _content_schema(request_body)
        if raw is None:
            return None
        return self.parser.parse(raw)

    def is_request_body_required(self, path: str, method: str) -> bool:
        request_body = self._resolve(self.get_operation(path, method).get("requestBody"))
        return bool(request_body.get("required"))

    def get_response_schema(
        self, path: str, method: str, status_code: int | str | None = None
    ) -> Schema | None:
        """
        Get the response schema for an endpoint and status code.

        Args:
            path: The endpoint path template
            method: The HTTP method
            status_code: The HTTP status code; the first declared 2xx when None

        Returns:
            The parsed schema, or None when the response has no JSON body
        """
        responses = self.get_operation(path, method).get("responses") or {}

        if status_code is None:
            success = sorted(str(code) for code in responses if str(code).startswith("2"))
            status_code = success[0] if success else "default"

        # Try the exact code, then the 2XX-style range, then default
        code = str(status_code)
        response = (
            responses.get(code)
            or responses.get(f"{code[:1]}XX")
            or responses.get("default")
        )
        raw = _content_schema(self._resolve(response))
        if raw is None:
            return None
        return self.parser.parse(raw)

    def get_parameters(self, path: str, method: str) -> dict[str, list[dict[str, Any]]]:
        """
        Get all parameters for an endpoint grouped by location.

        Operation-level parameters override path-level ones with the same
        name and location.
        """
        paths = self.document.get("paths", {}) or {}
        path_item = paths.get(path) or {}
        operation = self.get_operation(path, method)

        merged: dict[tuple[str, str], dict[str, Any]] = {}
        for param in path_item.get("parameters", []) + operation.get("parameters", []):
            param = self._resolve(param)
            merged[(param.get("in", "query"), param.get("name", ""))] = param

        result: dict[str, list[dict[str, Any]]] = {location: [] for location in PARAMETER_LOCATIONS}
        for (location, _), param in merged.items():
            if location in result:
                result[location].append(param)
        return result

    def get_parameter_schema(self, param: dict[str, Any]) -> Schema:
        return self.parser.parse(param.get("schema") or {"type": "string"})

    def _resolve(self, obj: dict[str, Any] | None) -> dict[str, Any]:
        """Follow a ``$ref`` on a request body, response or parameter."""
        if not obj:
            return {}
        while "$ref" in obj:
            obj = self.parser.resolve_ref(obj["$ref"])
        return obj


class DocumentValidator:
    """Validates request parameters and bodies, and response bodies, against a document."""

    def __init__(self, document: OpenAPIDocument):
        self.document = document

    def validate_request_body(self, path: str, method: str, body: Any) -> ValidationResult:
        """
        Validate a request body.

        A missing body is only an error when the operation marks its
        request body as required.
        """
        schema = self.document.get_request_body_schema(path, method)
        if schema is None:
            return ValidationResult(valid=True)
        if body is None and not self.document.is_request_body_required(path, method):
            return ValidationResult(valid=True)
        return _result(validate(schema, body))

    def validate_response(
        self, path: str, method: str, status_code: int | str, body: Any
    ) -> ValidationResult:
        """Validate a response body for the given status code."""
        schema = self.document.get_response_schema(path, method, status_code)
        if schema is None:
            return ValidationResult(valid=True)
        return _result(validate(schema, body))

    def validate_parameters(
        self,
        path: str,
        method: str,
        path_params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """
        Validate the path, query and header parameters of a request.

        Values arrive as they do on the wire: strings, or lists of strings for
        repeated query parameters and headers. Integer, number and boolean
        parameters are converted before their schema is checked. Header names
        match case-insensitively.

        Args:
            path: The endpoint path template
            method: The HTTP method
            path_params: Values extracted from the concrete path
            query: Query string values
            headers: Request headers

        Returns:
            The result; error fields look like ``query.limit``
        """
        params = self.document.get_parameters(path, method)
        supplied: dict[str, Mapping[str, Any]] = {
            "path": path_params or {},
            "query": query or {},
            "header": {name.lower(): value for name, value in (headers or {}).items()},
        }

        errors: list[ValidationError] = []
        for location, values in supplied.items():
            for param in params[location]:
                name = param.get("name", "")
                field = f"{location}.{name}"
                raw = values.get(name.lower() if location == "header" else name)

                if raw is None or raw == "" or raw == []:
                    if param.get("required", False):
                        errors.append(
                            ValidationError(
                                field=field,
                                message=f"missing required {location} parameter: {name}",
                                code=ErrorKind.MISSING_REQUIRED_PROPERTY,
                            )
                        )
                    continue

                schema = self.document.get_parameter_schema(param)
                errors.extend(_validate_parameter(schema, raw, field))

        return _result(errors)


class MockDataGenerator:
    """
    Generates bodies and parameters for the operations of a document.
    """

    def __init__(
        self,
        document: OpenAPISchema | OpenAPIDocument,
        seed: int | str | None = None,
        generator: SchemaGenerator | None = None,
    ):
        """
        Initialize the mock data generator.

        Args:
            document: The OpenAPI document (raw dict or ``OpenAPIDocument``)
            seed: Optional seed for reproducible values
            generator: Value generator to use instead of a seeded new one
        """
        if not isinstance(document, OpenAPIDocument):
            document = OpenAPIDocument(document)
        self.document = document
        self.generator = generator or SchemaGenerator(seed=seed)
        self.validator = DocumentValidator(document)

    def generate_request_body(self, path: str, method: str) -> Any:
        """Generate a valid request body, or None when there is none."""
        schema = self.document.get_request_body_schema(path, method)
        if schema is None:
            return None
        return self.generator.generate(schema)

    def generate_response_body(
        self, path: str, method: str, status_code: int | str | None = None
    ) -> Any:
        """Generate a response body for a status code (first 2xx by default)."""
        schema = self.document.get_response_schema(path, method, status_code)
        if schema is None:
            return None
        return self.generator.generate(schema)

    def generate_path_params(self, path: str, method: str) -> dict[str, Any]:
        params = self.document.get_parameters(path, method)
        return {
            param.get("name", ""): self._parameter_value(param)
            for param in params["path"]
        }

    def generate_query_params(
        self, path: str, method: str, include_optional: bool = False
    ) -> dict[str, Any]:
        """
        Generate query parameters for an endpoint.

        Args:
            path: The endpoint path template
            method: The HTTP method
            include_optional: Whether to include optional parameters
        """
        params = self.document.get_parameters(path, method)
        return {
            param.get("name", ""): self._parameter_value(param)
            for param in params["query"]
            if param.get("required", False) or include_optional
        }

    def generate_headers(self, path: str, method: str) -> dict[str, str]:
        """Generate values for the required header parameters, as strings."""
        params = self.document.get_parameters(path, method)
        return {
            param.get("name", ""): str(self._parameter_value(param))
            for param in params["header"]
            if param.get("required", False)
        }

    def validate_request(self, path: str, method: str, body: Any) -> ValidationResult:
        """Validate a request body."""
        return self.validator.validate_request_body(path, method, body)

    def validate_response(
        self, path: str, method: str, status_code: int | str, body: Any
    ) -> ValidationResult:
        """Validate a response body."""
        return self.validator.validate_response(path, method, status_code, body)

    def validate_parameters(
        self,
        path: str,
        method: str,
        path_params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """Validate path, query and header parameters."""
        return self.validator.validate_parameters(path, method, path_params, query, headers)

    def _parameter_value(self, param: dict[str, Any]) -> Any:
        if "example" in param:
            return param["example"]
        schema = self.document.get_parameter_schema(param)
        return self.generator.generate(schema, param.get("name", ""))


def _content_schema(holder: dict[str, Any]) -> OpenAPISchema | None:
    content: dict[str, Any] = holder.get("content") or {}
    for content_type in PREFERRED_CONTENT_TYPES:
        if content_type in content:
            return (content[content_type] or {}).get("schema")
    for content_type, media in content.items():
        if content_type.endswith("+json"):
            return (media or {}).get("schema")
    return None


def _validate_parameter(schema: Schema, raw: Any, field: str) -> list[ValidationError]:
    raw_values = list(raw) if isinstance(raw, (list, tuple)) else [raw]
    if schema.kind == SchemaKind.ARRAY:
        item_schema = schema.items or Schema()
        try:
            items = [_coerce_parameter(item_schema, value) for value in raw_values]
        except ValueError as e:
            return [ValidationError(field=field, message=str(e), code=ErrorKind.INVALID_TYPE)]
        return validate(schema, items, field)

    errors: list[ValidationError] = []
    for value in raw_values:
        try:
            coerced = _coerce_parameter(schema, value)
        except ValueError as e:
            errors.append(
                ValidationError(field=field, message=str(e), code=ErrorKind.INVALID_TYPE)
            )
            continue
        errors.extend(validate(schema, coerced, field))
    return errors


def _coerce_parameter(schema: Schema, value: Any) -> Any:
    """Convert a wire string to the parameter's declared scalar type."""
    if not isinstance(value, str):
        return value
    try:
        if schema.kind == SchemaKind.INTEGER:
            return int(value)
        if schema.kind == SchemaKind.NUMBER:
            return float(value)
    except ValueError:
        raise ValueError(f"expected {schema.kind.value}, got {value!r}") from None
    if schema.kind == SchemaKind.BOOLEAN:
        if value not in ("true", "false"):
            raise ValueError(f"expected boolean, got {value!r}")
        return value == "true"
    return value


def _result(errors: list[ValidationError]) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors)
