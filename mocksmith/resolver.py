"""
Multi-resource seed data with consistent foreign keys.

The resolver treats every top-level path segment of an OpenAPI document as a
resource, works out which resources reference each other, and generates
instances parents-first so that every foreign key points at a real ID.

Pipeline:
1. Extract: resource name -> object schema
2. Detect: ``owner_id`` / ``$ref: Owner`` properties -> dependencies
3. Order: Kahn's topological sort with lexicographic tie-breaking
4. Generate: instances with stable IDs and foreign keys filled in
"""

from __future__ import annotations

import bisect
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from mocksmith.errors import RequiredParentUnavailableError, UnsupportedSchemaError
from mocksmith.generator import SchemaGenerator
from mocksmith.logging_config import get_logger
from mocksmith.naming import (
    extract_resource_name,
    literal_segments,
    pluralize,
    singularize,
    to_snake_case,
)
from mocksmith.schema import OpenAPISchema, Schema, SchemaKind, SchemaParser
from mocksmith.settings import Settings, settings

logger = get_logger(__name__)

DEFAULT_ITEMS_PER_RESOURCE = 5

JSON_CONTENT_TYPE = "application/json"

# Schema sources, best first
SOURCE_POST_BODY = 0
SOURCE_GET_ARRAY_ITEMS = 1
SOURCE_GET_OBJECT = 2


class SeedConfig(BaseModel):
    """What to seed and how much of it."""

    items_per_resource: int = DEFAULT_ITEMS_PER_RESOURCE
    include_resources: list[str] = Field(default_factory=list)
    exclude_resources: list[str] = Field(default_factory=list)

    @field_validator("items_per_resource")
    @classmethod
    def _positive_or_default(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_ITEMS_PER_RESOURCE

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> SeedConfig:
        """Build a config from the ``MOCKSMITH_*`` environment settings."""
        source = source or settings
        return cls(
            items_per_resource=source.items_per_resource,
            include_resources=list(source.include_resources),
            exclude_resources=list(source.exclude_resources),
        )

    def should_include(self, resource: str) -> bool:
        """
        Check the include/exclude filters (case-insensitive).

        Exclusions win over inclusions; an empty include list means all.
        """
        name = resource.lower()
        if any(excluded.lower() == name for excluded in self.exclude_resources):
            return False
        if not self.include_resources:
            return True
        return any(included.lower() == name for included in self.include_resources)


@dataclass
class ResourceDependency:
    """``resource.foreign_key_field`` holds the ID of a ``depends_on`` instance."""

    resource: str
    depends_on: str
    foreign_key_field: str
    is_required: bool = False


class Resolver:
    """
    Builds seed data for every resource of one OpenAPI document.

    A resolver owns its resource registry and dependency list; nothing is
    shared between documents.
    """

    def __init__(
        self,
        document: OpenAPISchema,
        config: SeedConfig | None = None,
        generator: SchemaGenerator | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            document: The parsed OpenAPI 3.0 document
            config: Seeding options (defaults to ``SeedConfig.from_settings()``)
            generator: Value generator (a new one is created when omitted)
        """
        self.document = document
        self.config = config or SeedConfig.from_settings()
        self.generator = generator or SchemaGenerator()
        self.parser = SchemaParser(document)

        self.resources: dict[str, Schema] = {}
        self.dependencies: list[ResourceDependency] = []
        self._cyclic: list[str] = []

    # Extract

    def extract_resources(self) -> dict[str, Schema]:
        """
        Find one schema per resource.

        Candidates are ranked: paths whose only literal segment is the
        resource beat nested paths, then a POST JSON body beats the items
        of a GET array response, which beats a GET object response.

        Returns:
            Resource name -> schema, in sorted name order
        """
        candidates: dict[str, tuple[tuple[int, int, str], Schema]] = {}

        paths: dict[str, Any] = self.document.get("paths", {}) or {}
        for path in sorted(paths):
            name = extract_resource_name(path)
            if not name:
                continue

            nested = 0 if literal_segments(path) == [name] else 1
            for source, schema in self._schema_sources(paths[path] or {}):
                rank = (nested, source, path)
                if name not in candidates or rank < candidates[name][0]:
                    candidates[name] = (rank, schema)

        self.resources = {name: candidates[name][1] for name in sorted(candidates)}
        return self.resources

    def _schema_sources(self, path_item: dict[str, Any]) -> list[tuple[int, Schema]]:
        sources: list[tuple[int, Schema]] = []

        post = path_item.get("post") or {}
        raw = _json_schema(post.get("requestBody") or {})
        if raw is not None:
            sources.append((SOURCE_POST_BODY, self.parser.parse(raw)))

        get = path_item.get("get") or {}
        responses: dict[str, Any] = get.get("responses") or {}
        for status in sorted(responses, key=str):
            if not str(status).startswith("2"):
                continue
            raw = _json_schema(responses[status] or {})
            if raw is None:
                continue
            schema = self.parser.parse(raw)
            if schema.kind == SchemaKind.ARRAY and schema.items is not None:
                sources.append((SOURCE_GET_ARRAY_ITEMS, schema.items))
            else:
                sources.append((SOURCE_GET_OBJECT, schema))
            break

        return sources

    # Detect

    def detect_dependencies(self) -> list[ResourceDependency]:
        """
        Find foreign keys between known resources.

        ``<word>_id`` (or ``<word>Id``) points at ``pluralize(word)``; a
        property that is a direct ``$ref`` points at the pluralized component
        name. Self-references are ignored.
        """
        if not self.resources:
            self.extract_resources()

        dependencies: list[ResourceDependency] = []
        for resource in sorted(self.resources):
            schema = self.resources[resource]
            for prop_name, prop_schema in schema.properties.items():
                target = self._foreign_key_target(prop_name, prop_schema)
                if target is None or target == resource:
                    continue
                dependencies.append(
                    ResourceDependency(
                        resource=resource,
                        depends_on=target,
                        foreign_key_field=prop_name,
                        is_required=prop_name in schema.required,
                    )
                )

        self.dependencies = dependencies
        logger.debugf(dependencies)
        return dependencies

    def _foreign_key_target(self, prop_name: str, prop_schema: Schema) -> str | None:
        snake = to_snake_case(prop_name)
        if snake.endswith("_id") and len(snake) > 3:
            target = pluralize(snake[: -len("_id")])
            if target in self.resources:
                return target

        if prop_schema.ref_name:
            ref_name = prop_schema.ref_name
            spellings = (
                ref_name.lower(),
                to_snake_case(ref_name),
                to_snake_case(ref_name).replace("_", "-"),
            )
            for spelling in spellings:
                target = pluralize(spelling)
                if target in self.resources:
                    return target

        return None

    # Order

    def resource_order(self) -> list[str]:
        """
        Sort resources so every dependency comes before its dependents.

        Ties are broken lexicographically. Resources caught in a cycle are
        appended in sorted order and reported by ``cyclic_resources()``.
        """
        in_degree: dict[str, int] = {name: 0 for name in self.resources}
        dependents: dict[str, list[str]] = defaultdict(list)

        edges = {
            (dep.depends_on, dep.resource)
            for dep in self.dependencies
            if dep.depends_on in in_degree and dep.resource in in_degree
        }
        for parent, child in sorted(edges):
            in_degree[child] += 1
            dependents[parent].append(child)

        available = sorted(name for name, degree in in_degree.items() if degree == 0)
        order: list[str] = []

        while available:
            current = available.pop(0)
            order.append(current)
            for dependent in dependents[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    bisect.insort(available, dependent)

        placed = set(order)
        self._cyclic = sorted(name for name in self.resources if name not in placed)
        if self._cyclic:
            logger.warning(
                "Dependency cycle between %s; generating them in name order",
                ", ".join(self._cyclic),
            )
            order.extend(self._cyclic)

        return order

    def cyclic_resources(self) -> list[str]:
        """Resources the last ``resource_order()`` could not sort."""
        return list(self._cyclic)

    # Generate

    def generate(self) -> dict[str, list[dict[str, Any]]]:
        """
        Run the whole pipeline.

        Returns:
            Resource name -> instances, in dependency order

        Raises:
            RequiredParentUnavailableError: A required foreign key has no parent
            UnsupportedSchemaError: A resource schema does not produce objects
        """
        logger.phase("Extracting resources")
        self.extract_resources()
        logger.update(f"Found {len(self.resources)} resource(s): {', '.join(self.resources)}")

        logger.phase("Detecting dependencies")
        self.detect_dependencies()
        for dep in self.dependencies:
            logger.update(
                f"{dep.resource}.{dep.foreign_key_field} -> {dep.depends_on}"
                f"{' (required)' if dep.is_required else ''}"
            )

        order = self.resource_order()
        logger.update(f"Generation order: {' -> '.join(order)}")

        logger.phase("Generating seed data")
        generated: dict[str, list[dict[str, Any]]] = {}
        count = self.config.items_per_resource
        for resource in order:
            if not self.config.should_include(resource):
                logger.update(f"Skipping {resource} (filtered out)")
                continue

            logger.step(f"Generating {count} {resource}")
            generated[resource] = [
                self._generate_item(resource, index, generated) for index in range(count)
            ]

        return generated

    def _generate_item(
        self,
        resource: str,
        index: int,
        generated: dict[str, list[dict[str, Any]]],
    ) -> dict[str, Any]:
        item = self.generator.generate(self.resources[resource])
        if not isinstance(item, dict):
            raise UnsupportedSchemaError(
                f"expected an object for {resource}, got {type(item).__name__}"
            )

        item["id"] = make_id(resource, index)

        for dep in self.dependencies:
            if dep.resource != resource:
                continue
            parents = generated.get(dep.depends_on, [])
            if not parents:
                if dep.is_required:
                    raise RequiredParentUnavailableError(
                        resource, dep.depends_on, dep.foreign_key_field
                    )
                # No parents: leave the optional key unset
                item.pop(dep.foreign_key_field, None)
                continue
            item[dep.foreign_key_field] = parents[index % len(parents)]["id"]

        logger.debugf(item)
        return item


def make_id(resource: str, index: int) -> str:
    """Stable synthetic ID: ``make_id("owners", 0)`` -> ``owner-001``."""
    return f"{singularize(resource)}-{index + 1:03d}"


def _json_schema(holder: dict[str, Any]) -> OpenAPISchema | None:
    """The JSON media-type schema of a request body or response, if any."""
    content = holder.get("content") or {}
    media = content.get(JSON_CONTENT_TYPE)
    if not media:
        return None
    return media.get("schema")


def resolve(
    document: OpenAPISchema,
    config: SeedConfig | None = None,
    *,
    seed: int | str | None = None,
) -> dict[str, list[dict[str, Any]]]:
    """
    Generate seed data for every resource of ``document``.

    Args:
        document: The parsed OpenAPI 3.0 document
        config: Seeding options (defaults to the environment settings)
        seed: Seed for reproducible output

    Returns:
        Resource name -> instances, in dependency order
    """
    generator = SchemaGenerator(seed=seed)
    return Resolver(document, config, generator).generate()
