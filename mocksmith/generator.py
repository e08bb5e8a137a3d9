"""
Schema-driven value generation.

``SchemaGenerator`` walks a ``Schema`` tree and produces a JSON-shaped value
the validator accepts. Field names are used as hints, so a string property
called ``email`` gets a realistic address instead of a random word.
"""

from __future__ import annotations

import copy
import hashlib
import math
import random
import string
from datetime import timezone
from decimal import Decimal
from typing import Any, Callable

from faker import Faker

from mocksmith.errors import UnsupportedSchemaError
from mocksmith.logging_config import get_logger
from mocksmith.pattern import PatternGenerator
from mocksmith.schema import Schema, SchemaKind, StringFormat
from mocksmith.semantic import (
    REFERENCE_TIME,
    SemanticType,
    classify,
    generate_by_semantic_type,
)
from mocksmith.settings import settings
from mocksmith.validation import canonical_json, validate

logger = get_logger(__name__)

# Default range for numbers without bounds, and the window around a single bound
DEFAULT_MINIMUM = 0
DEFAULT_MAXIMUM = 100
SINGLE_BOUND_WINDOW = 100

# Arrays without maxItems get up to this many items beyond minItems
EXTRA_ARRAY_ITEMS = 3

# Extra keys synthesized for a Schema-valued additionalProperties
MIN_EXTRA_PROPERTIES = 1
MAX_EXTRA_PROPERTIES = 3

# Redraws allowed when a length limit rejects a generated string
RETRY_FACTOR = 10

# Required properties are still generated past max_depth; this stops
# schemas whose required properties recurse forever
RECURSION_LIMIT = 64

# Stand-in for ``items: {}`` and ``additionalProperties: {}``
ANY_VALUE = Schema(kind=SchemaKind.STRING)


class SchemaGenerator:
    """
    Generates values that satisfy a ``Schema``.

    All randomness comes from one ``random.Random``; the Faker provider is
    seeded from it, so two generators built with the same seed produce the
    same values.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        seed: int | str | None = None,
        faker: Faker | None = None,
        max_depth: int | None = None,
    ):
        """
        Initialize the generator.

        Args:
            rng: PRNG to draw from. Takes precedence over ``seed``.
            seed: Seed for reproducibility. Can be int, string (will be hashed),
                or None for ``settings.seed`` (random when that is unset too).
            faker: Realistic-value provider. A new one is created for
                ``settings.faker_locale`` and seeded from ``rng`` when omitted.
            max_depth: Nesting depth after which optional properties are skipped
        """
        if rng is None:
            if seed is None:
                seed = settings.seed
            if seed is None:
                seed = random.randint(0, 2**32 - 1)
            elif isinstance(seed, str):
                seed = int(hashlib.md5(seed.encode()).hexdigest()[:8], 16)
            rng = random.Random(seed)
        self._seed = seed
        self._rng = rng

        if faker is None:
            faker = Faker(settings.faker_locale)
            faker.seed_instance(self._rng.getrandbits(32))
        self._faker = faker

        self._patterns = PatternGenerator(self._rng)
        self.max_depth = settings.max_depth if max_depth is None else max_depth

    @property
    def seed(self) -> int | None:
        """The seed the PRNG was built from (None when an rng was injected)."""
        return self._seed

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def faker(self) -> Faker:
        return self._faker

    def generate(self, schema: Schema, field_name: str = "") -> Any:
        """
        Generate one value for a schema.

        Args:
            schema: The schema to satisfy
            field_name: Property name used as a semantic hint for strings

        Returns:
            JSON-shaped data

        Raises:
            UnsupportedSchemaError: When the schema has no usable kind
            PatternError: When a string pattern is malformed
        """
        return self._generate(schema, field_name, 0)

    def _generate(self, schema: Schema, field_name: str, depth: int) -> Any:
        if depth > RECURSION_LIMIT:
            raise UnsupportedSchemaError(
                f"schema nesting exceeds {RECURSION_LIMIT} levels at {schema!r}"
            )

        if schema.has_example:
            return copy.deepcopy(schema.example)

        branches = schema.one_of or schema.any_of
        if branches:
            return self._generate(self._rng.choice(branches), field_name, depth + 1)

        if schema.all_of:
            if schema.kind == SchemaKind.OBJECT:
                return self._generate_object(schema, depth)
            return self._merge_all_of(schema, field_name, depth)

        if schema.enum:
            return copy.deepcopy(self._rng.choice(schema.enum))

        if schema.kind == SchemaKind.STRING:
            if field_name:
                value = self._semantic_string(schema, field_name)
                if value is not None:
                    return value
            if schema.pattern:
                return self._pattern_string(schema)
            return self._generate_string(schema)

        if schema.kind in (SchemaKind.INTEGER, SchemaKind.NUMBER):
            return self._generate_number(schema)
        if schema.kind == SchemaKind.BOOLEAN:
            return self._rng.choice([True, False])
        if schema.kind == SchemaKind.ARRAY:
            return self._generate_array(schema, depth)
        if schema.kind == SchemaKind.OBJECT:
            return self._generate_object(schema, depth)

        raise UnsupportedSchemaError(f"cannot generate a value for {schema!r}")

    def _merge_all_of(self, schema: Schema, field_name: str, depth: int) -> Any:
        merged: dict[str, Any] = {}
        last_scalar: Any = None
        for branch in schema.all_of:
            if not _is_generatable(branch):
                continue
            value = self._generate(branch, field_name, depth + 1)
            if isinstance(value, dict):
                merged.update(value)
            else:
                last_scalar = value
        if merged or last_scalar is None:
            return merged
        return last_scalar

    # Strings

    def _semantic_string(self, schema: Schema, field_name: str) -> str | None:
        semantic_type = classify(field_name)
        if semantic_type == SemanticType.UNKNOWN:
            return None

        value = generate_by_semantic_type(semantic_type, self._faker, self._rng)
        if value is None:
            return None
        value = str(value)

        # Realistic values must still satisfy the node's own constraints
        if validate(schema, value):
            logger.debug(
                "Discarding %s value for %r: violates %r",
                semantic_type.value,
                field_name,
                schema,
            )
            return None
        return value

    def _pattern_string(self, schema: Schema) -> str:
        value = self._patterns.generate(schema.pattern)
        for _ in range(RETRY_FACTOR):
            if _fits_length(schema, value):
                break
            value = self._patterns.generate(schema.pattern)
        return value

    def _generate_string(self, schema: Schema) -> str:
        format_generators: dict[str, Callable[[], str]] = {
            "email": self._faker.email,
            "uuid": lambda: str(self._faker.uuid4()),
            "uri": self._faker.url,
            "url": self._faker.url,
            "date": lambda: self._faker.date_object(REFERENCE_TIME).isoformat(),
            "date-time": lambda: self._faker.date_time(
                tzinfo=timezone.utc, end_datetime=REFERENCE_TIME
            ).isoformat(),
            "time": lambda: self._faker.time_object(REFERENCE_TIME).isoformat(),
            "ipv4": self._faker.ipv4,
            "ipv6": self._faker.ipv6,
            "hostname": self._faker.hostname,
        }

        generator = format_generators.get(schema.format or "")
        if generator is None:
            return self._word(schema)

        for _ in range(RETRY_FACTOR):
            value = generator()
            if _fits_length(schema, value):
                return value

        logger.debug("No %s value fits %r; using a sized fallback", schema.format, schema)
        if schema.format == StringFormat.EMAIL.value:
            return self._sized_email(schema)
        return self._word(schema)

    def _sized_email(self, schema: Schema) -> str:
        domain = "@example.com"
        if schema.max_length is not None and schema.max_length <= len(domain):
            domain = "@x.io"
        low = max((schema.min_length or 0) - len(domain), 1)
        high = low if schema.max_length is None else max(schema.max_length - len(domain), low)
        length = self._rng.randint(low, high)
        return "".join(self._rng.choices(string.ascii_lowercase, k=length)) + domain

    def _word(self, schema: Schema) -> str:
        value = self._faker.word()
        min_length = schema.min_length or 0
        if len(value) < min_length:
            value += "".join(
                self._rng.choices(string.ascii_lowercase, k=min_length - len(value))
            )
        if schema.max_length is not None:
            value = value[: schema.max_length]
        return value

    # Numbers

    def _generate_number(self, schema: Schema) -> int | float:
        low, high = schema.minimum, schema.maximum
        if low is None and high is None:
            low, high = DEFAULT_MINIMUM, DEFAULT_MAXIMUM
        elif low is None:
            low = high - SINGLE_BOUND_WINDOW
        elif high is None:
            high = low + SINGLE_BOUND_WINDOW

        if schema.kind == SchemaKind.INTEGER:
            return self._generate_integer(schema, low, high)

        if schema.multiple_of:
            step = schema.multiple_of
            first = math.ceil(low / step)
            last = math.floor(high / step)
            if schema.exclusive_minimum and first * step <= low:
                first += 1
            if schema.exclusive_maximum and last * step >= high:
                last -= 1
            if first <= last:
                # Keep the step's own precision instead of float noise
                return round(self._rng.randint(first, last) * step, _decimal_places(step))

        value = self._rng.uniform(low, high)
        rounded = round(value, 2)
        if _within_bounds(schema, rounded):
            return rounded
        if _within_bounds(schema, value):
            return value
        return (low + high) / 2

    def _generate_integer(self, schema: Schema, low: float, high: float) -> int:
        first = math.floor(low) + 1 if schema.exclusive_minimum else math.ceil(low)
        last = math.ceil(high) - 1 if schema.exclusive_maximum else math.floor(high)
        if first > last:
            return first

        step = schema.multiple_of
        if step and float(step).is_integer():
            step = abs(int(step))
            start = -(-first // step) * step
            if start <= last:
                return self._rng.randrange(start, last + 1, step)

        return self._rng.randint(first, last)

    # Containers

    def _generate_array(self, schema: Schema, depth: int) -> list[Any]:
        min_items = schema.min_items or 0
        max_items = (
            schema.max_items
            if schema.max_items is not None
            else min_items + EXTRA_ARRAY_ITEMS
        )
        min_items = min(min_items, max_items)

        if depth >= self.max_depth:
            count = min_items
        else:
            count = self._rng.randint(min_items, max_items)

        item_schema = schema.items
        if item_schema is None or not _is_generatable(item_schema):
            item_schema = ANY_VALUE

        items = [self._generate(item_schema, "", depth + 1) for _ in range(count)]
        if not schema.unique_items:
            return items

        # Duplicates are dropped, not redrawn, so the array may come out short
        unique: dict[str, Any] = {}
        for item in items:
            unique.setdefault(canonical_json(item), item)
        return list(unique.values())

    def _generate_object(self, schema: Schema, depth: int) -> dict[str, Any]:
        shallow = depth >= self.max_depth
        result: dict[str, Any] = {}

        for name, prop_schema in schema.properties.items():
            if shallow and name not in schema.required:
                continue
            result[name] = self._generate(prop_schema, name, depth + 1)

        for branch in schema.all_of:
            if not _is_generatable(branch):
                continue
            value = self._generate(branch, "", depth + 1)
            if isinstance(value, dict):
                result.update(value)

        additional = schema.additional_properties
        value_schema = additional if isinstance(additional, Schema) else ANY_VALUE
        if not _is_generatable(value_schema):
            value_schema = ANY_VALUE

        # Required names without a declared property
        for name in schema.required:
            if name not in result:
                result[name] = self._generate(value_schema, name, depth + 1)

        if additional is False:
            return result

        room = None
        if schema.max_properties is not None:
            room = max(schema.max_properties - len(result), 0)
        shortfall = max((schema.min_properties or 0) - len(result), 0)

        if isinstance(additional, Schema) and not shallow:
            count = max(
                self._rng.randint(MIN_EXTRA_PROPERTIES, MAX_EXTRA_PROPERTIES), shortfall
            )
        else:
            count = shortfall
        if room is not None:
            count = min(count, room)

        for _ in range(count):
            key = self._extra_key(result)
            result[key] = self._generate(value_schema, "", depth + 1)

        return result

    def _extra_key(self, taken: dict[str, Any]) -> str:
        key = self._faker.word()
        for _ in range(RETRY_FACTOR):
            if key not in taken:
                return key
            key = self._faker.word()
        while key in taken:
            key += "_"
        return key


def _is_generatable(schema: Schema) -> bool:
    """False for ``{}``-style nodes that constrain nothing."""
    return (
        schema.kind != SchemaKind.UNKNOWN
        or schema.has_example
        or schema.is_composed
        or bool(schema.enum)
    )


def _fits_length(schema: Schema, value: str) -> bool:
    if schema.min_length is not None and len(value) < schema.min_length:
        return False
    if schema.max_length is not None and len(value) > schema.max_length:
        return False
    return True


def _decimal_places(step: float) -> int:
    exponent = Decimal(str(step)).as_tuple().exponent
    return max(-exponent, 0) if isinstance(exponent, int) else 0


def _within_bounds(schema: Schema, value: float) -> bool:
    if schema.minimum is not None:
        if value < schema.minimum or (schema.exclusive_minimum and value == schema.minimum):
            return False
    if schema.maximum is not None:
        if value > schema.maximum or (schema.exclusive_maximum and value == schema.maximum):
            return False
    return True


def generate(schema: Schema, field_name: str = "", rng: random.Random | None = None) -> Any:
    """Generate one value for ``schema`` with a throwaway ``SchemaGenerator``."""
    return SchemaGenerator(rng).generate(schema, field_name)
