"""Tests for the semantic module - field-name classification."""

import random
from datetime import datetime

import pytest
from faker import Faker

from mocksmith.semantic import (
    CURRENCIES,
    SEMANTIC_RULES,
    STATUSES,
    SemanticType,
    classify,
    generate_by_semantic_type,
)


@pytest.fixture
def faker():
    fake = Faker("en_US")
    fake.seed_instance(1234)
    return fake


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("id", SemanticType.ID),
            ("ID", SemanticType.ID),
            ("user_id", SemanticType.ID),
            ("ownerId", SemanticType.ID),
            ("email_address", SemanticType.EMAIL),
            ("email", SemanticType.EMAIL),
            ("first_name", SemanticType.FIRST_NAME),
            ("firstName", SemanticType.FIRST_NAME),
            ("surname", SemanticType.LAST_NAME),
            ("name", SemanticType.NAME),
            ("phone_number", SemanticType.PHONE),
            ("zip", SemanticType.ZIP_CODE),
            ("createdAt", SemanticType.CREATED_AT),
            ("updated_at", SemanticType.UPDATED_AT),
            ("dob", SemanticType.BIRTHDAY),
            ("lat", SemanticType.LATITUDE),
            ("longitude", SemanticType.LONGITUDE),
            ("avatar_url", SemanticType.AVATAR),
            ("colour", SemanticType.COLOR),
            ("sku", SemanticType.SKU),
            ("ip_address", SemanticType.IP_ADDRESS),
            ("userAgent", SemanticType.USER_AGENT),
            ("xyz123", SemanticType.UNKNOWN),
            ("", SemanticType.UNKNOWN),
        ],
    )
    def test_classify(self, name, expected):
        assert classify(name) == expected

    def test_id_rule_comes_first(self):
        """The ID rule outranks every broader rule."""
        assert SEMANTIC_RULES[0][1] == SemanticType.ID

    def test_lowercase_id_suffix_is_not_an_id(self):
        """Only a capital I marks a camelCase Id suffix."""
        assert classify("paid") == SemanticType.UNKNOWN

    def test_classification_is_idempotent(self):
        for name in ("user_id", "email", "price", "unknown_thing"):
            assert classify(name) == classify(name)


class TestGenerateBySemanticType:
    """Tests for generate_by_semantic_type()."""

    def test_every_type_has_a_value(self, faker):
        rng = random.Random(1)

        for semantic_type in SemanticType:
            value = generate_by_semantic_type(semantic_type, faker, rng)
            if semantic_type == SemanticType.UNKNOWN:
                assert value is None
            else:
                assert value is not None, semantic_type

    def test_numeric_ranges(self, faker):
        rng = random.Random(2)

        for _ in range(20):
            assert 18 <= generate_by_semantic_type(SemanticType.AGE, faker, rng) <= 80
            assert -90 <= generate_by_semantic_type(SemanticType.LATITUDE, faker, rng) <= 90
            assert 1 <= generate_by_semantic_type(SemanticType.PRICE, faker, rng) <= 1000

    def test_timestamps_are_iso_with_offset(self, faker):
        value = generate_by_semantic_type(SemanticType.CREATED_AT, faker, random.Random(3))
        parsed = datetime.fromisoformat(value)

        assert parsed.tzinfo is not None

    def test_choices_come_from_vocabulary(self, faker):
        rng = random.Random(4)

        assert generate_by_semantic_type(SemanticType.STATUS, faker, rng) in STATUSES
        assert generate_by_semantic_type(SemanticType.CURRENCY, faker, rng) in CURRENCIES

    def test_email_looks_like_email(self, faker):
        assert "@" in generate_by_semantic_type(SemanticType.EMAIL, faker, random.Random(5))

    def test_same_seed_same_value(self):
        first = Faker("en_US")
        second = Faker("en_US")
        first.seed_instance(9)
        second.seed_instance(9)

        assert generate_by_semantic_type(
            SemanticType.FULL_NAME, first, random.Random(9)
        ) == generate_by_semantic_type(SemanticType.FULL_NAME, second, random.Random(9))
