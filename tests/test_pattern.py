"""Tests for the pattern module - regex-shaped string generation."""

import random
import re

import pytest

from mocksmith.errors import (
    EmptyPatternError,
    ErrorKind,
    UnclosedCharacterClassError,
    UnclosedGroupError,
)
from mocksmith.pattern import PatternGenerator, generate_from_pattern


def samples(pattern, count=50):
    """Generate ``count`` strings from ``pattern`` with distinct seeds."""
    return [PatternGenerator(random.Random(seed)).generate(pattern) for seed in range(count)]


class TestPatternConformance:
    """Generated strings must match the pattern as a real regex."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "SKU-[A-Z]{3}-[0-9]{4}",
            "^[a-z]{3,5}$",
            r"\d{3}-\d{4}",
            r"(foo|bar)+baz",
            r"[^abc]{4}",
            r"(?:ab|cd){2}",
            r"[A-Z][a-z]*",
            r"\w+@\w+\.com",
            r"a?b*c+",
            r"(red|green|blue)",
            r"x{2,}",
            r"cat|dog",
            r"(?P<year>\d{4})-(?P<month>0[1-9]|1[0-2])",
            r"[\d_]{5}",
            r"[a-fA-F0-9]{8}",
            r"\bword\b",
            r"\D\W\s\S",
            r"((a|b)c){3}",
            r"a+?b",
            r"\.\$",
            r"[]a]{3}",
            r"...",
            r"a{,3}b",
            r"[\x41-\x43]{3}",
            r"\x41\x2d[0-9]",
        ],
    )
    def test_output_matches_pattern(self, pattern):
        for value in samples(pattern):
            assert re.fullmatch(pattern, value), f"{value!r} does not match {pattern!r}"

    def test_sku_pattern(self):
        """SKU codes always have the declared shape."""
        for value in samples("SKU-[A-Z]{3}-[0-9]{4}", 100):
            assert re.match(r"^SKU-[A-Z]{3}-[0-9]{4}$", value)


class TestQuantifiers:
    """Tests for repetition bounds."""

    def test_exact_count(self):
        assert set(samples("a{3}")) == {"aaa"}

    def test_open_range(self):
        """{n,} repeats n to n+5 times."""
        lengths = {len(value) for value in samples("a{2,}", 200)}

        assert min(lengths) >= 2
        assert max(lengths) <= 7

    def test_upper_bound_only(self):
        """{,m} repeats zero to m times."""
        lengths = {len(value) for value in samples("a{,3}", 200)}

        assert lengths <= {0, 1, 2, 3}
        assert 0 in lengths

    def test_hex_escapes(self):
        assert set(samples(r"\x41\x42")) == {"AB"}
        assert set(samples(r"[\x41-\x43]", 200)) <= {"A", "B", "C"}

    def test_star_and_plus(self):
        star = {len(value) for value in samples("a*", 200)}
        plus = {len(value) for value in samples("a+", 200)}

        assert star <= set(range(0, 5))
        assert plus <= set(range(1, 5))
        assert 0 in star

    def test_optional(self):
        assert set(samples("ab?", 100)) == {"a", "ab"}

    def test_quantified_group_regenerates(self):
        """Each repetition of a group draws again."""
        values = samples("(a|b){10}")

        assert any(len(set(value)) == 2 for value in values)


class TestPatternErrors:
    """Tests for malformed patterns."""

    def test_empty_pattern(self):
        with pytest.raises(EmptyPatternError) as exc_info:
            generate_from_pattern("")

        assert exc_info.value.kind == ErrorKind.EMPTY_PATTERN

    def test_unclosed_group(self):
        with pytest.raises(UnclosedGroupError) as exc_info:
            generate_from_pattern("ab(cd")

        assert exc_info.value.kind == ErrorKind.UNCLOSED_GROUP
        assert exc_info.value.position == 2
        assert exc_info.value.pattern == "ab(cd"

    def test_unclosed_character_class(self):
        with pytest.raises(UnclosedCharacterClassError) as exc_info:
            generate_from_pattern("x[abc")

        assert exc_info.value.kind == ErrorKind.UNCLOSED_CHARACTER_CLASS
        assert exc_info.value.position == 1

    def test_unclosed_class_inside_group(self):
        with pytest.raises(UnclosedCharacterClassError):
            generate_from_pattern("(a[bc)")


class TestDeterminism:
    """Tests for PRNG injection."""

    def test_same_seed_same_output(self):
        first = PatternGenerator(random.Random(7))
        second = PatternGenerator(random.Random(7))

        for _ in range(10):
            assert first.generate(r"[a-z]{5}\d+") == second.generate(r"[a-z]{5}\d+")

    def test_module_helper_uses_rng(self):
        assert generate_from_pattern("[a-z]{8}", random.Random(1)) == generate_from_pattern(
            "[a-z]{8}", random.Random(1)
        )
