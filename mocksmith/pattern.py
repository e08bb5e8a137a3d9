"""
A miniature regex-to-string engine.

``PatternGenerator`` walks a regular-expression-like pattern left to right and
builds a string that the pattern would match. It is a generator, not a
matcher: lookaround, backreferences and POSIX classes are not supported.
"""

from __future__ import annotations

import random
import re
import string
from typing import Callable

from mocksmith.errors import (
    EmptyPatternError,
    UnclosedCharacterClassError,
    UnclosedGroupError,
)

DIGITS = string.digits
NON_DIGITS = string.ascii_letters + "!@#$%^&*"
WORD_CHARS = string.ascii_letters + string.digits + "_"
NON_WORD_CHARS = "!@#$%^&*()+-=[]{}|;':\",./<>?"
SPACE_CHARS = " "
NON_SPACE_CHARS = string.ascii_letters + string.digits
ALPHANUMERIC = string.ascii_letters + string.digits
PRINTABLE_ASCII = "".join(chr(c) for c in range(32, 127))

ESCAPE_CLASSES = {
    "d": DIGITS,
    "D": NON_DIGITS,
    "w": WORD_CHARS,
    "W": NON_WORD_CHARS,
    "s": SPACE_CHARS,
    "S": NON_SPACE_CHARS,
    "n": "\n",
    "t": "\t",
    "r": "\r",
}

# Zero-width assertions produce no output
ZERO_WIDTH_ESCAPES = set("bBAZz")

# Repetition bounds for open-ended quantifiers
STAR_MAX = 4
PLUS_MAX = 4
OPEN_RANGE_EXTRA = 5

_BRACE_QUANTIFIER_RE = re.compile(r"\{(?:(\d+)(?:(,)(\d*))?|,(\d+))\}")
_HEX_ESCAPE_RE = re.compile(r"x([0-9A-Fa-f]{2})")

Producer = Callable[[], str]


class PatternGenerator:
    """
    Generates strings from patterns using an injected PRNG.

    Supported syntax:
    - literals, ``.``, ``^``/``$`` anchors (ignored)
    - escapes ``\\d \\D \\w \\W \\s \\S \\n \\t \\r`` and ``\\xHH`` (other escapes are literals)
    - character classes with ranges and ``^`` negation
    - groups (nested, ``?:`` and named prefixes tolerated) with ``|`` alternation
    - quantifiers ``* + ? {n} {n,} {,m} {n,m}`` on the preceding atom
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def generate(self, pattern: str) -> str:
        """
        Generate one string matching ``pattern``.

        Raises:
            EmptyPatternError: If the pattern is empty
            UnclosedGroupError: If a ``(`` has no matching ``)``
            UnclosedCharacterClassError: If a ``[`` has no matching ``]``
        """
        if not pattern:
            raise EmptyPatternError()
        # Parse the whole pattern once so malformed input fails before any output
        producer = self._compile(pattern, 0, len(pattern))
        return producer()

    # Parsing

    def _compile(self, pattern: str, start: int, end: int) -> Producer:
        """Compile ``pattern[start:end]``, splitting top-level alternatives."""
        alternatives = [
            self._compile_sequence(pattern, alt_start, alt_end)
            for alt_start, alt_end in self._split_alternatives(pattern, start, end)
        ]
        if len(alternatives) == 1:
            return alternatives[0]
        return lambda: self._rng.choice(alternatives)()

    def _compile_sequence(self, pattern: str, start: int, end: int) -> Producer:
        parts: list[Producer] = []
        i = start

        while i < end:
            char = pattern[i]

            if char == "\\":
                atom, i = self._parse_escape(pattern, i, end)
            elif char == "[":
                atom, i = self._parse_class(pattern, i, end)
            elif char == "(":
                atom, i = self._parse_group(pattern, i, end)
            elif char == ".":
                atom, i = self._draw(ALPHANUMERIC), i + 1
            elif char in "^${}+*?)":
                # Anchors and stray quantifiers are inert
                i += 1
                continue
            else:
                atom, i = self._literal(char), i + 1

            quantifier, i = self._parse_quantifier(pattern, i, end)
            if quantifier is None:
                parts.append(atom)
            else:
                parts.append(self._repeat(atom, *quantifier))

        return lambda: "".join(part() for part in parts)

    def _parse_escape(self, pattern: str, i: int, end: int) -> tuple[Producer, int]:
        if i + 1 >= end:
            return self._literal("\\"), i + 1

        escaped = pattern[i + 1]
        hex_match = _HEX_ESCAPE_RE.match(pattern, i + 1, end)
        if hex_match:
            return self._literal(chr(int(hex_match.group(1), 16))), hex_match.end()
        if escaped in ESCAPE_CLASSES:
            return self._draw(ESCAPE_CLASSES[escaped]), i + 2
        if escaped in ZERO_WIDTH_ESCAPES:
            return self._literal(""), i + 2
        return self._literal(escaped), i + 2

    def _parse_class(self, pattern: str, i: int, end: int) -> tuple[Producer, int]:
        close = self._find_class_end(pattern, i, end)
        if close == -1:
            raise UnclosedCharacterClassError(pattern, i)

        content = pattern[i + 1 : close]
        negated = content.startswith("^")
        if negated:
            content = content[1:]

        members = self._class_members(content)
        if negated:
            excluded = set(members)
            alphabet = "".join(c for c in PRINTABLE_ASCII if c not in excluded)
        else:
            alphabet = "".join(dict.fromkeys(members))

        if not alphabet:
            return self._literal(""), close + 1
        return self._draw(alphabet), close + 1

    @staticmethod
    def _find_class_end(pattern: str, i: int, end: int) -> int:
        j = i + 1
        if j < end and pattern[j] == "^":
            j += 1
        # A leading ] is a literal member
        if j < end and pattern[j] == "]":
            j += 1
        while j < end:
            if pattern[j] == "\\":
                j += 2
                continue
            if pattern[j] == "]":
                return j
            j += 1
        return -1

    @staticmethod
    def _class_members(content: str) -> list[str]:
        """Expand class content (``a-z``, ``\\d``, literals) into characters."""
        tokens: list[tuple[str, bool]] = []  # (chars, is_single_literal)
        i = 0
        while i < len(content):
            char = content[i]
            if char == "\\" and i + 1 < len(content):
                escaped = content[i + 1]
                hex_match = _HEX_ESCAPE_RE.match(content, i + 1)
                if hex_match:
                    tokens.append((chr(int(hex_match.group(1), 16)), True))
                    i = hex_match.end()
                    continue
                if escaped in ESCAPE_CLASSES:
                    tokens.append((ESCAPE_CLASSES[escaped], False))
                else:
                    tokens.append((escaped, True))
                i += 2
            else:
                tokens.append((char, True))
                i += 1

        members: list[str] = []
        k = 0
        while k < len(tokens):
            chars, single = tokens[k]
            is_range = (
                single
                and k + 2 < len(tokens)
                and tokens[k + 1] == ("-", True)
                and tokens[k + 2][1]
            )
            if is_range:
                low, high = ord(chars), ord(tokens[k + 2][0])
                members.extend(chr(c) for c in range(low, high + 1))
                k += 3
            else:
                members.extend(chars)
                k += 1
        return members

    def _parse_group(self, pattern: str, i: int, end: int) -> tuple[Producer, int]:
        close = self._find_group_end(pattern, i, end)
        if close == -1:
            raise UnclosedGroupError(pattern, i)

        start = i + 1
        if pattern.startswith("?:", start):
            start += 2
        elif pattern.startswith("?P<", start) or pattern.startswith("?<", start):
            name_end = pattern.find(">", start, close)
            if name_end != -1:
                start = name_end + 1

        return self._compile(pattern, start, close), close + 1

    @staticmethod
    def _find_group_end(pattern: str, i: int, end: int) -> int:
        depth = 0
        j = i
        while j < end:
            char = pattern[j]
            if char == "\\":
                j += 2
                continue
            if char == "[":
                class_end = PatternGenerator._find_class_end(pattern, j, end)
                if class_end == -1:
                    raise UnclosedCharacterClassError(pattern, j)
                j = class_end + 1
                continue
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return j
            j += 1
        return -1

    @staticmethod
    def _split_alternatives(
        pattern: str, start: int, end: int
    ) -> list[tuple[int, int]]:
        """Split ``pattern[start:end]`` at ``|`` outside groups and classes."""
        spans: list[tuple[int, int]] = []
        depth = 0
        segment_start = start
        j = start
        while j < end:
            char = pattern[j]
            if char == "\\":
                j += 2
                continue
            if char == "[":
                class_end = PatternGenerator._find_class_end(pattern, j, end)
                if class_end == -1:
                    raise UnclosedCharacterClassError(pattern, j)
                j = class_end + 1
                continue
            if char == "(":
                depth += 1
            elif char == ")":
                depth = max(depth - 1, 0)
            elif char == "|" and depth == 0:
                spans.append((segment_start, j))
                segment_start = j + 1
            j += 1
        spans.append((segment_start, end))
        return spans

    def _parse_quantifier(
        self, pattern: str, i: int, end: int
    ) -> tuple[tuple[int, int] | None, int]:
        if i >= end:
            return None, i

        char = pattern[i]
        if char == "*":
            bounds, i = (0, STAR_MAX), i + 1
        elif char == "+":
            bounds, i = (1, PLUS_MAX), i + 1
        elif char == "?":
            bounds, i = (0, 1), i + 1
        elif char == "{":
            match = _BRACE_QUANTIFIER_RE.match(pattern, i, end)
            if not match:
                return None, i
            if match.group(4) is not None:
                low, high = 0, int(match.group(4))
            elif match.group(2) is None:
                low = high = int(match.group(1))
            elif match.group(3):
                low = int(match.group(1))
                high = max(int(match.group(3)), low)
            else:
                low = int(match.group(1))
                high = low + OPEN_RANGE_EXTRA
            bounds, i = (low, high), match.end()
        else:
            return None, i

        # Lazy modifier
        if i < end and pattern[i] == "?":
            i += 1
        return bounds, i

    # Producers

    def _literal(self, text: str) -> Producer:
        return lambda: text

    def _draw(self, alphabet: str) -> Producer:
        return lambda: self._rng.choice(alphabet)

    def _repeat(self, atom: Producer, low: int, high: int) -> Producer:
        def produce() -> str:
            count = self._rng.randint(low, high)
            return "".join(atom() for _ in range(count))

        return produce


def generate_from_pattern(pattern: str, rng: random.Random | None = None) -> str:
    """Generate one string matching ``pattern``."""
    return PatternGenerator(rng).generate(pattern)
