"""
Word inflection and resource-name helpers.

Used to match resource names (``owners``) with schema and field names
(``Owner``, ``owner_id``) and to build synthetic IDs (``owner-001``).
"""

import re

IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "category": "categories",
    "company": "companies",
    "movie": "movies",
}

IRREGULAR_SINGULARS = {plural: singular for singular, plural in IRREGULAR_PLURALS.items()}

_SIBILANT_SUFFIXES = ("s", "x", "z", "ch", "sh")
_VOWELS = "aeiou"


def pluralize(word: str) -> str:
    """
    Convert a singular word to its plural form.

    Irregular words are looked up first, then suffix rules apply:
    ``s/x/z/ch/sh`` take ``es``, consonant + ``y`` becomes ``ies``,
    everything else takes ``s``.
    """
    if not word:
        return ""

    lower = word.lower()
    if lower in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[lower]

    if lower.endswith(_SIBILANT_SUFFIXES):
        return word + "es"

    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"

    return word + "s"


def singularize(word: str) -> str:
    """Convert a plural word to its singular form (inverse of ``pluralize``)."""
    if not word:
        return ""

    lower = word.lower()
    if lower in IRREGULAR_SINGULARS:
        return IRREGULAR_SINGULARS[lower]

    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"

    if lower.endswith("es"):
        base = word[:-2]
        if base.lower().endswith(_SIBILANT_SUFFIXES):
            return base

    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]

    return word


def to_snake_case(name: str) -> str:
    """``OrderItem`` -> ``order_item``."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def extract_resource_name(path: str) -> str:
    """
    Extract the resource name from a path template.

    The resource is the first segment that is not a path parameter:
    ``/users/{id}/posts`` -> ``users``.
    """
    for part in path.strip("/").split("/"):
        if part and not part.startswith("{"):
            return part
    return ""


def literal_segments(path: str) -> list[str]:
    """Path segments that are not parameters."""
    return [
        part for part in path.strip("/").split("/") if part and not part.startswith("{")
    ]
