"""
Semantic classification of field names.

``classify`` maps a property name such as ``email_address`` or ``createdAt``
to a ``SemanticType``; ``generate_by_semantic_type`` turns that type into one
realistic value using Faker.
"""

from __future__ import annotations

import random
import re
import string
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

from faker import Faker


class SemanticType(str, Enum):
    """Realistic-data categories a field name can fall into."""

    UNKNOWN = "unknown"
    ID = "id"
    NAME = "name"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    FULL_NAME = "full_name"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    STREET = "street"
    CITY = "city"
    STATE = "state"
    COUNTRY = "country"
    ZIP_CODE = "zip_code"
    POSTAL_CODE = "postal_code"
    URL = "url"
    WEBSITE = "website"
    USERNAME = "username"
    PASSWORD = "password"
    TITLE = "title"
    DESCRIPTION = "description"
    CONTENT = "content"
    MESSAGE = "message"
    COMPANY = "company"
    ORGANIZATION = "organization"
    PRICE = "price"
    AMOUNT = "amount"
    QUANTITY = "quantity"
    COUNT = "count"
    AGE = "age"
    DATE = "date"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    BIRTHDAY = "birthday"
    IMAGE = "image"
    AVATAR = "avatar"
    COLOR = "color"
    STATUS = "status"
    TYPE = "type"
    CATEGORY = "category"
    TAG = "tag"
    SLUG = "slug"
    CODE = "code"
    SKU = "sku"
    ISBN = "isbn"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    CURRENCY = "currency"
    LANGUAGE = "language"
    TIMEZONE = "timezone"
    IP_ADDRESS = "ip_address"
    USER_AGENT = "user_agent"
    CREDIT_CARD = "credit_card"


def _rule(pattern: str, semantic_type: SemanticType) -> tuple[re.Pattern[str], SemanticType]:
    return re.compile(pattern, re.IGNORECASE), semantic_type


# Evaluated top to bottom, first match wins. ID must stay first.
SEMANTIC_RULES: list[tuple[re.Pattern[str], SemanticType]] = [
    (re.compile(r"(?i:^id$|_id$)|[a-z0-9]Id$"), SemanticType.ID),
    _rule(r"^first_?name$|^given_?name$", SemanticType.FIRST_NAME),
    _rule(r"^last_?name$|^family_?name$|^surname$", SemanticType.LAST_NAME),
    _rule(r"^full_?name$|^display_?name$", SemanticType.FULL_NAME),
    _rule(r"^name$", SemanticType.NAME),
    _rule(r"^e?mail$|^e?mail_?address$", SemanticType.EMAIL),
    _rule(r"^phone$|^phone_?number$|^mobile$|^tel$|^telephone$", SemanticType.PHONE),
    _rule(r"^address$|^full_?address$", SemanticType.ADDRESS),
    _rule(r"^street$|^street_?address$|^line_?1$|^address_?line_?1$", SemanticType.STREET),
    _rule(r"^city$|^town$", SemanticType.CITY),
    _rule(r"^state$|^province$|^region$", SemanticType.STATE),
    _rule(r"^country$|^nation$", SemanticType.COUNTRY),
    _rule(r"^zip$|^zip_?code$", SemanticType.ZIP_CODE),
    _rule(r"^postal_?code$|^post_?code$", SemanticType.POSTAL_CODE),
    _rule(r"^url$|^link$|^href$", SemanticType.URL),
    _rule(r"^website$|^homepage$|^site$", SemanticType.WEBSITE),
    _rule(r"^user_?name$|^login$|^handle$", SemanticType.USERNAME),
    _rule(r"^password$|^pass$|^pwd$|^secret$", SemanticType.PASSWORD),
    _rule(r"^title$|^headline$|^subject$", SemanticType.TITLE),
    _rule(r"^description$|^desc$|^summary$|^bio$", SemanticType.DESCRIPTION),
    _rule(r"^content$|^text$|^body$", SemanticType.CONTENT),
    _rule(r"^message$|^comment$|^note$", SemanticType.MESSAGE),
    _rule(r"^company$|^business$|^employer$", SemanticType.COMPANY),
    _rule(r"^organi[sz]ation$|^org$|^institution$", SemanticType.ORGANIZATION),
    _rule(r"^price$|^cost$|^fee$", SemanticType.PRICE),
    _rule(r"^amount$|^total$|^sum$|^balance$", SemanticType.AMOUNT),
    _rule(r"^quantity$|^qty$", SemanticType.QUANTITY),
    _rule(r"^count$|^num$|^number$", SemanticType.COUNT),
    _rule(r"^age$", SemanticType.AGE),
    _rule(r"^date$", SemanticType.DATE),
    _rule(r"^created_?at$|^creation_?date$", SemanticType.CREATED_AT),
    _rule(r"^updated_?at$|^modified_?at$|^edit_?date$", SemanticType.UPDATED_AT),
    _rule(r"^birthday$|^birth_?date$|^date_?of_?birth$|^dob$", SemanticType.BIRTHDAY),
    _rule(r"^image$|^img$|^picture$|^image_?url$", SemanticType.IMAGE),
    _rule(r"^avatar$|^profile_?image$|^photo$|^avatar_?url$", SemanticType.AVATAR),
    _rule(r"^colou?r$", SemanticType.COLOR),
    _rule(r"^status$", SemanticType.STATUS),
    _rule(r"^type$|^kind$", SemanticType.TYPE),
    _rule(r"^category$|^cat$", SemanticType.CATEGORY),
    _rule(r"^tag$|^label$", SemanticType.TAG),
    _rule(r"^slug$|^permalink$", SemanticType.SLUG),
    _rule(r"^code$", SemanticType.CODE),
    _rule(r"^sku$|^product_?code$", SemanticType.SKU),
    _rule(r"^isbn$", SemanticType.ISBN),
    _rule(r"^lat$|^latitude$", SemanticType.LATITUDE),
    _rule(r"^lng$|^lon$|^long$|^longitude$", SemanticType.LONGITUDE),
    _rule(r"^currency$|^currency_?code$", SemanticType.CURRENCY),
    _rule(r"^language$|^lang$|^locale$", SemanticType.LANGUAGE),
    _rule(r"^timezone$|^tz$|^time_?zone$", SemanticType.TIMEZONE),
    _rule(r"^ip$|^ip_?address$", SemanticType.IP_ADDRESS),
    _rule(r"^user_?agent$|^ua$", SemanticType.USER_AGENT),
    _rule(r"^credit_?card$|^card_?number$|^cc$", SemanticType.CREDIT_CARD),
]


def classify(field_name: str) -> SemanticType:
    """
    Classify a field name into a semantic type.

    Args:
        field_name: The property name (snake_case or camelCase)

    Returns:
        The first matching SemanticType, or UNKNOWN
    """
    if not field_name:
        return SemanticType.UNKNOWN
    for pattern, semantic_type in SEMANTIC_RULES:
        if pattern.search(field_name):
            return semantic_type
    return SemanticType.UNKNOWN


STATUSES = ["active", "inactive", "pending", "completed", "cancelled"]
CURRENCIES = ["USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "BRL"]
LANGUAGES = ["en", "es", "fr", "de", "pt", "it", "ja", "zh", "ko", "ru"]
TIMEZONES = [
    "America/New_York",
    "America/Los_Angeles",
    "Europe/London",
    "Europe/Paris",
    "Asia/Tokyo",
    "Asia/Shanghai",
    "Australia/Sydney",
]
REFERENCE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _recent_datetime(rng: random.Random) -> datetime:
    """A UTC timestamp within the two years before REFERENCE_TIME."""
    offset = timedelta(seconds=rng.randint(0, 2 * 365 * 24 * 3600))
    return REFERENCE_TIME - offset


def _upper_letters(rng: random.Random, count: int) -> str:
    return "".join(rng.choices(string.ascii_uppercase, k=count))


def _birthday(rng: random.Random) -> str:
    year = rng.randint(1950, 2005)
    return f"{year}-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}"


def _image_url(rng: random.Random) -> str:
    seed = "".join(rng.choices("0123456789abcdef", k=8))
    return f"https://picsum.photos/seed/{seed}/400/400"


def generate_by_semantic_type(
    semantic_type: SemanticType, faker: Faker, rng: random.Random
) -> Any:
    """
    Produce one realistic value for a semantic type.

    Args:
        semantic_type: The classified type
        faker: The realistic-value provider
        rng: The PRNG for values Faker does not cover

    Returns:
        A string or number, or None for UNKNOWN
    """
    generators: dict[SemanticType, Callable[[], Any]] = {
        SemanticType.ID: faker.uuid4,
        SemanticType.FIRST_NAME: faker.first_name,
        SemanticType.LAST_NAME: faker.last_name,
        SemanticType.FULL_NAME: faker.name,
        SemanticType.NAME: faker.name,
        SemanticType.EMAIL: faker.email,
        SemanticType.PHONE: faker.phone_number,
        SemanticType.ADDRESS: lambda: faker.address().replace("\n", ", "),
        SemanticType.STREET: faker.street_address,
        SemanticType.CITY: faker.city,
        SemanticType.STATE: faker.state,
        SemanticType.COUNTRY: faker.country,
        SemanticType.ZIP_CODE: faker.postcode,
        SemanticType.POSTAL_CODE: faker.postcode,
        SemanticType.URL: faker.url,
        SemanticType.WEBSITE: faker.url,
        SemanticType.USERNAME: faker.user_name,
        SemanticType.PASSWORD: lambda: faker.password(length=16),
        SemanticType.TITLE: lambda: faker.sentence(nb_words=4).rstrip("."),
        SemanticType.DESCRIPTION: lambda: faker.paragraph(nb_sentences=2),
        SemanticType.CONTENT: lambda: faker.paragraph(nb_sentences=2),
        SemanticType.MESSAGE: lambda: faker.paragraph(nb_sentences=2),
        SemanticType.COMPANY: faker.company,
        SemanticType.ORGANIZATION: faker.company,
        SemanticType.PRICE: lambda: round(rng.uniform(1, 1000), 2),
        SemanticType.AMOUNT: lambda: round(rng.uniform(1, 1000), 2),
        SemanticType.QUANTITY: lambda: rng.randint(1, 100),
        SemanticType.COUNT: lambda: rng.randint(1, 100),
        SemanticType.AGE: lambda: rng.randint(18, 80),
        SemanticType.DATE: lambda: _recent_datetime(rng).date().isoformat(),
        SemanticType.CREATED_AT: lambda: _recent_datetime(rng).isoformat(),
        SemanticType.UPDATED_AT: lambda: _recent_datetime(rng).isoformat(),
        SemanticType.BIRTHDAY: lambda: _birthday(rng),
        SemanticType.IMAGE: lambda: _image_url(rng),
        SemanticType.AVATAR: lambda: _image_url(rng),
        SemanticType.COLOR: faker.hex_color,
        SemanticType.STATUS: lambda: rng.choice(STATUSES),
        SemanticType.TYPE: faker.word,
        SemanticType.CATEGORY: faker.word,
        SemanticType.TAG: faker.word,
        SemanticType.SLUG: faker.slug,
        SemanticType.CODE: lambda: f"{_upper_letters(rng, 3)}-{rng.randint(1000, 9999)}",
        SemanticType.SKU: lambda: f"SKU-{_upper_letters(rng, 3)}-{rng.randint(1, 9999):04d}",
        SemanticType.ISBN: faker.isbn13,
        SemanticType.LATITUDE: lambda: round(rng.uniform(-90, 90), 6),
        SemanticType.LONGITUDE: lambda: round(rng.uniform(-180, 180), 6),
        SemanticType.CURRENCY: lambda: rng.choice(CURRENCIES),
        SemanticType.LANGUAGE: lambda: rng.choice(LANGUAGES),
        SemanticType.TIMEZONE: lambda: rng.choice(TIMEZONES),
        SemanticType.IP_ADDRESS: faker.ipv4,
        SemanticType.USER_AGENT: faker.user_agent,
        SemanticType.CREDIT_CARD: faker.credit_card_number,
    }

    generator = generators.get(semantic_type)
    if generator:
        return generator()
    return None
