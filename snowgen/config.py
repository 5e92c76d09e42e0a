"""Manages configuration variables.

This module provides:
- Config: a base class for pulling environment variables
- DevelopmentConfig: a dev config class for test environments
- ProductionConfig: a config class for production
- TestingConfig: a config class for the test suite
- config: a dict for getting configuration depending on environment
- parse_fields, parse_defaults: parsers for the layout settings
- load_generator: a function that builds a Generator from settings
"""

import os
from collections.abc import Mapping
from re import fullmatch

from dotenv import load_dotenv

from .ids import Generator, MonotonicClock, wall_clock
from .layout import TWITTER_EPOCH, BitLayout
from .utils.errors import ConfigError

load_dotenv()

NAME_RE = r"[A-Za-z_][A-Za-z0-9_]*"


class Config:
    """Base class for pulling environment variables."""

    SNOWFLAKE_EPOCH = os.getenv("SNOWFLAKE_EPOCH", str(TWITTER_EPOCH))
    SNOWFLAKE_SEQUENCE_BITS = os.getenv("SNOWFLAKE_SEQUENCE_BITS", "12")
    SNOWFLAKE_FIELDS = os.getenv("SNOWFLAKE_FIELDS", "unused:1,machine:10")
    SNOWFLAKE_DEFAULTS = os.getenv("SNOWFLAKE_DEFAULTS", "")
    SNOWFLAKE_STRICT = os.getenv("SNOWFLAKE_STRICT", "False").lower() == "true"
    SNOWFLAKE_CLOCK = os.getenv("SNOWFLAKE_CLOCK", "wall")

    LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")
    LOG_REQUESTS = os.getenv("LOG_REQUESTS", "False").lower() == "true"


class DevelopmentConfig(Config):
    """Config class with DEBUG on."""

    DEBUG = True


class ProductionConfig(Config):
    """Config class with DEBUG off."""

    DEBUG = False


class TestingConfig(Config):
    """Config class that keeps logs off the disk."""

    DEBUG = True
    TESTING = True
    LOG_FILE = ""


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}

CLOCKS = {
    "wall": lambda: wall_clock,
    "monotonic": MonotonicClock,
}


def _to_int(value, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{what} must be an integer, got {value!r}") from None


def _to_bool(value, what: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", ""):
        return value.strip().lower() == "true"
    raise ConfigError(f'{what} must be "true" or "false", got {value!r}')


def parse_fields(text: str) -> list[tuple[str, int]]:
    """Parses an ordered field list like ``unused:1,machine:10``.

    Raises:
        ConfigError: If an entry is not ``name:bits``
    """
    fields = []
    for entry in filter(None, (part.strip() for part in text.split(","))):
        name, sep, bits = entry.partition(":")
        name = name.strip()
        if not sep or not fullmatch(NAME_RE, name):
            raise ConfigError(f'Field entry "{entry}" must look like name:bits')
        fields.append((name, _to_int(bits.strip(), f'Width of "{name}"')))
    return fields


def parse_defaults(text: str) -> dict[str, int]:
    """Parses field values like ``machine=7,region=2``.

    Raises:
        ConfigError: If an entry is not ``name=value``
    """
    defaults = {}
    for entry in filter(None, (part.strip() for part in text.split(","))):
        name, sep, value = entry.partition("=")
        name = name.strip()
        if not sep or not fullmatch(NAME_RE, name):
            raise ConfigError(f'Default entry "{entry}" must look like name=value')
        defaults[name] = _to_int(value.strip(), f'Value of "{name}"')
    return defaults


def load_generator(settings: Mapping) -> Generator:
    """Builds a generator from a Flask config or any mapping with the SNOWFLAKE_* keys.

    Args:
        settings (Mapping): The settings to read

    Returns:
        Generator: A generator with the configured layout, defaults and clock

    Raises:
        ConfigError: If any setting is malformed or the layout does not fit in 64 bits
    """
    clock = settings.get("SNOWFLAKE_CLOCK", "wall")
    if clock not in CLOCKS:
        raise ConfigError(f'Unknown clock "{clock}", expected one of {", ".join(CLOCKS)}')
    layout = BitLayout.build(
        _to_int(settings.get("SNOWFLAKE_EPOCH", TWITTER_EPOCH), "Epoch"),
        _to_int(settings.get("SNOWFLAKE_SEQUENCE_BITS", 12), "Sequence bits"),
        parse_fields(settings.get("SNOWFLAKE_FIELDS", "unused:1,machine:10")),
    )
    return Generator(
        layout,
        defaults=parse_defaults(settings.get("SNOWFLAKE_DEFAULTS", "")),
        strict=_to_bool(settings.get("SNOWFLAKE_STRICT", False), "Strict mode"),
        clock=CLOCKS[clock](),
    )
