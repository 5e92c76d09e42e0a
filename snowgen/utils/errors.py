"""Errors tailored for this project.

This module provides:
- ConfigError: An error if a bit layout or a generator is misconfigured
- DecodeError: An error if raw bytes, an integer or a hex string is not an ID
- FieldOverflowError: An error if a field value does not fit its bits (strict mode only)
"""


class ConfigError(ValueError):
    """A bit layout, a generator or an environment setting is invalid."""

class DecodeError(ValueError):
    """Raw input cannot be decoded into an identifier."""

class FieldOverflowError(OverflowError):
    """A field value is wider than the bits reserved for it."""
