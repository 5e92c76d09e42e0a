"""Bit layouts for Snowflake-like IDs.

This module provides:
- Field: a named bit range inside an ID
- BitLayout: an immutable table of shifts and maxima built from a configuration
- TWITTER_EPOCH: the epoch used by Twitter's Snowflake, in milliseconds
- DEFAULT_LAYOUT: 1 unused bit, 10 machine bits, 41 timestamp bits, 12 sequence bits
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .utils.errors import ConfigError

ID_BITS = 64

# Nov 04 2010 01:42:54.657 UTC
TWITTER_EPOCH = 1288834974657
DEFAULT_SEQUENCE_BITS = 12
DEFAULT_FIELDS = (("unused", 1), ("machine", 10))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Field:
    """A named bit range.

    Attributes:
        name (str): The name callers use to pass a value
        bits (int): Width of the range
        shift (int): Position of the lowest bit of the range
    """

    name: str
    bits: int
    shift: int

    @property
    def max(self) -> int:
        """The biggest value the field can hold."""
        return (1 << self.bits) - 1


@dataclass(frozen=True)
class BitLayout:
    """Shifts and maxima of every part of an ID.

    Do not instantiate directly, use ``BitLayout.build`` so the bit budget gets checked.
    From the lowest bit up an ID holds the sequence, the timestamp, then the fields
    with the first declared field on top.
    """

    epoch: int
    sequence_bits: int
    timestamp_bits: int
    fields: tuple[Field, ...]

    @classmethod
    def build(
            cls,
            epoch: int,
            sequence_bits: int = DEFAULT_SEQUENCE_BITS,
            fields: Iterable = DEFAULT_FIELDS,
            widths: Mapping[str, int] | None = None,
    ) -> "BitLayout":
        """Validates a configuration and computes its layout.

        Args:
            epoch (int): Reference instant in milliseconds since the Unix epoch
            sequence_bits (int): Width of the per-millisecond counter
            fields (Iterable): Ordered ``(name, bits)`` pairs, or bare names looked up in ``widths``
            widths (Mapping[str, int] | None): Widths for fields given as bare names

        Returns:
            BitLayout: The computed layout

        Raises:
            ConfigError: If a field has no width, a width is malformed,
                a name repeats, or the fields and the sequence do not fit in 64 bits
        """
        if not _is_int(epoch):
            raise ConfigError("Epoch must be an integer amount of milliseconds")
        if not _is_int(sequence_bits) or not 0 <= sequence_bits <= ID_BITS:
            raise ConfigError(f"Sequence bits must be an integer between 0 and {ID_BITS}")
        widths = widths or {}

        declared = []
        used = sequence_bits
        for entry in fields:
            if isinstance(entry, str):
                name = entry
                if name not in widths:
                    raise ConfigError(f'Field "{name}" is not assigned a bit width')
                bits = widths[name]
            else:
                try:
                    name, bits = entry
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"Fields must be names or (name, bits) pairs, got {entry!r}") from e
            if not isinstance(name, str) or not name:
                raise ConfigError("Field names must be non-empty strings")
            if any(name == other for other, _ in declared):
                raise ConfigError(f'Field "{name}" is declared twice')
            if not _is_int(bits) or bits < 0:
                raise ConfigError(f'Field "{name}" must have a non-negative integer width')
            used += bits
            if used > ID_BITS or bits > ID_BITS - sequence_bits:
                raise ConfigError("Not enough bits left for the timestamp")
            declared.append((name, bits))

        timestamp_bits = ID_BITS - used
        shift = sequence_bits + timestamp_bits
        packed = []
        for name, bits in reversed(declared):
            packed.append(Field(name, bits, shift))
            shift += bits
        packed.reverse()
        return cls(epoch, sequence_bits, timestamp_bits, tuple(packed))

    @property
    def sequence_shift(self) -> int:
        return 0

    @property
    def timestamp_shift(self) -> int:
        return self.sequence_bits

    @property
    def sequence_max(self) -> int:
        return (1 << self.sequence_bits) - 1

    @property
    def timestamp_max(self) -> int:
        return (1 << self.timestamp_bits) - 1

    @property
    def names(self) -> tuple[str, ...]:
        """Field names in declaration order."""
        return tuple(field.name for field in self.fields)

    def index(self, name: str) -> int:
        """Returns the position of a field in ``fields``.

        Raises:
            KeyError: If the layout has no such field
        """
        for i, field in enumerate(self.fields):
            if field.name == name:
                return i
        raise KeyError(name)

    def field(self, name: str) -> Field:
        """Returns the field called ``name``.

        Raises:
            KeyError: If the layout has no such field
        """
        return self.fields[self.index(name)]

    def resolve(self, values: Mapping[str, int] | None, base: tuple[int, ...] | None = None) -> tuple[int, ...]:
        """Orders field values the way the layout stores them.

        Names the layout does not know are ignored, missing ones come from ``base`` or are 0.
        """
        resolved = list(base) if base is not None else [0] * len(self.fields)
        if values:
            for i, field in enumerate(self.fields):
                if field.name in values:
                    resolved[i] = values[field.name]
        return tuple(resolved)

    def describe(self) -> dict:
        """Returns the layout as a JSON-friendly dict."""
        return {
            "epoch": self.epoch,
            "sequence": {"bits": self.sequence_bits, "shift": self.sequence_shift},
            "timestamp": {"bits": self.timestamp_bits, "shift": self.timestamp_shift},
            "fields": [
                {"name": field.name, "bits": field.bits, "shift": field.shift}
                for field in self.fields
            ],
        }


DEFAULT_LAYOUT = BitLayout.build(TWITTER_EPOCH)
