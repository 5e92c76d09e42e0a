"""Identifiers and their integer, byte and hex forms.

This module provides:
- Identifier: an immutable ID split into its timestamp, sequence and fields
- to_integer, to_bytes, to_hex: encoders
- from_integer, from_bytes, from_hex: decoders that recover an Identifier using a BitLayout
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from re import fullmatch

from .layout import ID_BITS, BitLayout
from .utils.errors import DecodeError

ID_BYTES = ID_BITS // 8
HEX_WIDTH = ID_BITS // 4
MASK = (1 << ID_BITS) - 1
SIGN_BIT = 1 << (ID_BITS - 1)
HEX_RE = rf"[0-9a-fA-F]{{1,{HEX_WIDTH}}}"


@dataclass(frozen=True)
class Identifier:
    """A Snowflake-like ID.

    Attributes:
        layout (BitLayout): The layout the ID was made with
        overtime (int): Milliseconds between ``layout.epoch`` and creation
        sequence (int): Counter that tells apart IDs made within one millisecond
        fields (tuple[int, ...]): Field values in ``layout.fields`` order
    """

    layout: BitLayout = field(repr=False)
    overtime: int
    sequence: int
    fields: tuple[int, ...]

    def __post_init__(self):
        if len(self.fields) != len(self.layout.fields):
            raise ValueError(
                f"Layout has {len(self.layout.fields)} fields, got {len(self.fields)} values"
            )

    def __getitem__(self, name: str) -> int:
        return self.fields[self.layout.index(name)]

    @property
    def field_values(self) -> dict[str, int]:
        """Field values keyed by name."""
        return dict(zip(self.layout.names, self.fields))

    def create_time(self) -> int:
        """Returns the creation time in milliseconds, in the same units as the epoch."""
        return self.overtime + self.layout.epoch

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.create_time() / 1000, tz=UTC)

    def to_integer(self) -> int:
        return to_integer(self)

    def to_bytes(self) -> bytes:
        return to_bytes(self)

    def to_hex(self) -> str:
        return to_hex(self)

    def __int__(self) -> int:
        return to_integer(self)

    def __str__(self) -> str:
        return to_hex(self)

    def as_dict(self) -> dict:
        """Returns the ID in every form, ready to be serialized to JSON."""
        return {
            "id": to_integer(self),
            "hex": to_hex(self),
            "overtime": self.overtime,
            "sequence": self.sequence,
            "fields": self.field_values,
            "create_time": self.create_time(),
        }


def _pack(identifier: Identifier) -> int:
    """Packs an ID into its unsigned 64-bit pattern.

    Values are not masked to their fields, so anything too wide spills into higher bits.
    Spilled bits are OR-ed into whatever is already there, they never carry like an addition.
    """
    layout = identifier.layout
    raw = (identifier.overtime << layout.timestamp_shift) | (identifier.sequence << layout.sequence_shift)
    for part, value in zip(layout.fields, identifier.fields):
        raw |= value << part.shift
    return raw & MASK


def to_integer(identifier: Identifier) -> int:
    """Encodes an ID as a signed 64-bit integer."""
    raw = _pack(identifier)
    return raw - (1 << ID_BITS) if raw & SIGN_BIT else raw


def to_bytes(identifier: Identifier) -> bytes:
    """Encodes an ID as 8 big-endian bytes."""
    return _pack(identifier).to_bytes(ID_BYTES, "big")


def to_hex(identifier: Identifier) -> str:
    """Encodes an ID as 16 lowercase hex digits, zero-padded so that strings sort like IDs."""
    return format(_pack(identifier), f"0{HEX_WIDTH}x")


def from_integer(raw: int, layout: BitLayout) -> Identifier:
    """Decodes an ID from an integer.

    Both the signed and the unsigned reading of a 64-bit pattern are accepted.

    Args:
        raw (int): The encoded ID
        layout (BitLayout): The layout the ID was encoded with

    Returns:
        Identifier: The decoded ID

    Raises:
        TypeError: If ``raw`` is not an integer
        DecodeError: If ``raw`` does not fit in 64 bits
    """
    if not isinstance(raw, int) or isinstance(raw, bool):
        raise TypeError("Encoded ID must be an integer")
    if not -SIGN_BIT <= raw <= MASK:
        raise DecodeError(f"{raw} does not fit in {ID_BITS} bits")
    raw &= MASK
    return Identifier(
        layout,
        (raw >> layout.timestamp_shift) & layout.timestamp_max,
        (raw >> layout.sequence_shift) & layout.sequence_max,
        tuple((raw >> part.shift) & part.max for part in layout.fields),
    )


def from_bytes(raw: bytes, layout: BitLayout) -> Identifier:
    """Decodes an ID from 8 big-endian bytes.

    Raises:
        TypeError: If ``raw`` is not bytes-like
        DecodeError: If ``raw`` is not exactly 8 bytes long
    """
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise TypeError("Encoded ID must be bytes")
    if len(raw) != ID_BYTES:
        raise DecodeError(f"Encoded ID must be {ID_BYTES} bytes, got {len(raw)}")
    return from_integer(int.from_bytes(raw, "big"), layout)


def from_hex(text: str, layout: BitLayout) -> Identifier:
    """Decodes an ID from a hex string of up to 16 digits.

    Raises:
        TypeError: If ``text`` is not a string
        DecodeError: If ``text`` is not a plain base-16 number that fits in 64 bits
    """
    if not isinstance(text, str):
        raise TypeError("Encoded ID must be a string")
    if not fullmatch(HEX_RE, text):
        raise DecodeError(f"{text!r} is not a {ID_BITS}-bit hex number")
    return from_integer(int(text, 16), layout)
