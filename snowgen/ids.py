"""A module for handling unique ID generation.

This module provides:
- Generator: a class that spits out unique IDs for one node
- wall_clock: the default clock, wall time in milliseconds
- MonotonicClock: a clock that follows wall time but never runs backwards
"""

import logging
from collections.abc import Callable, Mapping
from threading import Lock
from time import monotonic_ns, sleep, time

from .codec import Identifier, from_bytes, from_hex, from_integer, to_bytes, to_hex, to_integer
from .layout import DEFAULT_LAYOUT, BitLayout
from .utils.errors import ConfigError, FieldOverflowError

# Seconds slept while waiting for the next millisecond, doubled up to the cap
BACKOFF_START = 0.00005
BACKOFF_CAP = 0.001

logger = logging.getLogger(__name__)


def wall_clock() -> int:
    """Returns the current Unix time in milliseconds."""
    return int(time() * 1000)


class MonotonicClock:
    """Reads wall time once, then advances it with the monotonic clock.

    IDs stay ordered when the system clock is stepped back,
    at the cost of drifting from wall time as long as the process lives.
    """

    def __init__(self):
        self.origin = wall_clock()
        self.started = monotonic_ns()

    def __call__(self) -> int:
        return self.origin + (monotonic_ns() - self.started) // 1_000_000


class Generator:
    """A class that spits out unique IDs."""

    def __init__(
            self,
            layout: BitLayout = DEFAULT_LAYOUT,
            defaults: Mapping[str, int] | None = None,
            strict: bool = False,
            clock: Callable[[], int] | None = None,
    ):
        """Sets reference variables for enforcing uniqueness.

        Args:
            layout (BitLayout): How IDs are packed
            defaults (Mapping[str, int] | None): Field values of this node, e.g. ``{"machine": 7}``
            strict (bool): True to reject field values that do not fit their bits,
                False to let them spill into neighbouring bits
            clock (Callable[[], int] | None): Returns the time in milliseconds, ``wall_clock`` if omitted

        Raises:
            ConfigError: If ``defaults`` names an unknown field or a value that does not fit
        """
        defaults = dict(defaults or {})
        for name, value in defaults.items():
            try:
                field = layout.field(name)
            except KeyError:
                raise ConfigError(f'Layout has no field "{name}"') from None
            if not isinstance(value, int) or not 0 <= value <= field.max:
                raise ConfigError(f'Field "{name}" must be between 0 and {field.max}')
        self.layout = layout
        self.defaults = layout.resolve(defaults)
        self.strict = strict
        self.clock = clock or wall_clock
        self.sequence = 0
        self.last_use_time = 0
        self.lock = Lock()
        self._behind = False

    def _check(self, fields: tuple[int, ...]) -> None:
        for field, value in zip(self.layout.fields, fields):
            if not 0 <= value <= field.max:
                raise FieldOverflowError(f'Field "{field.name}" must be between 0 and {field.max}, got {value}')

    def _til_next_millis(self) -> int:
        delay = BACKOFF_START
        now = self.clock()
        while now <= self.last_use_time:
            sleep(delay)
            delay = min(delay * 2, BACKOFF_CAP)
            now = self.clock()
        return now

    def new(self, values: Mapping[str, int] | None = None, **kwargs) -> Identifier:
        """Generates an ID.

        Blocks until the next millisecond if this one ran out of sequence numbers.
        Values for fields the layout does not have are ignored, missing ones fall back to the defaults.

        Args:
            values (Mapping[str, int] | None): Field values by name
            **kwargs: More field values, taking precedence over ``values``

        Returns:
            Identifier: The ID

        Raises:
            FieldOverflowError: If ``strict`` is on and a value does not fit its field
        """
        if kwargs:
            values = {**values, **kwargs} if values else kwargs
        fields = self.layout.resolve(values, self.defaults) if values else self.defaults
        if self.strict:
            self._check(fields)

        with self.lock:
            now = self.clock()
            if now < self.last_use_time:
                if not self._behind:
                    logger.warning(
                        "Clock moved backwards by %d ms, holding IDs at %d",
                        self.last_use_time - now, self.last_use_time,
                    )
                    self._behind = True
                now = self.last_use_time
            elif self._behind and now > self.last_use_time:
                logger.info("Clock caught up at %d", now)
                self._behind = False

            if self.sequence >= self.layout.sequence_max and now <= self.last_use_time:
                now = self._til_next_millis()
                if self._behind:
                    logger.info("Clock caught up at %d", now)
                    self._behind = False

            if now == self.last_use_time:
                self.sequence += 1
            else:
                self.last_use_time = now
                self.sequence = 0
            return Identifier(self.layout, self.last_use_time - self.layout.epoch, self.sequence, fields)

    def new_integer(self, values: Mapping[str, int] | None = None, **kwargs) -> int:
        """Generates an ID as a signed 64-bit integer."""
        return to_integer(self.new(values, **kwargs))

    def new_bytes(self, values: Mapping[str, int] | None = None, **kwargs) -> bytes:
        """Generates an ID as 8 big-endian bytes."""
        return to_bytes(self.new(values, **kwargs))

    def new_hex(self, values: Mapping[str, int] | None = None, **kwargs) -> str:
        """Generates an ID as a 16 character hex string."""
        return to_hex(self.new(values, **kwargs))

    def parse_integer(self, raw: int) -> Identifier:
        return from_integer(raw, self.layout)

    def parse_bytes(self, raw: bytes) -> Identifier:
        return from_bytes(raw, self.layout)

    def parse_hex(self, text: str) -> Identifier:
        return from_hex(text, self.layout)
