"""Currencies, leverages and the other value types shared by the protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from functools import total_ordering
from typing import Generic, Iterator, TypeVar, Union

from laminar_synth.fixed import FixedI128, FixedU128

Price = FixedU128


class DecodeError(ValueError):
    """Raised when bytes cannot be decoded into a value."""


class CurrencyId(IntEnum):
    LAMI = 0
    AUSD = 1
    FEUR = 2
    FJPY = 3
    FBTC = 4
    FETH = 5
    FAUD = 6
    FCAD = 7
    FCHF = 8
    FXAU = 9
    FOIL = 10


class DataProviderId(IntEnum):
    AGGREGATED = 0
    LAMINAR = 1
    BAND = 2


_FACTORS = (2, 3, 5, 10, 20, 30, 50, 100)


@total_ordering
class Leverage(Enum):
    """A single leverage option; each one occupies one bit of a ``Leverages`` mask."""

    LONG_TWO = 1 << 0
    LONG_THREE = 1 << 1
    LONG_FIVE = 1 << 2
    LONG_TEN = 1 << 3
    LONG_TWENTY = 1 << 4
    LONG_THIRTY = 1 << 5
    LONG_FIFTY = 1 << 6
    LONG_RESERVED = 1 << 7
    SHORT_TWO = 1 << 8
    SHORT_THREE = 1 << 9
    SHORT_FIVE = 1 << 10
    SHORT_TEN = 1 << 11
    SHORT_TWENTY = 1 << 12
    SHORT_THIRTY = 1 << 13
    SHORT_FIFTY = 1 << 14
    SHORT_RESERVED = 1 << 15

    @property
    def _index(self) -> int:
        return self.value.bit_length() - 1

    def is_long(self):
        return not self.is_short()

    def is_short(self):
        return self.value >= Leverage.SHORT_TWO.value

    def factor(self):
        """The leverage multiplier, e.g. 10 for ``LONG_TEN``."""
        return _FACTORS[self._index % len(_FACTORS)]

    def encode(self):
        """Encode as one byte: the bit position of the option."""
        return bytes([self._index])

    @classmethod
    def decode(cls, data):
        """Decode from the first byte of ``data``."""
        if not data:
            raise DecodeError("not enough data")
        position = data[0]
        if position >= 16:
            raise DecodeError("overflow")
        return cls(1 << position)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Leverage):
            return NotImplemented
        return self.value < other.value

    def __or__(self, other: Union[Leverage, Leverages]) -> Leverages:
        return Leverages(self.value) | other


@dataclass(frozen=True)
class Leverages:
    """A set of leverage options held as a 16-bit mask."""

    bits: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.bits <= 0xFFFF:
            raise ValueError(f"{self.bits:#x} does not fit in 16 bits")

    @classmethod
    def all(cls):
        return cls(0xFFFF)

    @classmethod
    def none(cls):
        return cls(0)

    @classmethod
    def of(cls, *leverages: Leverage) -> Leverages:
        result = cls.none()
        for leverage in leverages:
            result = result | leverage
        return result

    def contains(self, leverage):
        return bool(self.bits & leverage.value)

    def __contains__(self, leverage: object) -> bool:
        return isinstance(leverage, Leverage) and self.contains(leverage)

    def __iter__(self) -> Iterator[Leverage]:
        return (leverage for leverage in Leverage if self.contains(leverage))

    def __or__(self, other: Union[Leverage, Leverages]) -> Leverages:
        if isinstance(other, Leverage):
            return Leverages(self.bits | other.value)
        if isinstance(other, Leverages):
            return Leverages(self.bits | other.bits)
        return NotImplemented

    __ror__ = __or__

    def __int__(self) -> int:
        return self.bits

    def encode(self):
        """Encode as a little-endian 16-bit integer."""
        return self.bits.to_bytes(2, "little")

    @classmethod
    def decode(cls, data):
        """Decode from the first two bytes of ``data``."""
        if len(data) < 2:
            raise DecodeError("not enough data")
        return cls(int.from_bytes(bytes(data[:2]), "little"))


@dataclass(frozen=True, order=True)
class TradingPair:
    base: CurrencyId
    quote: CurrencyId


@dataclass
class AccumulateConfig:
    """Swap is accumulated every ``frequency`` time units, when ``now % frequency == offset``."""

    frequency: int = 0
    offset: int = 0


@dataclass
class IdentityInfo:
    """Identity of a liquidity pool owner."""

    legal_name: bytes = b""
    display_name: bytes = b""
    web: bytes = b""
    email: bytes = b""
    image_url: bytes = b""


@dataclass
class SwapRate:
    long: FixedI128 = field(default_factory=FixedI128.zero)
    short: FixedI128 = field(default_factory=FixedI128.zero)


V = TypeVar("V")


@dataclass(frozen=True)
class TimestampedValue(Generic[V]):
    """A value together with the moment it was recorded."""

    value: V
    timestamp: int