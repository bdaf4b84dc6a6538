"""Fixed-point numbers, per-million ratios and saturating conversions between them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional

U128_MAX = 2**128 - 1
I128_MIN = -(2**127)
I128_MAX = 2**127 - 1

_DIV = 10**18


def _div_toward_zero(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@total_ordering
class FixedU128:
    """Unsigned fixed-point number with 18 decimal places, stored as a 128-bit integer."""

    __slots__ = ("_inner",)

    DIV = _DIV
    _MIN = 0
    _MAX = U128_MAX

    def __init__(self, inner: int = 0) -> None:
        if not self._MIN <= inner <= self._MAX:
            raise OverflowError(f"{inner} is out of range for {type(self).__name__}")
        self._inner = inner

    @property
    def inner(self) -> int:
        """The raw integer, scaled by ``DIV``."""
        return self._inner

    # Construction -----------------------------------------------------------

    @classmethod
    def from_inner(cls, inner):
        return cls(inner)

    @classmethod
    def _checked(cls, inner: int):
        return cls(inner) if cls._MIN <= inner <= cls._MAX else None

    @classmethod
    def _saturated(cls, inner: int):
        return cls(_clamp(inner, cls._MIN, cls._MAX))

    @classmethod
    def saturating_from_integer(cls, n):
        return cls._saturated(n * cls.DIV)

    @classmethod
    def checked_from_rational(cls, n, d):
        """Return ``n / d``, or ``None`` on a zero denominator or overflow."""
        if d == 0:
            return None
        return cls._checked(_div_toward_zero(n * cls.DIV, d))

    @classmethod
    def saturating_from_rational(cls, n, d):
        """Return ``n / d``, clamped to the bound that the signs point to."""
        result = cls.checked_from_rational(n, d)
        if result is not None:
            return result
        return cls.max_value() if (n < 0) == (d < 0) else cls.min_value()

    @classmethod
    def from_fraction(cls, x):
        """Convert a float, truncating toward zero and saturating at the bounds."""
        if math.isnan(x):
            return cls.zero()
        if math.isinf(x):
            return cls.max_value() if x > 0 else cls.min_value()
        return cls._saturated(int(x * cls.DIV))

    @classmethod
    def one(cls):
        return cls(cls.DIV)

    @classmethod
    def zero(cls):
        return cls(0)

    @classmethod
    def max_value(cls):
        return cls(cls._MAX)

    @classmethod
    def min_value(cls):
        return cls(cls._MIN)

    # Arithmetic -------------------------------------------------------------

    def _same(self, other) -> int:
        if type(other) is not type(self):
            raise TypeError(f"cannot combine {type(self).__name__} with {type(other).__name__}")
        return other._inner

    def checked_add(self, other):
        return self._checked(self._inner + self._same(other))

    def checked_sub(self, other):
        return self._checked(self._inner - self._same(other))

    def checked_mul(self, other):
        return self._checked(_div_toward_zero(self._inner * self._same(other), self.DIV))

    def checked_div(self, other):
        rhs = self._same(other)
        if rhs == 0:
            return None
        return self._checked(_div_toward_zero(self._inner * self.DIV, rhs))

    def saturating_add(self, other):
        return self._saturated(self._inner + self._same(other))

    def saturating_mul(self, other):
        return self._saturated(_div_toward_zero(self._inner * self._same(other), self.DIV))

    def checked_mul_int(self, n):
        """Multiply by an integer, truncating toward zero.

        A non-negative ``n`` is treated as unsigned 128-bit, a negative one as
        signed 128-bit; ``None`` is returned if the result does not fit.
        """
        result = _div_toward_zero(self._inner * n, self.DIV)
        low, high = (0, U128_MAX) if n >= 0 else (I128_MIN, I128_MAX)
        return result if low <= result <= high else None

    def is_negative(self):
        return self._inner < 0

    # Protocols --------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._inner == other._inner  # type: ignore[attr-defined]

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._inner < other._inner  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._inner))

    def __str__(self) -> str:
        sign = "-" if self._inner < 0 else ""
        whole, frac = divmod(abs(self._inner), self.DIV)
        return f"{sign}{whole}.{frac:018d}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class FixedI128(FixedU128):
    """Signed fixed-point number with 18 decimal places, stored as a 128-bit integer."""

    __slots__ = ()

    _MIN = I128_MIN
    _MAX = I128_MAX


@dataclass(frozen=True, order=True)
class Permill:
    """A ratio in parts per million, between zero and one inclusive."""

    parts: int = 0

    ACCURACY = 1_000_000

    def __post_init__(self) -> None:
        if not 0 <= self.parts <= self.ACCURACY:
            raise ValueError(f"{self.parts} parts per million is out of range")

    @classmethod
    def from_parts(cls, parts):
        return cls(_clamp(parts, 0, cls.ACCURACY))

    @classmethod
    def from_percent(cls, percent):
        return cls(_clamp(percent, 0, 100) * (cls.ACCURACY // 100))

    @classmethod
    def from_fraction(cls, x):
        if math.isnan(x):
            return cls.zero()
        if math.isinf(x):
            return cls.one() if x > 0 else cls.zero()
        return cls.from_parts(int(x * cls.ACCURACY))

    @classmethod
    def zero(cls):
        return cls(0)

    @classmethod
    def one(cls):
        return cls(cls.ACCURACY)

    def mul_int(self, n):
        """Multiply a non-negative integer by this ratio, rounding half up."""
        if n < 0:
            raise ValueError("only non-negative integers can be scaled by a Permill")
        return (n * self.parts + self.ACCURACY // 2) // self.ACCURACY

    def __mul__(self, n: int) -> int:
        if not isinstance(n, int):
            return NotImplemented
        return self.mul_int(n)

    __rmul__ = __mul__

    def to_fixed(self):
        return FixedU128.saturating_from_rational(self.parts, self.ACCURACY)


def fixed_i128_from_fixed_u128(f):
    """Convert a ``FixedU128`` to a ``FixedI128``, saturating at the signed maximum."""
    return FixedI128(min(f.inner, I128_MAX))


def fixed_i128_mul_signum(f, signum):
    """Multiply the raw value of ``f`` by ``signum``, saturating."""
    return FixedI128(_clamp(f.inner * signum, I128_MIN, I128_MAX))


def fixed_i128_from_u128(u):
    """Wrap an unsigned raw value as a ``FixedI128``, saturating at the signed maximum."""
    return FixedI128(_clamp(u, 0, I128_MAX))


def u128_from_fixed_i128(f):
    """Return the raw value of ``f`` as an unsigned integer; zero if ``f`` is negative."""
    if f.is_negative():
        return 0
    return f.inner