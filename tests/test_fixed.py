import math

import pytest

from laminar_synth.fixed import (
    I128_MAX,
    I128_MIN,
    U128_MAX,
    FixedI128,
    FixedU128,
    Permill,
    fixed_i128_from_fixed_u128,
    fixed_i128_from_u128,
    fixed_i128_mul_signum,
    u128_from_fixed_i128,
)


def test_one_is_div():
    assert FixedU128.one() == FixedU128.from_inner(FixedU128.DIV)


@pytest.mark.parametrize("inner", [0, 1, 12345, U128_MAX])
def test_from_inner_round_trip(inner):
    assert FixedU128.from_inner(inner).inner == inner


@pytest.mark.parametrize("inner", [-1, U128_MAX + 1])
def test_unsigned_out_of_range(inner):
    with pytest.raises(OverflowError):
        FixedU128.from_inner(inner)


def test_signed_range():
    assert FixedI128.min_value().inner == I128_MIN
    assert FixedI128.max_value().inner == I128_MAX
    with pytest.raises(OverflowError):
        FixedI128.from_inner(I128_MAX + 1)


@pytest.mark.parametrize("n", [0, 1, 3, 1_000_000])
def test_integer_matches_rational(n):
    assert FixedU128.saturating_from_integer(n) == FixedU128.saturating_from_rational(n, 1)


def test_rational_zero_denominator():
    assert FixedU128.checked_from_rational(1, 0) is None
    assert FixedU128.saturating_from_rational(1, 0) == FixedU128.max_value()
    assert FixedI128.saturating_from_rational(-1, 0) == FixedI128.min_value()


def test_unsigned_negative_rational():
    assert FixedU128.checked_from_rational(-1, 1) is None
    assert FixedU128.saturating_from_rational(-1, 1) == FixedU128.zero()


def test_signed_rational_symmetry():
    positive = FixedI128.checked_from_rational(1, 3)
    negative = FixedI128.checked_from_rational(-1, 3)
    assert negative == FixedI128.from_inner(-positive.inner)
    assert negative.is_negative()
    assert not positive.is_negative()


def test_rational_truncates():
    third = FixedU128.checked_from_rational(1, 3)
    assert third.checked_add(third).checked_add(third) < FixedU128.one()


def test_from_fraction():
    assert FixedU128.from_fraction(0.01) == FixedU128.saturating_from_rational(1, 100)
    assert FixedU128.from_fraction(-1.0) == FixedU128.zero()
    assert FixedU128.from_fraction(math.nan) == FixedU128.zero()
    assert FixedU128.from_fraction(math.inf) == FixedU128.max_value()


def test_add_sub_round_trip():
    a = FixedU128.saturating_from_rational(7, 3)
    b = FixedU128.saturating_from_rational(2, 5)
    assert a.checked_add(b).checked_sub(b) == a


def test_add_sub_overflow():
    assert FixedU128.max_value().checked_add(FixedU128.one()) is None
    assert FixedU128.zero().checked_sub(FixedU128.one()) is None
    assert FixedU128.max_value().saturating_add(FixedU128.one()) == FixedU128.max_value()


def test_mul_div():
    x = FixedU128.saturating_from_rational(31, 10)
    assert x.checked_mul(FixedU128.one()) == x
    assert x.checked_div(x) == FixedU128.one()
    assert x.checked_div(FixedU128.zero()) is None
    assert FixedU128.max_value().checked_mul(x) is None
    assert FixedU128.max_value().saturating_mul(x) == FixedU128.max_value()


@pytest.mark.parametrize("n", [0, 7, 1_000_000, U128_MAX])
def test_mul_int_by_one(n):
    assert FixedU128.one().checked_mul_int(n) == n


def test_mul_int_overflow():
    assert FixedU128.saturating_from_integer(2).checked_mul_int(U128_MAX) is None
    assert FixedI128.saturating_from_integer(-1).checked_mul_int(5) is None


def test_ordering():
    assert FixedU128.zero() < FixedU128.one() < FixedU128.max_value()


def test_mixing_types_rejected():
    with pytest.raises(TypeError):
        FixedU128.one().checked_add(FixedI128.one())


def test_permill_bounds():
    assert Permill.from_percent(100) == Permill.one()
    assert Permill.from_percent(150) == Permill.one()
    assert Permill.from_parts(2_000_000) == Permill.one()
    assert Permill.from_fraction(0.1) == Permill.from_percent(10)
    assert Permill.from_fraction(-1.0) == Permill.zero()
    with pytest.raises(ValueError):
        Permill(2_000_000)


@pytest.mark.parametrize("n", [1, 99, 330_033, 10**20])
def test_permill_mul_int_identity(n):
    assert Permill.one().mul_int(n) == n
    assert Permill.one() * n == n
    assert Permill.zero().mul_int(n) == 0


def test_permill_rounds_half_up():
    assert Permill.from_percent(50).mul_int(3) == 2


def test_permill_to_fixed():
    assert Permill.one().to_fixed() == FixedU128.one()
    assert Permill.from_percent(10).to_fixed() == FixedU128.saturating_from_rational(1, 10)


def test_fixed_i128_from_fixed_u128():
    assert fixed_i128_from_fixed_u128(FixedU128.max_value()) == FixedI128.max_value()
    assert fixed_i128_from_fixed_u128(FixedU128.from_inner(42)) == FixedI128.from_inner(42)


def test_fixed_i128_mul_signum():
    f = FixedI128.saturating_from_rational(3, 2)
    assert fixed_i128_mul_signum(f, -1) == FixedI128.from_inner(-f.inner)
    assert fixed_i128_mul_signum(f, 1) == f
    assert fixed_i128_mul_signum(FixedI128.min_value(), -1) == FixedI128.max_value()


def test_fixed_i128_from_u128():
    assert fixed_i128_from_u128(U128_MAX) == FixedI128.max_value()
    assert fixed_i128_from_u128(99) == FixedI128.from_inner(99)


def test_u128_from_fixed_i128():
    assert u128_from_fixed_i128(FixedI128.saturating_from_integer(-5)) == 0
    assert u128_from_fixed_i128(FixedI128.from_inner(77)) == 77