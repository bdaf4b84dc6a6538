import pytest

from laminar_synth.fixed import FixedU128, Permill
from laminar_synth.synthetic_tokens import (
    CollateralRatioUpdated,
    ExtremeRatioUpdated,
    LiquidationRatioUpdated,
    Position,
    SyntheticTokens,
)
from laminar_synth.traits import BadOrigin
from laminar_synth.types import CurrencyId

UPDATE_ORIGIN = 0
ALICE = 0
BOB = 1

DEFAULT_EXTREME = Permill.from_percent(1)
DEFAULT_LIQUIDATION = Permill.from_percent(5)
DEFAULT_COLLATERAL = Permill.from_percent(10)


@pytest.fixture
def tokens():
    return SyntheticTokens(
        [CurrencyId.FEUR],
        DEFAULT_EXTREME,
        DEFAULT_LIQUIDATION,
        DEFAULT_COLLATERAL,
        UPDATE_ORIGIN,
    )


def plus_one(ratio):
    return ratio.saturating_add(FixedU128.saturating_from_rational(1, 1))


def test_root_set_extreme_ratio(tokens):
    assert tokens.ratios(CurrencyId.FEUR).extreme is None
    ratio = Permill.from_percent(1)
    tokens.set_extreme_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).extreme == ratio
    assert ExtremeRatioUpdated(CurrencyId.FEUR, ratio) in tokens.events


def test_non_root_set_extreme_ratio_fails(tokens):
    ratio = Permill.from_percent(1)
    with pytest.raises(BadOrigin):
        tokens.set_extreme_ratio(BOB, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).extreme is None
    assert tokens.events == []
    tokens.set_extreme_ratio(ALICE, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).extreme == ratio


def test_root_set_liquidation_ratio(tokens):
    assert tokens.ratios(CurrencyId.FEUR).liquidation is None
    ratio = Permill.from_percent(1)
    tokens.set_liquidation_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).liquidation == ratio
    assert LiquidationRatioUpdated(CurrencyId.FEUR, ratio) in tokens.events


def test_non_root_set_liquidation_ratio_fails(tokens):
    ratio = Permill.from_percent(1)
    with pytest.raises(BadOrigin):
        tokens.set_liquidation_ratio(BOB, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).liquidation is None
    tokens.set_liquidation_ratio(ALICE, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).liquidation == ratio


def test_root_set_collateral_ratio(tokens):
    assert tokens.ratios(CurrencyId.FEUR).collateral is None
    ratio = Permill.from_percent(1)
    tokens.set_collateral_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).collateral == ratio
    assert CollateralRatioUpdated(CurrencyId.FEUR, ratio) in tokens.events


def test_non_root_set_collateral_ratio_fails(tokens):
    ratio = Permill.from_percent(1)
    with pytest.raises(BadOrigin):
        tokens.set_collateral_ratio(BOB, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).collateral is None
    tokens.set_collateral_ratio(ALICE, CurrencyId.FEUR, ratio)
    assert tokens.ratios(CurrencyId.FEUR).collateral == ratio


def test_setting_one_ratio_keeps_others(tokens):
    tokens.set_extreme_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, Permill.from_percent(2))
    tokens.set_collateral_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, Permill.from_percent(20))
    ratios = tokens.ratios(CurrencyId.FEUR)
    assert ratios.extreme == Permill.from_percent(2)
    assert ratios.liquidation is None
    assert ratios.collateral == Permill.from_percent(20)


def test_liquidation_ratio_or_default(tokens):
    assert tokens.liquidation_ratio_or_default(CurrencyId.FEUR) == DEFAULT_LIQUIDATION
    ratio = Permill.from_percent(1)
    tokens.set_liquidation_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, ratio)
    assert tokens.liquidation_ratio_or_default(CurrencyId.FEUR) == ratio


def test_extreme_ratio_or_default(tokens):
    assert tokens.extreme_ratio_or_default(CurrencyId.FEUR) == DEFAULT_EXTREME
    ratio = Permill.from_percent(1)
    tokens.set_extreme_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, ratio)
    assert tokens.extreme_ratio_or_default(CurrencyId.FEUR) == ratio


def test_collateral_ratio_or_default(tokens):
    assert tokens.collateral_ratio_or_default(CurrencyId.FEUR) == DEFAULT_COLLATERAL
    ratio = Permill.from_percent(1)
    tokens.set_collateral_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, ratio)
    assert tokens.collateral_ratio_or_default(CurrencyId.FEUR) == ratio


def test_no_incentive_if_collateral_less_than_synthetic_value(tokens):
    ratio = FixedU128.saturating_from_rational(1, 2)
    assert tokens.incentive_ratio(CurrencyId.FEUR, ratio) == FixedU128.from_inner(0)


def test_no_incentive_if_equal_or_above_liquidation_ratio(tokens):
    assert tokens.incentive_ratio(
        CurrencyId.FEUR, plus_one(DEFAULT_LIQUIDATION.to_fixed())
    ) == FixedU128.from_inner(0)

    ratio = FixedU128.saturating_from_rational(11, 100)
    assert ratio > tokens.liquidation_ratio_or_default(CurrencyId.FEUR).to_fixed()
    assert tokens.incentive_ratio(CurrencyId.FEUR, plus_one(ratio)) == FixedU128.from_inner(0)


def test_full_incentive_if_equal_or_below_extreme_ratio(tokens):
    assert tokens.incentive_ratio(
        CurrencyId.FEUR, plus_one(DEFAULT_EXTREME.to_fixed())
    ) == FixedU128.saturating_from_rational(1, 1)

    ratio = FixedU128.from_inner(0)
    assert ratio < tokens.extreme_ratio_or_default(CurrencyId.FEUR).to_fixed()
    assert tokens.incentive_ratio(
        CurrencyId.FEUR, plus_one(ratio)
    ) == FixedU128.saturating_from_rational(1, 1)


def test_proportional_incentive_between_extreme_and_liquidation(tokens):
    tokens.set_extreme_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, Permill.zero())
    tokens.set_liquidation_ratio(UPDATE_ORIGIN, CurrencyId.FEUR, Permill.one())
    ten_percent = FixedU128.saturating_from_rational(1, 10)
    assert tokens.incentive_ratio(
        CurrencyId.FEUR, plus_one(ten_percent)
    ) == FixedU128.saturating_from_rational(9, 10)


def test_should_add_remove_get_position(tokens):
    assert tokens.positions(0, CurrencyId.FEUR) == Position()
    assert tokens.get_position(0, CurrencyId.FEUR) == (0, 0)

    tokens.add_position(0, CurrencyId.FEUR, 1, 2)
    assert tokens.positions(0, CurrencyId.FEUR) == Position(collateral=1, synthetic=2)
    assert tokens.get_position(0, CurrencyId.FEUR) == (1, 2)

    tokens.remove_position(0, CurrencyId.FEUR, 1, 1)
    assert tokens.positions(0, CurrencyId.FEUR) == Position(collateral=0, synthetic=1)
    assert tokens.get_position(0, CurrencyId.FEUR) == (0, 1)

    tokens.remove_position(0, CurrencyId.FEUR, 1, 1)
    assert tokens.positions(0, CurrencyId.FEUR) == Position()
    assert tokens.get_position(0, CurrencyId.FEUR) == (0, 0)


def test_positions_are_per_pool(tokens):
    tokens.add_position(0, CurrencyId.FEUR, 5, 6)
    assert tokens.get_position(1, CurrencyId.FEUR) == (0, 0)
    assert tokens.get_position(0, CurrencyId.FJPY) == (0, 0)


def test_can_remove_only_without_synthetic(tokens):
    assert tokens.can_remove(0) is True
    tokens.add_position(0, CurrencyId.FEUR, 10, 0)
    assert tokens.can_remove(0) is True
    tokens.add_position(0, CurrencyId.FEUR, 0, 3)
    assert tokens.can_remove(0) is False
    assert tokens.can_remove(1) is True
    tokens.remove_position(0, CurrencyId.FEUR, 0, 3)
    assert tokens.can_remove(0) is True


def test_account_id_is_derived_from_module_id(tokens):
    account = tokens.account_id()
    assert account.startswith(b"modllami/stk")
    assert len(account) == 32
    assert account == tokens.account_id()