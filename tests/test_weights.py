import pytest

from laminar_synth.weights import (
    ROCKS_DB_WEIGHT,
    WEIGHT_MAX,
    RuntimeDbWeight,
    synthetic_protocol_weight,
    synthetic_tokens_weight,
)


def test_rocks_db_costs():
    assert ROCKS_DB_WEIGHT.reads(1) == 25_000_000
    assert ROCKS_DB_WEIGHT.writes(1) == 100_000_000


def test_reads_and_writes_scale():
    db = RuntimeDbWeight(read=7, write=11)
    assert db.reads(0) == 0
    assert db.writes(0) == 0
    assert db.reads(3) == 21
    assert db.writes(2) == 22


def test_reads_and_writes_saturate():
    db = RuntimeDbWeight(read=WEIGHT_MAX, write=WEIGHT_MAX)
    assert db.reads(2) == WEIGHT_MAX
    assert db.writes(5) == WEIGHT_MAX


def test_redeem_differs_from_mint_only_by_base():
    assert synthetic_protocol_weight("redeem") - synthetic_protocol_weight("mint") == (
        661_365_000 - 506_992_000
    )


def test_token_ratio_setters_share_db_costs():
    extreme = synthetic_tokens_weight("set_extreme_ratio")
    liquidation = synthetic_tokens_weight("set_liquidation_ratio")
    collateral = synthetic_tokens_weight("set_collateral_ratio")
    assert liquidation - extreme == 57_010_000 - 56_349_000
    assert collateral - extreme == 66_234_000 - 56_349_000


def test_weights_exceed_base():
    assert synthetic_protocol_weight("add_collateral") > 271_474_000
    assert synthetic_protocol_weight("withdraw_collateral") > 411_939_000
    assert synthetic_protocol_weight("liquidate") > 567_526_000


def test_protocol_ordering():
    assert synthetic_protocol_weight("add_collateral") < synthetic_protocol_weight("withdraw_collateral")
    assert synthetic_protocol_weight("liquidate") < synthetic_protocol_weight("mint")


@pytest.mark.parametrize("call", ["mint", "unknown", ""])
def test_unknown_token_call_raises(call):
    with pytest.raises(ValueError):
        synthetic_tokens_weight(call)


def test_unknown_protocol_call_raises():
    with pytest.raises(ValueError):
        synthetic_protocol_weight("set_extreme_ratio")