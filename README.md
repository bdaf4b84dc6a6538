# laminar_synth

A self-contained model of a synthetic asset protocol. Traders lock collateral
(for example `AUSD`) to mint synthetic tokens (for example `FEUR`) against a
liquidity pool. Later they redeem the tokens for collateral. Anyone holding the
synthetic token can liquidate a position that is no longer safely
collateralised. The pool owner can add collateral and withdraw the surplus.

All amounts are integers. Prices and ratios are exact 18-decimal fixed-point
numbers (`FixedU128`, `FixedI128`) and parts-per-million ratios (`Permill`).
Arithmetic on them is checked or saturating and truncates toward zero.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `laminar_synth.fixed`: `FixedU128` and `FixedI128` with checked and
  saturating arithmetic (`checked_add`, `checked_div`, `checked_mul_int`,
  `saturating_from_rational`, ...). `Permill` holds a ratio between zero and
  one and provides `mul_int`, which rounds half up, and `to_fixed`. The module
  also has the helpers `fixed_i128_from_fixed_u128`, `fixed_i128_mul_signum`,
  `fixed_i128_from_u128` and `u128_from_fixed_i128`.
- `laminar_synth.types`: `CurrencyId` and `DataProviderId`. `Leverage` has
  `is_long`, `is_short`, `factor` and a one-byte `encode`/`decode`. The
  `Leverages` 16-bit set has `all`, `none`, `contains` and a two-byte
  little-endian `encode`/`decode`; decoding problems raise `DecodeError`. The
  module also defines `TradingPair`, `AccumulateConfig`, `IdentityInfo`,
  `SwapRate` and `TimestampedValue`.
- `laminar_synth.traits`: the `DispatchError` and `BadOrigin` exceptions,
  `OpenPositionError`, and abstract interfaces for liquidity pools
  (`LiquidityPools`, `SyntheticProtocolLiquidityPools`,
  `MarginProtocolLiquidityPools`, ...) and for a `PriceProvider`.
- `laminar_synth.weights`: `synthetic_tokens_weight(call)` and
  `synthetic_protocol_weight(call)` return the benchmarked weight of a call,
  given by name. An unknown name raises `ValueError`. `RuntimeDbWeight` gives
  the cost of database reads and writes.
- `laminar_synth.synthetic_tokens`: `SyntheticTokens` holds the per-currency
  ratio settings (`set_extreme_ratio`, `set_liquidation_ratio`,
  `set_collateral_ratio`). Only the configured update origin may change them;
  any other caller gets `BadOrigin`. It also holds pool positions
  (`add_position`, `remove_position`, `get_position`) and the liquidation
  `incentive_ratio` curve.
- `laminar_synth.memory`: in-memory `Tokens` balances and per-currency
  `Currency` views, which raise `BalanceTooLow` on a short balance. It also
  provides a `PriceTable` and `SimpleLiquidityPools`. In those pools, liquidity
  is the collateral held under the pool id, the spread is proportional to the
  currency price, and one owner and one mint switch apply to every pool.
- `laminar_synth.synthetic_protocol`: `SyntheticProtocol` with `mint`,
  `redeem`, `liquidate`, `add_collateral`, `withdraw_collateral`,
  `collateral_ratio`, `is_safe_collateral_ratio` and `pool_state`.

## Example

```python
from laminar_synth.fixed import FixedU128, Permill
from laminar_synth.types import CurrencyId
from laminar_synth.memory import Tokens, Currency, PriceTable, SimpleLiquidityPools
from laminar_synth.synthetic_tokens import SyntheticTokens
from laminar_synth.synthetic_protocol import SyntheticProtocol

ALICE, POOL = 0, 100

tokens = Tokens()
collateral = Currency(tokens, CurrencyId.AUSD)
collateral.deposit(ALICE, 1_000_000)
collateral.deposit(POOL, 1_000_000)

prices = PriceTable()
prices.set_price(CurrencyId.AUSD, FixedU128.saturating_from_integer(1))
prices.set_price(CurrencyId.FEUR, FixedU128.saturating_from_integer(3))

pools = SimpleLiquidityPools(
    collateral, prices, owner=ALICE, pool_ids=[POOL],
    spread=FixedU128.from_fraction(0.01),
    additional_ratio=Permill.from_percent(10),
    allowed=True,
)
synthetic_tokens = SyntheticTokens(
    [CurrencyId.FEUR],
    Permill.from_percent(1),
    Permill.from_percent(5),
    Permill.from_percent(10),
    update_origin=1,
)
protocol = SyntheticProtocol(tokens, synthetic_tokens, CurrencyId.AUSD, prices, pools)

minted = protocol.mint(ALICE, POOL, CurrencyId.FEUR, 1_000_000,
                       FixedU128.saturating_from_integer(4))
print(minted)                                                # 330033
print(synthetic_tokens.get_position(POOL, CurrencyId.FEUR))  # (1089109, 330033)
print(protocol.pool_state(POOL, CurrencyId.FEUR))
```

## Errors and events

When a protocol call fails, it raises a `DispatchError`. The usual cases are:

- `SyntheticProtocolError`, whose `kind` member is one of the `Error` values, such as `Error.ASK_PRICE_TOO_HIGH` or `Error.STILL_IN_SAFE_POSITION`.
- `BalanceTooLow`, raised when an account cannot cover an amount.

A failed call restores the balances in `Tokens`, the positions in `SyntheticTokens` and the protocol's event list to what they were before the call. Each completed call appends an event to `SyntheticProtocol.events`: `Minted`, `Redeemed`, `Liquidated`, `CollateralAdded` or `CollateralWithdrew`. Ratio updates append `ExtremeRatioUpdated`, `LiquidationRatioUpdated` or `CollateralRatioUpdated` to `SyntheticTokens.events`.

## What this package does not do

- It is a library only. It has no command-line program, no network service and no RPC endpoint. `pool_state` is an ordinary method call.
- All state lives in memory in the objects you create, and nothing is persisted.
- For the margin protocol it defines interfaces only (`MarginProtocolLiquidityPools` and related classes). It has no margin trading implementation.
- It has no price oracle. Prices are whatever you set in a `PriceTable`, or whatever your own `PriceProvider` returns.