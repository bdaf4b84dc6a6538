"""Minting, redeeming and liquidating synthetic currencies against pool collateral."""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Iterator, List, Optional, Tuple

from laminar_synth.fixed import FixedU128, Permill
from laminar_synth.memory import Tokens
from laminar_synth.synthetic_tokens import SyntheticTokens
from laminar_synth.traits import DispatchError, PriceProvider, SyntheticProtocolLiquidityPools
from laminar_synth.types import CurrencyId

Price = FixedU128


class Error(Enum):
    """Reasons the synthetic protocol rejects a call."""

    INSUFFICIENT_LIQUIDITY_IN_POOL = "InsufficientLiquidityInPool"
    CANNOT_MINT_IN_POOL = "CannotMintInPool"
    ASK_PRICE_TOO_HIGH = "AskPriceTooHigh"
    BID_PRICE_TOO_LOW = "BidPriceTooLow"
    NUM_OVERFLOW = "NumOverflow"
    NO_PRICE = "NoPrice"
    NEGATIVE_ADDITIONAL_COLLATERAL_AMOUNT = "NegativeAdditionalCollateralAmount"
    INSUFFICIENT_SYNTHETIC_IN_POSITION = "InsufficientSyntheticInPosition"
    INSUFFICIENT_COLLATERAL_IN_POSITION = "InsufficientCollateralInPosition"
    INSUFFICIENT_LOCKED_COLLATERAL = "InsufficientLockedCollateral"
    STILL_IN_SAFE_POSITION = "StillInSafePosition"
    NO_PERMISSION = "NoPermission"
    NO_BID_SPREAD = "NoBidSpread"
    NO_ASK_SPREAD = "NoAskSpread"
    NOT_VALID_SYNTHETIC_CURRENCY_ID = "NotValidSyntheticCurrencyId"


class SyntheticProtocolError(DispatchError):
    """A synthetic protocol call failed for the reason given by ``kind``."""

    def __init__(self, kind: Error) -> None:
        super().__init__(kind.value)
        self.kind = kind


@dataclass(frozen=True)
class Minted:
    who: Hashable
    currency_id: CurrencyId
    pool_id: int
    collateral_amount: int
    synthetic_amount: int


@dataclass(frozen=True)
class Redeemed:
    who: Hashable
    currency_id: CurrencyId
    pool_id: int
    collateral_amount: int
    synthetic_amount: int


@dataclass(frozen=True)
class Liquidated:
    who: Hashable
    currency_id: CurrencyId
    pool_id: int
    collateral_amount: int
    synthetic_amount: int


@dataclass(frozen=True)
class CollateralAdded:
    who: Hashable
    currency_id: CurrencyId
    pool_id: int
    collateral_amount: int


@dataclass(frozen=True)
class CollateralWithdrew:
    who: Hashable
    currency_id: CurrencyId
    pool_id: int
    collateral_amount: int


@dataclass(frozen=True)
class SyntheticPoolState:
    collateral_ratio: FixedU128
    is_safe: bool


def _fail(kind: Error) -> SyntheticProtocolError:
    return SyntheticProtocolError(kind)


def _require(value, kind: Error):
    if value is None:
        raise _fail(kind)
    return value


class SyntheticProtocol:
    """Lets traders exchange collateral for synthetic currency backed by liquidity pools."""

    def __init__(self, tokens, synthetic_tokens, collateral_currency_id, price_provider, liquidity_pools):
        self.tokens: Tokens = tokens
        self.synthetic_tokens: SyntheticTokens = synthetic_tokens
        self.collateral_currency_id: CurrencyId = collateral_currency_id
        self.price_provider: PriceProvider = price_provider
        self.liquidity_pools: SyntheticProtocolLiquidityPools = liquidity_pools
        self.events: List[object] = []

    # Transactions -------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        saved = [
            (obj, copy.deepcopy(obj.__dict__)) for obj in (self.tokens, self.synthetic_tokens)
        ]
        saved_events = list(self.events)
        try:
            yield
        except BaseException:
            for obj, state in saved:
                obj.__dict__.clear()
                obj.__dict__.update(state)
            self.events[:] = saved_events
            raise

    # Calls --------------------------------------------------------------------

    def mint(self, who, pool_id, currency_id, collateral_amount, max_price):
        """Lock collateral and mint synthetic; returns the synthetic amount."""
        with self._transaction():
            synthetic = self._do_mint(who, pool_id, currency_id, collateral_amount, max_price)
            self.events.append(Minted(who, currency_id, pool_id, collateral_amount, synthetic))
        return synthetic

    def redeem(self, who, pool_id, currency_id, synthetic_amount, min_price):
        """Burn synthetic and release collateral; returns the collateral amount."""
        with self._transaction():
            collateral = self._do_redeem(who, pool_id, currency_id, synthetic_amount, min_price)
            self.events.append(Redeemed(who, currency_id, pool_id, collateral, synthetic_amount))
        return collateral

    def liquidate(self, who, pool_id, currency_id, synthetic_amount):
        """Liquidate an unsafe position; returns the collateral paid without incentive."""
        with self._transaction():
            collateral = self._do_liquidate(who, pool_id, currency_id, synthetic_amount)
            self.events.append(Liquidated(who, currency_id, pool_id, collateral, synthetic_amount))
        return collateral

    def add_collateral(self, who, pool_id, currency_id, collateral_amount):
        """Add collateral from ``who`` to the position of ``currency_id`` in ``pool_id``."""
        with self._transaction():
            self._do_add_collateral(who, pool_id, currency_id, collateral_amount)
            self.events.append(CollateralAdded(who, currency_id, pool_id, collateral_amount))

    def withdraw_collateral(self, who, pool_id, currency_id):
        """Withdraw all collateral beyond what is required; only the pool owner may call."""
        with self._transaction():
            amount = self._do_withdraw_collateral(who, pool_id, currency_id)
            self.events.append(CollateralWithdrew(who, currency_id, pool_id, amount))
        return amount

    # Implementation -----------------------------------------------------------

    def _ensure_synthetic(self, currency_id: CurrencyId) -> None:
        if currency_id not in self.synthetic_tokens.synthetic_currency_ids:
            raise _fail(Error.NOT_VALID_SYNTHETIC_CURRENCY_ID)

    def _price(self, currency_id: CurrencyId) -> Price:
        return _require(
            self.price_provider.get_price(currency_id, self.collateral_currency_id), Error.NO_PRICE
        )

    @property
    def _module_account(self):
        return self.synthetic_tokens.account_id()

    def _transfer_collateral(self, source, dest, amount: int) -> None:
        self.tokens.transfer(self.collateral_currency_id, source, dest, amount)

    def _do_mint(self, who, pool_id, currency_id, collateral, max_price) -> int:
        self._ensure_synthetic(currency_id)
        if not self.liquidity_pools.can_mint(pool_id, currency_id):
            raise _fail(Error.CANNOT_MINT_IN_POOL)
        price = self._price(currency_id)
        ask_price = self._ask_price(pool_id, currency_id, price, max_price)

        quotient = Price.from_inner(collateral).checked_div(ask_price)
        synthetic = _require(quotient, Error.NUM_OVERFLOW).inner
        synthetic_value = _require(price.checked_mul_int(synthetic), Error.NUM_OVERFLOW)
        additional = self._additional_collateral_amount(pool_id, currency_id, collateral, synthetic_value)

        self._transfer_collateral(who, self._module_account, collateral)
        try:
            self.liquidity_pools.withdraw_liquidity(self._module_account, pool_id, additional)
        except DispatchError:
            raise _fail(Error.INSUFFICIENT_LIQUIDITY_IN_POOL) from None

        self.tokens.deposit(currency_id, who, synthetic)
        self.synthetic_tokens.add_position(pool_id, currency_id, collateral + additional, synthetic)
        return synthetic

    def _do_redeem(self, who, pool_id, currency_id, synthetic, min_price) -> int:
        self._ensure_synthetic(currency_id)
        self.tokens.withdraw(currency_id, who, synthetic)
        price = self._price(currency_id)
        bid_price = self._bid_price(pool_id, currency_id, price, min_price)
        redeemed = _require(bid_price.checked_mul_int(synthetic), Error.NUM_OVERFLOW)
        delta, refund = self._collateral_change_on_remove_position(
            pool_id, currency_id, price, synthetic, redeemed
        )
        try:
            self._transfer_collateral(self._module_account, who, redeemed)
            self.liquidity_pools.deposit_liquidity(self._module_account, pool_id, refund)
        except DispatchError:
            raise _fail(Error.INSUFFICIENT_LOCKED_COLLATERAL) from None
        self.synthetic_tokens.remove_position(pool_id, currency_id, delta, synthetic)
        return redeemed

    def _do_liquidate(self, who, pool_id, currency_id, synthetic) -> int:
        self._ensure_synthetic(currency_id)
        price = self._price(currency_id)
        bid_price = self._bid_price(pool_id, currency_id, price, None)
        collateral = _require(bid_price.checked_mul_int(synthetic), Error.NUM_OVERFLOW)
        delta, refund, incentive = self._collateral_change_on_liquidation(
            pool_id, currency_id, price, synthetic, collateral
        )
        self.tokens.withdraw(currency_id, who, synthetic)
        try:
            self._transfer_collateral(self._module_account, who, collateral + incentive)
            self.liquidity_pools.deposit_liquidity(self._module_account, pool_id, refund)
        except DispatchError:
            raise _fail(Error.INSUFFICIENT_LOCKED_COLLATERAL) from None
        self.synthetic_tokens.remove_position(pool_id, currency_id, delta, synthetic)
        return collateral

    def _do_add_collateral(self, who, pool_id, currency_id, collateral) -> None:
        self._ensure_synthetic(currency_id)
        self.liquidity_pools.deposit_liquidity(who, pool_id, collateral)
        self.liquidity_pools.withdraw_liquidity(self._module_account, pool_id, collateral)
        self.synthetic_tokens.add_position(pool_id, currency_id, collateral, 0)

    def _do_withdraw_collateral(self, who, pool_id, currency_id) -> int:
        self._ensure_synthetic(currency_id)
        if not self.liquidity_pools.is_owner(pool_id, who):
            raise _fail(Error.NO_PERMISSION)
        price = self._price(currency_id)
        delta, refund = self._collateral_change_on_remove_position(pool_id, currency_id, price, 0, 0)
        try:
            self.liquidity_pools.deposit_liquidity(self._module_account, pool_id, refund)
        except DispatchError:
            raise _fail(Error.INSUFFICIENT_LOCKED_COLLATERAL) from None
        self.liquidity_pools.withdraw_liquidity(who, pool_id, refund)
        self.synthetic_tokens.remove_position(pool_id, currency_id, delta, 0)
        return refund

    # Pricing helpers ----------------------------------------------------------

    def _ask_price(self, pool_id, currency_id, price: Price, max_price: Price) -> Price:
        spread = _require(self.liquidity_pools.ask_spread(pool_id, currency_id), Error.NO_ASK_SPREAD)
        ask_price = _require(price.checked_add(spread), Error.NUM_OVERFLOW)
        if ask_price > max_price:
            raise _fail(Error.ASK_PRICE_TOO_HIGH)
        return ask_price

    def _bid_price(self, pool_id, currency_id, price: Price, min_price: Optional[Price]) -> Price:
        spread = _require(self.liquidity_pools.bid_spread(pool_id, currency_id), Error.NO_BID_SPREAD)
        bid_price = price.checked_sub(spread)
        if bid_price is None:
            raise ArithmeticError("bid spread exceeds price")
        if min_price is not None and bid_price < min_price:
            raise _fail(Error.BID_PRICE_TOO_LOW)
        return bid_price

    def _with_additional_collateral(self, pool_id, currency_id, collateral: int) -> int:
        ratio: Permill = self.liquidity_pools.additional_collateral_ratio(pool_id, currency_id)
        total = collateral + ratio.mul_int(collateral)
        if total > 2**128 - 1:
            raise _fail(Error.NUM_OVERFLOW)
        return total

    def _additional_collateral_amount(self, pool_id, currency_id, collateral, synthetic_value) -> int:
        required = self._with_additional_collateral(pool_id, currency_id, synthetic_value)
        if required < collateral:
            raise _fail(Error.NEGATIVE_ADDITIONAL_COLLATERAL_AMOUNT)
        return required - collateral

    def _collateral_change_on_remove_position(
        self, pool_id, currency_id, price: Price, burned: int, redeemed: int
    ) -> Tuple[int, int]:
        collateral_position, synthetic_position = self.synthetic_tokens.get_position(pool_id, currency_id)
        if synthetic_position < burned:
            raise _fail(Error.INSUFFICIENT_SYNTHETIC_IN_POSITION)
        new_value = _require(price.checked_mul_int(synthetic_position - burned), Error.NUM_OVERFLOW)
        required = self._with_additional_collateral(pool_id, currency_id, new_value)

        delta, refund = redeemed, 0
        if required <= collateral_position:
            delta = collateral_position - required
            if delta < redeemed:
                raise _fail(Error.INSUFFICIENT_COLLATERAL_IN_POSITION)
            refund = delta - redeemed
        return delta, refund

    def _collateral_change_on_liquidation(
        self, pool_id, currency_id, price: Price, burned: int, liquidized: int
    ) -> Tuple[int, int, int]:
        collateral_position, synthetic_position = self.synthetic_tokens.get_position(pool_id, currency_id)
        if synthetic_position < burned:
            raise _fail(Error.INSUFFICIENT_SYNTHETIC_IN_POSITION)
        if collateral_position < liquidized:
            raise _fail(Error.INSUFFICIENT_COLLATERAL_IN_POSITION)
        new_synthetic = synthetic_position - burned
        new_collateral = collateral_position - liquidized

        position_value = _require(price.checked_mul_int(synthetic_position), Error.NUM_OVERFLOW)
        if collateral_position <= position_value:
            return liquidized, 0, 0

        current_ratio = FixedU128.checked_from_rational(collateral_position, position_value) or FixedU128.zero()
        if self.is_safe_collateral_ratio(currency_id, current_ratio):
            raise _fail(Error.STILL_IN_SAFE_POSITION)

        new_value = price.checked_mul_int(new_synthetic)
        with_current_ratio = None if new_value is None else current_ratio.checked_mul_int(new_value)
        with_current_ratio = _require(with_current_ratio, Error.NUM_OVERFLOW)

        if new_collateral <= with_current_ratio:
            return liquidized, 0, 0
        available = new_collateral - with_current_ratio
        incentive_ratio = self.synthetic_tokens.incentive_ratio(currency_id, current_ratio)
        incentive = _require(incentive_ratio.checked_mul_int(available), Error.NUM_OVERFLOW)
        refund = available - incentive
        return liquidized + incentive + refund, refund, incentive

    # Queries ------------------------------------------------------------------

    def collateral_ratio(self, pool_id, currency_id):
        """``collateral_position / (synthetic_position * price)``, or ``None`` without a price."""
        collateral_position, synthetic_position = self.synthetic_tokens.get_position(pool_id, currency_id)
        price = self.price_provider.get_price(currency_id, self.collateral_currency_id)
        if price is None:
            return None
        value = price.checked_mul_int(synthetic_position)
        if value is None:
            return None
        return FixedU128.checked_from_rational(collateral_position, value) or FixedU128.zero()

    def is_safe_collateral_ratio(self, currency_id, ratio):
        """A ratio is safe when it exceeds one plus the liquidation ratio."""
        liquidation = self.synthetic_tokens.liquidation_ratio_or_default(currency_id)
        threshold = liquidation.to_fixed().saturating_add(FixedU128.one())
        return ratio > threshold

    def pool_state(self, pool_id, currency_id):
        """Collateral ratio and safety of a pool's position, or ``None`` without a price."""
        ratio = self.collateral_ratio(pool_id, currency_id)
        if ratio is None:
            return None
        return SyntheticPoolState(ratio, self.is_safe_collateral_ratio(currency_id, ratio))