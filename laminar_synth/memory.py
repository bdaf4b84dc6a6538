"""In-memory balances, prices and liquidity pools for running the protocol."""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from laminar_synth.fixed import U128_MAX, FixedU128, Permill
from laminar_synth.traits import DispatchError, PriceProvider, SyntheticProtocolLiquidityPools
from laminar_synth.types import CurrencyId

Price = FixedU128


class BalanceTooLow(DispatchError):
    """The account does not hold enough of the currency."""


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValueError(f"amount must not be negative, got {amount}")


class Tokens:
    """Free balances of many currencies, keyed by account."""

    def __init__(self, endowed: Iterable[Tuple[Hashable, CurrencyId, int]] = ()) -> None:
        self._balances: Dict[Tuple[CurrencyId, Hashable], int] = {}
        self._issuance: Dict[CurrencyId, int] = {}
        for who, currency_id, amount in endowed:
            self.deposit(currency_id, who, amount)

    def free_balance(self, currency_id, who):
        return self._balances.get((currency_id, who), 0)

    def total_issuance(self, currency_id):
        return self._issuance.get(currency_id, 0)

    def _set(self, currency_id: CurrencyId, who: Hashable, balance: int) -> None:
        key = (currency_id, who)
        if balance:
            self._balances[key] = balance
        else:
            self._balances.pop(key, None)

    def deposit(self, currency_id, who, amount):
        """Create ``amount`` of ``currency_id`` in the account of ``who``."""
        _check_amount(amount)
        if amount == 0:
            return
        issuance = self.total_issuance(currency_id) + amount
        if issuance > U128_MAX:
            raise DispatchError("total issuance overflow")
        self._issuance[currency_id] = issuance
        self._set(currency_id, who, self.free_balance(currency_id, who) + amount)

    def withdraw(self, currency_id, who, amount):
        """Destroy ``amount`` of ``currency_id`` held by ``who``."""
        _check_amount(amount)
        if amount == 0:
            return
        balance = self.free_balance(currency_id, who)
        if balance < amount:
            raise BalanceTooLow(f"{who!r} holds {balance}, needs {amount}")
        self._set(currency_id, who, balance - amount)
        self._issuance[currency_id] = self.total_issuance(currency_id) - amount

    def transfer(self, currency_id, source, dest, amount):
        """Move ``amount`` from ``source`` to ``dest``; total issuance is unchanged."""
        _check_amount(amount)
        if amount == 0 or source == dest:
            return
        balance = self.free_balance(currency_id, source)
        if balance < amount:
            raise BalanceTooLow(f"{source!r} holds {balance}, needs {amount}")
        received = self.free_balance(currency_id, dest) + amount
        if received > U128_MAX:
            raise DispatchError("balance overflow")
        self._set(currency_id, source, balance - amount)
        self._set(currency_id, dest, received)


class Currency:
    """A view of one currency within ``Tokens``."""

    def __init__(self, tokens, currency_id):
        self.tokens: Tokens = tokens
        self.currency_id: CurrencyId = currency_id

    def free_balance(self, who):
        return self.tokens.free_balance(self.currency_id, who)

    def total_issuance(self):
        return self.tokens.total_issuance(self.currency_id)

    def deposit(self, who, amount):
        self.tokens.deposit(self.currency_id, who, amount)

    def withdraw(self, who, amount):
        self.tokens.withdraw(self.currency_id, who, amount)

    def transfer(self, source, dest, amount):
        self.tokens.transfer(self.currency_id, source, dest, amount)


class PriceTable(PriceProvider):
    """Prices of currencies against a common unit."""

    def __init__(self, prices: Iterable[Tuple[CurrencyId, Price]] = ()) -> None:
        self._prices: Dict[CurrencyId, Price] = dict(prices)

    def set_price(self, currency_id, price):
        """Set the price of ``currency_id``; ``None`` removes it."""
        if price is None:
            self._prices.pop(currency_id, None)
        else:
            self._prices[currency_id] = price

    def get(self, currency_id):
        return self._prices.get(currency_id)

    def get_price(self, base, quote):
        """Price of ``base`` in ``quote``, or ``None`` if either is unknown or ``quote`` is zero."""
        base_price = self.get(base)
        quote_price = self.get(quote)
        if base_price is None or quote_price is None:
            return None
        return base_price.checked_div(quote_price)


class SimpleLiquidityPools(SyntheticProtocolLiquidityPools):
    """Pools whose liquidity is the collateral balance held under each pool id.

    Every pool has one owner, a spread proportional to the currency price, one
    additional collateral ratio and one switch that allows minting.
    """

    def __init__(
        self,
        collateral,
        prices,
        owner,
        pool_ids,
        spread=None,
        additional_ratio=None,
        allowed=True,
    ):
        self.collateral: Currency = collateral
        self.prices: PriceTable = prices
        self.owner = owner
        self.pool_ids: List[int] = list(pool_ids)
        self.spread: Price = Price.zero() if spread is None else spread
        self.additional_ratio: Permill = Permill.zero() if additional_ratio is None else additional_ratio
        self.allowed: bool = allowed

    def all(self):
        return list(self.pool_ids)

    def is_owner(self, pool_id, who):
        return who == self.owner

    def pool_exists(self, pool_id):
        return pool_id in self.pool_ids

    def liquidity(self, pool_id):
        return self.collateral.free_balance(pool_id)

    def deposit_liquidity(self, source, pool_id, amount):
        self.collateral.transfer(source, pool_id, amount)

    def withdraw_liquidity(self, dest, pool_id, amount):
        self.collateral.transfer(pool_id, dest, amount)

    def _spread_for(self, currency_id: CurrencyId) -> Optional[Price]:
        price = self.prices.get(currency_id)
        if price is None:
            return None
        return self.spread.saturating_mul(price)

    def bid_spread(self, pool_id, currency_id):
        return self._spread_for(currency_id)

    def ask_spread(self, pool_id, currency_id):
        return self._spread_for(currency_id)

    def additional_collateral_ratio(self, pool_id, currency_id):
        return self.additional_ratio

    def can_mint(self, pool_id, currency_id):
        return self.allowed