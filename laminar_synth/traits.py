"""Errors and the interfaces that liquidity pools and price sources provide."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from laminar_synth.fixed import FixedI128, FixedU128, Permill
from laminar_synth.types import CurrencyId, Leverage, TradingPair


class DispatchError(Exception):
    """A call was rejected; the state it acted on is left unchanged."""


class BadOrigin(DispatchError):
    """The caller is not allowed to make this call."""


class OpenPositionError(DispatchError):
    """A position cannot be opened in a pool."""

    class Kind(Enum):
        LEVERAGE_NOT_ALLOWED_IN_POOL = "LeverageNotAllowedInPool"
        TRADING_PAIR_NOT_ENABLED = "TradingPairNotEnabled"
        TRADING_PAIR_NOT_ENABLED_IN_POOL = "TradingPairNotEnabledInPool"
        BELOW_MIN_LEVERAGED_AMOUNT = "BelowMinLeveragedAmount"

    def __init__(self, kind: OpenPositionError.Kind) -> None:
        super().__init__(kind.value)
        self.kind = kind


class LiquidityPools(ABC):
    """Basic operations of liquidity pools."""

    @abstractmethod
    def all(self) -> List[int]:
        """Return the ids of all liquidity pools."""

    @abstractmethod
    def is_owner(self, pool_id: int, who) -> bool:
        """Return ``True`` if ``who`` owns ``pool_id``."""

    @abstractmethod
    def pool_exists(self, pool_id: int) -> bool:
        """Return ``True`` if ``pool_id`` exists."""

    @abstractmethod
    def liquidity(self, pool_id: int) -> int:
        """Return the liquidity balance of ``pool_id``."""

    @abstractmethod
    def deposit_liquidity(self, source, pool_id: int, amount: int) -> None:
        """Move ``amount`` from ``source`` into ``pool_id``; raise ``DispatchError`` on failure."""

    @abstractmethod
    def withdraw_liquidity(self, dest, pool_id: int, amount: int) -> None:
        """Move ``amount`` from ``pool_id`` to ``dest``; raise ``DispatchError`` on failure."""


class BaseLiquidityPoolManager(ABC):
    """Checks a pool manager makes before a pool changes."""

    @abstractmethod
    def can_remove(self, pool_id: int) -> bool:
        """Return ``True`` if the pool can be removed."""

    @abstractmethod
    def ensure_can_withdraw(self, pool_id: int, amount: int) -> None:
        """Raise ``DispatchError`` unless ``amount`` could be withdrawn from the pool."""


class SyntheticProtocolLiquidityPools(LiquidityPools):
    """Liquidity pools as the synthetic protocol sees them."""

    @abstractmethod
    def bid_spread(self, pool_id: int, currency_id: CurrencyId) -> Optional[FixedU128]:
        """Return the bid spread, or ``None`` if the pool owner has not set one."""

    @abstractmethod
    def ask_spread(self, pool_id: int, currency_id: CurrencyId) -> Optional[FixedU128]:
        """Return the ask spread, or ``None`` if the pool owner has not set one."""

    @abstractmethod
    def additional_collateral_ratio(self, pool_id: int, currency_id: CurrencyId) -> Permill:
        """Return the additional collateral ratio of ``currency_id``."""

    @abstractmethod
    def can_mint(self, pool_id: int, currency_id: CurrencyId) -> bool:
        """Return ``True`` if ``currency_id`` can be minted in ``pool_id``."""


class MarginProtocolLiquidityPools(LiquidityPools):
    """Liquidity pools as the margin protocol sees them."""

    @abstractmethod
    def bid_spread(self, pool_id: int, pair: TradingPair) -> Optional[FixedU128]:
        """Return the bid spread of ``pair``, or ``None`` if not set."""

    @abstractmethod
    def ask_spread(self, pool_id: int, pair: TradingPair) -> Optional[FixedU128]:
        """Return the ask spread of ``pair``, or ``None`` if not set."""

    @abstractmethod
    def swap_rate(self, pool_id: int, pair: TradingPair, is_long: bool) -> FixedI128:
        """Return the swap rate of ``pair``."""

    @abstractmethod
    def accumulated_swap_rate(self, pool_id: int, pair: TradingPair, is_long: bool) -> FixedI128:
        """Return the swap rate accumulated so far, in USD."""

    @abstractmethod
    def ensure_can_open_position(
        self, pool_id: int, pair: TradingPair, leverage: Leverage, leveraged_amount: int
    ) -> None:
        """Raise ``OpenPositionError`` unless the position can be opened."""


class MarginProtocolLiquidityPoolsManager(ABC):
    @abstractmethod
    def ensure_can_enable_trading_pair(self, pool_id: int, pair: TradingPair) -> None:
        """Raise ``DispatchError`` unless ``pair`` can be enabled in ``pool_id``."""


class OnDisableLiquidityPool(ABC):
    @abstractmethod
    def on_disable(self, pool_id: int) -> None:
        """Called after a pool has been disabled."""


class OnRemoveLiquidityPool(ABC):
    @abstractmethod
    def on_remove(self, pool_id: int) -> None:
        """Called after a pool has been removed."""


class PriceProvider(ABC):
    """A source of relative prices."""

    @abstractmethod
    def get_price(self, base: CurrencyId, quote: CurrencyId) -> Optional[FixedU128]:
        """Return the price of ``base`` in ``quote``, or ``None`` if unknown."""