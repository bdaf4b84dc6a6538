"""Positions and risk ratios of synthetic currencies held in liquidity pools."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from laminar_synth.fixed import U128_MAX, FixedU128, Permill
from laminar_synth.traits import BadOrigin, BaseLiquidityPoolManager
from laminar_synth.types import CurrencyId

MODULE_ID = b"lami/stk"
_ACCOUNT_LENGTH = 32


@dataclass(frozen=True)
class Position:
    """Collateral and synthetic amounts of one currency in one pool."""

    collateral: int = 0
    synthetic: int = 0


@dataclass(frozen=True)
class SyntheticTokensRatio:
    """Per-currency ratio options; ``None`` means the default is used."""

    extreme: Optional[Permill] = None
    liquidation: Optional[Permill] = None
    collateral: Optional[Permill] = None


@dataclass(frozen=True)
class ExtremeRatioUpdated:
    currency_id: CurrencyId
    ratio: Permill


@dataclass(frozen=True)
class LiquidationRatioUpdated:
    currency_id: CurrencyId
    ratio: Permill


@dataclass(frozen=True)
class CollateralRatioUpdated:
    currency_id: CurrencyId
    ratio: Permill


class SyntheticTokens(BaseLiquidityPoolManager):
    """Keeps synthetic positions per pool and the ratios used to judge their safety."""

    def __init__(
        self,
        synthetic_currency_ids: Iterable[CurrencyId],
        default_extreme_ratio: Permill,
        default_liquidation_ratio: Permill,
        default_collateral_ratio: Permill,
        update_origin: Hashable,
    ) -> None:
        self.synthetic_currency_ids: List[CurrencyId] = list(synthetic_currency_ids)
        self.default_extreme_ratio = default_extreme_ratio
        self.default_liquidation_ratio = default_liquidation_ratio
        self.default_collateral_ratio = default_collateral_ratio
        self.update_origin = update_origin
        self.events: list = []
        self._ratios: Dict[CurrencyId, SyntheticTokensRatio] = {}
        self._positions: Dict[Tuple[int, CurrencyId], Position] = {}

    def account_id(self):
        """The account that holds collateral locked by the protocol."""
        return (b"modl" + MODULE_ID).ljust(_ACCOUNT_LENGTH, b"\0")

    # Governance ---------------------------------------------------------------

    def _ensure_origin(self, origin) -> None:
        if origin != self.update_origin:
            raise BadOrigin("origin is not allowed to update ratios")

    def _update_ratio(self, origin, currency_id: CurrencyId, event, **change) -> None:
        self._ensure_origin(origin)
        self._ratios[currency_id] = replace(self.ratios(currency_id), **change)
        self.events.append(event)

    def set_extreme_ratio(self, origin, currency_id, ratio):
        """Set the extreme liquidation ratio; only the update origin may call this."""
        self._update_ratio(origin, currency_id, ExtremeRatioUpdated(currency_id, ratio), extreme=ratio)

    def set_liquidation_ratio(self, origin, currency_id, ratio):
        """Set the liquidation ratio; only the update origin may call this."""
        self._update_ratio(
            origin, currency_id, LiquidationRatioUpdated(currency_id, ratio), liquidation=ratio
        )

    def set_collateral_ratio(self, origin, currency_id, ratio):
        """Set the collateral ratio; only the update origin may call this."""
        self._update_ratio(
            origin, currency_id, CollateralRatioUpdated(currency_id, ratio), collateral=ratio
        )

    def ratios(self, currency_id):
        return self._ratios.get(currency_id, SyntheticTokensRatio())

    # Positions ----------------------------------------------------------------

    def positions(self, pool_id, currency_id):
        return self._positions.get((pool_id, currency_id), Position())

    def _store(self, pool_id: int, currency_id: CurrencyId, position: Position) -> None:
        key = (pool_id, currency_id)
        if position == Position():
            self._positions.pop(key, None)
        else:
            self._positions[key] = position

    def add_position(self, pool_id, currency_id, collateral, synthetic):
        """Increase a position, saturating at the 128-bit maximum."""
        p = self.positions(pool_id, currency_id)
        self._store(
            pool_id,
            currency_id,
            Position(min(p.collateral + collateral, U128_MAX), min(p.synthetic + synthetic, U128_MAX)),
        )

    def remove_position(self, pool_id, currency_id, collateral, synthetic):
        """Decrease a position, saturating at zero."""
        p = self.positions(pool_id, currency_id)
        self._store(
            pool_id,
            currency_id,
            Position(max(p.collateral - collateral, 0), max(p.synthetic - synthetic, 0)),
        )

    def get_position(self, pool_id, currency_id):
        """Return ``(collateral, synthetic)`` of the position."""
        p = self.positions(pool_id, currency_id)
        return p.collateral, p.synthetic

    # Ratios -------------------------------------------------------------------

    def incentive_ratio(self, currency_id, current_ratio):
        """Liquidation incentive for a collateral ratio.

        With ``r = current_ratio - 1``: zero below one or when ``r`` reaches the
        liquidation ratio, one when ``r`` is at or below the extreme ratio, and
        ``(liquidation - r) / (liquidation - extreme)`` in between.
        """
        one = FixedU128.one()
        if current_ratio < one:
            return FixedU128.zero()
        ratio = current_ratio.checked_sub(one)
        liquidation = self.liquidation_ratio_or_default(currency_id).to_fixed()
        if ratio >= liquidation:
            return FixedU128.zero()
        extreme = self.extreme_ratio_or_default(currency_id).to_fixed()
        if ratio <= extreme:
            return one
        gap_to_liquidation = liquidation.checked_sub(ratio)
        liquidation_to_extreme = liquidation.checked_sub(extreme)
        result = gap_to_liquidation.checked_div(liquidation_to_extreme)
        if result is None:
            raise ArithmeticError("liquidation ratio must exceed extreme ratio")
        return result

    def liquidation_ratio_or_default(self, currency_id):
        value = self.ratios(currency_id).liquidation
        return self.default_liquidation_ratio if value is None else value

    def extreme_ratio_or_default(self, currency_id):
        value = self.ratios(currency_id).extreme
        return self.default_extreme_ratio if value is None else value

    def collateral_ratio_or_default(self, currency_id):
        value = self.ratios(currency_id).collateral
        return self.default_collateral_ratio if value is None else value

    # Pool manager -------------------------------------------------------------

    def can_remove(self, pool_id):
        """A pool can be removed once it holds no synthetic of any currency."""
        return all(
            self.get_position(pool_id, currency_id)[1] == 0
            for currency_id in self.synthetic_currency_ids
        )

    def ensure_can_withdraw(self, pool_id, amount):
        """Withdrawals are never restricted by synthetic positions."""
        return None