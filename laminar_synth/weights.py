"""Benchmarked weights of the synthetic tokens and synthetic protocol calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

WEIGHT_MAX = 2**64 - 1


def _saturating_add(a: int, b: int) -> int:
    return min(a + b, WEIGHT_MAX)


@dataclass(frozen=True)
class RuntimeDbWeight:
    """Cost of a single database read and a single database write."""

    read: int
    write: int

    def reads(self, n):
        """Weight of ``n`` reads, saturating at the weight maximum."""
        return min(self.read * n, WEIGHT_MAX)

    def writes(self, n):
        """Weight of ``n`` writes, saturating at the weight maximum."""
        return min(self.write * n, WEIGHT_MAX)


ROCKS_DB_WEIGHT = RuntimeDbWeight(read=25_000_000, write=100_000_000)

# call name -> (base weight, database reads, database writes)
_SYNTHETIC_TOKENS: Mapping[str, Tuple[int, int, int]] = {
    "set_extreme_ratio": (56_349_000, 5, 3),
    "set_liquidation_ratio": (57_010_000, 5, 3),
    "set_collateral_ratio": (66_234_000, 5, 3),
}

_SYNTHETIC_PROTOCOL: Mapping[str, Tuple[int, int, int]] = {
    "mint": (506_992_000, 22, 9),
    "redeem": (661_365_000, 22, 9),
    "liquidate": (567_526_000, 20, 8),
    "add_collateral": (271_474_000, 9, 7),
    "withdraw_collateral": (411_939_000, 20, 7),
}


def _lookup(table: Dict[str, Tuple[int, int, int]] | Mapping[str, Tuple[int, int, int]], call: str) -> int:
    try:
        base, reads, writes = table[call]
    except KeyError:
        raise ValueError(f"no weight is known for call {call!r}") from None
    weight = _saturating_add(base, ROCKS_DB_WEIGHT.reads(reads))
    return _saturating_add(weight, ROCKS_DB_WEIGHT.writes(writes))


def synthetic_tokens_weight(call):
    """Return the weight of a synthetic tokens call, given by name."""
    return _lookup(_SYNTHETIC_TOKENS, call)


def synthetic_protocol_weight(call):
    """Return the weight of a synthetic protocol call, given by name."""
    return _lookup(_SYNTHETIC_PROTOCOL, call)