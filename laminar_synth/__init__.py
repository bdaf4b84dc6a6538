"""Synthetic asset protocol with exact fixed-point arithmetic, in-memory balances and pools."""

__version__ = "0.4.0"
__all__ = [
    "fixed",
    "types",
    "traits",
    "weights",
    "synthetic_tokens",
    "memory",
    "synthetic_protocol",
]