from __future__ import annotations

import math


def atomic_to_decimal(amount: int, decimals: int) -> float:
    """Convert an atomic token amount to its decimal (whole-token) value.

    Args:
        amount: Integer amount in the token's smallest unit.
        decimals: Number of decimal places the token uses.

    Returns:
        ``amount / 10**decimals`` as a float.

    Notes:
        - Integer true division is correctly rounded, so very large reserves
          do not lose precision before the division happens.
        - Raises ``ValueError`` for negative ``decimals``.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return amount / (10**decimals)


def is_valid_rate(value: float) -> bool:
    """True when ``value`` is a finite, strictly positive number."""
    return math.isfinite(value) and value > 0
