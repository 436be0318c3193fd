"""
Constant-product pricing

Pure integer math, floor division throughout.  The fee is taken off the
input first, then the constant-product formula is applied with a single
truncating division at the end, so rounding always favours the pool.
"""

from ..constants import FEE_DENOMINATOR, MAX_FEE_RATE
from ..exceptions import InsufficientLiquidity, InvalidAmount


def amount_in_after_fee(amount_in: int, fee_rate: int) -> int:
    """Fee-adjusted input: ``amount_in * (1000 - fee_rate) // 1000``."""
    if fee_rate < 0 or fee_rate > MAX_FEE_RATE:
        raise InvalidAmount(f"Fee rate must be 0-{MAX_FEE_RATE}, got {fee_rate}")
    return amount_in * (FEE_DENOMINATOR - fee_rate) // FEE_DENOMINATOR


def fee_amount(amount_in: int, fee_rate: int) -> int:
    """Portion of ``amount_in`` retained by the pool as fee."""
    return amount_in - amount_in_after_fee(amount_in, fee_rate)


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee_rate: int) -> int:
    """
    Output of an exact-in swap against ``(reserve_in, reserve_out)``.

    Raises:
        InvalidAmount: non-positive input
        InsufficientLiquidity: an empty reserve
    """
    if amount_in <= 0:
        raise InvalidAmount("Swap amount must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity("Pool has an empty reserve")

    with_fee = amount_in_after_fee(amount_in, fee_rate)
    return (with_fee * reserve_out) // (reserve_in + with_fee)


def initial_shares(amount_a: int, amount_b: int) -> int:
    """Share supply minted at pool creation (arithmetic mean of deposits)."""
    return (amount_a + amount_b) // 2


def liquidity_shares(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
) -> int:
    """Shares minted for a deposit, bounded by the less generous side."""
    if reserve_a <= 0 or reserve_b <= 0:
        raise InsufficientLiquidity("Pool has an empty reserve")
    return min(
        amount_a * total_shares // reserve_a,
        amount_b * total_shares // reserve_b,
    )
