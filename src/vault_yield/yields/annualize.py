"""Annualization formulas for period returns.

Two yield sources, two compounding models:
  - Native yield (price-per-share appreciation) compounds inside the vault:
        native_apy = ((1 + r) ** AF - 1) * 100
  - External rewards are paid out and do not compound in the vault:
        rewards_apr = rewards_usd / start_value_usd * AF * 100

where AF = seconds_per_year / period_duration_seconds. Both are local
annualized rates of one period, not forecasts. total APY is their sum,
an additive approximation across the two models.

All functions return Decimal and neutralize degenerate inputs (zero start
value, non-positive duration) to zero instead of raising.
"""

from decimal import Decimal, Overflow

from vault_yield.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def annualization_factor(duration_seconds: int, seconds_per_year: int) -> Decimal:
    """seconds_per_year / duration_seconds, or 0 for a non-positive duration."""
    if duration_seconds <= 0:
        return ZERO
    return Decimal(seconds_per_year) / Decimal(duration_seconds)


def period_return(interest: int, start_value: int) -> Decimal:
    """interest / start_value as a fraction (0.01 = 1%), 0 when start_value <= 0."""
    if start_value <= 0:
        return ZERO
    return Decimal(interest) / Decimal(start_value)


def interest_percent(interest: int, start_value: int) -> Decimal:
    """Period return in percent."""
    return period_return(interest, start_value) * HUNDRED


def native_apy(rate: Decimal, factor: Decimal) -> Decimal:
    """Compounding APY in percent: ((1 + rate) ** factor - 1) * 100.

    Args:
        rate: Period return as a fraction.
        factor: Annualization factor.

    Returns:
        APY in percent. 0 for a zero factor; -100 when the period lost
        the whole position (1 + rate <= 0).
    """
    if factor <= ZERO:
        return ZERO

    base = ONE + rate
    if base <= ZERO:
        return -HUNDRED

    try:
        return (base**factor - ONE) * HUNDRED
    except Overflow:
        logger.warning("native_apy_overflow", rate=str(rate), factor=str(factor))
        return ZERO


def rewards_apr(
    rewards_value_usd: Decimal,
    start_value_usd: Decimal | None,
    factor: Decimal,
) -> Decimal:
    """Simple (non-compounding) rewards APR in percent.

    Returns 0 when the position has no USD valuation.
    """
    if start_value_usd is None or start_value_usd <= ZERO:
        return ZERO
    return rewards_value_usd / start_value_usd * factor * HUNDRED
