"""Aggregation of computed periods into overall metrics.

- accumulate(): in-order running sum of interest (exact integers) and
  cumulative interest as a percentage of assets deposited so far.
- aggregate(): duration/value-weighted APY and APR plus totals.
- reconcile(): period-based interest vs. currentValue - totalDeposited.

Weighted averages are computed with exact rationals, so a single period's
weighted APY is exactly its own APY.
"""

from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal
from fractions import Fraction

from vault_yield.models import AggregateMetrics, Period, Reconciliation

ZERO = Decimal("0")
HUNDRED = Decimal("100")
SECONDS_PER_DAY = 86400


def _percent(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return ZERO
    return Decimal(part) / Decimal(whole) * HUNDRED


def _to_decimal(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)


def accumulate(periods: Sequence[Period]) -> tuple[Period, ...]:
    """Attach running cumulative interest to each period, in index order.

    cumulative_interest_percent is relative to the Deposit assets recorded
    up to and including the period's opening interaction.
    """
    running = 0
    result: list[Period] = []
    for period in sorted(periods, key=lambda p: p.index):
        running += period.interest_accrued
        result.append(
            replace(
                period,
                cumulative_interest=running,
                cumulative_interest_percent=_percent(running, period.deposited_to_date),
            )
        )
    return tuple(result)


def uses_usd_weights(periods: Sequence[Period]) -> bool:
    """USD weighting applies only when every period has a positive USD value."""
    return bool(periods) and all(
        p.start_value_usd is not None and p.start_value_usd > ZERO for p in periods
    )


def period_weight(period: Period, use_usd: bool, share_decimals: int = 18) -> Fraction:
    """Weight of one period in the overall averages.

    USD variant: duration_seconds * start_value_usd.
    Native variant: duration_days * shares normalized by share_decimals.
    """
    if use_usd and period.start_value_usd is not None:
        return Fraction(period.duration_seconds) * Fraction(period.start_value_usd)
    return Fraction(period.duration_seconds, SECONDS_PER_DAY) * Fraction(
        period.shares_held, 10**share_decimals
    )


def weighted_average(values: Sequence[Decimal], weights: Sequence[Fraction]) -> Decimal:
    """sum(v * w) / sum(w), or 0 when the weights sum to zero."""
    total = sum(weights, Fraction(0))
    if total == 0:
        return ZERO
    numerator = sum((Fraction(v) * w for v, w in zip(values, weights)), Fraction(0))
    return _to_decimal(numerator / total)


def aggregate(
    periods: Sequence[Period],
    total_deposited: int,
    share_decimals: int = 18,
) -> AggregateMetrics:
    """Fold the ordered period sequence into AggregateMetrics.

    Args:
        periods: Computed periods (cumulative fields are not required).
        total_deposited: Sum of Deposit assets over the whole ledger.
        share_decimals: Share token decimals for native-unit weighting.

    Returns:
        AggregateMetrics; all zeros for an empty sequence. Gaps while the
        position was closed are not periods, so they are excluded from
        total_duration_days.
    """
    if not periods:
        return AggregateMetrics.zero()

    use_usd = uses_usd_weights(periods)
    weights = [period_weight(p, use_usd, share_decimals) for p in periods]
    weighted_native = weighted_average([p.native_apy for p in periods], weights)
    weighted_rewards = weighted_average([p.rewards_apr for p in periods], weights)

    total_interest = sum(p.interest_accrued for p in periods)
    total_rewards_usd = sum((p.rewards_value_usd for p in periods), ZERO)
    total_interest_usd = sum((p.interest_usd or ZERO for p in periods), ZERO)
    total_seconds = sum(p.duration_seconds for p in periods)

    return AggregateMetrics(
        total_interest=total_interest,
        total_interest_percent=_percent(total_interest, total_deposited),
        total_rewards_usd=total_rewards_usd,
        total_interest_usd=total_interest_usd,
        total_earnings_usd=total_interest_usd + total_rewards_usd,
        weighted_native_apy=weighted_native,
        weighted_rewards_apr=weighted_rewards,
        weighted_total_apy=weighted_native + weighted_rewards,
        total_duration_days=Decimal(total_seconds) / Decimal(SECONDS_PER_DAY),
        period_count=len(periods),
    )


def reconcile(
    period_interest: int,
    current_value: int | None,
    total_deposited: int,
) -> Reconciliation:
    """Compare period-based interest with the naive end-minus-deposits figure.

    The period-based figure is authoritative: it attributes interest to
    each deposit for the time it was actually held. The simple figure
    ignores timing and withdrawals, so it understates interest when later
    deposits had less time to accrue and can go negative after withdrawals.

    Args:
        period_interest: Sum of interest_accrued over all periods.
        current_value: Final share balance valued at the current price, or
            None if that price is unavailable.
        total_deposited: Sum of Deposit assets over the whole ledger.

    Returns:
        Reconciliation with signed simple interest and delta.
    """
    if current_value is None:
        return Reconciliation(
            period_interest=period_interest,
            simple_interest=None,
            delta=None,
            explanation="Current price unavailable; simple interest not computed.",
        )

    simple_interest = current_value - total_deposited
    delta = period_interest - simple_interest

    if delta == 0:
        explanation = "Both interest calculation methods match."
    else:
        explanation = (
            f"Period-by-period interest ({period_interest}) differs from simple "
            f"interest ({simple_interest}) by {delta}. The period figure values "
            "the shares held in each interval between interactions; the simple "
            "figure is current value minus total deposits and ignores when each "
            "deposit was made and any withdrawals."
        )

    return Reconciliation(
        period_interest=period_interest,
        simple_interest=simple_interest,
        delta=delta,
        explanation=explanation,
    )
