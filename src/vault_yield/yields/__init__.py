"""Yield computation -- annualization, per-period calculator, and aggregation."""

from vault_yield.yields.aggregator import (
    accumulate,
    aggregate,
    period_weight,
    reconcile,
    uses_usd_weights,
    weighted_average,
)
from vault_yield.yields.annualize import (
    annualization_factor,
    interest_percent,
    native_apy,
    period_return,
    rewards_apr,
)
from vault_yield.yields.calculator import CalculationResult, YieldCalculator

__all__ = [
    "CalculationResult",
    "YieldCalculator",
    "accumulate",
    "aggregate",
    "annualization_factor",
    "interest_percent",
    "native_apy",
    "period_return",
    "period_weight",
    "reconcile",
    "rewards_apr",
    "uses_usd_weights",
    "weighted_average",
]
