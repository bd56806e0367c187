"""Realized yield analysis for a depositor in an ERC-4626-style vault.

Segments a user's deposit/withdraw ledger into constant-balance periods,
values each period from price-per-share samples, annualizes native
(compounding) and rewards (simple) yield, and aggregates the result with a
reconciliation against the naive end-minus-deposits figure.
"""

from vault_yield.analysis import YieldAnalyzer, compute_yield
from vault_yield.config import AppSettings, RewardSettings, YieldSettings
from vault_yield.exceptions import (
    DataUnavailableError,
    InvariantViolationError,
    ShareBalanceError,
    VaultYieldError,
)
from vault_yield.models import (
    AggregateMetrics,
    AssetInfo,
    BlockRef,
    Diagnostic,
    DiagnosticReason,
    Interaction,
    InteractionKind,
    Period,
    PositionSummary,
    PricePoint,
    Reconciliation,
    RewardAccrual,
    YieldReport,
)

__all__ = [
    "AggregateMetrics",
    "AppSettings",
    "AssetInfo",
    "BlockRef",
    "DataUnavailableError",
    "Diagnostic",
    "DiagnosticReason",
    "Interaction",
    "InteractionKind",
    "InvariantViolationError",
    "Period",
    "PositionSummary",
    "PricePoint",
    "Reconciliation",
    "RewardAccrual",
    "RewardSettings",
    "ShareBalanceError",
    "VaultYieldError",
    "YieldAnalyzer",
    "YieldReport",
    "YieldSettings",
    "compute_yield",
]
