"""Shared data models for vault yield analysis.

CRITICAL: Share and asset quantities are integers in base units; USD values,
percentages and APYs use Decimal. Never use float for financial quantities.

Every model is frozen: interactions are immutable once recorded and periods
are never mutated after creation (the cumulative fold builds new Period
objects via dataclasses.replace).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from fractions import Fraction

from vault_yield.exceptions import InvariantViolationError

ZERO = Decimal("0")


class InteractionKind(str, Enum):
    """Direction of a ledger event."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class DiagnosticReason(str, Enum):
    """Why a candidate period was omitted or a figure was degraded."""

    PRICE_UNAVAILABLE = "price_unavailable"
    DEGENERATE_PERIOD = "degenerate_period"
    BELOW_MIN_DURATION = "below_min_duration"
    NEGATIVE_INTEREST = "negative_interest"
    REWARDS_UNAVAILABLE = "rewards_unavailable"
    CURRENT_PRICE_UNAVAILABLE = "current_price_unavailable"
    SHARES_CLAMPED = "shares_clamped"


@dataclass(frozen=True)
class BlockRef:
    """A block number anchored to its unix timestamp (seconds)."""

    block_number: int
    timestamp: int


@dataclass(frozen=True)
class Interaction:
    """One deposit or withdraw event of the analysed user.

    assets and shares are unsigned base-unit amounts as emitted by the
    vault's Deposit/Withdraw events; the direction lives in kind.
    """

    block_number: int
    timestamp: int
    kind: InteractionKind
    assets: int
    shares: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", InteractionKind(self.kind))
        if self.assets < 0 or self.shares < 0:
            raise InvariantViolationError(
                f"{self.kind.value} at block {self.block_number} has negative amounts "
                f"(assets={self.assets}, shares={self.shares}); amounts are unsigned"
            )

    @property
    def is_deposit(self) -> bool:
        return self.kind == InteractionKind.DEPOSIT

    @property
    def signed_shares(self) -> int:
        """Share delta applied to the running balance."""
        return self.shares if self.is_deposit else -self.shares

    @property
    def ref(self) -> BlockRef:
        return BlockRef(self.block_number, self.timestamp)


@dataclass(frozen=True)
class PricePoint:
    """Price-per-share sample at one block, kept as an exact ratio."""

    block_number: int
    price_per_share: Fraction

    def scaled(self, scale: int) -> int:
        """Return the price as a fixed-point integer, rounded down."""
        return math.floor(self.price_per_share * scale)


@dataclass(frozen=True)
class AssetInfo:
    """Metadata of the vault's underlying asset.

    price_usd is None when no USD quote is available; the analysis then
    falls back to native-unit weighting and reports zero rewards APR.
    """

    symbol: str
    decimals: int
    price_usd: Decimal | None = None

    def to_usd(self, base_units: int) -> Decimal | None:
        """Convert an amount in base units to USD, or None without a quote."""
        if self.price_usd is None:
            return None
        return Decimal(base_units).scaleb(-self.decimals) * self.price_usd


@dataclass(frozen=True)
class RewardAccrual:
    """Amount of one reward asset accrued within a single period's window."""

    asset_id: str
    raw_amount: int
    decimals: int
    symbol: str = "UNKNOWN"
    price_usd: Decimal | None = None

    @property
    def amount(self) -> Decimal:
        """Human-readable amount (raw_amount / 10**decimals)."""
        return Decimal(self.raw_amount).scaleb(-self.decimals)

    @property
    def value_usd(self) -> Decimal:
        """USD value, zero for rewards without a reported price."""
        if self.price_usd is None:
            return ZERO
        return self.amount * self.price_usd

    def to_dict(self) -> dict:
        return {
            "asset_id": self.asset_id,
            "symbol": self.symbol,
            "raw_amount": str(self.raw_amount),
            "decimals": self.decimals,
            "amount": str(self.amount),
            "price_usd": str(self.price_usd) if self.price_usd is not None else None,
            "value_usd": str(self.value_usd),
        }


@dataclass(frozen=True)
class Period:
    """A maximal interval during which the user's share balance is constant.

    Values (start_value, end_value, interest_accrued, cumulative_interest)
    are underlying-asset base units. Prices are fixed-point integers at the
    configured scale.
    """

    index: int
    kind: InteractionKind
    start_block: int
    end_block: int
    start_timestamp: int
    end_timestamp: int
    shares_held: int
    start_price: int
    end_price: int
    start_value: int
    end_value: int
    interest_accrued: int
    interest_percent: Decimal
    rewards_accrued: tuple[RewardAccrual, ...]
    rewards_value_usd: Decimal
    start_value_usd: Decimal | None
    interest_usd: Decimal | None
    native_apy: Decimal
    rewards_apr: Decimal
    total_apy: Decimal
    deposited_to_date: int
    cumulative_interest: int = 0
    cumulative_interest_percent: Decimal = ZERO

    @property
    def duration_seconds(self) -> int:
        return self.end_timestamp - self.start_timestamp

    @property
    def duration_days(self) -> Decimal:
        return Decimal(self.duration_seconds) / Decimal(86400)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output.

        Big integers and Decimals are rendered as strings to survive JSON
        round-trips without precision loss.
        """
        return {
            "index": self.index,
            "kind": self.kind.value,
            "start_block": self.start_block,
            "end_block": self.end_block,
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "duration_seconds": self.duration_seconds,
            "shares_held": str(self.shares_held),
            "start_price": str(self.start_price),
            "end_price": str(self.end_price),
            "start_value": str(self.start_value),
            "end_value": str(self.end_value),
            "interest_accrued": str(self.interest_accrued),
            "interest_percent": str(self.interest_percent),
            "rewards_accrued": [r.to_dict() for r in self.rewards_accrued],
            "rewards_value_usd": str(self.rewards_value_usd),
            "start_value_usd": _opt_str(self.start_value_usd),
            "interest_usd": _opt_str(self.interest_usd),
            "native_apy": str(self.native_apy),
            "rewards_apr": str(self.rewards_apr),
            "total_apy": str(self.total_apy),
            "deposited_to_date": str(self.deposited_to_date),
            "cumulative_interest": str(self.cumulative_interest),
            "cumulative_interest_percent": str(self.cumulative_interest_percent),
        }


@dataclass(frozen=True)
class AggregateMetrics:
    """Overall metrics folded from the ordered period sequence."""

    total_interest: int
    total_interest_percent: Decimal
    total_rewards_usd: Decimal
    total_interest_usd: Decimal
    total_earnings_usd: Decimal
    weighted_native_apy: Decimal
    weighted_rewards_apr: Decimal
    weighted_total_apy: Decimal
    total_duration_days: Decimal
    period_count: int

    @classmethod
    def zero(cls) -> AggregateMetrics:
        return cls(
            total_interest=0,
            total_interest_percent=ZERO,
            total_rewards_usd=ZERO,
            total_interest_usd=ZERO,
            total_earnings_usd=ZERO,
            weighted_native_apy=ZERO,
            weighted_rewards_apr=ZERO,
            weighted_total_apy=ZERO,
            total_duration_days=ZERO,
            period_count=0,
        )

    def to_dict(self) -> dict:
        return {
            "total_interest": str(self.total_interest),
            "total_interest_percent": str(self.total_interest_percent),
            "total_rewards_usd": str(self.total_rewards_usd),
            "total_interest_usd": str(self.total_interest_usd),
            "total_earnings_usd": str(self.total_earnings_usd),
            "weighted_native_apy": str(self.weighted_native_apy),
            "weighted_rewards_apr": str(self.weighted_rewards_apr),
            "weighted_total_apy": str(self.weighted_total_apy),
            "total_duration_days": str(self.total_duration_days),
            "period_count": self.period_count,
        }


@dataclass(frozen=True)
class Reconciliation:
    """Period-based interest compared with currentValue - totalDeposited.

    simple_interest and delta are None when the current price could not
    be sampled.
    """

    period_interest: int
    simple_interest: int | None
    delta: int | None
    explanation: str = ""

    @property
    def matches(self) -> bool:
        return self.delta == 0

    def to_dict(self) -> dict:
        return {
            "period_interest": str(self.period_interest),
            "simple_interest": _opt_str(self.simple_interest),
            "delta": _opt_str(self.delta),
            "matches": self.matches,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Diagnostic:
    """A note about an omitted period or degraded figure."""

    reason: DiagnosticReason
    start_block: int
    end_block: int
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "reason": self.reason.value,
            "start_block": self.start_block,
            "end_block": self.end_block,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class PositionSummary:
    """Ledger-level snapshot of the user's position, ignoring timing."""

    total_deposited: int
    total_withdrawn: int
    current_shares: int
    current_value: int | None
    first_interaction_timestamp: int | None
    last_interaction_timestamp: int | None
    interaction_count: int

    def to_dict(self) -> dict:
        return {
            "total_deposited": str(self.total_deposited),
            "total_withdrawn": str(self.total_withdrawn),
            "current_shares": str(self.current_shares),
            "current_value": _opt_str(self.current_value),
            "first_interaction_timestamp": self.first_interaction_timestamp,
            "last_interaction_timestamp": self.last_interaction_timestamp,
            "interaction_count": self.interaction_count,
        }


@dataclass(frozen=True)
class YieldReport:
    """Full output of one analysis run."""

    periods: tuple[Period, ...]
    aggregate: AggregateMetrics
    reconciliation: Reconciliation
    summary: PositionSummary
    as_of: BlockRef
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def active_period(self) -> Period | None:
        """The still-open period ending at the current block, if any."""
        if not self.periods:
            return None
        last = self.periods[-1]
        if last.end_block != self.as_of.block_number:
            return None
        return last

    def projected_annual_earnings_usd(self) -> dict[str, Decimal] | None:
        """Annual USD earnings if the active period's rates continue.

        Returns None without an active period or without USD pricing.
        """
        period = self.active_period
        if period is None or period.start_value_usd is None:
            return None
        interest = period.start_value_usd * period.native_apy / Decimal(100)
        rewards = period.start_value_usd * period.rewards_apr / Decimal(100)
        return {"interest": interest, "rewards": rewards, "total": interest + rewards}

    def to_dict(self) -> dict:
        return {
            "as_of": {
                "block_number": self.as_of.block_number,
                "timestamp": self.as_of.timestamp,
            },
            "periods": [p.to_dict() for p in self.periods],
            "aggregate": self.aggregate.to_dict(),
            "reconciliation": self.reconciliation.to_dict(),
            "summary": self.summary.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def _opt_str(value: object | None) -> str | None:
    return str(value) if value is not None else None
