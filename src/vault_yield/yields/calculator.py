"""Per-period value, interest and yield computation.

For each segment boundary the calculator samples price-per-share at the
start and end block, values the constant share balance in fixed-point
integer arithmetic, and annualizes the result:

    start_value = shares * floor(start_price * SCALE) // SCALE
    end_value   = shares * floor(end_price * SCALE) // SCALE
    interest    = max(end_value - start_value, 0)   (clamped mode)

Only the percentage and APY figures leave integer arithmetic (as Decimal).

Failure contract:
  - price sample missing at start or end -> period omitted, diagnostic
  - reward sample missing or empty       -> zero rewards for the period
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction

from vault_yield.config import YieldSettings
from vault_yield.exceptions import DataUnavailableError
from vault_yield.ledger.segmenter import SegmentBoundary
from vault_yield.logging import get_logger
from vault_yield.models import (
    AssetInfo,
    Diagnostic,
    DiagnosticReason,
    Period,
    PricePoint,
    RewardAccrual,
)
from vault_yield.oracles.base import Found, NotFound, PriceOracle, RewardOracle
from vault_yield.yields.annualize import (
    annualization_factor,
    interest_percent,
    native_apy,
    period_return,
    rewards_apr,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    """Computed periods (in order) plus diagnostics for omitted ones."""

    periods: tuple[Period, ...]
    diagnostics: tuple[Diagnostic, ...]


class YieldCalculator:
    """Computes Period records from segment boundaries.

    Args:
        settings: Scale, seconds-per-year and interest mode.
        price_oracle: Source of price-per-share samples.
        reward_oracle: Source of reward accruals per time window.
        asset: Underlying asset metadata; USD figures are only produced
            when it carries a USD price.
        user_id: Identifier passed through to the reward oracle.
    """

    def __init__(
        self,
        settings: YieldSettings,
        price_oracle: PriceOracle,
        reward_oracle: RewardOracle,
        asset: AssetInfo | None = None,
        user_id: str = "",
    ) -> None:
        self._settings = settings
        self._price_oracle = price_oracle
        self._reward_oracle = reward_oracle
        self._asset = asset
        self._user_id = user_id

    def price_at(self, block_number: int) -> PricePoint | None:
        """Sample price-per-share, converting oracle failures to None."""
        try:
            result = self._price_oracle.get_price_per_share(block_number)
        except DataUnavailableError as e:
            logger.warning("price_oracle_failed", block_number=block_number, error=str(e))
            return None

        if not isinstance(result, Found):
            return None
        return PricePoint(block_number=block_number, price_per_share=Fraction(result.value))

    def position_value(self, shares: int, price: PricePoint) -> int:
        """Value of a share balance in underlying base units, rounded down."""
        scale = self._settings.price_scale
        return shares * price.scaled(scale) // scale

    def rewards_for(self, boundary: SegmentBoundary) -> tuple[list[RewardAccrual], Diagnostic | None]:
        """Fetch rewards for a boundary's window; a missing sample means zero rewards."""
        try:
            result = self._reward_oracle.get_reward_accrual(
                self._user_id, boundary.start_timestamp, boundary.end_timestamp
            )
        except DataUnavailableError as e:
            result = NotFound(str(e))

        if isinstance(result, Found):
            return list(result.value), None

        reason = result.reason
        logger.info(
            "rewards_unavailable",
            start_block=boundary.start_block,
            end_block=boundary.end_block,
            reason=reason,
        )
        note = Diagnostic(
            reason=DiagnosticReason.REWARDS_UNAVAILABLE,
            start_block=boundary.start_block,
            end_block=boundary.end_block,
            detail=reason,
        )
        return [], note

    def compute_period(
        self,
        boundary: SegmentBoundary,
        index: int,
    ) -> tuple[Period | None, list[Diagnostic]]:
        """Compute one Period, or None if a required price sample is missing.

        Args:
            boundary: Segment to value.
            index: 1-based index to assign to the emitted period.

        Returns:
            Tuple of (period or None, diagnostics raised while computing it).
        """
        notes: list[Diagnostic] = []

        start_price = self.price_at(boundary.start_block)
        end_price = self.price_at(boundary.end_block)
        if start_price is None or end_price is None:
            missing = [
                str(block)
                for block, price in (
                    (boundary.start_block, start_price),
                    (boundary.end_block, end_price),
                )
                if price is None
            ]
            logger.warning(
                "period_omitted_price_unavailable",
                start_block=boundary.start_block,
                end_block=boundary.end_block,
                missing_blocks=missing,
            )
            notes.append(
                Diagnostic(
                    reason=DiagnosticReason.PRICE_UNAVAILABLE,
                    start_block=boundary.start_block,
                    end_block=boundary.end_block,
                    detail=f"missing price at block(s) {', '.join(missing)}",
                )
            )
            return None, notes

        shares = boundary.shares_held
        start_value = self.position_value(shares, start_price)
        end_value = self.position_value(shares, end_price)

        interest = end_value - start_value
        if interest < 0 and self._settings.interest_mode == "clamped":
            notes.append(
                Diagnostic(
                    reason=DiagnosticReason.NEGATIVE_INTEREST,
                    start_block=boundary.start_block,
                    end_block=boundary.end_block,
                    detail=f"loss of {-interest} reported as zero interest",
                )
            )
            interest = 0

        rewards, rewards_note = self.rewards_for(boundary)
        if rewards_note is not None:
            notes.append(rewards_note)
        rewards_value_usd = sum((r.value_usd for r in rewards), Decimal("0"))

        start_value_usd = self._asset.to_usd(start_value) if self._asset else None
        interest_usd = self._asset.to_usd(interest) if self._asset else None

        factor = annualization_factor(boundary.duration_seconds, self._settings.seconds_per_year)
        native = native_apy(period_return(interest, start_value), factor)
        rewards_rate = rewards_apr(rewards_value_usd, start_value_usd, factor)

        period = Period(
            index=index,
            kind=boundary.start.kind,
            start_block=boundary.start_block,
            end_block=boundary.end_block,
            start_timestamp=boundary.start_timestamp,
            end_timestamp=boundary.end_timestamp,
            shares_held=shares,
            start_price=start_price.scaled(self._settings.price_scale),
            end_price=end_price.scaled(self._settings.price_scale),
            start_value=start_value,
            end_value=end_value,
            interest_accrued=interest,
            interest_percent=interest_percent(interest, start_value),
            rewards_accrued=tuple(rewards),
            rewards_value_usd=rewards_value_usd,
            start_value_usd=start_value_usd,
            interest_usd=interest_usd,
            native_apy=native,
            rewards_apr=rewards_rate,
            total_apy=native + rewards_rate,
            deposited_to_date=boundary.deposited_to_date,
        )
        return period, notes

    def compute(self, boundaries: Sequence[SegmentBoundary]) -> CalculationResult:
        """Compute all periods in order, omitting those without price samples."""
        periods: list[Period] = []
        diagnostics: list[Diagnostic] = []

        for boundary in boundaries:
            period, notes = self.compute_period(boundary, index=len(periods) + 1)
            diagnostics.extend(notes)
            if period is None:
                continue
            periods.append(period)

            logger.debug(
                "period_computed",
                index=period.index,
                start_block=period.start_block,
                end_block=period.end_block,
                shares_held=str(period.shares_held),
                interest_accrued=str(period.interest_accrued),
                native_apy=str(period.native_apy),
                rewards_apr=str(period.rewards_apr),
            )

        return CalculationResult(periods=tuple(periods), diagnostics=tuple(diagnostics))
