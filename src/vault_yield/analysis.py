"""High-level entry points for analysing a depositor's vault yield.

Data flows one way:

    ledger -> segment() -> YieldCalculator (price + reward oracles)
           -> accumulate() / aggregate() / reconcile() -> YieldReport

Provides YieldAnalyzer for repeated runs with shared settings and
compute_yield() as the functional wrapper. An empty ledger yields an empty
report rather than an error; missing price samples drop the affected
periods and are listed in the report diagnostics; a withdrawal exceeding
the tracked share balance raises ShareBalanceError (under the default
overdraw policy).
"""

import time
from collections.abc import Callable, Sequence

from vault_yield.config import AppSettings, RewardSettings, YieldSettings
from vault_yield.ledger.segmenter import segment
from vault_yield.ledger.summary import summarize_ledger
from vault_yield.logging import analysis_context, get_logger, setup_logging
from vault_yield.models import (
    AggregateMetrics,
    AssetInfo,
    BlockRef,
    Diagnostic,
    DiagnosticReason,
    Interaction,
    Reconciliation,
    YieldReport,
)
from vault_yield.oracles.base import NullRewardOracle, PriceOracle, RewardOracle
from vault_yield.oracles.cache import CachingPriceOracle
from vault_yield.oracles.rewards import Interval, TimeseriesRewardOracle, TokenInfo
from vault_yield.yields.aggregator import accumulate, aggregate, reconcile
from vault_yield.yields.calculator import YieldCalculator

logger = get_logger(__name__)


class YieldAnalyzer:
    """Runs the full segmentation -> calculation -> aggregation pipeline.

    Args:
        settings: Yield policy settings. Defaults to YieldSettings().
        reward_settings: Used by timeseries_reward_oracle(). Defaults to
            RewardSettings().
    """

    def __init__(
        self,
        settings: YieldSettings | None = None,
        reward_settings: RewardSettings | None = None,
    ) -> None:
        self._settings = settings or YieldSettings()
        self._reward_settings = reward_settings or RewardSettings()

    @classmethod
    def from_settings(cls, app_settings: AppSettings | None = None) -> "YieldAnalyzer":
        """Build an analyzer from application settings and configure logging.

        Loads AppSettings from the environment / .env when none are given.
        """
        app_settings = app_settings or AppSettings()
        setup_logging(app_settings.log_level)
        return cls(app_settings.yields, app_settings.rewards)

    @property
    def settings(self) -> YieldSettings:
        return self._settings

    def timeseries_reward_oracle(
        self,
        fetch_balances: Callable[[str, str, str, Interval], dict | None],
        token_info: Callable[[str], TokenInfo | None],
    ) -> TimeseriesRewardOracle:
        """Reward oracle over injected fetch callables, using this analyzer's reward settings."""
        return TimeseriesRewardOracle(fetch_balances, token_info, self._reward_settings)

    def analyze(
        self,
        interactions: Sequence[Interaction],
        price_oracle: PriceOracle,
        reward_oracle: RewardOracle | None,
        now: BlockRef | Callable[[], BlockRef],
        user_id: str = "",
        asset: AssetInfo | None = None,
    ) -> YieldReport:
        """Analyse one user's position in one vault.

        Args:
            interactions: The user's deposit/withdraw events in any order.
            price_oracle: Price-per-share source. Wrapped in a per-run cache.
            reward_oracle: Reward accrual source; None means no rewards.
            now: Current block, or a callable returning it. Closes the
                final period of a still-open position.
            user_id: Passed to the reward oracle.
            asset: Underlying asset metadata for USD figures.

        Returns:
            YieldReport with periods, aggregate metrics, reconciliation,
            position summary and diagnostics.

        Raises:
            ShareBalanceError: If a withdrawal overdraws the tracked balance
                under the "error" overdraw policy.
        """
        as_of = now() if callable(now) else now
        with analysis_context(user_id, as_of.block_number):
            return self._run(interactions, price_oracle, reward_oracle, as_of, user_id, asset)

    def _run(
        self,
        interactions: Sequence[Interaction],
        price_oracle: PriceOracle,
        reward_oracle: RewardOracle | None,
        as_of: BlockRef,
        user_id: str,
        asset: AssetInfo | None,
    ) -> YieldReport:
        start_time = time.monotonic()

        logger.info(
            "yield_analysis_starting",
            interactions=len(interactions),
            interest_mode=self._settings.interest_mode,
        )

        if not interactions:
            logger.info("yield_analysis_no_interactions")
            return YieldReport(
                periods=(),
                aggregate=AggregateMetrics.zero(),
                reconciliation=Reconciliation(0, 0, 0, "No interactions."),
                summary=summarize_ledger((), final_shares=0, current_value=0),
                as_of=as_of,
            )

        prices = price_oracle
        if not isinstance(prices, CachingPriceOracle):
            prices = CachingPriceOracle(prices)
        rewards = reward_oracle if reward_oracle is not None else NullRewardOracle()

        segmentation = segment(interactions, as_of, self._settings)

        calculator = YieldCalculator(
            settings=self._settings,
            price_oracle=prices,
            reward_oracle=rewards,
            asset=asset,
            user_id=user_id,
        )
        calculation = calculator.compute(segmentation.boundaries)
        periods = accumulate(calculation.periods)

        final_shares = segmentation.final_state.shares_held
        current_value, current_note = self._current_value(calculator, final_shares, as_of)

        summary = summarize_ledger(interactions, final_shares, current_value)
        metrics = aggregate(periods, summary.total_deposited, self._settings.share_decimals)
        reconciliation = reconcile(metrics.total_interest, current_value, summary.total_deposited)

        diagnostics = segmentation.diagnostics + calculation.diagnostics
        if current_note is not None:
            diagnostics += (current_note,)

        elapsed = time.monotonic() - start_time
        logger.info(
            "yield_analysis_complete",
            periods=metrics.period_count,
            total_interest=str(metrics.total_interest),
            weighted_total_apy=str(metrics.weighted_total_apy),
            reconciliation_delta=str(reconciliation.delta),
            diagnostics=len(diagnostics),
            elapsed_seconds=round(elapsed, 3),
        )

        return YieldReport(
            periods=periods,
            aggregate=metrics,
            reconciliation=reconciliation,
            summary=summary,
            as_of=as_of,
            diagnostics=diagnostics,
        )

    def _current_value(
        self,
        calculator: YieldCalculator,
        final_shares: int,
        as_of: BlockRef,
    ) -> tuple[int | None, Diagnostic | None]:
        """Value the final share balance at the current block."""
        if final_shares == 0:
            return 0, None

        price = calculator.price_at(as_of.block_number)
        if price is None:
            logger.warning("current_price_unavailable", block_number=as_of.block_number)
            return None, Diagnostic(
                reason=DiagnosticReason.CURRENT_PRICE_UNAVAILABLE,
                start_block=as_of.block_number,
                end_block=as_of.block_number,
                detail="simple interest not computed",
            )
        return calculator.position_value(final_shares, price), None


def compute_yield(
    interactions: Sequence[Interaction],
    price_oracle: PriceOracle,
    reward_oracle: RewardOracle | None,
    now: BlockRef | Callable[[], BlockRef],
    *,
    user_id: str = "",
    asset: AssetInfo | None = None,
    settings: YieldSettings | None = None,
) -> YieldReport:
    """Compute periods, aggregate metrics and reconciliation for one user.

    Functional wrapper around YieldAnalyzer.analyze(); see it for details.
    """
    return YieldAnalyzer(settings).analyze(
        interactions,
        price_oracle,
        reward_oracle,
        now,
        user_id=user_id,
        asset=asset,
    )
