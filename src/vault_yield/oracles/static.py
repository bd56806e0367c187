"""In-memory oracles over pre-fetched samples.

Used to replay an analysis from stored data (and throughout the tests).
The host fetches price and reward samples however it likes -- batched,
parallel, cached -- and hands them over keyed by block or window.
"""

from bisect import bisect_right
from collections.abc import Mapping, Sequence
from decimal import Decimal
from fractions import Fraction

from vault_yield.models import RewardAccrual
from vault_yield.oracles.base import Found, NotFound, OracleResult, PriceOracle, RewardOracle


class StaticPriceOracle(PriceOracle):
    """Price oracle backed by a block -> price mapping.

    Args:
        prices: Mapping of block number to price-per-share. Values may be
            Fraction, Decimal, int or a decimal string; all are converted
            to an exact Fraction.
        step: If True, a block without its own sample uses the most recent
            sample at or before it (a step function). If False, only exact
            blocks are answered.
    """

    def __init__(
        self,
        prices: Mapping[int, Fraction | Decimal | int | str],
        step: bool = False,
    ) -> None:
        self._prices: dict[int, Fraction] = {
            block: Fraction(value) for block, value in prices.items()
        }
        self._blocks = sorted(self._prices)
        self._step = step

    def get_price_per_share(self, block_number: int) -> OracleResult[Fraction]:
        price = self._prices.get(block_number)
        if price is not None:
            return Found(price)

        if self._step:
            idx = bisect_right(self._blocks, block_number)
            if idx > 0:
                return Found(self._prices[self._blocks[idx - 1]])

        return NotFound(f"no price sample for block {block_number}")


class StaticRewardOracle(RewardOracle):
    """Reward oracle backed by a (from_timestamp, to_timestamp) -> accruals mapping.

    Args:
        accruals: Mapping of exact time windows to the rewards accrued in them.
        missing_is_unavailable: If True, unknown windows answer NotFound;
            otherwise they answer with no rewards.
    """

    def __init__(
        self,
        accruals: Mapping[tuple[int, int], Sequence[RewardAccrual]] | None = None,
        missing_is_unavailable: bool = False,
    ) -> None:
        self._accruals = {window: list(items) for window, items in (accruals or {}).items()}
        self._missing_is_unavailable = missing_is_unavailable

    def get_reward_accrual(
        self,
        user_id: str,
        from_timestamp: int,
        to_timestamp: int,
    ) -> OracleResult[list[RewardAccrual]]:
        items = self._accruals.get((from_timestamp, to_timestamp))
        if items is not None:
            return Found(list(items))
        if self._missing_is_unavailable:
            return NotFound(f"no rewards sample for {from_timestamp}-{to_timestamp}")
        return Found([])
