"""Memoizing wrapper for price oracles.

A single analysis samples the same block several times (a period's end
block is the next period's start block). Only Found answers are cached so
a transient miss can be retried by the next lookup.
"""

from fractions import Fraction

from vault_yield.logging import get_logger
from vault_yield.oracles.base import Found, OracleResult, PriceOracle

logger = get_logger(__name__)


class CachingPriceOracle(PriceOracle):
    """Caches Found price samples per block in memory.

    Args:
        inner: The oracle to delegate cache misses to.
    """

    def __init__(self, inner: PriceOracle) -> None:
        self._inner = inner
        self._cache: dict[int, Fraction] = {}
        self.hits = 0
        self.misses = 0

    def get_price_per_share(self, block_number: int) -> OracleResult[Fraction]:
        cached = self._cache.get(block_number)
        if cached is not None:
            self.hits += 1
            return Found(cached)

        self.misses += 1
        result = self._inner.get_price_per_share(block_number)
        if isinstance(result, Found):
            self._cache[block_number] = result.value
        else:
            logger.debug("price_sample_missing", block_number=block_number, reason=result.reason)
        return result

    def clear(self) -> None:
        self._cache.clear()
