"""Price-per-share derived from ERC-4626 vault totals.

price_per_share = totalAssets / totalSupply, both in base units, so the
ratio converts share base units directly into underlying base units even
when the asset and share decimals differ.
"""

from collections.abc import Callable
from fractions import Fraction

from vault_yield.exceptions import DataUnavailableError
from vault_yield.logging import get_logger
from vault_yield.oracles.base import Found, NotFound, OracleResult, PriceOracle

logger = get_logger(__name__)


def price_per_share_from_totals(total_assets: int, total_supply: int) -> Fraction:
    """Exact price-per-share from vault totals.

    An empty vault (no shares outstanding) prices shares 1:1, matching the
    vault's own conversion for the first deposit.
    """
    if total_supply <= 0:
        return Fraction(1)
    return Fraction(total_assets, total_supply)


class VaultTotalsPriceOracle(PriceOracle):
    """Price oracle reading (totalAssets, totalSupply) at a block.

    Args:
        read_totals: Callable returning (total_assets, total_supply) at a
            block. It should raise DataUnavailableError when the state
            cannot be read; that is reported as NotFound.
    """

    def __init__(self, read_totals: Callable[[int], tuple[int, int]]) -> None:
        self._read_totals = read_totals

    def get_price_per_share(self, block_number: int) -> OracleResult[Fraction]:
        try:
            total_assets, total_supply = self._read_totals(block_number)
        except DataUnavailableError as e:
            logger.warning(
                "vault_totals_unavailable",
                block_number=block_number,
                error=str(e),
            )
            return NotFound(str(e))

        return Found(price_per_share_from_totals(total_assets, total_supply))
