"""Tests for the vault-totals price oracle."""

from fractions import Fraction

from vault_yield.exceptions import DataUnavailableError
from vault_yield.oracles.base import Found, NotFound
from vault_yield.oracles.vault import VaultTotalsPriceOracle, price_per_share_from_totals


class TestPricePerShareFromTotals:
    """Test totalAssets / totalSupply."""

    def test_exact_ratio(self) -> None:
        assert price_per_share_from_totals(1_050_000, 1_000_000) == Fraction(21, 20)

    def test_mixed_decimals(self) -> None:
        """6-decimal asset, 18-decimal shares: ratio converts base units directly."""
        assert price_per_share_from_totals(2 * 10**6, 2 * 10**18) == Fraction(1, 10**12)

    def test_empty_vault_prices_one(self) -> None:
        assert price_per_share_from_totals(0, 0) == Fraction(1)


class TestVaultTotalsPriceOracle:
    """Test reading totals at a block."""

    def test_found(self) -> None:
        oracle = VaultTotalsPriceOracle(lambda block: (block * 2, block))
        assert oracle.get_price_per_share(50) == Found(Fraction(2))

    def test_read_failure_is_not_found(self) -> None:
        def read_totals(block: int) -> tuple[int, int]:
            raise DataUnavailableError(f"state pruned at {block}")

        result = VaultTotalsPriceOracle(read_totals).get_price_per_share(7)
        assert result == NotFound("state pruned at 7")
