"""Tests for in-memory price and reward oracles."""

from decimal import Decimal
from fractions import Fraction

from vault_yield.models import RewardAccrual
from vault_yield.oracles.base import Found, NotFound, NullRewardOracle
from vault_yield.oracles.static import StaticPriceOracle, StaticRewardOracle


class TestStaticPriceOracle:
    """Test exact and step lookups."""

    def test_exact_block(self) -> None:
        oracle = StaticPriceOracle({10: Fraction(101, 100)})
        assert oracle.get_price_per_share(10) == Found(Fraction(101, 100))

    def test_values_converted_exactly(self) -> None:
        """Decimal strings must not pass through float."""
        oracle = StaticPriceOracle({1: "1.1", 2: Decimal("0.3"), 3: 2})
        assert oracle.get_price_per_share(1) == Found(Fraction(11, 10))
        assert oracle.get_price_per_share(2) == Found(Fraction(3, 10))
        assert oracle.get_price_per_share(3) == Found(Fraction(2))

    def test_missing_block_not_found(self) -> None:
        oracle = StaticPriceOracle({10: 1})
        result = oracle.get_price_per_share(11)
        assert isinstance(result, NotFound)
        assert "11" in result.reason

    def test_step_uses_latest_sample_at_or_before(self) -> None:
        oracle = StaticPriceOracle({10: 1, 20: 2}, step=True)
        assert oracle.get_price_per_share(15) == Found(Fraction(1))
        assert oracle.get_price_per_share(25) == Found(Fraction(2))

    def test_step_before_first_sample_not_found(self) -> None:
        oracle = StaticPriceOracle({10: 1}, step=True)
        assert isinstance(oracle.get_price_per_share(5), NotFound)


class TestStaticRewardOracle:
    """Test window lookups."""

    def test_known_window(self) -> None:
        accrual = RewardAccrual(asset_id="8453:0xabc", raw_amount=5, decimals=0)
        oracle = StaticRewardOracle({(0, 100): [accrual]})
        assert oracle.get_reward_accrual("user", 0, 100) == Found([accrual])

    def test_unknown_window_is_empty_by_default(self) -> None:
        oracle = StaticRewardOracle()
        assert oracle.get_reward_accrual("user", 0, 100) == Found([])

    def test_unknown_window_unavailable_when_configured(self) -> None:
        oracle = StaticRewardOracle(missing_is_unavailable=True)
        assert isinstance(oracle.get_reward_accrual("user", 0, 100), NotFound)


class TestNullRewardOracle:
    def test_always_empty(self) -> None:
        assert NullRewardOracle().get_reward_accrual("user", 0, 10) == Found([])
