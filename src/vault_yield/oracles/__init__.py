"""Oracle interfaces and pure adapters for price-per-share and reward samples."""

from vault_yield.oracles.base import (
    Found,
    NotFound,
    NullRewardOracle,
    OracleResult,
    PriceOracle,
    RewardOracle,
)
from vault_yield.oracles.cache import CachingPriceOracle
from vault_yield.oracles.rewards import (
    TimeseriesEntry,
    TimeseriesRewardOracle,
    TokenInfo,
    accrual_from_timeseries,
    parse_balance_timeseries,
    select_interval,
)
from vault_yield.oracles.static import StaticPriceOracle, StaticRewardOracle
from vault_yield.oracles.vault import VaultTotalsPriceOracle, price_per_share_from_totals

__all__ = [
    "CachingPriceOracle",
    "Found",
    "NotFound",
    "NullRewardOracle",
    "OracleResult",
    "PriceOracle",
    "RewardOracle",
    "StaticPriceOracle",
    "StaticRewardOracle",
    "TimeseriesEntry",
    "TimeseriesRewardOracle",
    "TokenInfo",
    "VaultTotalsPriceOracle",
    "accrual_from_timeseries",
    "parse_balance_timeseries",
    "price_per_share_from_totals",
    "select_interval",
]
