"""Reward accruals derived from a user's reward balance timeseries.

Reward distributors typically expose a per-user balance timeseries per
reward asset rather than per-window accruals. The accrual for a window is
the last balance sample inside the window minus the first one, floored at
zero (claims and transfers can make the balance drop).

Payload shape consumed by parse_balance_timeseries:

    {"data": [{"asset": {"address": "0x..", "chain_id": 8453},
               "timeseries": [{"timestamp": 1700000000, "amount": "123"}, ...]}]}

Fetching the payload and the token metadata is left to injected callables;
this module holds no network code.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal

from vault_yield.config import RewardSettings
from vault_yield.exceptions import DataUnavailableError
from vault_yield.logging import get_logger
from vault_yield.models import RewardAccrual
from vault_yield.oracles.base import Found, NotFound, OracleResult, RewardOracle

logger = get_logger(__name__)

Interval = Literal["hour", "day"]


@dataclass(frozen=True)
class TimeseriesEntry:
    """One reward balance sample."""

    timestamp: int
    amount: int


@dataclass(frozen=True)
class TokenInfo:
    """Reward token metadata."""

    symbol: str
    decimals: int
    price_usd: Decimal | None = None


def select_interval(from_timestamp: int, to_timestamp: int, daily_threshold_days: int = 2) -> Interval:
    """Pick the sampling interval: daily for windows longer than the threshold."""
    duration_days = Decimal(to_timestamp - from_timestamp) / Decimal(86400)
    return "day" if duration_days > daily_threshold_days else "hour"


def to_date_string(timestamp: int) -> str:
    """Unix seconds -> YYYY-MM-DD (UTC)."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


def accrual_from_timeseries(
    entries: Iterable[TimeseriesEntry],
    from_timestamp: int,
    to_timestamp: int,
) -> int:
    """Balance growth between the first and last samples inside the window.

    Returns 0 when fewer than two samples fall inside the window or when
    the balance shrank.
    """
    in_window = [e for e in entries if from_timestamp <= e.timestamp <= to_timestamp]
    if len(in_window) < 2:
        return 0

    first = min(in_window, key=lambda e: e.timestamp)
    last = max(in_window, key=lambda e: e.timestamp)
    return max(last.amount - first.amount, 0)


def parse_balance_timeseries(payload: dict) -> dict[str, list[TimeseriesEntry]]:
    """Parse a balance timeseries payload into entries keyed by asset id.

    Asset ids are "<chain_id>:<address>" with the address lower-cased.
    """
    result: dict[str, list[TimeseriesEntry]] = {}
    for item in payload.get("data", []):
        asset = item.get("asset", {})
        asset_id = f"{asset.get('chain_id', '')}:{str(asset.get('address', '')).lower()}"
        entries = [
            TimeseriesEntry(timestamp=int(e["timestamp"]), amount=int(e["amount"]))
            for e in item.get("timeseries", [])
        ]
        result.setdefault(asset_id, []).extend(entries)
    return result


class TimeseriesRewardOracle(RewardOracle):
    """RewardOracle computing per-window accruals from balance timeseries.

    Results are cached per window; running totals per asset are kept for
    reporting.

    Args:
        fetch_balances: Callable (user_id, from_date, to_date, interval) ->
            payload dict or None. May raise DataUnavailableError.
        token_info: Callable asset_id -> TokenInfo or None.
        settings: Interval threshold and fallback decimals.
    """

    def __init__(
        self,
        fetch_balances: Callable[[str, str, str, Interval], dict | None],
        token_info: Callable[[str], TokenInfo | None],
        settings: RewardSettings | None = None,
    ) -> None:
        self._fetch_balances = fetch_balances
        self._token_info = token_info
        self._settings = settings or RewardSettings()
        self._cache: dict[tuple[str, int, int], list[RewardAccrual]] = {}
        self._totals: dict[str, int] = {}

    def get_reward_accrual(
        self,
        user_id: str,
        from_timestamp: int,
        to_timestamp: int,
    ) -> OracleResult[list[RewardAccrual]]:
        key = (user_id, from_timestamp, to_timestamp)
        cached = self._cache.get(key)
        if cached is not None:
            return Found(list(cached))

        interval = select_interval(
            from_timestamp, to_timestamp, self._settings.daily_interval_threshold_days
        )
        from_date = to_date_string(from_timestamp)
        to_date = to_date_string(to_timestamp)

        logger.debug(
            "fetching_reward_timeseries",
            user_id=user_id,
            from_date=from_date,
            to_date=to_date,
            interval=interval,
        )

        try:
            payload = self._fetch_balances(user_id, from_date, to_date, interval)
        except DataUnavailableError as e:
            logger.warning("reward_timeseries_unavailable", user_id=user_id, error=str(e))
            return NotFound(str(e))

        if payload is None:
            return NotFound(f"no reward timeseries for {from_date}..{to_date}")

        accruals: list[RewardAccrual] = []
        for asset_id, entries in parse_balance_timeseries(payload).items():
            accrued = accrual_from_timeseries(entries, from_timestamp, to_timestamp)
            if accrued == 0:
                continue

            info = self._token_info(asset_id)
            if info is None:
                info = TokenInfo(symbol="UNKNOWN", decimals=self._settings.default_decimals)

            accruals.append(
                RewardAccrual(
                    asset_id=asset_id,
                    raw_amount=accrued,
                    decimals=info.decimals,
                    symbol=info.symbol,
                    price_usd=info.price_usd,
                )
            )
            self._totals[asset_id] = self._totals.get(asset_id, 0) + accrued

        self._cache[key] = accruals
        return Found(list(accruals))

    def totals(self) -> dict[str, int]:
        """Raw reward amounts accrued per asset across all fetched windows."""
        return dict(self._totals)
