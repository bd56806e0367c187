"""Abstract oracle interfaces consumed by the yield engine.

The engine never talks to a chain or an API directly: it asks a
PriceOracle for price-per-share at a block and a RewardOracle for the
rewards accrued in a time window. Answers are explicit tagged results
(Found | NotFound) so a missing sample is a first-class branch rather
than an accidental None.

Oracle calls are treated as pure functions of (block) or (user, window).
Retries, batching and timeouts belong to the concrete implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Generic, TypeVar, Union

from vault_yield.models import RewardAccrual

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    """An oracle answer."""

    value: T


@dataclass(frozen=True)
class NotFound:
    """The oracle has no answer for the requested block or window."""

    reason: str = ""


OracleResult = Union[Found[T], NotFound]


class PriceOracle(ABC):
    """Source of price-per-share samples (underlying per share, exact ratio)."""

    @abstractmethod
    def get_price_per_share(self, block_number: int) -> OracleResult[Fraction]:
        """Return price-per-share at the given block."""
        ...


class RewardOracle(ABC):
    """Source of reward accruals for a user over a time window."""

    @abstractmethod
    def get_reward_accrual(
        self,
        user_id: str,
        from_timestamp: int,
        to_timestamp: int,
    ) -> OracleResult[list[RewardAccrual]]:
        """Return rewards accrued strictly within [from_timestamp, to_timestamp]."""
        ...


class NullRewardOracle(RewardOracle):
    """Reward oracle for vaults without external reward programs."""

    def get_reward_accrual(
        self,
        user_id: str,
        from_timestamp: int,
        to_timestamp: int,
    ) -> OracleResult[list[RewardAccrual]]:
        return Found([])
