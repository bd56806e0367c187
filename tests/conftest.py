"""Shared test fixtures for vault yield analysis."""

import logging
from collections.abc import Iterator
from decimal import Decimal

import pytest
import structlog

from vault_yield.config import YieldSettings
from vault_yield.models import AssetInfo


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo setup_logging(): root handlers, root level and structlog config."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def settings() -> YieldSettings:
    """Default yield settings (clamped interest, error on overdraw)."""
    return YieldSettings()


@pytest.fixture
def signed_settings() -> YieldSettings:
    """Settings that keep negative interest."""
    return YieldSettings(interest_mode="signed")


@pytest.fixture
def clamp_settings() -> YieldSettings:
    """Settings that floor an overdrawn balance at zero."""
    return YieldSettings(overdraw_policy="clamp")


@pytest.fixture
def usdc() -> AssetInfo:
    """6-decimal stablecoin priced at $1."""
    return AssetInfo(symbol="USDC", decimals=6, price_usd=Decimal("1"))


@pytest.fixture
def weth() -> AssetInfo:
    """18-decimal asset priced at $2,000."""
    return AssetInfo(symbol="WETH", decimals=18, price_usd=Decimal("2000"))
