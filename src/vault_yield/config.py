"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class YieldSettings(BaseSettings):
    """Formula constants and policy switches for the yield engine.

    Exposed as settings rather than module constants so tests and callers
    can exercise boundary policies (minimum period length, signed interest).
    All fields configurable via YIELD_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="YIELD_")

    price_scale: int = 10**18  # fixed-point scale for price-per-share
    seconds_per_year: int = 365 * 86400
    min_period_seconds: int = 3600  # 1/24 day; shorter periods are not annualized
    share_decimals: int = 18  # used to normalize shares for native-only weighting

    # "clamped": losses reported as zero interest; "signed": keep the sign
    interest_mode: Literal["clamped", "signed"] = "clamped"
    # "error": raise on a withdrawal exceeding the tracked balance; "clamp": floor at 0
    overdraw_policy: Literal["error", "clamp"] = "error"


class RewardSettings(BaseSettings):
    """Reward timeseries handling."""

    model_config = SettingsConfigDict(env_prefix="REWARDS_")

    daily_interval_threshold_days: int = 2  # windows longer than this use daily samples
    default_decimals: int = 18  # fallback when token metadata is unavailable


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    yields: YieldSettings = YieldSettings()
    rewards: RewardSettings = RewardSettings()
