"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from amm_engine.constants import (
    DEFAULT_FEE_DENOMINATOR,
    DEFAULT_FEE_NUMERATOR,
    DEFAULT_MAX_INPUT_FRACTION_BPS,
    DEFAULT_MAX_PRICE_IMPACT_PCT,
    DEFAULT_SLIPPAGE_BPS,
)
from amm_engine.pool import validate_fee


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from err


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class PolicyConfig:
    """Thresholds for the caller-side trade policy.

    Attributes:
        max_price_impact_pct: Reject quotes whose price impact exceeds this (percent)
        max_input_fraction_bps: Reject inputs above this share of reserve_in (bps)
    """

    max_price_impact_pct: int = DEFAULT_MAX_PRICE_IMPACT_PCT
    max_input_fraction_bps: int = DEFAULT_MAX_INPUT_FRACTION_BPS

    def __post_init__(self) -> None:
        if not 0 < self.max_price_impact_pct <= 100:
            raise ValueError(f"max_price_impact_pct must be in (0, 100], got {self.max_price_impact_pct}")
        if not 0 < self.max_input_fraction_bps <= 10_000:
            raise ValueError(
                f"max_input_fraction_bps must be in (0, 10000], got {self.max_input_fraction_bps}"
            )


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the pool engine.

    Holding defaults in one frozen object makes it easy to run tests with
    different settings and keeps every component on the same values.

    Attributes:
        default_fee_numerator: Fee numerator for pools created without one
        default_fee_denominator: Fee denominator for pools created without one
        default_slippage_bps: Tolerance used by quote() when the caller gives none
        policy: Caller-side trade policy thresholds
        log_level: Minimum level for configure_logging()
        log_json: Render log lines as JSON instead of console format
    """

    default_fee_numerator: int = DEFAULT_FEE_NUMERATOR
    default_fee_denominator: int = DEFAULT_FEE_DENOMINATOR
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    log_level: str = "info"
    log_json: bool = False

    def __post_init__(self) -> None:
        validate_fee(self.default_fee_numerator, self.default_fee_denominator)
        if not 0 <= self.default_slippage_bps <= 10_000:
            raise ValueError(
                f"default_slippage_bps must be in [0, 10000], got {self.default_slippage_bps}"
            )

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from environment variables, falling back to defaults.

        Variables:
        - AMM_DEFAULT_FEE_NUMERATOR / AMM_DEFAULT_FEE_DENOMINATOR
        - AMM_DEFAULT_SLIPPAGE_BPS
        - AMM_MAX_PRICE_IMPACT_PCT
        - AMM_MAX_INPUT_FRACTION_BPS
        - AMM_LOG_LEVEL (default: info)
        - AMM_LOG_JSON (default: false)
        """
        return cls(
            default_fee_numerator=_env_int("AMM_DEFAULT_FEE_NUMERATOR", DEFAULT_FEE_NUMERATOR),
            default_fee_denominator=_env_int("AMM_DEFAULT_FEE_DENOMINATOR", DEFAULT_FEE_DENOMINATOR),
            default_slippage_bps=_env_int("AMM_DEFAULT_SLIPPAGE_BPS", DEFAULT_SLIPPAGE_BPS),
            policy=PolicyConfig(
                max_price_impact_pct=_env_int("AMM_MAX_PRICE_IMPACT_PCT", DEFAULT_MAX_PRICE_IMPACT_PCT),
                max_input_fraction_bps=_env_int(
                    "AMM_MAX_INPUT_FRACTION_BPS", DEFAULT_MAX_INPUT_FRACTION_BPS
                ),
            ),
            log_level=os.environ.get("AMM_LOG_LEVEL", "info").lower(),
            log_json=_env_bool("AMM_LOG_JSON", False),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
