"""Kernel configuration and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog

from ammkernel.constants import (
    BPS_DENOMINATOR,
    DEFAULT_PROTOCOL_FEE_BPS,
    DEFAULT_TRADING_FEE_BPS,
    MINIMUM_LIQUIDITY,
)


@dataclass(frozen=True)
class KernelConfig:
    """Centralized configuration for pool and router economics.

    The registry hands this to every pool it creates and the router reads
    the protocol fee from the registry it is bound to, so one deployment
    always runs on one consistent set of parameters.

    Attributes:
        trading_fee_bps: Fee retained in pool reserves on every swap (default: 30)
        protocol_fee_bps: Slice of swap input sent to the treasury (default: 10)
        minimum_liquidity: Shares locked forever on a pool's first deposit (default: 1000)
    """

    trading_fee_bps: int = DEFAULT_TRADING_FEE_BPS
    protocol_fee_bps: int = DEFAULT_PROTOCOL_FEE_BPS
    minimum_liquidity: int = MINIMUM_LIQUIDITY

    def __post_init__(self) -> None:
        if not 0 <= self.trading_fee_bps < BPS_DENOMINATOR:
            raise ValueError(
                f"trading_fee_bps must be in [0, {BPS_DENOMINATOR}): {self.trading_fee_bps}"
            )
        if not 0 <= self.protocol_fee_bps < BPS_DENOMINATOR:
            raise ValueError(
                f"protocol_fee_bps must be in [0, {BPS_DENOMINATOR}): {self.protocol_fee_bps}"
            )
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity cannot be negative: {self.minimum_liquidity}")

    @property
    def fee_multiplier(self) -> int:
        """Trading fee multiplier for AMM math (10000 - trading_fee_bps)."""
        return BPS_DENOMINATOR - self.trading_fee_bps

    @classmethod
    def from_env(cls) -> KernelConfig:
        """Build a configuration from environment variables.

        - AMM_TRADING_FEE_BPS (default: 30)
        - AMM_PROTOCOL_FEE_BPS (default: 10)
        - AMM_MINIMUM_LIQUIDITY (default: 1000)
        """
        return cls(
            trading_fee_bps=int(os.environ.get("AMM_TRADING_FEE_BPS", DEFAULT_TRADING_FEE_BPS)),
            protocol_fee_bps=int(os.environ.get("AMM_PROTOCOL_FEE_BPS", DEFAULT_PROTOCOL_FEE_BPS)),
            minimum_liquidity=int(os.environ.get("AMM_MINIMUM_LIQUIDITY", MINIMUM_LIQUIDITY)),
        )


# Default configuration instance
DEFAULT_KERNEL_CONFIG = KernelConfig()


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure structlog for console output at the given level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
