"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from vamm.constants import (
    DEFAULT_A,
    DEFAULT_GAMMA,
    DEFAULT_MID_FEE,
    DEFAULT_TRADE_INTERVAL,
    MAX_A,
    MAX_GAMMA,
    MIN_A,
    MIN_GAMMA,
)
from vamm.errors import UnsafeParameterError


@dataclass(frozen=True)
class PoolConfig:
    """Construction-time parameters of a pool instance.

    These never change after the pool is created; everything that evolves
    with trading lives in PoolState.

    Attributes:
        A: Amplification, in the contract's A * N^N * A_MULTIPLIER convention
        gamma: Curvature; smaller values keep the curve closer to constant-sum
        mid_fee: Linear fee rate charged on every trade (0.0005 = 5 bps)
        trade_interval: Seconds added to the pool clock for trades executed
            without an explicit timestamp
    """

    A: float = DEFAULT_A
    gamma: float = DEFAULT_GAMMA
    mid_fee: float = DEFAULT_MID_FEE
    trade_interval: int = DEFAULT_TRADE_INTERVAL

    def __post_init__(self) -> None:
        if not MIN_A <= self.A <= MAX_A:
            raise UnsafeParameterError(f"A must be in [{MIN_A}, {MAX_A}], got {self.A}")
        if not MIN_GAMMA <= self.gamma <= MAX_GAMMA:
            raise UnsafeParameterError(
                f"gamma must be in [{MIN_GAMMA}, {MAX_GAMMA}], got {self.gamma}"
            )
        if not 0 <= self.mid_fee < 1:
            raise UnsafeParameterError(f"mid_fee must be in [0, 1), got {self.mid_fee}")
        if self.trade_interval < 0:
            raise UnsafeParameterError(
                f"trade_interval must be non-negative, got {self.trade_interval}"
            )

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from environment variables.

        - VAMM_A: amplification (default: 400000)
        - VAMM_GAMMA: curvature (default: 0.000145)
        - VAMM_MID_FEE: fee rate (default: 0.0005)
        - VAMM_TRADE_INTERVAL: seconds per trade (default: 3)
        """
        return cls(
            A=float(os.environ.get("VAMM_A", str(DEFAULT_A))),
            gamma=float(os.environ.get("VAMM_GAMMA", str(DEFAULT_GAMMA))),
            mid_fee=float(os.environ.get("VAMM_MID_FEE", str(DEFAULT_MID_FEE))),
            trade_interval=int(os.environ.get("VAMM_TRADE_INTERVAL", str(DEFAULT_TRADE_INTERVAL))),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
