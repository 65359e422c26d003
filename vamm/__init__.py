"""Off-chain pricing engine for a two-asset crypto-invariant vAMM."""

from vamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from vamm.errors import (
    DidNotConvergeError,
    IndexOutOfRangeError,
    InsufficientLiquidityError,
    LossDetectedError,
    NonPositiveAmountError,
    SameAssetError,
    SlippageExceededError,
    TradeSizingError,
    UnsafeIntermediateValueError,
    UnsafeParameterError,
    UnsafeValueError,
    VammError,
)
from vamm.pool import Pool
from vamm.positions import MakerPosition, TakerPosition
from vamm.quoter import TradeQuote
from vamm.snapshot import VammSnapshot
from vamm.state import PoolState, RepegState

__version__ = "0.1.0"
__all__ = [
    # Pool
    "Pool",
    "PoolConfig",
    "DEFAULT_POOL_CONFIG",
    "PoolState",
    "RepegState",
    "VammSnapshot",
    # Value objects
    "TradeQuote",
    "MakerPosition",
    "TakerPosition",
    # Errors
    "VammError",
    "UnsafeValueError",
    "UnsafeParameterError",
    "UnsafeIntermediateValueError",
    "DidNotConvergeError",
    "SlippageExceededError",
    "LossDetectedError",
    "SameAssetError",
    "IndexOutOfRangeError",
    "NonPositiveAmountError",
    "InsufficientLiquidityError",
    "TradeSizingError",
    "__version__",
]
