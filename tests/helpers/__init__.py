"""Test helpers module for shared test utilities.

- constants: the reference pool's balances and parameters
- factories: PoolState and Pool factory functions
"""

from tests.helpers.constants import (
    ADJUSTMENT_STEP,
    ALLOWED_EXTRA_PROFIT,
    BASE_BALANCE,
    MA_HALF_TIME,
    PRICE_SCALE,
    QUOTE_BALANCE,
    START_TIME,
)
from tests.helpers.factories import make_pool, make_state

__all__ = [
    # Constants
    "QUOTE_BALANCE",
    "BASE_BALANCE",
    "PRICE_SCALE",
    "MA_HALF_TIME",
    "ADJUSTMENT_STEP",
    "ALLOWED_EXTRA_PROFIT",
    "START_TIME",
    # Factories
    "make_state",
    "make_pool",
]
