"""Pytest configuration and fixtures."""

import pytest

from vamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from vamm.pool import Pool
from vamm.state import PoolState
from tests.helpers import make_pool, make_state


@pytest.fixture
def config() -> PoolConfig:
    """Deployed pool parameters."""
    return DEFAULT_POOL_CONFIG


@pytest.fixture
def state() -> PoolState:
    """Balanced reference pool state at virtual price 1."""
    return make_state()


@pytest.fixture
def pool() -> Pool:
    """Pool over the balanced reference state."""
    return make_pool()
