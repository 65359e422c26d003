"""Tests for trade sizing and depth."""

import pytest

from vamm.errors import TradeSizingError
from vamm.pool import Pool
from vamm.sizing import depth, optimal_trade_size

UNIT = 5.0


class TestOptimalTradeSize:
    def test_already_at_target(self, pool: Pool) -> None:
        assert optimal_trade_size(pool, pool.mark_price()) == 0.0

    def test_long_reaches_target(self, pool: Pool) -> None:
        target = pool.mark_price() * 1.002
        size = optimal_trade_size(pool, target, UNIT)

        assert size > 0
        assert size % UNIT == 0
        assert pool.quote_long(size).mark_price >= target
        if size > UNIT:
            assert pool.quote_long(size - UNIT).mark_price < target

    def test_short_reaches_target(self, pool: Pool) -> None:
        target = pool.mark_price() * 0.998
        size = optimal_trade_size(pool, target, UNIT)

        assert size < 0
        assert size % UNIT == 0
        assert pool.quote_short(-size).mark_price <= target

    def test_sizing_does_not_trade(self, pool: Pool) -> None:
        before = pool.snapshot()
        optimal_trade_size(pool, pool.mark_price() * 1.002, UNIT)
        assert pool.snapshot() == before

    def test_gives_up_after_convergence_multiple(self, pool: Pool) -> None:
        with pytest.raises(TradeSizingError, match="no long size"):
            optimal_trade_size(
                pool, pool.mark_price() * 2, unit_trade=1.0, convergence_multiple=3
            )

    def test_overshoot(self, pool: Pool) -> None:
        """A unit too coarse for the target jumps past it."""
        with pytest.raises(TradeSizingError, match="overshot"):
            optimal_trade_size(
                pool, pool.mark_price() * 1.00001, unit_trade=50.0, max_overshoot=1e-5
            )


class TestDepth:
    def test_depth_is_positive(self, pool: Pool) -> None:
        assert depth(pool) > 0

    def test_wider_band_is_deeper(self, pool: Pool) -> None:
        assert depth(pool, band=0.01) >= depth(pool, band=0.005)
