"""Tests for Pool quotes, trades and snapshots."""

import pytest

from vamm.errors import SlippageExceededError, UnsafeIntermediateValueError
from vamm.pool import Pool
from vamm.snapshot import VammSnapshot
from tests.helpers import BASE_BALANCE, PRICE_SCALE, QUOTE_BALANCE, START_TIME, make_pool, make_state


class TestQuotes:
    def test_balanced_mark_price(self, pool: Pool) -> None:
        assert pool.mark_price() == pytest.approx(PRICE_SCALE, rel=1e-9)

    def test_quotes_do_not_mutate(self, pool: Pool) -> None:
        before = pool.snapshot()
        pool.quote_long(10.0)
        pool.quote_short(10.0)
        assert pool.snapshot() == before

    def test_snapshot_is_a_copy(self, pool: Pool) -> None:
        snapshot = pool.snapshot()
        snapshot.balances[0] = 0.0
        snapshot.price_scale = 1.0
        assert pool.snapshot().balances[0] == QUOTE_BALANCE
        assert pool.snapshot().price_scale == PRICE_SCALE

    def test_long_for_whole_reserve(self, pool: Pool) -> None:
        with pytest.raises(UnsafeIntermediateValueError, match=r"x\[1\]"):
            pool.quote_long(BASE_BALANCE)

    def test_get_D_matches_state(self, pool: Pool) -> None:
        assert pool.get_D() == pytest.approx(pool.snapshot().D, rel=1e-12)


class TestExecuteLong:
    def test_long_updates_state(self, pool: Pool) -> None:
        mark_before = pool.mark_price()
        quote = pool.execute_long(5.0, float("inf"))
        state = pool.snapshot()

        assert quote.amount / 5.0 == pytest.approx(PRICE_SCALE, rel=0.02)
        assert state.balances == [QUOTE_BALANCE + quote.amount, BASE_BALANCE - 5.0]
        assert state.last_prices == pytest.approx(quote.amount / 5.0)
        assert state.last_prices_timestamp == START_TIME + pool.config.trade_interval
        assert state.virtual_price > 1.0
        assert pool.mark_price() > mark_before
        assert pool.mark_price() == pytest.approx(quote.mark_price)

    def test_explicit_timestamp(self, pool: Pool) -> None:
        pool.execute_long(5.0, float("inf"), timestamp=START_TIME + 100)
        assert pool.snapshot().last_prices_timestamp == START_TIME + 100

    def test_slippage_exceeded_leaves_state(self, pool: Pool) -> None:
        before = pool.snapshot()
        with pytest.raises(SlippageExceededError):
            pool.execute_long(5.0, 1.0)
        assert pool.snapshot() == before


class TestExecuteShort:
    def test_short_lowers_mark(self, pool: Pool) -> None:
        mark_before = pool.mark_price()
        quote = pool.execute_short(5.0, 0.0)
        state = pool.snapshot()

        assert state.balances == [QUOTE_BALANCE - quote.amount, BASE_BALANCE + 5.0]
        assert pool.mark_price() < mark_before
        assert state.last_prices == pytest.approx(quote.amount / 5.0)

    def test_slippage_exceeded_leaves_state(self, pool: Pool) -> None:
        before = pool.snapshot()
        with pytest.raises(SlippageExceededError):
            pool.execute_short(5.0, 10_000.0)
        assert pool.snapshot() == before

    def test_round_trip_loses_fees(self, pool: Pool) -> None:
        paid = pool.execute_long(5.0, float("inf")).amount
        received = pool.execute_short(5.0, 0.0).amount
        assert received < paid


class TestProfitInvariant:
    def test_virtual_price_never_drops(self, pool: Pool) -> None:
        """Alternating trades only ever add fees to the pool."""
        virtual_price = pool.snapshot().virtual_price
        for _ in range(5):
            pool.execute_long(10.0, float("inf"))
            pool.execute_short(10.0, 0.0)
            current = pool.snapshot().virtual_price
            assert current >= virtual_price
            virtual_price = current


class TestRefresh:
    def test_refresh_sets_implied_price(self, pool: Pool) -> None:
        pool.execute_long(20.0, float("inf"))
        pool.refresh(START_TIME + 600)
        state = pool.snapshot()
        assert state.last_prices == pytest.approx(pool.mark_price(), rel=1e-4)
        assert state.last_prices_timestamp == START_TIME + 600


class TestFromSnapshot:
    def test_round_trip_through_snapshot(self) -> None:
        source = make_pool()
        pool = Pool.from_snapshot(VammSnapshot.from_state(make_state()))
        assert pool.snapshot() == source.snapshot()
        assert pool.mark_price() == source.mark_price()
