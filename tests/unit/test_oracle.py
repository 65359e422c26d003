"""Tests for the price oracle EMA, profit accounting and repegging."""

import pytest

from vamm.config import DEFAULT_POOL_CONFIG
from vamm.errors import LossDetectedError
from vamm.math import solve_D
from vamm.oracle import halfpow, tweak_price
from vamm.state import PoolState, RepegState
from tests.helpers import MA_HALF_TIME, PRICE_SCALE, START_TIME, make_state

A = DEFAULT_POOL_CONFIG.A
GAMMA = DEFAULT_POOL_CONFIG.gamma


def _xp(state: PoolState) -> list[float]:
    return [state.balances[0], state.balances[1] * state.price_scale]


def _tweak(
    state: PoolState,
    trade_price: float = 0.0,
    new_D: float = 0.0,
    timestamp: int = START_TIME,
) -> None:
    tweak_price(state, A, GAMMA, _xp(state), trade_price, new_D, timestamp)


class TestHalfpow:
    def test_halfpow(self) -> None:
        assert halfpow(0) == 1.0
        assert halfpow(1) == 0.5
        assert halfpow(2) == 0.25


class TestEmaUpdate:
    """price_oracle moves toward last_prices with the configured half-life."""

    def test_one_half_life(self) -> None:
        state = make_state(last_prices=1_100.0, price_oracle=1_000.0)
        _tweak(state, trade_price=PRICE_SCALE, timestamp=START_TIME + int(MA_HALF_TIME))
        assert state.price_oracle == pytest.approx(1_050.0)
        assert state.last_prices_timestamp == START_TIME + int(MA_HALF_TIME)

    def test_no_update_without_time_passing(self) -> None:
        state = make_state(last_prices=1_100.0, price_oracle=1_000.0)
        _tweak(state, trade_price=PRICE_SCALE, timestamp=START_TIME)
        assert state.price_oracle == 1_000.0
        assert state.last_prices_timestamp == START_TIME

    def test_no_update_for_older_timestamp(self) -> None:
        state = make_state(last_prices=1_100.0, price_oracle=1_000.0)
        _tweak(state, trade_price=PRICE_SCALE, timestamp=START_TIME - 60)
        assert state.price_oracle == 1_000.0
        assert state.last_prices_timestamp == START_TIME


class TestLastPrices:
    def test_trade_price_is_used_directly(self) -> None:
        state = make_state()
        _tweak(state, trade_price=1_001.5)
        assert state.last_prices == 1_001.5

    def test_implied_price_without_trade(self) -> None:
        """With no trade price, a probe trade prices the pool at its mark."""
        state = make_state(last_prices=1_100.0)
        _tweak(state)
        assert state.last_prices == pytest.approx(PRICE_SCALE, rel=1e-4)


class TestProfitAccounting:
    def test_D_recomputed(self) -> None:
        state = make_state()
        expected = solve_D(A, GAMMA, _xp(state))
        state.D = 1.0
        _tweak(state, trade_price=PRICE_SCALE)
        assert state.D == expected

    def test_known_D_is_used(self) -> None:
        """A caller-supplied D skips the solve and raises virtual price with it."""
        state = make_state()
        new_D = state.D * 1.001
        _tweak(state, trade_price=PRICE_SCALE, new_D=new_D)
        assert state.D == new_D
        assert state.virtual_price == pytest.approx(1.001)
        assert state.xcp_profit == pytest.approx(1.001)

    def test_first_update_defaults_to_one(self) -> None:
        """Without a previous virtual price, both counters start at 1."""
        state = make_state()
        state.virtual_price = 0.0
        state.xcp_profit = 0.0
        _tweak(state, trade_price=PRICE_SCALE)
        assert state.virtual_price == 1.0
        assert state.xcp_profit == 1.0

    def test_loss_detected(self) -> None:
        """A drop in virtual price is fatal."""
        state = make_state()
        with pytest.raises(LossDetectedError):
            _tweak(state, trade_price=PRICE_SCALE, new_D=state.D * 0.99)

    def test_rounding_noise_never_lowers_virtual_price(self) -> None:
        """A drop within the tolerance is accepted but not stored."""
        state = make_state()
        _tweak(state, trade_price=PRICE_SCALE, new_D=state.D * (1 - 5e-13))
        assert state.virtual_price == 1.0
        assert state.xcp_profit == 1.0

    def test_repeated_noise_is_detected(self) -> None:
        """Small drops are measured against the stored value, so they cannot add up."""
        state = make_state()
        with pytest.raises(LossDetectedError):
            for _ in range(3):
                _tweak(state, trade_price=PRICE_SCALE, new_D=state.D * (1 - 5e-13))
        assert state.virtual_price == 1.0


class TestRepeg:
    """price_scale moves toward price_oracle only when profit allows."""

    def test_no_repeg_with_insufficient_profit(self) -> None:
        state = make_state(price_oracle=1_100.0)
        _tweak(state, trade_price=1_100.0)
        assert state.price_scale == PRICE_SCALE
        assert state.repeg_state is RepegState.ADJUSTED

    def test_repeg_committed(self) -> None:
        """Enough profit and a distant oracle move price_scale one step."""
        state = make_state(price_oracle=1_100.0, virtual_price=1.1)
        xp = _xp(state)
        _tweak(state, trade_price=1_100.0)

        # norm = 0.1, adjustment_step = norm / 10
        expected_scale = (PRICE_SCALE * 0.09 + 0.01 * 1_100.0) / 0.1
        assert state.price_scale == pytest.approx(expected_scale)
        assert state.D == pytest.approx(
            solve_D(A, GAMMA, [xp[0], xp[1] * expected_scale / PRICE_SCALE])
        )
        assert state.virtual_price > 1
        assert state.repeg_state is RepegState.PENDING_REPEG

    def test_repeg_rejected_releases_latch(self) -> None:
        """A latched repeg that would eat too much profit is abandoned."""
        state = make_state(
            price_oracle=1_100.0,
            xcp_profit=1.5,
            repeg_state=RepegState.PENDING_REPEG,
        )
        D_unadjusted = solve_D(A, GAMMA, _xp(state))
        _tweak(state, trade_price=1_100.0)

        assert state.price_scale == PRICE_SCALE
        assert state.repeg_state is RepegState.ADJUSTED
        assert state.D == D_unadjusted
        assert state.virtual_price == pytest.approx(1.0)

    def test_latch_released_when_oracle_converges(self) -> None:
        state = make_state(repeg_state=RepegState.PENDING_REPEG)
        _tweak(state, trade_price=PRICE_SCALE)
        assert state.price_scale == PRICE_SCALE
        assert state.repeg_state is RepegState.ADJUSTED

    def test_not_adjusted_view(self) -> None:
        state = make_state(repeg_state=RepegState.PENDING_REPEG)
        assert state.not_adjusted is True
        state.repeg_state = RepegState.ADJUSTED
        assert state.not_adjusted is False
