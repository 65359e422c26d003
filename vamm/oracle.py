"""Price oracle EMA, profit accounting and price_scale repegging.

After every trade the pool:

1. folds last_prices into the price_oracle EMA,
2. refreshes D and last_prices,
3. updates virtual_price / xcp_profit (a drop is fatal),
4. moves price_scale toward price_oracle by at most one adjustment_step,
   but only when the pool has earned enough to pay for the move.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from vamm.constants import N_COINS, VIRTUAL_PRICE_TOLERANCE
from vamm.errors import LossDetectedError
from vamm.math import geometric_mean, solve_D, solve_y
from vamm.state import PoolState, RepegState

logger = structlog.get_logger()

# Probe trade size for the implied price, as a fraction of the quote balance
_PROBE_FRACTION = 1e-6


def halfpow(power: float) -> float:
    """0.5 ** power."""
    return 0.5**power


def _virtual_price(D: float, price_scale: float, total_supply: float) -> float:
    xp = [D / N_COINS, D / (N_COINS * price_scale)]
    return geometric_mean(xp) / total_supply


def _implied_price(
    A: float, gamma: float, xp: Sequence[float], D: float, price_scale: float
) -> float:
    """Marginal price from a tiny quote-in probe trade."""
    dx_price = xp[0] * _PROBE_FRACTION
    probe = [xp[0] + dx_price, xp[1]]
    return price_scale * dx_price / (xp[1] - solve_y(A, gamma, probe, D, 1))


def tweak_price(
    state: PoolState,
    A: float,
    gamma: float,
    xp: Sequence[float],
    trade_price: float,
    new_D: float,
    timestamp: int,
) -> None:
    """Update oracle, invariant, profit counters and possibly price_scale.

    Mutates state in place.

    Args:
        state: Pool state to update
        A: Amplification
        gamma: Curvature
        xp: Post-trade price-scaled balances
        trade_price: Execution price of the trade, or 0 to derive an implied
            price from the curve
        new_D: Post-trade invariant if already known, or 0 to recompute
        timestamp: Event time in seconds; the EMA only advances when this is
            later than state.last_prices_timestamp

    Raises:
        LossDetectedError: If virtual_price dropped
        VammError: Any solver error, unchanged
    """
    price_oracle = state.price_oracle
    price_scale = state.price_scale

    if state.last_prices_timestamp < timestamp:
        alpha = halfpow((timestamp - state.last_prices_timestamp) / state.ma_half_time)
        price_oracle = state.last_prices * (1 - alpha) + price_oracle * alpha
        state.price_oracle = price_oracle
        state.last_prices_timestamp = timestamp

    # Callers that changed liquidity already know the new D
    D_unadjusted = new_D if new_D else solve_D(A, gamma, xp)

    if trade_price > 0:
        state.last_prices = trade_price
    else:
        state.last_prices = _implied_price(A, gamma, xp, D_unadjusted, price_scale)

    old_xcp_profit = state.xcp_profit
    old_virtual_price = state.virtual_price

    # Profit numbers without price adjustment first
    xcp_profit = 1.0
    virtual_price = 1.0
    if old_virtual_price > 0:
        virtual_price = _virtual_price(D_unadjusted, price_scale, state.total_supply)
        if virtual_price < old_virtual_price * (1 - VIRTUAL_PRICE_TOLERANCE):
            logger.error(
                "vamm_loss_detected",
                virtual_price=virtual_price,
                old_virtual_price=old_virtual_price,
            )
            raise LossDetectedError(
                f"virtual price dropped from {old_virtual_price} to {virtual_price}"
            )
        # Drops within the tolerance are rounding noise; never store them
        virtual_price = max(virtual_price, old_virtual_price)
        xcp_profit = old_xcp_profit * virtual_price / old_virtual_price

    state.xcp_profit = xcp_profit

    norm = abs(price_oracle / price_scale - 1)
    adjustment_step = max(state.adjustment_step, norm / 10)

    # 2 * (virtual_price - 1) > xcp_profit - 1 + 2 * allowed_extra_profit, rearranged
    if (
        state.repeg_state is RepegState.ADJUSTED
        and virtual_price * 2 - 1 > xcp_profit + 2 * state.allowed_extra_profit
        and norm > adjustment_step
        and old_virtual_price > 0
    ):
        state.repeg_state = RepegState.PENDING_REPEG

    needs_adjustment = state.repeg_state is RepegState.PENDING_REPEG

    if needs_adjustment and norm > adjustment_step and old_virtual_price > 0:
        p_new = (price_scale * (norm - adjustment_step) + adjustment_step * price_oracle) / norm

        D = solve_D(A, gamma, [xp[0], xp[1] * p_new / price_scale])
        new_virtual_price = _virtual_price(D, p_new, state.total_supply)

        if new_virtual_price > 1 and 2 * new_virtual_price - 1 > xcp_profit:
            logger.debug(
                "vamm_repeg_committed",
                old_price_scale=price_scale,
                price_scale=p_new,
                price_oracle=price_oracle,
                virtual_price=new_virtual_price,
            )
            state.price_scale = p_new
            state.D = D
            state.virtual_price = new_virtual_price
            return

        logger.warning(
            "vamm_repeg_rejected",
            price_scale=price_scale,
            candidate_price_scale=p_new,
            candidate_virtual_price=new_virtual_price,
            xcp_profit=xcp_profit,
        )
        state.repeg_state = RepegState.ADJUSTED
        state.D = D_unadjusted
        state.virtual_price = virtual_price
        return

    # No price_scale adjustment; still refresh the profit counter and D
    state.D = D_unadjusted
    state.virtual_price = virtual_price

    # norm dropped below adjustment_step while latched
    if needs_adjustment:
        state.repeg_state = RepegState.ADJUSTED
