"""Maker and taker position accounting.

A maker's share of the pool is an implied perp position: whatever base the
maker would withdraw beyond the base deposited at mint (vAsset) is a long,
any shortfall a short. Quote (vUSD) flows the same way and becomes the open
notional.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from vamm.constants import MIN_D, N_COINS, WEI
from vamm.errors import InsufficientLiquidityError
from vamm.quoter import get_dx, get_dy
from vamm.state import PoolState

logger = structlog.get_logger()


@dataclass(frozen=True)
class MakerPosition:
    """A maker's implied position.

    Attributes:
        position: Base asset size; positive is long
        open_notional: Quote cost basis of the position
        unrealized_pnl: PnL if the position were closed against the pool now,
            including fees already accrued to the maker
    """

    position: float
    open_notional: float
    unrealized_pnl: float


@dataclass(frozen=True)
class TakerPosition:
    """Value of a position when closed against the pool."""

    notional: float
    unrealized_pnl: float


@dataclass(frozen=True)
class _MakerShare:
    position: float
    open_notional: float
    fee_adjusted_pnl: float
    balances: list[float]
    D: float


def fee_adjusted_pnl(position: float, open_notional: float) -> tuple[float, float]:
    """Realize the part of a maker's open notional that is already settled.

    A negative open notional means the maker withdraws more quote than the
    position cost: that is realized profit on a long and realized loss on a
    short. A positive notional with no position left is accumulated fees.

    Returns:
        Tuple of (realized_pnl, remaining_open_notional)
    """
    if open_notional < 0:
        pnl = 0.0
        if position > 0:
            pnl = -open_notional
        elif position < 0:
            pnl = open_notional
        return pnl, 0.0
    if open_notional > 0 and position == 0:
        return open_notional, 0.0
    return 0.0, open_notional


def maker_share(
    state: PoolState,
    amount: float,
    vusd: float,
    vasset: float,
    mint_dtoken: float,
) -> _MakerShare:
    """Split a maker's share out of the pool.

    Args:
        state: Current pool state (not modified)
        amount: dTokens being valued
        vusd: Quote deposited when the maker's dTokens were minted
        vasset: Base deposited when the maker's dTokens were minted
        mint_dtoken: dTokens minted for that deposit

    Returns:
        The maker's position and the pool that remains without the maker
    """
    balances = list(state.balances)
    if not amount:
        return _MakerShare(0.0, 0.0, 0.0, balances, state.D)

    fraction = amount / state.total_supply
    d_balances = [b * fraction for b in balances]
    balances = [b - d for b, d in zip(balances, d_balances)]
    D = state.D - state.D * fraction

    position = d_balances[N_COINS - 1]
    if amount == mint_dtoken:
        basis_quote = vusd
        position -= vasset
    else:
        basis_quote = vusd * amount / mint_dtoken
        position -= vasset * amount / mint_dtoken

    if position > 0:
        open_notional = basis_quote - d_balances[0]
    else:
        # == 0 with positive notional is fee accumulation
        open_notional = d_balances[0] - basis_quote

    pnl, open_notional = fee_adjusted_pnl(position, open_notional)
    return _MakerShare(position, open_notional, pnl, balances, D)


def taker_notional_and_pnl(
    position: float,
    open_notional: float,
    balances: Sequence[float],
    D: float,
    price_scale: float,
    A: float,
    gamma: float,
    fee_rate: float,
) -> TakerPosition:
    """Close a position against the given pool and report its value.

    Longs sell the base (get_dy); shorts buy it back (get_dx).

    Raises:
        InsufficientLiquidityError: If a short is larger than the pool's
            base reserve
        VammError: Any quoting error, unchanged
    """
    if D <= MIN_D - WEI or position == 0:
        return TakerPosition(notional=0.0, unrealized_pnl=0.0)

    if position > 0:
        notional = get_dy(1, 0, position, balances, D, price_scale, A, gamma, fee_rate).amount
        return TakerPosition(notional=notional, unrealized_pnl=notional - open_notional)

    size = -position
    if size > balances[N_COINS - 1]:
        logger.debug(
            "vamm_insufficient_liquidity",
            size=size,
            base_balance=balances[N_COINS - 1],
        )
        raise InsufficientLiquidityError(
            f"pool holds {balances[N_COINS - 1]} base, cannot close short of {size}"
        )
    notional = get_dx(0, 1, size, balances, D, price_scale, A, gamma, fee_rate).amount
    return TakerPosition(notional=notional, unrealized_pnl=open_notional - notional)


def maker_position(
    state: PoolState,
    amount: float,
    vusd: float,
    vasset: float,
    mint_dtoken: float,
    A: float,
    gamma: float,
    fee_rate: float,
) -> MakerPosition:
    """Value a maker's dTokens as a position with unrealized PnL.

    The implied position is closed against the pool that remains after the
    maker's share is removed; realized fee PnL is added on top.
    """
    share = maker_share(state, amount, vusd, vasset, mint_dtoken)
    taker = taker_notional_and_pnl(
        share.position,
        share.open_notional,
        share.balances,
        share.D,
        state.price_scale,
        A,
        gamma,
        fee_rate,
    )
    return MakerPosition(
        position=share.position,
        open_notional=share.open_notional,
        unrealized_pnl=taker.unrealized_pnl + share.fee_adjusted_pnl,
    )
