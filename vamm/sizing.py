"""Trade sizing against a target mark price."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from vamm.errors import TradeSizingError

if TYPE_CHECKING:
    from vamm.pool import Pool

logger = structlog.get_logger()

DEFAULT_UNIT_TRADE = 5.0
DEFAULT_CONVERGENCE_MULTIPLE = 1000
DEFAULT_MAX_OVERSHOOT = 0.05

# Price band used for depth, in each direction (50 bps)
DEFAULT_DEPTH_BAND = 0.005


def optimal_trade_size(
    pool: Pool,
    target_price: float,
    unit_trade: float = DEFAULT_UNIT_TRADE,
    convergence_multiple: int = DEFAULT_CONVERGENCE_MULTIPLE,
    max_overshoot: float = DEFAULT_MAX_OVERSHOOT,
) -> float:
    """Smallest multiple of unit_trade that moves the mark price past target_price.

    Sizes are quoted, never executed.

    Args:
        pool: Pool to quote against
        target_price: Mark price to reach
        unit_trade: Size increment, in base units
        convergence_multiple: Give up after this many increments
        max_overshoot: Reject a size whose post-trade mark price overshoots
            the target by more than this fraction

    Returns:
        Signed base size: positive to long, negative to short, 0 if the mark
        price already equals the target

    Raises:
        TradeSizingError: If the target is overshot by too much or cannot be
            reached within convergence_multiple increments
        VammError: Any quoting error
    """
    # Start from the committed state; later steps read each quote's post-trade price
    mark_price = pool.mark_price()
    max_size = unit_trade * convergence_multiple
    size = 0.0

    if mark_price < target_price:
        while mark_price < target_price:
            size += unit_trade
            mark_price = pool.quote_long(size).mark_price
            if mark_price > target_price * (1 + max_overshoot):
                raise TradeSizingError(
                    f"mark price {mark_price} overshot target {target_price} at size {size}"
                )
            if size > max_size:
                raise TradeSizingError(f"no long size up to {max_size} reaches {target_price}")
    elif mark_price > target_price:
        while mark_price > target_price:
            size += unit_trade
            mark_price = pool.quote_short(size).mark_price
            if mark_price < target_price * (1 - max_overshoot):
                raise TradeSizingError(
                    f"mark price {mark_price} overshot target {target_price} at size {size}"
                )
            if size > max_size:
                raise TradeSizingError(f"no short size up to {max_size} reaches {target_price}")
        size = -size

    logger.debug("vamm_trade_sized", target_price=target_price, size=size)
    return size


def depth(
    pool: Pool,
    band: float = DEFAULT_DEPTH_BAND,
    unit_trade: float = DEFAULT_UNIT_TRADE,
) -> float:
    """Quote value needed to move the mark price by band, averaged over both sides."""
    mark_price = pool.mark_price()
    up = abs(optimal_trade_size(pool, mark_price * (1 + band), unit_trade))
    down = abs(optimal_trade_size(pool, mark_price * (1 - band), unit_trade))
    return mark_price * (up + down) / 2
