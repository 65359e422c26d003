"""Mutable pool state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class RepegState(str, Enum):
    """Repeg hysteresis latch (the contract's not_adjusted flag).

    PENDING_REPEG is entered once profit allows moving price_scale and stays
    set across trades until a repeg is either committed or abandoned.
    """

    ADJUSTED = "adjusted"
    PENDING_REPEG = "pending_repeg"


@dataclass
class PoolState:
    """Everything about a pool that changes with trading.

    Attributes:
        balances: [quote, base] reserves; base in native units, not price-scaled
        D: Invariant in price-scaled space
        price_scale: Peg converting base into quote units for the curve math
        price_oracle: EMA of last_prices
        last_prices: Most recent trade or implied price
        last_prices_timestamp: Time of the last EMA update (seconds)
        ma_half_time: EMA half-life (seconds)
        total_supply: LP share (dToken) supply
        xcp_profit: Cumulative profit counter
        virtual_price: xcp value per LP share
        adjustment_step: Minimum relative price_scale move per repeg
        allowed_extra_profit: Profit kept in reserve before repegging
        repeg_state: Hysteresis latch
    """

    balances: list[float]
    D: float
    price_scale: float
    price_oracle: float
    last_prices: float
    ma_half_time: float
    total_supply: float
    xcp_profit: float
    virtual_price: float
    adjustment_step: float
    allowed_extra_profit: float
    repeg_state: RepegState = RepegState.ADJUSTED
    last_prices_timestamp: int = 0

    @property
    def not_adjusted(self) -> bool:
        """Contract-compatible view of the latch."""
        return self.repeg_state is RepegState.PENDING_REPEG

    def copy(self) -> PoolState:
        """Independent copy; mutating it never touches this state."""
        return replace(self, balances=list(self.balances))
