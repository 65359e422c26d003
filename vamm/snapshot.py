"""Pool snapshots.

A snapshot is the pool state as read from the contract's vars() call, or
as persisted by the engine. Raw contract values are fixed-point uint256
integers; they are decoded exactly with Decimal before becoming floats.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vamm.constants import BASE_DECIMALS, QUOTE_DECIMALS
from vamm.state import PoolState, RepegState

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

# Number of values returned by the contract's vars() call
ONCHAIN_VARS_COUNT = 13


def parse_uint256(value: Any) -> int:
    """Parse a raw contract value (int or decimal string) as uint256.

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")
    try:
        int_value = int(value)
    except ValueError as err:
        raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return int_value


def from_fixed(value: Any, decimals: int) -> float:
    """Decode a fixed-point uint256 with the given decimals into a float."""
    return float(Decimal(parse_uint256(value)).scaleb(-decimals))


class VammSnapshot(BaseModel):
    """Read-only pool state, decoded to floats."""

    model_config = ConfigDict(frozen=True)

    balances: tuple[float, float]
    price_scale: float = Field(gt=0)
    price_oracle: float = Field(gt=0)
    last_prices: float = Field(gt=0)
    ma_half_time: float = Field(gt=0, description="EMA half-life in seconds")
    total_supply: float = Field(gt=0)
    xcp_profit: float = Field(ge=0)
    virtual_price: float = Field(ge=0)
    adjustment_step: float = Field(ge=0)
    allowed_extra_profit: float = Field(ge=0)
    not_adjusted: bool = False
    D: float = Field(gt=0)
    last_prices_timestamp: int = Field(default=0, ge=0)

    @classmethod
    def from_onchain_vars(
        cls, values: Sequence[Any], last_prices_timestamp: int = 0
    ) -> VammSnapshot:
        """Decode the contract's vars() tuple.

        Order: balances[0] (6 decimals), balances[1], price_scale,
        price_oracle, last_prices (18 decimals), ma_half_time (seconds, raw),
        total_supply, xcp_profit, virtual_price, adjustment_step,
        allowed_extra_profit (18 decimals), not_adjusted (bool), D (18 decimals).

        The contract does not expose the EMA timestamp; pass it separately.

        Raises:
            ValueError: On a wrong number of values or an invalid uint256
        """
        if len(values) != ONCHAIN_VARS_COUNT:
            raise ValueError(f"expected {ONCHAIN_VARS_COUNT} values, got {len(values)}")

        (
            balance_quote,
            balance_base,
            price_scale,
            price_oracle,
            last_prices,
            ma_half_time,
            total_supply,
            xcp_profit,
            virtual_price,
            adjustment_step,
            allowed_extra_profit,
            not_adjusted,
            D,
        ) = values

        return cls(
            balances=(
                from_fixed(balance_quote, QUOTE_DECIMALS),
                from_fixed(balance_base, BASE_DECIMALS),
            ),
            price_scale=from_fixed(price_scale, BASE_DECIMALS),
            price_oracle=from_fixed(price_oracle, BASE_DECIMALS),
            last_prices=from_fixed(last_prices, BASE_DECIMALS),
            ma_half_time=float(parse_uint256(ma_half_time)),
            total_supply=from_fixed(total_supply, BASE_DECIMALS),
            xcp_profit=from_fixed(xcp_profit, BASE_DECIMALS),
            virtual_price=from_fixed(virtual_price, BASE_DECIMALS),
            adjustment_step=from_fixed(adjustment_step, BASE_DECIMALS),
            allowed_extra_profit=from_fixed(allowed_extra_profit, BASE_DECIMALS),
            not_adjusted=bool(not_adjusted),
            D=from_fixed(D, BASE_DECIMALS),
            last_prices_timestamp=last_prices_timestamp,
        )

    @classmethod
    def from_state(cls, state: PoolState) -> VammSnapshot:
        return cls(
            balances=(state.balances[0], state.balances[1]),
            price_scale=state.price_scale,
            price_oracle=state.price_oracle,
            last_prices=state.last_prices,
            ma_half_time=state.ma_half_time,
            total_supply=state.total_supply,
            xcp_profit=state.xcp_profit,
            virtual_price=state.virtual_price,
            adjustment_step=state.adjustment_step,
            allowed_extra_profit=state.allowed_extra_profit,
            not_adjusted=state.not_adjusted,
            D=state.D,
            last_prices_timestamp=state.last_prices_timestamp,
        )

    def to_state(self) -> PoolState:
        """Fresh mutable state for a Pool."""
        return PoolState(
            balances=list(self.balances),
            D=self.D,
            price_scale=self.price_scale,
            price_oracle=self.price_oracle,
            last_prices=self.last_prices,
            ma_half_time=self.ma_half_time,
            total_supply=self.total_supply,
            xcp_profit=self.xcp_profit,
            virtual_price=self.virtual_price,
            adjustment_step=self.adjustment_step,
            allowed_extra_profit=self.allowed_extra_profit,
            repeg_state=RepegState.PENDING_REPEG if self.not_adjusted else RepegState.ADJUSTED,
            last_prices_timestamp=self.last_prices_timestamp,
        )
