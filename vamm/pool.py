"""Pool façade: quotes, trades and positions over one in-memory pool."""

from __future__ import annotations

import structlog

from vamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from vamm.errors import SlippageExceededError
from vamm.math import get_D
from vamm.oracle import tweak_price
from vamm.positions import MakerPosition, TakerPosition, maker_position, taker_notional_and_pnl
from vamm.quoter import TradeQuote, calc_mark_price, get_dx, get_dy
from vamm.snapshot import VammSnapshot
from vamm.state import PoolState

logger = structlog.get_logger()

# Coin indices
QUOTE = 0
BASE = 1


class Pool:
    """In-memory mirror of one vAMM.

    Shorts sell base into the pool for quote, longs buy base with quote.
    All sizes are in base units. Not thread-safe; use one Pool per owner.
    """

    def __init__(self, state: PoolState, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self._state = state
        self.config = config

    @classmethod
    def from_snapshot(
        cls, snapshot: VammSnapshot, config: PoolConfig = DEFAULT_POOL_CONFIG
    ) -> Pool:
        return cls(snapshot.to_state(), config)

    def snapshot(self) -> PoolState:
        """Copy of the current state."""
        return self._state.copy()

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def quote_short(self, size: float) -> TradeQuote:
        """Quote output for selling size base."""
        s = self._state
        return get_dy(
            BASE,
            QUOTE,
            size,
            s.balances,
            s.D,
            s.price_scale,
            self.config.A,
            self.config.gamma,
            self.config.mid_fee,
        )

    def quote_long(self, size: float) -> TradeQuote:
        """Quote input needed to buy size base."""
        s = self._state
        return get_dx(
            QUOTE,
            BASE,
            size,
            s.balances,
            s.D,
            s.price_scale,
            self.config.A,
            self.config.gamma,
            self.config.mid_fee,
        )

    def mark_price(self) -> float:
        s = self._state
        return calc_mark_price(
            s.balances[QUOTE],
            s.balances[BASE] * s.price_scale,
            self.config.A,
            self.config.gamma,
            s.D,
            s.price_scale,
        )

    def get_D(self) -> float:
        """Invariant recomputed from the current balances."""
        s = self._state
        return get_D(self.config.A, self.config.gamma, s.balances, s.price_scale)

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------

    def execute_short(
        self, size: float, min_output: float, timestamp: int | None = None
    ) -> TradeQuote:
        """Sell size base; fails if the quote output is below min_output.

        Raises:
            SlippageExceededError: Output below min_output; state is unchanged
            VammError: Any quoting or repeg error
        """
        quote = self.quote_short(size)
        if quote.amount < min_output:
            raise SlippageExceededError(f"short output {quote.amount} below minimum {min_output}")
        self._apply_trade(-quote.amount, size, quote.amount / size, timestamp)
        logger.debug("vamm_short", size=size, output=quote.amount, fee=quote.fee)
        return quote

    def execute_long(
        self, size: float, max_input: float, timestamp: int | None = None
    ) -> TradeQuote:
        """Buy size base; fails if the required quote input exceeds max_input.

        Raises:
            SlippageExceededError: Input above max_input; state is unchanged
            VammError: Any quoting or repeg error
        """
        quote = self.quote_long(size)
        if quote.amount > max_input:
            raise SlippageExceededError(f"long input {quote.amount} above maximum {max_input}")
        self._apply_trade(quote.amount, -size, quote.amount / size, timestamp)
        logger.debug("vamm_long", size=size, input=quote.amount, fee=quote.fee)
        return quote

    def refresh(self, timestamp: int) -> None:
        """Advance the oracle without a trade; last_prices becomes the implied price."""
        state = self._state.copy()
        self._tweak(state, trade_price=0.0, timestamp=timestamp)
        self._state = state

    def _apply_trade(
        self, d_quote: float, d_base: float, trade_price: float, timestamp: int | None
    ) -> None:
        # Work on a copy so a failed price update leaves the pool untouched
        state = self._state.copy()
        state.balances[QUOTE] += d_quote
        state.balances[BASE] += d_base
        if timestamp is None:
            timestamp = state.last_prices_timestamp + self.config.trade_interval
        self._tweak(state, trade_price=trade_price, timestamp=timestamp)
        self._state = state

    def _tweak(self, state: PoolState, trade_price: float, timestamp: int) -> None:
        xp = [state.balances[QUOTE], state.balances[BASE] * state.price_scale]
        tweak_price(state, self.config.A, self.config.gamma, xp, trade_price, 0.0, timestamp)

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def maker_position(
        self, amount: float, vusd: float, vasset: float, mint_dtoken: float
    ) -> MakerPosition:
        """Value amount dTokens of a maker who minted mint_dtoken for (vusd, vasset)."""
        return maker_position(
            self._state,
            amount,
            vusd,
            vasset,
            mint_dtoken,
            self.config.A,
            self.config.gamma,
            self.config.mid_fee,
        )

    def taker_pnl(self, position: float, open_notional: float) -> TakerPosition:
        """Notional and unrealized PnL of closing a taker position now."""
        s = self._state
        return taker_notional_and_pnl(
            position,
            open_notional,
            s.balances,
            s.D,
            s.price_scale,
            self.config.A,
            self.config.gamma,
            self.config.mid_fee,
        )
