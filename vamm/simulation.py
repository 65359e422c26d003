"""Replay historical candles through a pool.

Each candle is turned into a path of target prices; for every target the
replay sizes a trade that moves the mark price there and executes it. After
each candle it records the mark price, depth and, optionally, one maker's
position and PnL.
"""

from __future__ import annotations

import csv
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import structlog

from vamm.errors import VammError
from vamm.pool import Pool
from vamm.sizing import DEFAULT_UNIT_TRADE, depth, optimal_trade_size

logger = structlog.get_logger()

# APR is annualized from per-candle PnL, in percent
DAYS_PER_YEAR = 365
MINUTES_PER_DAY = 1440


@dataclass(frozen=True)
class Candle:
    """One OHLC bar."""

    time: str
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class MakerStake:
    """A maker's dTokens and the (vUSD, vAsset) basis they were minted for."""

    dtoken: float
    vusd: float
    vasset: float


@dataclass(frozen=True)
class ReplayRow:
    epoch: str
    close_price: float
    mark_price: float
    depth: float
    volume: float
    slippage: float
    position: float
    open_notional: float
    unrealized_pnl: float
    apr: float


@dataclass
class ReplaySummary:
    """Aggregate results of a replay.

    Attributes:
        rows: One row per completed candle
        num_trades: Trades executed
        volume: Total quote volume traded
        total_slippage: Sum of per-trade slippage, in percent
        error: Message of the error that stopped the replay, if any
    """

    rows: list[ReplayRow] = field(default_factory=list)
    num_trades: int = 0
    volume: float = 0.0
    total_slippage: float = 0.0
    error: str | None = None

    @property
    def avg_slippage(self) -> float:
        if self.num_trades == 0:
            return 0.0
        return self.total_slippage / self.num_trades


def load_candles(path: Path | str, limit: int | None = None) -> list[Candle]:
    """Read candles from a CSV with time, price_open, price_high, price_low, price_close."""
    candles: list[Candle] = []
    with open(path, newline="") as f:
        for row in csv.DictReader(f):
            candles.append(
                Candle(
                    time=row["time"],
                    open=float(row["price_open"]),
                    high=float(row["price_high"]),
                    low=float(row["price_low"]),
                    close=float(row["price_close"]),
                )
            )
            if limit is not None and len(candles) >= limit:
                break
    return candles


def candle_targets(candle: Candle) -> list[float]:
    """Price path through a candle: low before high on a rising bar, high first otherwise."""
    if candle.close > candle.open:
        return [candle.open, candle.low, candle.high, candle.close]
    return [candle.open, candle.high, candle.low, candle.close]


def _execute(pool: Pool, size: float) -> float:
    """Execute a signed trade with no slippage bound and return its quote amount."""
    if size > 0:
        return pool.execute_long(size, float("inf")).amount
    return pool.execute_short(-size, 0.0).amount


def replay(
    pool: Pool,
    candles: list[Candle],
    maker: MakerStake | None = None,
    maker_liquidity: float | None = None,
    unit_trade: float = DEFAULT_UNIT_TRADE,
    candles_per_day: int = MINUTES_PER_DAY,
) -> ReplaySummary:
    """Trade the pool through every candle's price path.

    A VammError stops the replay; it is logged and stored on the summary
    together with the rows collected so far.

    Args:
        pool: Pool to trade against; mutated
        candles: Candles in time order
        maker: Maker whose position is tracked, if any
        maker_liquidity: Quote value the maker deposited, for APR
        unit_trade: Size increment for trade sizing
        candles_per_day: Candle frequency, for APR

    Returns:
        ReplaySummary
    """
    summary = ReplaySummary()
    mark_price = pool.mark_price()

    try:
        for index, candle in enumerate(candles):
            candle_slippage = 0.0
            candle_trades = 0
            candle_volume = 0.0

            for target in candle_targets(candle):
                size = optimal_trade_size(pool, target, unit_trade)
                if size == 0:
                    continue
                quote_amount = _execute(pool, size)

                avg_price = quote_amount / abs(size)
                candle_slippage += abs(avg_price - mark_price) * 100 / mark_price
                mark_price = pool.mark_price()
                candle_volume += quote_amount
                candle_trades += 1

            summary.num_trades += candle_trades
            summary.volume += candle_volume
            summary.total_slippage += candle_slippage

            position = open_notional = unrealized_pnl = apr = 0.0
            if maker is not None:
                maker_pos = pool.maker_position(
                    maker.dtoken, maker.vusd, maker.vasset, maker.dtoken
                )
                position = maker_pos.position
                open_notional = maker_pos.open_notional
                unrealized_pnl = maker_pos.unrealized_pnl
                if maker_liquidity:
                    annualized = unrealized_pnl * candles_per_day * DAYS_PER_YEAR * 100
                    apr = annualized / (maker_liquidity * (index + 1))

            summary.rows.append(
                ReplayRow(
                    epoch=candle.time,
                    close_price=candle.close,
                    mark_price=mark_price,
                    depth=depth(pool, unit_trade=unit_trade),
                    volume=candle_volume,
                    slippage=candle_slippage / candle_trades if candle_trades else 0.0,
                    position=position,
                    open_notional=open_notional,
                    unrealized_pnl=unrealized_pnl,
                    apr=apr,
                )
            )
            logger.info(
                "vamm_replay_candle",
                epoch=candle.time,
                price_scale=pool.snapshot().price_scale,
                mark_price=mark_price,
                trades=candle_trades,
            )
    except VammError as err:
        logger.error("vamm_replay_stopped", candles_done=len(summary.rows), error=str(err))
        summary.error = str(err)

    logger.info(
        "vamm_replay_finished",
        num_trades=summary.num_trades,
        volume=summary.volume,
        avg_slippage=summary.avg_slippage,
    )
    return summary


def write_rows(path: Path | str, rows: list[ReplayRow]) -> None:
    """Write replay rows as CSV."""
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=[fld.name for fld in fields(ReplayRow)])
        writer.writeheader()
        for row in rows:
            writer.writerow(asdict(row))
