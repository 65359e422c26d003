#!/usr/bin/env python3
"""Replay OHLC candles through an in-memory vAMM and write per-candle results.

Usage:
    python scripts/replay_candles.py \\
        --snapshot pool.json \\
        --candles avax_perp_minutely.csv \\
        --output replay.csv

    # Track a maker's position and APR
    python scripts/replay_candles.py --snapshot pool.json --candles c.csv \\
        --output replay.csv --maker-dtoken 45.5 --maker-vusd 5000 --maker-vasset 45.5 \\
        --maker-liquidity 10000

The snapshot is a JSON-serialized VammSnapshot. Pool parameters come from
VAMM_A, VAMM_GAMMA, VAMM_MID_FEE and VAMM_TRADE_INTERVAL.
"""

import argparse
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vamm.config import PoolConfig  # noqa: E402
from vamm.pool import Pool  # noqa: E402
from vamm.simulation import MakerStake, load_candles, replay, write_rows  # noqa: E402
from vamm.snapshot import VammSnapshot  # noqa: E402

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay candles through a vAMM")
    parser.add_argument("--snapshot", type=Path, required=True, help="Pool snapshot JSON")
    parser.add_argument("--candles", type=Path, required=True, help="OHLC candles CSV")
    parser.add_argument("--output", type=Path, required=True, help="Output CSV")
    parser.add_argument("--limit", type=int, default=None, help="Replay at most N candles")
    parser.add_argument("--unit-trade", type=float, default=5.0, help="Trade size increment")
    parser.add_argument("--maker-dtoken", type=float, default=None)
    parser.add_argument("--maker-vusd", type=float, default=0.0)
    parser.add_argument("--maker-vasset", type=float, default=0.0)
    parser.add_argument(
        "--maker-liquidity",
        type=float,
        default=None,
        help="Quote value deposited by the maker, for APR",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    snapshot = VammSnapshot.model_validate_json(args.snapshot.read_text())
    pool = Pool.from_snapshot(snapshot, PoolConfig.from_env())
    candles = load_candles(args.candles, limit=args.limit)
    logger.info("replay_start", candles=len(candles), mark_price=pool.mark_price())

    maker = None
    if args.maker_dtoken is not None:
        maker = MakerStake(dtoken=args.maker_dtoken, vusd=args.maker_vusd, vasset=args.maker_vasset)

    summary = replay(
        pool,
        candles,
        maker=maker,
        maker_liquidity=args.maker_liquidity,
        unit_trade=args.unit_trade,
    )
    write_rows(args.output, summary.rows)

    print(f"Candles:      {len(summary.rows)}/{len(candles)}")
    print(f"Trades:       {summary.num_trades}")
    print(f"Volume:       {summary.volume:.2f}")
    print(f"Avg slippage: {summary.avg_slippage:.4f}%")
    if summary.error:
        print(f"Stopped:      {summary.error}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
