"""Curve constants for the two-asset crypto-invariant vAMM.

Values mirror the deployed contract, expressed as floats instead of
18-decimal fixed-point integers.
"""

N_COINS = 2

# A is stored multiplied by A_MULTIPLIER and by N^N (ANN convention)
A_MULTIPLIER = 10_000
MIN_A = N_COINS**N_COINS * A_MULTIPLIER / 10
MAX_A = N_COINS**N_COINS * A_MULTIPLIER * 100_000

MIN_GAMMA = 1e-8
MAX_GAMMA = 2e-2

MIN_D = 0.1
MAX_D = 1e15

# Smallest representable on-chain unit (1 wei at 18 decimals)
WEI = 1e-18

# Newton-Raphson iteration ceiling for both solvers
MAX_ITERATIONS = 255

# Decimal precision of the raw contract values
QUOTE_DECIMALS = 6
BASE_DECIMALS = 18

# Relative drop in virtual price attributed to float rounding, not to loss
VIRTUAL_PRICE_TOLERANCE = 1e-12

# Deployed pool parameters
DEFAULT_A = 400_000
DEFAULT_GAMMA = 0.000145
DEFAULT_MID_FEE = 0.0005

# Seconds the in-memory clock advances per trade when no timestamp is given
DEFAULT_TRADE_INTERVAL = 3
