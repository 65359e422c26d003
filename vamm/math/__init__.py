"""Newton-Raphson solvers for the crypto-invariant curve.

The contract computes with 18-decimal fixed-point integers. This package
uses IEEE-754 doubles instead: results are an approximation for quoting
and simulation, not for settlement, and will differ from the chain in the
last digits. Every caller (quoting, repegging, position accounting,
simulation) goes through these two solvers.
"""

from .balance import solve_y
from .bounds import check_A, check_D, check_gamma
from .invariant import geometric_mean, get_D, solve_D

__all__ = [
    "solve_D",
    "solve_y",
    "get_D",
    "geometric_mean",
    "check_A",
    "check_gamma",
    "check_D",
]
