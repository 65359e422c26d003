"""Parameter guards shared by both Newton solvers.

Bounds are open intervals widened by one wei, matching the contract's
strict comparisons against MIN - 1 and MAX + 1.
"""

from vamm.constants import MAX_A, MAX_D, MAX_GAMMA, MIN_A, MIN_D, MIN_GAMMA, WEI
from vamm.errors import UnsafeParameterError


def check_A(A: float) -> None:
    if A <= MIN_A - 1 or A >= MAX_A + 1:
        raise UnsafeParameterError(f"unsafe value for A: {A}")


def check_gamma(gamma: float) -> None:
    if gamma <= MIN_GAMMA - WEI or gamma >= MAX_GAMMA + WEI:
        raise UnsafeParameterError(f"unsafe value for gamma: {gamma}")


def check_D(D: float) -> None:
    if D <= MIN_D - WEI or D >= MAX_D + WEI:
        raise UnsafeParameterError(f"unsafe value for D: {D}")


def in_band(value: float, low: float, high: float) -> bool:
    """True if value lies strictly inside (low - 1 wei, high + 1 wei)."""
    return low - WEI < value < high + WEI
