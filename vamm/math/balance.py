"""Balance solver: one price-scaled balance given the invariant and the other."""

from collections.abc import Sequence

from vamm.constants import A_MULTIPLIER, MAX_ITERATIONS, N_COINS, WEI
from vamm.errors import (
    DidNotConvergeError,
    IndexOutOfRangeError,
    UnsafeIntermediateValueError,
)

from .bounds import check_A, check_D, check_gamma, in_band


def solve_y(A: float, gamma: float, x: Sequence[float], D: float, i: int) -> float:
    """Solve for x[i] such that the curve passes through D.

    Only x[1 - i] is read from x; the value at index i is ignored.

    When a Newton step would push the estimate negative, the previous
    estimate is halved instead and the iteration continues.

    Args:
        A: Amplification (ANN convention, scaled by A_MULTIPLIER)
        gamma: Curvature parameter
        x: Price-scaled balances
        D: Invariant to preserve
        i: Index of the balance to solve for

    Returns:
        The price-scaled balance x[i]

    Raises:
        UnsafeParameterError: If A, gamma or D is out of bounds
        UnsafeIntermediateValueError: If x[1 - i] / D or the result / D
            leaves its band
        IndexOutOfRangeError: If i is not 0 or 1
        DidNotConvergeError: If iteration doesn't converge within 255 steps
    """
    check_A(A)
    check_gamma(gamma)
    check_D(D)
    if i not in (0, 1):
        raise IndexOutOfRangeError(f"coin index {i} out of range")

    x_j = x[1 - i]
    K0_i = N_COINS * x_j / D
    if not in_band(K0_i, 1e-2 * N_COINS, 1e2 * N_COINS):
        raise UnsafeIntermediateValueError(f"unsafe value for x[{1 - i}]: {x_j}")

    y = D**2 / (x_j * N_COINS**2)

    convergence_limit = max(x_j, D, 0.01)

    for _ in range(MAX_ITERATIONS):
        y_prev = y

        K0 = K0_i * y * N_COINS / D
        S = x_j + y
        g1k0 = abs(gamma + 1 - K0) + WEI

        # D / (A * N^N) * g1k0^2 / gamma^2
        mul1 = (D / gamma) * (g1k0 / gamma) * g1k0 * A_MULTIPLIER / A
        # 1 + 2 * K0 / g1k0
        mul2 = 1 + 2 * K0 / g1k0

        yfprime = y + S * mul2 + mul1
        dyfprime = D * mul2
        if yfprime < dyfprime:
            y = y_prev / 2
            continue
        yfprime -= dyfprime

        fprime = yfprime / y
        y_minus = mul1 / fprime
        y_plus = (yfprime + D) / fprime + y_minus / K0
        y_minus += S / fprime

        if y_plus < y_minus:
            y = y_prev / 2
        else:
            y = y_plus - y_minus

        if abs(y - y_prev) * 1e14 < max(convergence_limit, y):
            if not in_band(y / D, 1e-2, 1e2):
                raise UnsafeIntermediateValueError(f"unsafe value for y: {y}")
            return y

    raise DidNotConvergeError(f"newton_y did not converge after {MAX_ITERATIONS} iterations")
