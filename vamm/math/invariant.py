"""Invariant solver for the two-coin crypto-invariant curve.

The invariant is

    K0 = N^N * prod(x) / D^N
    K = A * K0 * gamma^2 / (gamma + 1 - K0)^2
    K * D^(N-1) * sum(x) + prod(x) = K * D^N + (D / N)^N

solved for D with Newton-Raphson. Balances are price-scaled (xp): asset1
already multiplied by price_scale.
"""

import math
from collections.abc import Sequence

from vamm.constants import A_MULTIPLIER, MAX_ITERATIONS, N_COINS, WEI
from vamm.errors import DidNotConvergeError, UnsafeIntermediateValueError, UnsafeParameterError

from .bounds import check_A, check_gamma, in_band


def geometric_mean(x: Sequence[float]) -> float:
    """Geometric mean of two balances."""
    return math.sqrt(x[0] * x[1])


def solve_D(A: float, gamma: float, x_unsorted: Sequence[float]) -> float:
    """Calculate the invariant D for price-scaled balances.

    Args:
        A: Amplification (ANN convention, scaled by A_MULTIPLIER)
        gamma: Curvature parameter
        x_unsorted: The two price-scaled balances, in any order

    Returns:
        The invariant D

    Raises:
        UnsafeParameterError: If A, gamma or the largest balance is out of bounds
        UnsafeIntermediateValueError: If the balances are too lopsided, either
            relative to each other or to the resulting D
        DidNotConvergeError: If iteration doesn't converge within 255 steps
    """
    check_A(A)
    check_gamma(gamma)
    if len(x_unsorted) != N_COINS:
        raise UnsafeParameterError(f"expected {N_COINS} balances, got {len(x_unsorted)}")

    # Presort, larger balance first
    x = sorted(x_unsorted, reverse=True)

    if not in_band(x[0], 1e-9, 1e15):
        raise UnsafeParameterError(f"unsafe value for x[0]: {x[0]}")
    if x[1] / x[0] <= 1e-4 - WEI:
        raise UnsafeIntermediateValueError(f"unsafe value for x[1]: {x[1]}")

    D = N_COINS * geometric_mean(x)
    S = x[0] + x[1]

    for _ in range(MAX_ITERATIONS):
        D_prev = D

        K0 = x[0] * x[1] * N_COINS**2 / D**2
        g1k0 = abs(gamma + 1 - K0) + WEI

        # D / (A * N^N) * g1k0^2 / gamma^2
        mul1 = (D / gamma) * (g1k0 / gamma) * g1k0 * A_MULTIPLIER / A
        # 2 * N * K0 / g1k0
        mul2 = 2 * N_COINS * K0 / g1k0

        neg_fprime = (S + S * mul2) + mul1 * N_COINS / K0 - mul2 * D

        D_plus = D * (neg_fprime + S) / neg_fprime
        D_minus = D**2 / neg_fprime
        D_minus -= D * (mul1 / neg_fprime) * (K0 - 1) / K0

        if D_plus > D_minus:
            D = D_plus - D_minus
        else:
            D = (D_minus - D_plus) / 2

        if abs(D - D_prev) * 1e14 < max(1e-2, D):
            for i, x_i in enumerate(x):
                if not in_band(x_i / D, 1e-2, 1e2):
                    raise UnsafeIntermediateValueError(f"unsafe value for x[{i}]: {x_i}")
            return D

    raise DidNotConvergeError(f"newton_D did not converge after {MAX_ITERATIONS} iterations")


def get_D(A: float, gamma: float, balances: Sequence[float], price_scale: float) -> float:
    """Invariant for native balances; asset1 is scaled by price_scale first."""
    return solve_D(A, gamma, [balances[0], balances[1] * price_scale])
