"""Swap quoting and mark price.

Coin 0 is the quote asset (vUSD), coin 1 the base asset. Balances passed in
are native; asset1 is scaled by price_scale internally.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from vamm.constants import A_MULTIPLIER, N_COINS, WEI
from vamm.errors import IndexOutOfRangeError, NonPositiveAmountError, SameAssetError
from vamm.math import solve_D, solve_y


@dataclass(frozen=True)
class TradeQuote:
    """Result of quoting a trade.

    Attributes:
        amount: Output amount for get_dy (fee deducted), required input for
            get_dx (fee included)
        fee: Fee charged, in units of the quoted amount
        mark_price: Mark price after the trade
    """

    amount: float
    fee: float
    mark_price: float


def _validate_trade(i: int, j: int, amount: float) -> None:
    if i == j:
        raise SameAssetError("same input and output coin")
    if i not in range(N_COINS):
        raise IndexOutOfRangeError(f"i coin index {i} out of range")
    if j not in range(N_COINS):
        raise IndexOutOfRangeError(f"j coin index {j} out of range")
    if amount <= 0:
        raise NonPositiveAmountError(f"can only exchange positive coins, got {amount}")


def get_dy(
    i: int,
    j: int,
    dx: float,
    balances: Sequence[float],
    D: float,
    price_scale: float,
    A: float,
    gamma: float,
    fee_rate: float,
) -> TradeQuote:
    """Quote the output for selling dx of coin i for coin j.

    Args:
        i: Input coin index
        j: Output coin index
        dx: Input amount, in coin i native units
        balances: Native pool balances
        D: Current invariant
        price_scale: Pool peg
        A: Amplification
        gamma: Curvature
        fee_rate: Linear fee, deducted from the output

    Returns:
        TradeQuote with the output amount, the fee and the post-trade mark price

    Raises:
        SameAssetError, IndexOutOfRangeError, NonPositiveAmountError: On a
            malformed request
        VammError: Any solver error, unchanged
    """
    _validate_trade(i, j, dx)

    xp = list(balances)
    xp[i] += dx
    xp = [xp[0], xp[1] * price_scale]

    y = solve_y(A, gamma, xp, D, j)
    dy = xp[j] - y - WEI
    if j > 0:
        dy /= price_scale

    fee = fee_rate * dy
    dy -= fee

    xp[j] -= dy * price_scale if j > 0 else dy

    D_new = solve_D(A, gamma, xp)
    mark_price = calc_mark_price(xp[0], xp[1], A, gamma, D_new, price_scale)
    return TradeQuote(amount=dy, fee=fee, mark_price=mark_price)


def get_dx(
    i: int,
    j: int,
    dy: float,
    balances: Sequence[float],
    D: float,
    price_scale: float,
    A: float,
    gamma: float,
    fee_rate: float,
) -> TradeQuote:
    """Quote the input of coin i needed to receive dy of coin j.

    The fee is added on top of the raw requirement. Arguments and errors are
    as for get_dy.
    """
    _validate_trade(i, j, dy)

    xp = list(balances)
    xp[j] -= dy
    xp = [xp[0], xp[1] * price_scale]

    x = solve_y(A, gamma, xp, D, i)
    dx = x - xp[i] + WEI
    if i > 0:
        dx /= price_scale

    fee = fee_rate * dx
    dx += fee

    xp[i] += dx * price_scale if i > 0 else dx

    D_new = solve_D(A, gamma, xp)
    mark_price = calc_mark_price(xp[0], xp[1], A, gamma, D_new, price_scale)
    return TradeQuote(amount=dx, fee=fee, mark_price=mark_price)


def calc_mark_price(
    x: float,
    y: float,
    A: float,
    gamma: float,
    D: float,
    price_scale: float,
) -> float:
    """Instantaneous price of asset1 in asset0 from the curve's slope.

    Differentiates the invariant implicitly at (x, y), both price-scaled,
    and converts dy/dx back to native units with price_scale.
    """
    D2 = D**2
    K0 = 4 * x * y / D2
    g1k = A * gamma**2 / (gamma + 1 - K0) ** 2 / A_MULTIPLIER
    K = g1k * K0
    P = g1k * (1 + 2 * K0 / (gamma + 1 - K0))
    Q = 4 * x / D2
    R = 4 * y / D2

    g2k = D * (x + y) - D2
    numerator = y + P * R * g2k + K * D
    denominator = P * Q * g2k + K * D + x

    y_prime = -numerator / denominator
    return abs(price_scale / y_prime)
