"""vAMM error classes.

Solver errors propagate unchanged through quoting and repegging. Callers
should halt on LossDetectedError and UnsafeIntermediateValueError, treat
DidNotConvergeError as "quote unavailable for this size" and
SlippageExceededError as an ordinary rejected trade.
"""


class VammError(Exception):
    """Base error for vAMM operations."""

    pass


class UnsafeValueError(VammError):
    """A value left the band in which the curve math is safe."""

    pass


class UnsafeParameterError(UnsafeValueError):
    """A, gamma, D or an input balance is outside its configured bounds."""

    pass


class UnsafeIntermediateValueError(UnsafeValueError):
    """A ratio computed during solving left its valid band."""

    pass


class DidNotConvergeError(VammError):
    """Newton-Raphson iteration hit the iteration ceiling."""

    pass


class SlippageExceededError(VammError):
    """Realized trade amount violates the caller's bound."""

    pass


class LossDetectedError(VammError):
    """Virtual price decreased between two price updates."""

    pass


class SameAssetError(VammError):
    """Input and output coin are the same."""

    pass


class IndexOutOfRangeError(VammError):
    """Coin index is not 0 or 1."""

    pass


class NonPositiveAmountError(VammError):
    """Trade size must be positive."""

    pass


class InsufficientLiquidityError(VammError):
    """The pool cannot supply the requested amount of base asset."""

    pass


class TradeSizingError(VammError):
    """Could not find a trade size that reaches the target price."""

    pass
