"""Curve engine error classes.

Every error is a precondition failure raised before the engine mutates any
state. Callers resubmit with adjusted parameters; nothing is retried
internally.
"""


class CurveError(Exception):
    """Base error for curve engine operations."""

    pass


class CurveNotInitialized(CurveError):
    """No curve has been initialized for the asset."""

    pass


class CurveAlreadyInitialized(CurveError):
    """Curve parameters are set once; re-initialization is rejected."""

    pass


class InvalidCurveParameter(CurveError):
    """Coefficient or exponent outside the accepted bounds."""

    pass


class ZeroAmount(CurveError):
    """Trade amount must be positive."""

    pass


class ZeroOutput(CurveError):
    """Trade would mint or pay out nothing."""

    pass


class SlippageExceeded(CurveError):
    """Computed output is below the caller's minimum."""

    pass


class InsufficientSupply(CurveError):
    """Sell amount exceeds circulating supply."""

    pass


class InsufficientReserves(CurveError):
    """Reserve ledger cannot cover the payout."""

    pass


class InsufficientBalance(CurveError):
    """Caller does not hold enough tokens to fund the trade."""

    pass


class ReentrantCall(CurveError):
    """Mutating operation invoked from inside another one."""

    pass


class Unauthorized(CurveError):
    """Caller is not the engine administrator."""

    pass


class SearchCeilingExceeded(CurveError):
    """Buy would need more supply than the configured search ceiling allows."""

    pass


class SearchDidNotConverge(CurveError):
    """Binary search hit its iteration cap."""

    pass
