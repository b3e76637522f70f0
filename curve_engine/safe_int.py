"""Checked uint256 arithmetic for curve amounts.

Supply, reserve and every fixed-point intermediate live in [0, 2^256-1].
SafeInt holds one such value and refuses to leave that range: an operation
whose exact result falls outside it raises instead of wrapping.

    Underflow        result below zero
    Uint256Overflow  result above 2^256-1
    DivisionByZero   zero divisor

Typical use wraps raw ints on the way in and unwraps on the way out:

    from curve_engine.safe_int import S

    product = (S(a) * b // SCALE).value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""

    pass


class Underflow(SafeIntError):
    """Result would be negative."""

    pass


class Uint256Overflow(SafeIntError):
    """Result exceeds 2^256-1."""

    pass


class DivisionByZero(SafeIntError):
    """Divisor is zero."""

    pass


def _raw(operand: SafeInt | int) -> int:
    return operand._value if isinstance(operand, SafeInt) else operand


class SafeInt:
    """An unsigned 256-bit integer.

    Every constructor call is range checked, and every operator builds its
    result through the constructor, so an out-of-range value can never be
    observed. Plain ints are accepted on either side of an operator.
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap an int (or copy a SafeInt).

        Raises:
            TypeError: For anything that is not an int, including bool
            Underflow: If value < 0
            Uint256Overflow: If value > 2^256-1
        """
        if isinstance(value, SafeInt):
            value = value._value
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt wraps int only, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"{value} is negative")
        if value > UINT256_MAX:
            raise Uint256Overflow(f"{value} exceeds 2^256-1")
        self._value = value

    @property
    def value(self) -> int:
        """The wrapped int."""
        return self._value

    def __repr__(self) -> str:
        return f"S({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # Arithmetic

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _raw(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return _difference(self._value, _raw(other))

    def __rsub__(self, other: int) -> SafeInt:
        return _difference(other, self._value)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _raw(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _raw(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def checked_sub(self, other: SafeInt | int) -> SafeInt | None:
        """Subtract, or None if the result would be negative."""
        remaining = self._value - _raw(other)
        return SafeInt(remaining) if remaining >= 0 else None

    # Comparison

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt | int):
            return self._value == _raw(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _raw(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _raw(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _raw(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _raw(other)

    # Conversion

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0


def _difference(minuend: int, subtrahend: int) -> SafeInt:
    if subtrahend > minuend:
        raise Underflow(f"{minuend} - {subtrahend} is negative")
    return SafeInt(minuend - subtrahend)


S = SafeInt
