"""Shared wire types for the quote service models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

from curve_engine.safe_int import UINT256_MAX


def validate_uint256(value: Any) -> int:
    """Validate that a value is a uint256, given as int or decimal string.

    Args:
        value: Value to validate

    Returns:
        The value as int

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("expected int or decimal string, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"not a decimal integer: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"expected int or decimal string, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"negative amount {value}")
    if value > UINT256_MAX:
        raise ValueError(f"amount {value} exceeds 2^256-1")
    return value


# 256-bit unsigned integer, accepted as int or decimal string and
# serialized as a decimal string (JSON numbers lose precision past 2^53)
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    PlainSerializer(str, return_type=str),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Account or token address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Signed counterpart of Uint256 for differences such as reserve surplus
# and net trader position, also serialized as a decimal string
Int256 = Annotated[
    int,
    PlainSerializer(str, return_type=str),
    Field(description="256-bit signed integer as decimal string"),
]
