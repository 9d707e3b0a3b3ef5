"""Bounded unsigned integer helpers.

Credit and currency amounts live in the unsigned 256-bit range. Python
integers never wrap, so the helpers here reject results that would leave that
range instead of silently producing them.
"""

from __future__ import annotations

from .errors import ValidationError

UINT256_MAX = (1 << 256) - 1


def require_uint(value: int, name: str) -> int:
    """Return ``value`` if it is an integer in ``[0, UINT256_MAX]``.

    Parameters
    ----------
    value : int
        Candidate amount.
    name : str
        Argument name used in the error message.

    Raises
    ------
    ValidationError
        If ``value`` is not an ``int`` (``bool`` is rejected too) or lies
        outside the unsigned 256-bit range.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(f"{name} must not be negative")
    if value > UINT256_MAX:
        raise ValidationError(f"{name} exceeds the unsigned 256-bit range")
    return value


def checked_add(left: int, right: int) -> int:
    """Add two amounts, raising :class:`ValidationError` on overflow."""
    result = left + right
    if result > UINT256_MAX:
        raise ValidationError("arithmetic overflow in addition")
    return result


def checked_mul(left: int, right: int) -> int:
    """Multiply two amounts, raising :class:`ValidationError` on overflow."""
    result = left * right
    if result > UINT256_MAX:
        raise ValidationError("arithmetic overflow in multiplication")
    return result


__all__ = ["UINT256_MAX", "require_uint", "checked_add", "checked_mul"]
