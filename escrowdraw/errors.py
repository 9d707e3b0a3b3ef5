"""Exception hierarchy raised by the escrow draw engine and its collaborators.

Callers can catch :class:`EscrowError` to handle every rejection produced by
the engine, or one of the concrete subclasses for finer control. Every error
is raised before the failing operation writes any state.
"""

from __future__ import annotations


class EscrowError(Exception):
    """Base class for all escrow draw errors."""


class ValidationError(EscrowError, ValueError):
    """An argument has the wrong shape (zero ``times``, past closing time, overflow)."""


class StateError(EscrowError):
    """The operation is not valid in the current draw lifecycle state."""


class ReentrancyError(StateError):
    """An operation was invoked while another engine operation was still running."""


class AuthorizationError(EscrowError, PermissionError):
    """The caller lacks the privilege, or the revealed seed does not match."""


class InsufficientFundsError(EscrowError):
    """A balance or allowance is smaller than the requested amount."""


__all__ = [
    "EscrowError",
    "ValidationError",
    "StateError",
    "ReentrancyError",
    "AuthorizationError",
    "InsufficientFundsError",
]
