"""Contracts the draw engine expects from its value-moving collaborators."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CreditLedger(Protocol):
    """Fungible credit ledger.

    Every method may run arbitrary code (hooks, callbacks) before returning,
    so callers must treat each call as a potential re-entry point. Failures
    for missing balance or allowance are reported with
    :class:`~escrowdraw.errors.InsufficientFundsError`.
    """

    def mint(self, to: str, amount: int) -> None:
        """Create ``amount`` new credits owned by ``to``."""
        ...

    def pull_transfer(self, spender: str, sender: str, to: str, amount: int) -> None:
        """Move ``amount`` from ``sender`` to ``to`` using ``spender``'s allowance."""
        ...

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """Move ``amount`` from ``sender`` to ``to``."""
        ...

    def burn_from(self, spender: str, account: str, amount: int) -> None:
        """Destroy ``amount`` of ``account``'s credits using ``spender``'s allowance."""
        ...


@runtime_checkable
class CurrencyGateway(Protocol):
    """Pays base currency out of the engine's reserve."""

    def send(self, to: str, amount: int) -> None:
        """Deliver ``amount`` base currency units to ``to``."""
        ...


__all__ = ["CreditLedger", "CurrencyGateway"]
