"""SQLAlchemy-backed implementations of the engine's ledger collaborators."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..amounts import checked_add, require_uint
from ..errors import InsufficientFundsError
from ..models import CreditAccount, CreditAllowance, LedgerTransaction

logger = logging.getLogger(__name__)


class SqlCreditLedger:
    """Credit ledger storing balances and allowances in the database.

    Every movement is validated before any row is touched and is recorded as a
    :class:`~escrowdraw.models.LedgerTransaction`. The ledger flushes but
    never commits; transaction boundaries belong to the caller's session.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # -------- queries --------
    def balance_of(self, account: str) -> int:
        row = CreditAccount.get_by_account(self._session, account)
        return row.balance if row is not None else 0

    def allowance(self, owner: str, spender: str) -> int:
        row = CreditAllowance.get(self._session, owner, spender)
        return row.amount if row is not None else 0

    def total_supply(self) -> int:
        """Return the sum of all balances."""
        return sum(self._session.scalars(select(CreditAccount.balance)).all())

    # -------- mutations --------
    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Let ``spender`` move or burn up to ``amount`` of ``owner``'s credits.

        A later call replaces the previous allowance instead of adding to it.
        """
        require_uint(amount, "amount")
        row = CreditAllowance.get(self._session, owner, spender)
        if row is None:
            row = CreditAllowance(owner=owner, spender=spender, amount=amount)
            self._session.add(row)
        else:
            row.amount = amount
        self._session.flush()

    def mint(self, to: str, amount: int) -> None:
        require_uint(amount, "amount")
        account = CreditAccount.get_or_create(self._session, to)
        account.balance = checked_add(account.balance, amount)
        self._record("mint", sender=None, recipient=to, amount=amount)
        logger.debug("Minted %d credits to %s", amount, to)

    def transfer(self, sender: str, to: str, amount: int) -> None:
        require_uint(amount, "amount")
        self._require_balance(sender, amount)
        self._move(sender, to, amount)
        self._record("transfer", sender=sender, recipient=to, amount=amount)

    def pull_transfer(self, spender: str, sender: str, to: str, amount: int) -> None:
        """Move credits on behalf of ``sender`` using ``spender``'s allowance.

        Raises
        ------
        InsufficientFundsError
            If the allowance or the balance of ``sender`` is below ``amount``.
        """
        require_uint(amount, "amount")
        allowance = self._require_allowance(sender, spender, amount)
        self._require_balance(sender, amount)
        allowance.amount = allowance.amount - amount
        self._move(sender, to, amount)
        self._record(
            "transfer", sender=sender, recipient=to, amount=amount, spender=spender
        )

    def burn_from(self, spender: str, account: str, amount: int) -> None:
        """Destroy credits of ``account`` using ``spender``'s allowance."""
        require_uint(amount, "amount")
        allowance = self._require_allowance(account, spender, amount)
        holder = self._require_balance(account, amount)
        allowance.amount = allowance.amount - amount
        holder.balance = holder.balance - amount
        self._record(
            "burn", sender=account, recipient=None, amount=amount, spender=spender
        )
        logger.debug("Burned %d credits of %s", amount, account)

    # -------- helpers --------
    def _require_balance(self, account: str, amount: int) -> CreditAccount:
        row = CreditAccount.get_by_account(self._session, account)
        balance = row.balance if row is not None else 0
        if balance < amount:
            raise InsufficientFundsError(
                f"insufficient balance: {account} holds {balance}, needs {amount}"
            )
        if row is None:
            # Only reachable for zero amounts.
            row = CreditAccount.get_or_create(self._session, account)
        return row

    def _require_allowance(
        self, owner: str, spender: str, amount: int
    ) -> CreditAllowance:
        row = CreditAllowance.get(self._session, owner, spender)
        available = row.amount if row is not None else 0
        if available < amount:
            raise InsufficientFundsError(
                f"insufficient allowance: {spender} may use {available} of "
                f"{owner}'s credits, needs {amount}"
            )
        if row is None:
            row = CreditAllowance(owner=owner, spender=spender, amount=0)
            self._session.add(row)
        return row

    def _move(self, sender: str, to: str, amount: int) -> None:
        source = CreditAccount.get_or_create(self._session, sender)
        source.balance = source.balance - amount
        target = CreditAccount.get_or_create(self._session, to)
        target.balance = checked_add(target.balance, amount)

    def _record(
        self,
        kind: str,
        *,
        sender: Optional[str],
        recipient: Optional[str],
        amount: int,
        spender: Optional[str] = None,
    ) -> LedgerTransaction:
        tx = LedgerTransaction(
            kind=kind,
            sender=sender,
            recipient=recipient,
            spender=spender,
            amount=amount,
        )
        self._session.add(tx)
        self._session.flush()
        return tx


class SqlCurrencyGateway:
    """Records base currency refunds as ``payout`` ledger transactions.

    Settlement of the payout itself happens outside this package; the rows
    form the queue an external payer works through.
    """

    def __init__(self, session: Session, source: str) -> None:
        self._session = session
        self._source = source

    def send(self, to: str, amount: int) -> None:
        require_uint(amount, "amount")
        self._session.add(
            LedgerTransaction(
                kind="payout",
                sender=self._source,
                recipient=to,
                amount=amount,
            )
        )
        self._session.flush()
        logger.debug("Queued payout of %d currency units to %s", amount, to)

    def total_paid(self, to: str) -> int:
        """Return the sum of payouts recorded for ``to``."""
        amounts = self._session.scalars(
            select(LedgerTransaction.amount).where(
                LedgerTransaction.kind == "payout",
                LedgerTransaction.recipient == to,
            )
        ).all()
        return sum(amounts)


__all__ = ["SqlCreditLedger", "SqlCurrencyGateway"]
