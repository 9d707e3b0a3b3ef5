"""Credit balances and allowances backing :class:`SqlCreditLedger`."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .column_types import ID_TYPE, UInt256


class CreditAccount(Base):
    """Credit balance held by a single identity."""

    __tablename__ = "credit_accounts"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    account: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    """Identity owning the balance (participant, owner or the engine itself)."""

    balance: Mapped[int] = mapped_column(UInt256, nullable=False, default=0)
    """Spendable credits."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __init__(self, *, account: str, balance: int = 0) -> None:
        self.account = account
        self.balance = balance

    def __repr__(self) -> str:
        return f"<CreditAccount(id={self.id}, account='{self.account}', balance={self.balance})>"

    @classmethod
    def get_by_account(cls, session: Session, account: str) -> Optional["CreditAccount"]:
        """Return the row for ``account`` if it exists."""
        return session.scalar(select(cls).where(cls.account == account))

    @classmethod
    def get_or_create(cls, session: Session, account: str) -> "CreditAccount":
        """Return the row for ``account``, adding an empty one when missing."""
        row = cls.get_by_account(session, account)
        if row is None:
            row = cls(account=account)
            session.add(row)
            session.flush()
        return row


class CreditAllowance(Base):
    """Amount ``spender`` may still move or burn on behalf of ``owner``."""

    __tablename__ = "credit_allowances"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    spender: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(UInt256, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("owner", "spender", name="uq_credit_allowance_pair"),
    )

    def __init__(self, *, owner: str, spender: str, amount: int = 0) -> None:
        self.owner = owner
        self.spender = spender
        self.amount = amount

    def __repr__(self) -> str:
        return (
            f"<CreditAllowance(owner='{self.owner}', spender='{self.spender}', "
            f"amount={self.amount})>"
        )

    @classmethod
    def get(cls, session: Session, owner: str, spender: str) -> Optional["CreditAllowance"]:
        return session.scalar(
            select(cls).where(cls.owner == owner, cls.spender == spender)
        )


__all__ = ["CreditAccount", "CreditAllowance"]
