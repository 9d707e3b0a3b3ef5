from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .column_types import ID_TYPE, UInt256


class LedgerTransaction(Base):
    """Append-only record of a value movement.

    Credit mints, transfers and burns are written by
    :class:`~escrowdraw.ledger.sql.SqlCreditLedger`; base currency refunds
    are written as ``payout`` rows by
    :class:`~escrowdraw.ledger.sql.SqlCurrencyGateway`.
    """

    __tablename__ = "ledger_transactions"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    sender: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    recipient: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Set when the movement consumed an allowance (pull transfer, burn).
    spender: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amount: Mapped[int] = mapped_column(UInt256, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            "kind IN ('mint','transfer','burn','payout')", name="kind_enum"
        ),
        Index("ix_ledger_kind", "kind"),
        Index("ix_ledger_sender", "sender"),
        Index("ix_ledger_recipient", "recipient"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerTransaction(id={self.id}, kind='{self.kind}', sender={self.sender}, "
            f"recipient={self.recipient}, amount={self.amount})>"
        )
