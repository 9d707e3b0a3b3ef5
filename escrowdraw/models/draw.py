"""Database model archiving the results of closed draws."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .column_types import ID_TYPE, UInt256


class DrawRecord(Base):
    """Immutable record of a draw that closed with a winner.

    Everything needed to recompute the winner is stored: the revealed seed,
    the block identifier mixed into it and the ordered slot list.
    """

    __tablename__ = "draw_records"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    engine_account: Mapped[str] = mapped_column(String(255), nullable=False)
    """Ledger identity of the engine that ran the draw."""

    draw_number: Mapped[int] = mapped_column(Integer, nullable=False)
    """Sequence number of the draw within its engine."""

    closing_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    """Closing time the draw was opened with."""

    closed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    """Time the close was accepted."""

    closed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    """Identity that revealed the seed."""

    slot_count: Mapped[int] = mapped_column(Integer, nullable=False)

    prize: Mapped[int] = mapped_column(UInt256, nullable=False)
    """Credits credited to the winner's withdrawable balance."""

    winner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    winning_index: Mapped[int] = mapped_column(Integer, nullable=False)

    random_number: Mapped[int] = mapped_column(UInt256, nullable=False)
    """Integer derived from the seed and block identifier."""

    block_id_hex: Mapped[str] = mapped_column(String(130), nullable=False)

    revealed_seed: Mapped[str] = mapped_column(Text, nullable=False)
    """Seed revealed at close; public once the draw is closed."""

    slots: Mapped[list] = mapped_column(JSON, nullable=False)
    """Ordered participant identities, one per slot."""

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint(
            "engine_account", "draw_number", name="uq_draw_record_engine_draw"
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<DrawRecord(id={id}, draw_number={n}, winner={w}, prize={p})>".format(
            id=self.id,
            n=self.draw_number,
            w=self.winner,
            p=self.prize,
        )

    @property
    def block_id(self) -> bytes:
        return bytes.fromhex(self.block_id_hex)

    @classmethod
    def get_by_draw_number(
        cls, session: Session, engine_account: str, draw_number: int
    ) -> Optional["DrawRecord"]:
        """Return the record of ``draw_number`` for ``engine_account``."""
        return session.scalar(
            select(cls).where(
                cls.engine_account == engine_account,
                cls.draw_number == draw_number,
            )
        )


__all__ = ["DrawRecord"]
