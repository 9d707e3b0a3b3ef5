from typing import Callable, Optional, Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .config import DrawConfig
from .errors import StateError
from .escrow.engine import DEFAULT_ENGINE_ACCOUNT, DrawOutcome, EscrowDrawEngine
from .escrow.randomness import (
    EntropySource,
    FixedEntropy,
    select_winner,
    verify_seed,
)
from .ledger.sql import SqlCreditLedger, SqlCurrencyGateway
from .models import DrawRecord
from .ownership import OwnershipCapability


def build_engine(
    session: Session,
    config: DrawConfig,
    owner: str,
    sealed_seed: str,
    *,
    entropy: Optional[EntropySource] = None,
    clock: Optional[Callable[[], datetime]] = None,
    account: str = DEFAULT_ENGINE_ACCOUNT,
) -> EscrowDrawEngine:
    """Create an engine whose credits and payouts live in ``session``.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session shared by the ledger and the currency gateway.
    config : DrawConfig
        Draw economics.
    owner : str
        Identity of the privileged account.
    sealed_seed : str
        Commitment produced by :func:`~escrowdraw.escrow.randomness.seal_seed`.
    entropy : Optional[EntropySource], default: None
        Source of the block identifier mixed into the winner selection. When
        omitted a :class:`~escrowdraw.chain.entropy.ChainBlockEntropy` is
        created, which requires ``CHAIN_RPC_URL``.
    clock : Optional[Callable[[], datetime]], default: None
        Time source forwarded to the engine.
    account : str, default: ``"escrow-draw"``
        Ledger identity of the engine.

    Returns
    -------
    EscrowDrawEngine
        Closed engine ready for :meth:`~EscrowDrawEngine.open_draw`.
    """
    if entropy is None:
        from .chain.entropy import ChainBlockEntropy

        entropy = ChainBlockEntropy()

    return EscrowDrawEngine(
        config,
        OwnershipCapability(owner),
        sealed_seed,
        SqlCreditLedger(session),
        SqlCurrencyGateway(session, source=account),
        entropy=entropy,
        clock=clock,
        account=account,
        draws_opened=_last_archived_draw(session, account),
    )


def _last_archived_draw(session: Session, engine_account: str) -> int:
    last = session.scalar(
        select(func.max(DrawRecord.draw_number)).where(
            DrawRecord.engine_account == engine_account
        )
    )
    return last or 0


def close_and_record_draw(
    session: Session,
    engine: EscrowDrawEngine,
    caller: str,
    reveal_seed: str,
) -> tuple[DrawOutcome, Optional[DrawRecord]]:
    """Close the open draw and archive the result when a winner was chosen.

    The slot list is captured before closing because the engine clears it as
    part of the payout.

    Returns
    -------
    tuple[DrawOutcome, Optional[DrawRecord]]
        The engine's outcome and the persisted record, or ``None`` when the
        draw had no participants.

    Raises
    ------
    StateError
        If a record for the open draw already exists. The engine is left
        open and untouched.
    """
    existing = DrawRecord.get_by_draw_number(
        session, engine.account, engine.draw_number
    )
    if existing is not None:
        raise StateError(
            f"draw {engine.draw_number} of {engine.account} is already archived"
        )

    slots = list(engine.slots)
    outcome = engine.close_draw(caller, reveal_seed)
    if outcome.selection is None:
        return outcome, None

    record = DrawRecord(
        engine_account=engine.account,
        draw_number=outcome.draw_number,
        closing_time=outcome.closing_time,
        closed_at=outcome.closed_at,
        closed_by=caller,
        slot_count=outcome.slot_count,
        prize=outcome.prize,
        winner=outcome.selection.winner,
        winning_index=outcome.selection.index,
        random_number=outcome.selection.random_number,
        block_id_hex=outcome.selection.block_id.hex(),
        revealed_seed=reveal_seed,
        slots=slots,
    )
    session.add(record)
    session.flush()
    return outcome, record


def audit_draw(
    record: DrawRecord,
    *,
    owner: Optional[str] = None,
    sealed_seed: Optional[str] = None,
) -> str:
    """Recompute the winner of an archived draw.

    When both ``owner`` and ``sealed_seed`` are supplied the revealed seed is
    also checked against the published commitment.

    Returns
    -------
    str
        The winner, identical to ``record.winner``.

    Raises
    ------
    RuntimeError
        If the commitment, slot count, index, random number or winner differ
        from what the stored inputs produce.
    """
    if owner is not None and sealed_seed is not None:
        if not verify_seed(sealed_seed, owner, record.revealed_seed):
            raise RuntimeError("Revealed seed does not match the sealed commitment")

    slots: Sequence[str] = list(record.slots)
    if len(slots) != record.slot_count:
        raise RuntimeError(
            f"Slot count mismatch: record={record.slot_count} stored={len(slots)}"
        )

    selection = select_winner(
        record.revealed_seed, slots, FixedEntropy(record.block_id)
    )
    if selection.random_number != record.random_number:
        raise RuntimeError("Random number mismatch")
    if selection.index != record.winning_index:
        raise RuntimeError(
            f"Winning index mismatch: record={record.winning_index} recomputed={selection.index}"
        )
    if selection.winner != record.winner:
        raise RuntimeError(
            f"Winner mismatch: record={record.winner} recomputed={selection.winner}"
        )
    return selection.winner


def latest_draw_records(
    session: Session,
    *,
    engine_account: str = DEFAULT_ENGINE_ACCOUNT,
    limit: int = 10,
) -> list[DrawRecord]:
    """Return up to ``limit`` archived draws, newest first."""
    if limit <= 0:
        raise ValueError("limit must be a positive integer")

    stmt = (
        select(DrawRecord)
        .where(DrawRecord.engine_account == engine_account)
        .order_by(DrawRecord.draw_number.desc())
        .limit(limit)
    )
    return list(session.scalars(stmt).all())


def winnings_by_account(
    session: Session, *, engine_account: str = DEFAULT_ENGINE_ACCOUNT
) -> dict[str, int]:
    """Sum the archived prizes per winner."""
    totals: dict[str, int] = {}
    for record in session.scalars(
        select(DrawRecord).where(DrawRecord.engine_account == engine_account)
    ):
        totals[record.winner] = totals.get(record.winner, 0) + record.prize
    return totals

