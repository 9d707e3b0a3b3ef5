from datetime import datetime, timedelta, timezone

from escrowdraw.config import DrawConfig
from escrowdraw.db.engine import get_sessionmaker, make_engine
from escrowdraw.escrow import FixedEntropy, seal_seed
from escrowdraw.ledger import SqlCreditLedger
from escrowdraw.models import Base
from escrowdraw.workflows import build_engine, close_and_record_draw

OWNER = "owner_01"
DEV_SEED = "dev-seed-do-not-use-in-production"


def main() -> None:
    """Reset the development database and run one complete draw in it."""
    engine = make_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    start = datetime.now(timezone.utc)
    now = {"value": start}

    with Session.begin() as session:
        draw = build_engine(
            session,
            DrawConfig(purchase_ratio=100, bet_price=10, bet_fee=1),
            OWNER,
            seal_seed(OWNER, DEV_SEED),
            entropy=FixedEntropy(b"\x00" * 31 + b"\x2a"),
            clock=lambda: now["value"],
        )
        ledger = SqlCreditLedger(session)

        draw.open_draw(OWNER, start + timedelta(hours=1))
        for bettor, bets in (("user_01", 1), ("user_02", 3)):
            draw.purchase_credits(bettor, 1100 * bets)
            ledger.approve(bettor, draw.account, draw.config.slot_cost * bets)
            draw.place_bets(bettor, bets)

        now["value"] = start + timedelta(hours=1)
        outcome, record = close_and_record_draw(session, draw, OWNER, DEV_SEED)

        print(f"Draw {outcome.draw_number}: {outcome.winner} won {outcome.prize} credits")
        print(f"Owner pool: {draw.owner_pool}, record id: {record.id if record else None}")


if __name__ == "__main__":
    main()
