"""initial escrow schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
AMOUNT = sa.String(length=78)


def upgrade() -> None:
    op.create_table(
        "credit_accounts",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("account", sa.String(length=255), nullable=False),
        sa.Column("balance", AMOUNT, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_credit_accounts"),
        sa.UniqueConstraint("account", name="uq_credit_accounts_account"),
    )
    op.create_table(
        "credit_allowances",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column("spender", sa.String(length=255), nullable=False),
        sa.Column("amount", AMOUNT, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_credit_allowances"),
        sa.UniqueConstraint("owner", "spender", name="uq_credit_allowance_pair"),
    )
    op.create_index(
        "ix_credit_allowances_owner", "credit_allowances", ["owner"], unique=False
    )
    op.create_table(
        "ledger_transactions",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("sender", sa.String(length=255), nullable=True),
        sa.Column("recipient", sa.String(length=255), nullable=True),
        sa.Column("spender", sa.String(length=255), nullable=True),
        sa.Column("amount", AMOUNT, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "kind IN ('mint','transfer','burn','payout')",
            name="ck_ledger_transactions_kind_enum",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_ledger_transactions"),
    )
    op.create_index("ix_ledger_kind", "ledger_transactions", ["kind"], unique=False)
    op.create_index("ix_ledger_sender", "ledger_transactions", ["sender"], unique=False)
    op.create_index(
        "ix_ledger_recipient", "ledger_transactions", ["recipient"], unique=False
    )
    op.create_table(
        "draw_records",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("engine_account", sa.String(length=255), nullable=False),
        sa.Column("draw_number", sa.Integer(), nullable=False),
        sa.Column("closing_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("closed_by", sa.String(length=255), nullable=False),
        sa.Column("slot_count", sa.Integer(), nullable=False),
        sa.Column("prize", AMOUNT, nullable=False),
        sa.Column("winner", sa.String(length=255), nullable=False),
        sa.Column("winning_index", sa.Integer(), nullable=False),
        sa.Column("random_number", AMOUNT, nullable=False),
        sa.Column("block_id_hex", sa.String(length=130), nullable=False),
        sa.Column("revealed_seed", sa.Text(), nullable=False),
        sa.Column("slots", sa.JSON(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_draw_records"),
        sa.UniqueConstraint(
            "engine_account", "draw_number", name="uq_draw_record_engine_draw"
        ),
    )
    op.create_index("ix_draw_records_winner", "draw_records", ["winner"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_draw_records_winner", table_name="draw_records")
    op.drop_table("draw_records")
    op.drop_index("ix_ledger_recipient", table_name="ledger_transactions")
    op.drop_index("ix_ledger_sender", table_name="ledger_transactions")
    op.drop_index("ix_ledger_kind", table_name="ledger_transactions")
    op.drop_table("ledger_transactions")
    op.drop_index("ix_credit_allowances_owner", table_name="credit_allowances")
    op.drop_table("credit_allowances")
    op.drop_table("credit_accounts")
