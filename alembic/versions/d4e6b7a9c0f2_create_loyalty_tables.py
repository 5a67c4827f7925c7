"""create_loyalty_tables

Revision ID: d4e6b7a9c0f2
Revises: c3f8a1d2e7b9
Create Date: 2025-12-09
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "d4e6b7a9c0f2"
down_revision: Union[str, Sequence[str], None] = "c3f8a1d2e7b9"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "loyalty_account",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("customer_id", sa.String(length=100), nullable=False),
        sa.Column("points_balance", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_earned", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_redeemed", sa.Integer(), server_default="0", nullable=False),
        sa.Column("tier", sa.String(length=20), server_default="bronze", nullable=False),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("birthday_reward_sent_year", sa.Integer(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_loyalty_account_customer_id"), "loyalty_account", ["customer_id"], unique=True)

    op.create_table(
        "loyalty_transaction",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("loyalty_account_id", sa.String(length=64), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("order_id", sa.String(length=100), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["loyalty_account_id"], ["loyalty_account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_loyalty_transaction_loyalty_account_id"),
        "loyalty_transaction",
        ["loyalty_account_id"],
        unique=False,
    )
    op.create_index(
        "ix_loyalty_transaction_account_order_type",
        "loyalty_transaction",
        ["loyalty_account_id", "order_id", "type"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_loyalty_transaction_account_order_type", table_name="loyalty_transaction")
    op.drop_index(op.f("ix_loyalty_transaction_loyalty_account_id"), table_name="loyalty_transaction")
    op.drop_table("loyalty_transaction")
    op.drop_index(op.f("ix_loyalty_account_customer_id"), table_name="loyalty_account")
    op.drop_table("loyalty_account")
