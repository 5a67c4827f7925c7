"""create_trade_in_tables

Revision ID: e5a9c3b1d8f4
Revises: d4e6b7a9c0f2
Create Date: 2025-12-14
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "e5a9c3b1d8f4"
down_revision: Union[str, Sequence[str], None] = "d4e6b7a9c0f2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "trade_in_offer",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("brand", sa.String(length=50), server_default="apple", nullable=False),
        sa.Column("device_type", sa.String(length=50), nullable=True),
        sa.Column("model_keyword", sa.Text(), nullable=False),
        sa.Column("condition", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency_code", sa.String(length=3), server_default="mnt", nullable=False),
        sa.Column("active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("priority", sa.Integer(), server_default="0", nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_trade_in_offer_lookup",
        "trade_in_offer",
        ["brand", "condition", "active"],
        unique=False,
    )

    op.create_table(
        "trade_in_device_map",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("tac_prefix", sa.String(length=8), nullable=False),
        sa.Column("brand", sa.String(length=50), server_default="apple", nullable=False),
        sa.Column("device_type", sa.String(length=50), nullable=True),
        sa.Column("model_keyword", sa.Text(), nullable=False),
        sa.Column("priority", sa.Integer(), server_default="0", nullable=False),
        sa.Column("active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_trade_in_device_map_tac_prefix"), "trade_in_device_map", ["tac_prefix"], unique=False)

    op.create_table(
        "trade_in_request",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("new_product_id", sa.String(length=100), nullable=True),
        sa.Column("new_product_handle", sa.Text(), nullable=True),
        sa.Column("new_product_title", sa.Text(), nullable=True),
        sa.Column("cart_id", sa.String(length=100), nullable=True),
        sa.Column("order_id", sa.String(length=100), nullable=True),
        sa.Column("estimated_amount", sa.Float(), nullable=True),
        sa.Column("final_amount", sa.Float(), nullable=True),
        sa.Column("currency_code", sa.String(length=3), server_default="mnt", nullable=False),
        sa.Column("promotion_code", sa.String(length=100), nullable=True),
        sa.Column("customer_name", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("old_device_model", sa.Text(), nullable=False),
        sa.Column("old_device_condition", sa.String(length=20), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="new", nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_trade_in_request_new_product_id"), "trade_in_request", ["new_product_id"], unique=False)
    op.create_index(op.f("ix_trade_in_request_cart_id"), "trade_in_request", ["cart_id"], unique=False)
    op.create_index(op.f("ix_trade_in_request_order_id"), "trade_in_request", ["order_id"], unique=False)
    op.create_index(op.f("ix_trade_in_request_promotion_code"), "trade_in_request", ["promotion_code"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_trade_in_request_promotion_code"), table_name="trade_in_request")
    op.drop_index(op.f("ix_trade_in_request_order_id"), table_name="trade_in_request")
    op.drop_index(op.f("ix_trade_in_request_cart_id"), table_name="trade_in_request")
    op.drop_index(op.f("ix_trade_in_request_new_product_id"), table_name="trade_in_request")
    op.drop_table("trade_in_request")
    op.drop_index(op.f("ix_trade_in_device_map_tac_prefix"), table_name="trade_in_device_map")
    op.drop_table("trade_in_device_map")
    op.drop_index("ix_trade_in_offer_lookup", table_name="trade_in_offer")
    op.drop_table("trade_in_offer")
