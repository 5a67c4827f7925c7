"""create_product_analytics_tables

Revision ID: c3f8a1d2e7b9
Revises: b27d93c5e6a4
Create Date: 2025-12-05
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "c3f8a1d2e7b9"
down_revision: Union[str, Sequence[str], None] = "b27d93c5e6a4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "product_view",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("product_id", sa.String(length=100), nullable=False),
        sa.Column("customer_id", sa.String(length=100), nullable=True),
        sa.Column("session_id", sa.String(length=200), nullable=True),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_product_view_product_viewed_at", "product_view", ["product_id", "viewed_at"], unique=False)

    op.create_table(
        "product_sale",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("product_id", sa.String(length=100), nullable=False),
        sa.Column("order_id", sa.String(length=100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("sold_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_product_sale_product_sold_at", "product_sale", ["product_id", "sold_at"], unique=False)
    op.create_index(op.f("ix_product_sale_order_id"), "product_sale", ["order_id"], unique=False)

    op.create_table(
        "product_review",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("product_id", sa.String(length=100), nullable=False),
        sa.Column("customer_id", sa.String(length=100), nullable=False),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("photos", postgresql.JSONB(), nullable=True),
        sa.Column("verified_purchase", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("is_approved", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("helpful_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_product_review_rating"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_product_review_product_id"), "product_review", ["product_id"], unique=False)
    op.create_index(op.f("ix_product_review_customer_id"), "product_review", ["customer_id"], unique=False)
    op.create_index(op.f("ix_product_review_is_approved"), "product_review", ["is_approved"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_product_review_is_approved"), table_name="product_review")
    op.drop_index(op.f("ix_product_review_customer_id"), table_name="product_review")
    op.drop_index(op.f("ix_product_review_product_id"), table_name="product_review")
    op.drop_table("product_review")
    op.drop_index(op.f("ix_product_sale_order_id"), table_name="product_sale")
    op.drop_index("ix_product_sale_product_sold_at", table_name="product_sale")
    op.drop_table("product_sale")
    op.drop_index("ix_product_view_product_viewed_at", table_name="product_view")
    op.drop_table("product_view")
