"""unique_loyalty_earn_per_order

Revision ID: a7d5c9e2f4b6
Revises: f6b2d4e8a1c3
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a7d5c9e2f4b6"
down_revision: Union[str, Sequence[str], None] = "f6b2d4e8a1c3"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index(
        "uq_loyalty_transaction_order_earn",
        "loyalty_transaction",
        ["loyalty_account_id", "order_id"],
        unique=True,
        postgresql_where=sa.text("type = 'earn'"),
    )


def downgrade() -> None:
    op.drop_index("uq_loyalty_transaction_order_earn", table_name="loyalty_transaction")
