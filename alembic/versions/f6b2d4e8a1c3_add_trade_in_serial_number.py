"""add_trade_in_serial_number

Revision ID: f6b2d4e8a1c3
Revises: e5a9c3b1d8f4
Create Date: 2025-12-14
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "f6b2d4e8a1c3"
down_revision: Union[str, Sequence[str], None] = "e5a9c3b1d8f4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("trade_in_request", sa.Column("serial_number", sa.String(length=100), nullable=True))


def downgrade() -> None:
    op.drop_column("trade_in_request", "serial_number")
