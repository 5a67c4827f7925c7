"""add_banner_layout_columns

Mobile artwork plus product-grid section and tile size.

Revision ID: b27d93c5e6a4
Revises: a1c4e2f80b11
Create Date: 2025-12-02
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "b27d93c5e6a4"
down_revision: Union[str, Sequence[str], None] = "a1c4e2f80b11"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("banner", sa.Column("mobile_image_url", sa.Text(), nullable=True))
    op.add_column("banner", sa.Column("section", sa.String(length=64), nullable=True))
    op.add_column("banner", sa.Column("grid_size", sa.String(length=16), server_default="3x3", nullable=False))


def downgrade() -> None:
    op.drop_column("banner", "grid_size")
    op.drop_column("banner", "section")
    op.drop_column("banner", "mobile_image_url")
