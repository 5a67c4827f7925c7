"""Banner model.

Storefront banner content for the homepage carousel (hero), the bento grid
and the product-grid sections. Rows are soft-deleted via deleted_at.
"""

from datetime import datetime
from functools import partial
from typing import Any

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront_api.stores.postgres import Base, JSONType, generate_id, utcnow


class Banner(Base):
    """Banner shown on a storefront placement."""

    __tablename__ = "banner"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "banner"))

    # Content
    title: Mapped[str | None] = mapped_column(Text)
    subtitle: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str] = mapped_column(Text)
    mobile_image_url: Mapped[str | None] = mapped_column(Text)
    link: Mapped[str] = mapped_column(Text)
    alt_text: Mapped[str | None] = mapped_column(Text)

    # Display settings
    placement: Mapped[str] = mapped_column(String(32), index=True)  # hero, bento, product_grid
    section: Mapped[str | None] = mapped_column(String(64))  # product_grid: apple, gaming, ipad...
    grid_size: Mapped[str] = mapped_column(String(16), default="3x3", server_default="3x3")
    sort_order: Mapped[int] = mapped_column(default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(default=True, server_default="true")
    dark_text: Mapped[bool] = mapped_column(default=False, server_default="false")

    # Scheduling (optional)
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Banner {self.id} {self.placement}>"
