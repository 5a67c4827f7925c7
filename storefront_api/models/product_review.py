"""Product review model.

Reviews are created unapproved from the storefront and become public once an
admin approves them.
"""

from datetime import datetime
from functools import partial
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront_api.stores.postgres import Base, JSONType, generate_id, utcnow


class ProductReview(Base):
    """Customer review of a product."""

    __tablename__ = "product_review"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_product_review_rating"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "prev"))
    product_id: Mapped[str] = mapped_column(String(100), index=True)
    customer_id: Mapped[str] = mapped_column(String(100), index=True)
    customer_name: Mapped[str] = mapped_column(Text)

    rating: Mapped[int] = mapped_column()  # 1-5
    title: Mapped[str | None] = mapped_column(Text)
    comment: Mapped[str] = mapped_column(Text)
    photos: Mapped[list[str] | None] = mapped_column(JSONType)

    verified_purchase: Mapped[bool] = mapped_column(default=False, server_default="false")
    is_approved: Mapped[bool] = mapped_column(default=False, server_default="false", index=True)
    helpful_count: Mapped[int] = mapped_column(default=0, server_default="0")

    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType)

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

    def __repr__(self) -> str:
        return f"<ProductReview {self.id} {self.rating}*>"
