"""Product view event (append-only, used for the live viewer counter)."""

from datetime import datetime
from functools import partial
from typing import Any

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront_api.stores.postgres import Base, JSONType, generate_id, utcnow


class ProductView(Base):
    """A single product page view."""

    __tablename__ = "product_view"
    __table_args__ = (Index("ix_product_view_product_viewed_at", "product_id", "viewed_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "pview"))
    product_id: Mapped[str] = mapped_column(String(100))

    # Viewer identity (customer when signed in, otherwise session)
    customer_id: Mapped[str | None] = mapped_column(String(100))
    session_id: Mapped[str | None] = mapped_column(String(200))
    ip_address: Mapped[str | None] = mapped_column(Text)

    viewed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ProductView {self.product_id} {self.viewed_at}>"
