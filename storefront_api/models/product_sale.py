"""Product sale event (append-only, one row per order line)."""

from datetime import datetime
from functools import partial
from typing import Any

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront_api.stores.postgres import Base, JSONType, generate_id, utcnow


class ProductSale(Base):
    """Units of a product sold in an order."""

    __tablename__ = "product_sale"
    __table_args__ = (Index("ix_product_sale_product_sold_at", "product_id", "sold_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "psale"))
    product_id: Mapped[str] = mapped_column(String(100))
    order_id: Mapped[str] = mapped_column(String(100), index=True)
    quantity: Mapped[int] = mapped_column()

    sold_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ProductSale {self.product_id} x{self.quantity}>"
