"""Trade-in models.

- trade_in_offer: pricing matrix (model keyword x condition -> amount)
- trade_in_device_map: TAC (first 8 IMEI digits) -> model keyword
- trade_in_request: customer trade-in, either a lead form or a cart discount
"""

from datetime import datetime
from functools import partial
from typing import Any

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront_api.stores.postgres import Base, JSONType, generate_id, utcnow


class TradeInOffer(Base):
    """Trade-in value for a device keyword in a given condition."""

    __tablename__ = "trade_in_offer"
    __table_args__ = (Index("ix_trade_in_offer_lookup", "brand", "condition", "active"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "tioffer"))

    # Matching fields
    brand: Mapped[str] = mapped_column(String(50), default="apple", server_default="apple")
    device_type: Mapped[str | None] = mapped_column(String(50))  # iphone, mac, ipad, watch, airpods, other
    model_keyword: Mapped[str] = mapped_column(Text)  # contains-match against user input
    condition: Mapped[str] = mapped_column(String(20))  # like_new, good, fair, broken

    # Offer value
    amount: Mapped[float] = mapped_column()
    currency_code: Mapped[str] = mapped_column(String(3), default="mnt", server_default="mnt")

    # Control
    active: Mapped[bool] = mapped_column(default=True, server_default="true")
    priority: Mapped[int] = mapped_column(default=0, server_default="0")

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
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<TradeInOffer {self.model_keyword!r} {self.condition} {self.amount}>"


class TradeInDeviceMap(Base):
    """TAC prefix to model keyword mapping (serial/IMEI resolution)."""

    __tablename__ = "trade_in_device_map"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "timap"))

    tac_prefix: Mapped[str] = mapped_column(String(8), index=True)
    brand: Mapped[str] = mapped_column(String(50), default="apple", server_default="apple")
    device_type: Mapped[str | None] = mapped_column(String(50))
    model_keyword: Mapped[str] = mapped_column(Text)

    priority: Mapped[int] = mapped_column(default=0, server_default="0")
    active: Mapped[bool] = mapped_column(default=True, server_default="true")

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
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<TradeInDeviceMap {self.tac_prefix} -> {self.model_keyword!r}>"


class TradeInRequest(Base):
    """A customer's trade-in of an old device toward a new product."""

    __tablename__ = "trade_in_request"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "tireq"))

    # New (desired) product
    new_product_id: Mapped[str | None] = mapped_column(String(100), index=True)
    new_product_handle: Mapped[str | None] = mapped_column(Text)
    new_product_title: Mapped[str | None] = mapped_column(Text)

    # Cart / order linkage
    cart_id: Mapped[str | None] = mapped_column(String(100), index=True)
    order_id: Mapped[str | None] = mapped_column(String(100), index=True)

    # Estimate and promotion
    estimated_amount: Mapped[float | None] = mapped_column()
    final_amount: Mapped[float | None] = mapped_column()
    currency_code: Mapped[str] = mapped_column(String(3), default="mnt", server_default="mnt")
    promotion_code: Mapped[str | None] = mapped_column(String(100), index=True)

    # Customer info
    customer_name: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(50))

    # Old device being traded in
    serial_number: Mapped[str | None] = mapped_column(String(100))
    old_device_model: Mapped[str] = mapped_column(Text)
    old_device_condition: Mapped[str] = mapped_column(String(20))
    note: Mapped[str | None] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(20), default="new", server_default="new")  # new, applied, ordered, removed

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
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<TradeInRequest {self.id} {self.status}>"
