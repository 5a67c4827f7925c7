"""Loyalty models.

- loyalty_account: one per customer, running balances and current tier
- loyalty_transaction: signed point ledger (earn / redeem / adjust)
"""

from datetime import date, datetime
from functools import partial
from typing import Any

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from storefront_api.stores.postgres import Base, JSONType, generate_id, utcnow

# Earn rows are unique per (account, order)
EARN_PREDICATE = text("type = 'earn'")


class LoyaltyAccount(Base):
    """Customer loyalty account."""

    __tablename__ = "loyalty_account"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "loyacc"))
    customer_id: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    # Points tracking
    points_balance: Mapped[int] = mapped_column(default=0, server_default="0")
    total_earned: Mapped[int] = mapped_column(default=0, server_default="0")
    total_redeemed: Mapped[int] = mapped_column(default=0, server_default="0")

    tier: Mapped[str] = mapped_column(String(20), default="bronze", server_default="bronze")

    # Birthday rewards
    birthday: Mapped[date | None] = mapped_column(Date)
    birthday_reward_sent_year: Mapped[int | None] = mapped_column()

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
        return f"<LoyaltyAccount {self.customer_id} {self.points_balance}pts {self.tier}>"


class LoyaltyTransaction(Base):
    """Point change on a loyalty account."""

    __tablename__ = "loyalty_transaction"
    __table_args__ = (
        Index("ix_loyalty_transaction_account_order_type", "loyalty_account_id", "order_id", "type"),
        Index(
            "uq_loyalty_transaction_order_earn",
            "loyalty_account_id",
            "order_id",
            unique=True,
            postgresql_where=EARN_PREDICATE,
            sqlite_where=EARN_PREDICATE,
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=partial(generate_id, "loytx"))
    loyalty_account_id: Mapped[str] = mapped_column(ForeignKey("loyalty_account.id"), index=True)

    points: Mapped[int] = mapped_column()  # signed: earn > 0, redeem < 0
    type: Mapped[str] = mapped_column(String(20))  # earn, redeem, adjust
    reason: Mapped[str | None] = mapped_column(Text)
    order_id: Mapped[str | None] = mapped_column(String(100))

    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<LoyaltyTransaction {self.type} {self.points:+d}>"
