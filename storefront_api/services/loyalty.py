"""Loyalty points service.

Rules:
- 1 point per whole currency unit spent, gold tier earns 1.5x
- tier is derived from lifetime earned points (never from the balance)
- earning is idempotent per order
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.models import LoyaltyAccount, LoyaltyTransaction
from storefront_api.models.loyalty import EARN_PREDICATE
from storefront_api.services.errors import InsufficientPointsError, ValidationFailedError

logger = logging.getLogger("uvicorn.error")

TIER_BRONZE = "bronze"
TIER_SILVER = "silver"
TIER_GOLD = "gold"

TX_EARN = "earn"
TX_REDEEM = "redeem"
TX_ADJUST = "adjust"

GOLD_MULTIPLIER = 1.5

# Ordered from lowest to highest threshold
TIER_CONFIG: dict[str, dict[str, Any]] = {
    TIER_BRONZE: {
        "name": "Хүрэл",
        "min_points": 0,
        "discount_percent": 0,
        "color": "#cd7f32",
        "benefits": ["1₮ = 1 оноо", "Онцгой санал хүргэлт"],
    },
    TIER_SILVER: {
        "name": "Мөнгө",
        "min_points": 10000,
        "discount_percent": 5,
        "color": "#c0c0c0",
        "benefits": ["1₮ = 1 оноо", "5% байнгын хөнгөлөлт", "Төрсөн өдрийн бэлэг", "Түргэн хүргэлт"],
    },
    TIER_GOLD: {
        "name": "Алт",
        "min_points": 50000,
        "discount_percent": 10,
        "color": "#ffd700",
        "benefits": [
            "1₮ = 1.5 оноо",
            "10% байнгын хөнгөлөлт",
            "Төрсөн өдрийн бэлэг",
            "Үнэгүй хүргэлт",
            "Түргэн буцаалт",
        ],
    },
}

TIER_ORDER = sorted(TIER_CONFIG, key=lambda tier: TIER_CONFIG[tier]["min_points"])


@dataclass
class AwardResult:
    """Outcome of an award_points call."""

    account: LoyaltyAccount
    tier_upgraded: bool = False
    already_processed: bool = False
    previous_tier: str | None = None


def calculate_tier(total_earned: int) -> str:
    tier = TIER_ORDER[0]
    for candidate in TIER_ORDER:
        if total_earned >= TIER_CONFIG[candidate]["min_points"]:
            tier = candidate
    return tier


def calculate_points_for_amount(amount: float, tier: str) -> int:
    points = math.floor(amount)
    if tier == TIER_GOLD:
        points = math.floor(points * GOLD_MULTIPLIER)
    return max(0, points)


def get_tier_info(account: LoyaltyAccount) -> dict[str, Any]:
    """Current tier config, next tier and progress towards it."""
    current = account.tier if account.tier in TIER_CONFIG else TIER_BRONZE
    index = TIER_ORDER.index(current)

    next_tier = None
    points_to_next_tier = 0
    progress_percent = 100.0
    if index + 1 < len(TIER_ORDER):
        next_key = TIER_ORDER[index + 1]
        next_min = TIER_CONFIG[next_key]["min_points"]
        next_tier = {"tier": next_key, **TIER_CONFIG[next_key]}
        points_to_next_tier = max(0, next_min - account.total_earned)
        progress_percent = min(100.0, account.total_earned / next_min * 100)

    return {
        "current_tier": {"tier": current, **TIER_CONFIG[current]},
        "next_tier": next_tier,
        "points_to_next_tier": points_to_next_tier,
        "progress_percent": progress_percent,
    }


def is_tier_upgrade(previous: str, current: str) -> bool:
    return TIER_ORDER.index(current) > TIER_ORDER.index(previous)


# ============================================================
# Account operations
# ============================================================


def _insert(session: AsyncSession, entity: Any):
    """INSERT for the bound dialect, with ON CONFLICT support."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite_insert(entity)
    return postgresql_insert(entity)


async def get_account(session: AsyncSession, customer_id: str) -> LoyaltyAccount | None:
    result = await session.execute(select(LoyaltyAccount).where(LoyaltyAccount.customer_id == customer_id))
    return result.scalar_one_or_none()


async def get_or_create_account(session: AsyncSession, customer_id: str) -> LoyaltyAccount:
    account = await get_account(session, customer_id)
    if account is not None:
        return account

    # A concurrent first award may insert the same customer; keep whichever row won.
    result = await session.execute(
        _insert(session, LoyaltyAccount)
        .values(
            customer_id=customer_id,
            points_balance=0,
            total_earned=0,
            total_redeemed=0,
            tier=TIER_BRONZE,
        )
        .on_conflict_do_nothing(index_elements=["customer_id"])
        .returning(LoyaltyAccount.id)
    )
    if result.scalar_one_or_none() is not None:
        logger.info(f"[loyalty] account created customer_id={customer_id}")

    account = await get_account(session, customer_id)
    if account is None:
        raise RuntimeError(f"Loyalty account for {customer_id} vanished after upsert")
    return account


async def _lock_account(session: AsyncSession, customer_id: str) -> LoyaltyAccount:
    """Ensure the account exists and re-read it under a row lock."""
    await get_or_create_account(session, customer_id)
    result = await session.execute(
        select(LoyaltyAccount)
        .where(LoyaltyAccount.customer_id == customer_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _add_to_counters(session: AsyncSession, account: LoyaltyAccount, *guards: Any, **deltas: int) -> bool:
    """Add deltas to counter columns in one UPDATE, then refresh ``account``.

    Returns False when a guard condition excluded the row.
    """
    values = {getattr(LoyaltyAccount, name): getattr(LoyaltyAccount, name) + delta for name, delta in deltas.items()}
    result = await session.execute(
        update(LoyaltyAccount)
        .where(LoyaltyAccount.id == account.id, *guards)
        .values(values)
        .execution_options(synchronize_session=False)
    )
    await session.refresh(account)
    return result.rowcount == 1


async def award_points(
    session: AsyncSession,
    customer_id: str,
    points: int,
    reason: str = "purchase",
    order_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AwardResult:
    """Credit points and recompute the tier.

    When ``order_id`` is given, a second award for the same order is a no-op
    reported with ``already_processed``. The earn row is guarded by a partial
    unique index, so redelivered events cannot double-credit.
    """
    if points < 0:
        raise ValidationFailedError("Points must not be negative")

    account = await _lock_account(session, customer_id)
    values = {
        "loyalty_account_id": account.id,
        "points": points,
        "type": TX_EARN,
        "reason": reason,
        "order_id": order_id,
        "metadata_": metadata,
    }

    if order_id:
        inserted = await session.execute(
            _insert(session, LoyaltyTransaction)
            .values(**values)
            .on_conflict_do_nothing(
                index_elements=["loyalty_account_id", "order_id"],
                index_where=EARN_PREDICATE,
            )
            .returning(LoyaltyTransaction.id)
        )
        if inserted.scalar_one_or_none() is None:
            logger.info(f"[loyalty] order already awarded customer_id={customer_id} order_id={order_id}")
            return AwardResult(account=account, already_processed=True, previous_tier=account.tier)
    else:
        session.add(LoyaltyTransaction(**values))

    previous_tier = account.tier
    await _add_to_counters(session, account, points_balance=points, total_earned=points)
    account.tier = calculate_tier(account.total_earned)
    await session.flush()

    upgraded = is_tier_upgrade(previous_tier, account.tier)
    logger.info(
        f"[loyalty] awarded customer_id={customer_id} points={points} order_id={order_id} "
        f"tier={account.tier} upgraded={upgraded}"
    )
    return AwardResult(account=account, tier_upgraded=upgraded, previous_tier=previous_tier)


async def redeem_points(
    session: AsyncSession,
    customer_id: str,
    points: int,
    reason: str = "redemption",
    order_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> LoyaltyAccount:
    if points <= 0:
        raise ValidationFailedError("Points must be positive")

    account = await _lock_account(session, customer_id)
    debited = await _add_to_counters(
        session,
        account,
        LoyaltyAccount.points_balance >= points,
        points_balance=-points,
        total_redeemed=points,
    )
    if not debited:
        raise InsufficientPointsError(available=account.points_balance, required=points)

    session.add(
        LoyaltyTransaction(
            loyalty_account_id=account.id,
            points=-points,
            type=TX_REDEEM,
            reason=reason,
            order_id=order_id,
            metadata_=metadata,
        )
    )
    await session.flush()
    logger.info(f"[loyalty] redeemed customer_id={customer_id} points={points}")
    return account


async def get_account_transactions(
    session: AsyncSession,
    customer_id: str,
    skip: int = 0,
    take: int = 50,
) -> list[LoyaltyTransaction]:
    account = await get_or_create_account(session, customer_id)
    result = await session.execute(
        select(LoyaltyTransaction)
        .where(LoyaltyTransaction.loyalty_account_id == account.id)
        .order_by(LoyaltyTransaction.created_at.desc())
        .offset(skip)
        .limit(take)
    )
    return list(result.scalars().all())


# ============================================================
# Birthday rewards
# ============================================================


async def update_birthday(session: AsyncSession, customer_id: str, birthday: date) -> LoyaltyAccount:
    account = await get_or_create_account(session, customer_id)
    account.birthday = birthday
    await session.flush()
    return account


async def is_birthday_reward_eligible(session: AsyncSession, customer_id: str, today: date | None = None) -> bool:
    """Birthday falls in the current month and no reward was sent this year."""
    today = today or date.today()
    account = await get_or_create_account(session, customer_id)
    if account.birthday is None:
        return False
    if account.birthday.month != today.month:
        return False
    return account.birthday_reward_sent_year != today.year


async def mark_birthday_reward_sent(session: AsyncSession, customer_id: str, today: date | None = None) -> None:
    today = today or date.today()
    account = await get_or_create_account(session, customer_id)
    account.birthday_reward_sent_year = today.year
    await session.flush()
