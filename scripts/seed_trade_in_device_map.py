#!/usr/bin/env python3
"""Seed the trade-in TAC device map.

Loads rows from data/trade-in-device-map.json when present, otherwise a small
built-in sample. Idempotent: rows are upserted by tac_prefix.

Usage:
    python -m scripts.seed_trade_in_device_map
"""

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from storefront_api.models import TradeInDeviceMap  # noqa: E402
from storefront_api.stores.postgres import close_db, get_session, init_db  # noqa: E402

load_dotenv()

DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "trade-in-device-map.json"

SAMPLE_ROWS: list[dict[str, Any]] = [
    {
        "tac_prefix": "35671081",
        "brand": "apple",
        "device_type": "iphone",
        "model_keyword": "iphone 13 pro",
        "priority": 20,
        "metadata": {"source": "sample"},
    },
    {
        "tac_prefix": "35881501",
        "brand": "apple",
        "device_type": "iphone",
        "model_keyword": "iphone 14 pro",
        "priority": 18,
        "metadata": {"source": "sample"},
    },
    {
        "tac_prefix": "35994461",
        "brand": "apple",
        "device_type": "iphone",
        "model_keyword": "iphone 15 pro",
        "priority": 18,
        "metadata": {"source": "sample"},
    },
]


def load_rows(path: Path = DATA_PATH) -> list[dict[str, Any]]:
    if path.exists():
        parsed = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(parsed, list):
            return parsed
    return SAMPLE_ROWS


async def upsert_device_map(session: AsyncSession, rows: list[dict[str, Any]]) -> dict[str, int]:
    """Create or update one mapping per TAC prefix."""
    stats = {"created": 0, "updated": 0, "skipped": 0}
    for row in rows:
        tac = str(row.get("tac_prefix") or "").strip()
        if not tac or not row.get("model_keyword"):
            stats["skipped"] += 1
            continue

        values = {
            "tac_prefix": tac,
            "brand": row.get("brand") or "apple",
            "device_type": row.get("device_type"),
            "model_keyword": row["model_keyword"],
            "priority": row.get("priority", 0),
            "active": row.get("active", True),
            "metadata_": row.get("metadata"),
        }

        result = await session.execute(
            select(TradeInDeviceMap).where(TradeInDeviceMap.tac_prefix == tac).limit(1)
        )
        existing = result.scalar_one_or_none()
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            stats["updated"] += 1
            print(f"  updated {tac} -> {row['model_keyword']}")
        else:
            session.add(TradeInDeviceMap(**values))
            stats["created"] += 1
            print(f"  created {tac} -> {row['model_keyword']}")

    await session.flush()
    return stats


async def seed_device_map() -> None:
    await init_db()
    try:
        rows = load_rows()
        print(f"Seeding {len(rows)} trade-in device map rows...")
        async with get_session() as session:
            stats = await upsert_device_map(session, rows)
        print(stats)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_device_map())
