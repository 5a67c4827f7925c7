#!/usr/bin/env python3
"""Abandoned-cart recovery job for cron.

Schedule:
- Every 6 hours (0 */6 * * *).

Behavior:
- Takes a Redis lock so overlapping runs skip instead of double-sending
- Emails carts idle for ABANDONED_CART_AFTER_HOURS (default 24) with the
  ABANDONED_CART_DISCOUNT_CODE (default CART10)

Run:
  python -m scripts.abandoned_cart_checker
"""

import asyncio
import os
import sys
from dataclasses import asdict

# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

from storefront_api.services.abandoned_cart import JOB_NAME, process_abandoned_carts  # noqa: E402
from storefront_api.services.commerce_client import close_commerce_client  # noqa: E402
from storefront_api.services.notifications import close_email_notifier  # noqa: E402
from storefront_api.stores.redis import acquire_lock, close_redis, init_redis, release_lock  # noqa: E402

load_dotenv()


async def main() -> None:
    await init_redis()
    try:
        if not await acquire_lock(JOB_NAME):
            print({"ok": True, "skipped": "lock held by another run"})
            return
        try:
            stats = await process_abandoned_carts()
            print({"ok": True, **asdict(stats)})
        finally:
            await release_lock(JOB_NAME)
    finally:
        await close_commerce_client()
        await close_email_notifier()
        await close_redis()


if __name__ == "__main__":
    asyncio.run(main())
