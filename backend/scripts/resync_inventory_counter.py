"""
Raise the inventory id counter to the highest id already persisted.

A counter that fell behind (restored backup, rows imported by hand) makes
every create burn attempts on duplicate ids. This moves it forward; it never
moves it back.

Run inside docker (recommended):
  docker exec -i bizdesk-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/resync_inventory_counter.py"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from core.config import settings  # noqa: E402
from db.database import async_session_maker  # noqa: E402
from db.inventory.item import InventoryItem  # noqa: E402
from services.inventory import parse_inventory_id  # noqa: E402
from services.sequence import SqlSequenceStore  # noqa: E402

logger = logging.getLogger("scripts.resync_inventory_counter")


async def highest_item_number(session_maker: async_sessionmaker[AsyncSession]) -> int:
    async with session_maker() as db:
        res = await db.execute(select(InventoryItem.id))
        numbers = [parse_inventory_id(item_id) for item_id in res.scalars().all()]
    return max((n for n in numbers if n is not None), default=0)


async def resync(session_maker: async_sessionmaker[AsyncSession], sequence_name: str) -> int:
    highest = await highest_item_number(session_maker)
    value = await SqlSequenceStore(session_maker).raise_to_at_least(sequence_name, highest)
    logger.info("[resync] %s: highest persisted=%d, counter now=%d", sequence_name, highest, value)
    return value


async def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--sequence", default=settings.inventory_sequence_name)
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(message)s")
    value = await resync(async_session_maker, args.sequence)
    print(f"{args.sequence} counter at {value}")


if __name__ == "__main__":
    asyncio.run(main())
