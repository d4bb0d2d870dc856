import re
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import settings
from db.database import async_session_maker
from db.inventory.item import InventoryItem
from services.creator import ConflictRetryingCreator, RetryPolicy
from services.sequence import SequenceAllocator, SqlSequenceStore
from services.store import SqlRecordStore

INVENTORY_ID_PREFIX = "ID"
_INVENTORY_ID_RE = re.compile(r"^ID(\d+)$")


def format_inventory_id(value: int) -> str:
    """ID + value padded to at least three digits: 1 -> ID001, 1000 -> ID1000."""
    if value < 0:
        raise ValueError("sequence value must be non-negative")
    return f"{INVENTORY_ID_PREFIX}{value:03d}"


def parse_inventory_id(item_id: str) -> Optional[int]:
    m = _INVENTORY_ID_RE.match(item_id or "")
    return int(m.group(1)) if m else None


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.id_max_attempts,
        backoff_seconds=settings.id_retry_backoff_ms / 1000.0,
    )


def build_item_creator(
    session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
    policy: Optional[RetryPolicy] = None,
) -> ConflictRetryingCreator:
    allocator = SequenceAllocator(SqlSequenceStore(session_maker))
    records = SqlRecordStore(session_maker, InventoryItem, key_field="id")
    return ConflictRetryingCreator(allocator, records, policy or default_retry_policy())


async def create_inventory_item(creator: ConflictRetryingCreator, fields: Mapping[str, Any]) -> InventoryItem:
    return await creator.create_with_generated_id(
        settings.inventory_sequence_name,
        format_inventory_id,
        fields,
    )
