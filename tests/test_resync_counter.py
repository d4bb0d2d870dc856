"""Tests for scripts/resync_inventory_counter.py."""

from scripts.resync_inventory_counter import highest_item_number, resync
from db.inventory.item import InventoryItem
from services.creator import RetryPolicy
from services.inventory import build_item_creator, create_inventory_item
from services.sequence import SqlSequenceStore


def _row(item_id: str) -> InventoryItem:
    return InventoryItem(
        id=item_id, name=item_id, display_name=item_id, tag="t", cost_price=1, selling_price=2,
        volume_weight="1kg", supplier="s", quantity=1, status="in-stock",
    )


async def test_resync_moves_counter_past_imported_rows(session_maker, item_payload) -> None:
    async with session_maker() as db:
        db.add_all([_row("ID007"), _row("ID1002"), _row("LEGACY-9")])
        await db.commit()

    assert await highest_item_number(session_maker) == 1002
    assert await resync(session_maker, "inventoryId") == 1002

    item = await create_inventory_item(build_item_creator(session_maker, RetryPolicy()), item_payload)
    assert item.id == "ID1003"


async def test_resync_never_lowers_counter(session_maker) -> None:
    await SqlSequenceStore(session_maker).raise_to_at_least("inventoryId", 50)

    assert await resync(session_maker, "inventoryId") == 50


async def test_resync_on_empty_table(session_maker) -> None:
    assert await highest_item_number(session_maker) == 0
    assert await resync(session_maker, "inventoryId") == 0
