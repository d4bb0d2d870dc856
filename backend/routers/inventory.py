import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from core.errors import IdAllocationExhausted, PersistFailure, StoreUnavailable
from db.database import get_async_session
from db.inventory.item import InventoryItem as InventoryItemModel
from schemas.inventory import InventoryItemCreate, InventoryItemOut, InventoryItemUpdate
from services.creator import ConflictRetryingCreator
from services.inventory import build_item_creator, create_inventory_item

logger = logging.getLogger(__name__)

router = APIRouter()


def get_item_creator() -> ConflictRetryingCreator:
    return build_item_creator()


async def _get_item_or_404(db: AsyncSession, item_id: str) -> InventoryItemModel:
    res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id == item_id))
    model = res.scalar_one_or_none()
    if not model:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Item with ID {item_id} not found")
    return model


@router.post("/", response_model=InventoryItemOut, status_code=status.HTTP_201_CREATED)
async def add_item(
    payload: InventoryItemCreate,
    creator: ConflictRetryingCreator = Depends(get_item_creator),
):
    """
    Create an item under the next sequential id (ID001, ID002, ...).

    - 409 when every attempt collided with an existing id
    - 503 when the store cannot be reached
    - 500 on any other persistence failure
    """
    try:
        item = await create_inventory_item(creator, payload.model_dump())
    except IdAllocationExhausted as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": e.code, "message": e.message, "attempts": e.attempts},
        )
    except StoreUnavailable as e:
        logger.error("[inventory] store unavailable: %s (%s)", e.message, e.details)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": e.code, "message": e.message},
        )
    except PersistFailure as e:
        logger.exception("[inventory] add_item failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": e.code, "message": e.message},
        )
    return InventoryItemOut.model_validate(item)


@router.get("/", response_model=List[InventoryItemOut])
async def get_all_items(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(InventoryItemModel).order_by(func.length(InventoryItemModel.id), InventoryItemModel.id))
    items = res.scalars().all()
    if not items:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No items found")
    return [InventoryItemOut(**it.to_schema) for it in items]


@router.get("/{item_id}", response_model=InventoryItemOut)
async def get_item_by_id(item_id: str, db: AsyncSession = Depends(get_async_session)):
    model = await _get_item_or_404(db, item_id)
    return InventoryItemOut(**model.to_schema)


@router.put("/{item_id}", response_model=InventoryItemOut)
async def update_item(
    item_id: str,
    payload: InventoryItemUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    model = await _get_item_or_404(db, item_id)

    try:
        for field, value in payload.model_dump().items():
            setattr(model, field, value)
        model.updated_at = func.now()
        await db.commit()
        await db.refresh(model)
    except Exception as e:
        await db.rollback()
        logger.exception("[inventory] update_item %s failed", item_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to update item: {e}")
    return InventoryItemOut(**model.to_schema)


@router.delete("/{item_id}", response_model=InventoryItemOut)
async def delete_item(item_id: str, db: AsyncSession = Depends(get_async_session)):
    model = await _get_item_or_404(db, item_id)
    out = InventoryItemOut(**model.to_schema)

    try:
        await db.delete(model)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("[inventory] delete_item %s failed", item_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to delete item: {e}")
    return out
