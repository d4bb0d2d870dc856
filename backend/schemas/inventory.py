from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class InventoryItemCreate(BaseModel):
    name: str
    display_name: str
    tag: str
    cost_price: float
    selling_price: float
    volume_weight: str
    supplier: str
    quantity: int
    status: str

    @field_validator("name", "display_name", "tag", "volume_weight", "supplier", "status")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("cost_price", "selling_price")
    @classmethod
    def _price_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("price must be >= 0")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return v


class InventoryItemUpdate(InventoryItemCreate):
    """Full replacement of the business fields; the id never changes."""


class InventoryItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    display_name: str
    tag: str
    cost_price: float
    selling_price: float
    volume_weight: str
    supplier: str
    quantity: int
    status: str
    created_at: datetime
    updated_at: datetime
