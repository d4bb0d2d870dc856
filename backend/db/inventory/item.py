from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    # Display id handed out by the inventory sequence (ID001, ID002, ...)
    id = Column(String(32), primary_key=True)

    name = Column(String, nullable=False, index=True)
    display_name = Column(String, nullable=False)
    tag = Column(Text, nullable=False)
    cost_price = Column(Float, nullable=False)
    selling_price = Column(Float, nullable=False)
    volume_weight = Column(String, nullable=False)
    supplier = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    status = Column(Text, nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=_utcnow, server_default=func.now())

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "tag": self.tag,
            "cost_price": float(self.cost_price),
            "selling_price": float(self.selling_price),
            "volume_weight": self.volume_weight,
            "supplier": self.supplier,
            "quantity": int(self.quantity),
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
