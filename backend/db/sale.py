import uuid
from sqlalchemy import JSON, Column, DateTime, Float, String, Uuid
from sqlalchemy.sql import func

from .database import Base


class Sale(Base):
    """Only the columns the monthly reports read."""
    __tablename__ = "sales"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_name = Column(String, nullable=True)
    total_amount = Column(Float, nullable=False, default=0)
    item_names = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
