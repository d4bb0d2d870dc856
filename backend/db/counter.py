from sqlalchemy import BigInteger, Column, DateTime, String
from sqlalchemy.sql import func

from .database import Base


class SequenceCounter(Base):
    """One row per named sequence; `value` is the last number handed out.

    Rows are only ever touched through the atomic upsert in
    services.sequence, never read-then-written.
    """
    __tablename__ = "sequence_counters"

    name = Column(String(64), primary_key=True)
    value = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
