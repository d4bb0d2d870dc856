from __future__ import annotations

import logging

from sqlalchemy import case, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import func

from core.errors import StoreUnavailable
from db.counter import SequenceCounter
from services.store import SequenceStore

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SqlSequenceStore:
    """Named counters in the `sequence_counters` table.

    Increments are a single INSERT .. ON CONFLICT DO UPDATE .. RETURNING
    statement, so concurrent callers (in any number of processes) never see
    the same value.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def find_and_increment(self, key: str, increment_by: int = 1, create_if_missing: bool = True) -> int:
        if increment_by < 1:
            raise ValueError("increment_by must be >= 1")
        tbl = SequenceCounter.__table__
        try:
            async with self._session_maker() as session:
                if create_if_missing:
                    insert = self._insert_for(session)
                    stmt = (
                        insert(tbl)
                        .values(name=key, value=increment_by)
                        .on_conflict_do_update(
                            index_elements=[tbl.c.name],
                            set_={"value": tbl.c.value + increment_by, "updated_at": func.now()},
                        )
                        .returning(tbl.c.value)
                    )
                else:
                    stmt = (
                        update(tbl)
                        .where(tbl.c.name == key)
                        .values(value=tbl.c.value + increment_by, updated_at=func.now())
                        .returning(tbl.c.value)
                    )
                value = (await session.execute(stmt)).scalar_one_or_none()
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Could not increment sequence '{key}'", details=repr(exc)) from exc
        except OSError as exc:
            raise StoreUnavailable(f"Could not reach store for sequence '{key}'", details=repr(exc)) from exc

        if value is None:
            raise LookupError(f"Sequence '{key}' does not exist")
        return int(value)

    async def raise_to_at_least(self, key: str, floor: int) -> int:
        """Move the counter up to `floor` if it is behind; never lowers it."""
        tbl = SequenceCounter.__table__
        try:
            async with self._session_maker() as session:
                insert = self._insert_for(session)
                stmt = (
                    insert(tbl)
                    .values(name=key, value=floor)
                    .on_conflict_do_update(
                        index_elements=[tbl.c.name],
                        set_={
                            "value": case((tbl.c.value < floor, floor), else_=tbl.c.value),
                            "updated_at": func.now(),
                        },
                    )
                    .returning(tbl.c.value)
                )
                value = (await session.execute(stmt)).scalar_one()
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Could not resync sequence '{key}'", details=repr(exc)) from exc
        return int(value)

    @staticmethod
    def _insert_for(session: AsyncSession):
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            # no atomic upsert primitive we trust on this backend
            raise StoreUnavailable(f"Atomic increment is not supported on dialect '{dialect}'")
        return insert


class SequenceAllocator:
    """Hands out the next integer of a named sequence. Formatting is the caller's job."""

    def __init__(self, store: SequenceStore) -> None:
        self._store = store

    async def next_value(self, sequence_name: str) -> int:
        name = (sequence_name or "").strip()
        if not name:
            raise ValueError("sequence name is required")
        value = await self._store.find_and_increment(name, 1, True)
        logger.debug("[sequence] %s -> %d", name, value)
        return value
