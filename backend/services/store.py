"""
Store contracts used by the id allocation path.

- SequenceStore: atomic find-and-increment on a named counter
- RecordStore: insert with a unique key, reporting the outcome as a tagged value
  (Persisted | Conflict | Failure) so the caller never parses driver errors

SqlRecordStore is the SQLAlchemy implementation. Each call opens its own
short-lived session, so one instance can be shared by concurrent requests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Type, Union

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import StoreUnavailable

logger = logging.getLogger(__name__)

# Postgres unique_violation
_PG_UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True)
class Persisted:
    record: Any


@dataclass(frozen=True)
class Conflict:
    key: str


@dataclass(frozen=True)
class Failure:
    reason: str
    error: Optional[BaseException] = None


PersistOutcome = Union[Persisted, Conflict, Failure]


class SequenceStore(Protocol):
    async def find_and_increment(self, key: str, increment_by: int = 1, create_if_missing: bool = True) -> int:
        ...


class RecordStore(Protocol):
    key_field: str

    async def insert_unique(self, record: Mapping[str, Any]) -> PersistOutcome:
        ...


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == _PG_UNIQUE_VIOLATION:
        return True
    message = str(orig or exc)
    return "UNIQUE constraint failed" in message or "duplicate key value" in message


# sqlite reports an unreachable file as a plain OperationalError
_UNREACHABLE_MESSAGES = ("unable to open database file",)


def is_connection_error(exc: BaseException) -> bool:
    """True when the store itself could not be reached.

    Schema or locking errors ("no such table", "database is locked") are
    OperationalErrors too, but they are not unavailability.
    """
    if isinstance(exc, (InterfaceError, OSError)):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True
    orig = exc.orig
    if isinstance(orig, OSError) or isinstance(getattr(orig, "__cause__", None), OSError):
        return True
    return any(m in str(orig or exc) for m in _UNREACHABLE_MESSAGES)


class SqlRecordStore:
    """Insert ORM rows of `model`, treating `key_field` as the unique key."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        model: Type[Any],
        *,
        key_field: str = "id",
    ) -> None:
        self._session_maker = session_maker
        self._model = model
        self.key_field = key_field

    async def insert_unique(self, record: Mapping[str, Any]) -> PersistOutcome:
        """
        The commit decides the outcome. Once it succeeds the row exists and the
        result is Persisted, even if reloading server-side values fails.
        """
        key = str(record.get(self.key_field, ""))
        obj = None
        committed = False
        try:
            async with self._session_maker() as session:
                obj = self._model(**record)
                session.add(obj)
                await session.commit()
                committed = True
                await session.refresh(obj)
        except (SQLAlchemyError, OSError, TypeError) as exc:
            if committed:
                logger.warning("[inventory] %s committed but reload failed: %r", key, exc)
                return Persisted(obj)
            return self._classify(key, exc)
        return Persisted(obj)

    @staticmethod
    def _classify(key: str, exc: BaseException) -> PersistOutcome:
        if isinstance(exc, IntegrityError):
            if is_unique_violation(exc):
                return Conflict(key)
            return Failure(reason=str(exc.orig or exc), error=exc)
        if isinstance(exc, TypeError):
            # unknown column passed in record
            return Failure(reason=str(exc), error=exc)
        if is_connection_error(exc):
            raise StoreUnavailable(f"Could not persist {key}", details=repr(exc)) from exc
        return Failure(reason=str(exc), error=exc)
