"""
Create records keyed by a freshly allocated sequential id.

Each attempt allocates a new sequence value, formats it and tries to insert.
A Conflict outcome means another writer already holds that id: the attempt
is dropped and the next one starts immediately with a new value. Any other
failure stops the loop. Burned values leave gaps in the id space; ids are
unique but not dense.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

from core.errors import DuplicateKeyError, IdAllocationExhausted, PersistFailure
from services.sequence import SequenceAllocator
from services.store import Conflict, Persisted, RecordStore

logger = logging.getLogger(__name__)

IdFormatter = Callable[[int], str]


def _log_insert_after_cancel(task: "asyncio.Future[Any]") -> None:
    # Nobody awaits the insert once the caller is gone; report its result here.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("[inventory] insert finished after cancellation with error: %r", exc)
        return
    logger.info("[inventory] insert finished after cancellation: %r", task.result())


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    backoff_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")


class ConflictRetryingCreator:
    def __init__(
        self,
        allocator: SequenceAllocator,
        records: RecordStore,
        policy: Optional[RetryPolicy] = None,
    ) -> None:
        self._allocator = allocator
        self._records = records
        self._policy = policy or RetryPolicy()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def create_with_generated_id(
        self,
        sequence_name: str,
        id_formatter: IdFormatter,
        record_fields: Mapping[str, Any],
    ) -> Any:
        """
        Persist `record_fields` under a new id drawn from `sequence_name`.

        Returns the persisted record. Raises IdAllocationExhausted when every
        attempt collided, PersistFailure on the first non-duplicate failure,
        and lets StoreUnavailable through untouched.

        Not idempotent: every call creates a new record.
        """
        max_attempts = self._policy.max_attempts
        key_field = self._records.key_field
        candidates: List[str] = []

        for attempt in range(1, max_attempts + 1):
            raw = await self._allocator.next_value(sequence_name)
            candidate = id_formatter(raw)
            candidates.append(candidate)

            record = dict(record_fields)
            record[key_field] = candidate

            # Let an in-flight insert finish even if the caller is cancelled;
            # the CancelledError still reaches us and ends the loop.
            insert = asyncio.ensure_future(self._records.insert_unique(record))
            try:
                outcome = await asyncio.shield(insert)
            except asyncio.CancelledError:
                insert.add_done_callback(_log_insert_after_cancel)
                raise

            if isinstance(outcome, Persisted):
                if attempt > 1:
                    logger.info("[inventory] %s persisted after %d attempts", candidate, attempt)
                return outcome.record

            if isinstance(outcome, Conflict):
                logger.warning(
                    "[inventory] Duplicate ID %s, retrying (attempt %d/%d)",
                    candidate, attempt, max_attempts,
                )
                if self._policy.backoff_seconds and attempt < max_attempts:
                    await asyncio.sleep(self._policy.backoff_seconds)
                continue

            logger.error("[inventory] persisting %s failed: %s", candidate, outcome.reason)
            raise PersistFailure(outcome.reason) from outcome.error

        logger.error(
            "[inventory] gave up on '%s' after %d attempts, tried %s",
            sequence_name, max_attempts, ", ".join(candidates),
        )
        raise IdAllocationExhausted(sequence_name, max_attempts, candidates) from DuplicateKeyError(candidates[-1])
