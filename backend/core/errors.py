"""Domain errors raised by the id allocation and inventory write path.

Routers translate these into HTTP responses; nothing below the router layer
knows about status codes.
"""
from typing import Optional, Sequence


class InventoryServiceError(Exception):
    code = "INVENTORY_ERROR"

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class StoreUnavailable(InventoryServiceError):
    """The backing store could not be reached, or cannot guarantee atomicity."""

    code = "STORE_UNAVAILABLE"


class DuplicateKeyError(InventoryServiceError):
    """A candidate key was already taken by another record."""

    code = "DUPLICATE_KEY"

    def __init__(self, key: str) -> None:
        super().__init__(f"Duplicate key {key}")
        self.key = key


class IdAllocationExhausted(InventoryServiceError):
    """Every attempt in the retry budget collided on the unique key."""

    code = "ID_ALLOCATION_EXHAUSTED"

    def __init__(self, sequence_name: str, attempts: int, candidates: Sequence[str]) -> None:
        super().__init__(
            f"Failed to generate a unique ID for '{sequence_name}' after {attempts} attempts.",
            details=f"candidates={','.join(candidates)}",
        )
        self.sequence_name = sequence_name
        self.attempts = attempts
        self.candidates = list(candidates)


class PersistFailure(InventoryServiceError):
    """A persist call failed for a reason other than a duplicate key."""

    code = "PERSIST_FAILED"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
