"""Auto-incrementing counters for sequential numbering."""

from enum import StrEnum
from uuid import UUID

from pinnote.core.db import MongoModel


class CounterType(StrEnum):
    """Types of entities that use sequential numbering."""

    COMMENT = "comment"


class Counter(MongoModel):
    """Atomic counter for sequential numbers per scope (a file for comments).

    Uses MongoDB atomic operations to prevent duplicates.
    Indexed on (scope_id, counter_type) - unique.
    """

    scope_id: UUID
    counter_type: CounterType
    seq: int = 0  # Current value; next number will be seq + 1
