from typing import Any
from uuid import UUID

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from pinnote.core.core import Service
from pinnote.core.modules.counter.models import CounterType


class CounterService(Service):
    """Service for managing auto-incrementing counters per scope."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("counters")

    async def on_start(self) -> None:
        await self._collection.create_index([("scope_id", 1), ("counter_type", 1)], unique=True)

    async def get_next_sequence(self, scope_id: UUID, counter_type: CounterType) -> int:
        """Atomically increment and return the next sequence number for a scope and type."""
        result = await self._collection.find_one_and_update(
            {"scope_id": scope_id, "counter_type": counter_type},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        # An upserted counter starts at 1
        return int(result["seq"])
