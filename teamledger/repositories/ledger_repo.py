"""
LedgerRepository - append-only store for signed ledger entries.

Posting is an upsert keyed on (reference_type, reference_id) with
$setOnInsert, so posting the same event twice leaves exactly one entry.
"""

from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from teamledger.models.base import from_document, to_document
from teamledger.models.ledger import LedgerEntry


class LedgerRepository:
    """Repository for the unified transactions ledger."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["transactions_ledger"]

    async def append(self, entry: LedgerEntry, session=None) -> Tuple[LedgerEntry, bool]:
        """
        Append an entry unless its originating record is already posted.

        Returns (stored entry, created). `created` is False when an entry for
        the same reference already existed; that entry is returned untouched.
        """
        key = {
            "reference_type": entry.reference_type,
            "reference_id": entry.reference_id,
        }
        doc = to_document(entry, exclude={"reference_type", "reference_id"})

        try:
            result = await self.collection.update_one(
                key,
                {"$setOnInsert": doc},
                upsert=True,
                session=session
            )
            created = result.upserted_id is not None
        except DuplicateKeyError:
            # Lost an upsert race; the other writer's entry stands
            created = False

        stored = await self.collection.find_one(key, session=session)
        return LedgerEntry(**from_document(stored)), created

    async def remove_reference(self, reference_type: str, reference_id: str, session=None) -> None:
        """Undo step for a paired write that failed after posting; not used otherwise."""
        await self.collection.delete_one(
            {"reference_type": reference_type, "reference_id": reference_id},
            session=session
        )

    async def find_by_reference(self, reference_type: str, reference_id: str) -> Optional[LedgerEntry]:
        doc = await self.collection.find_one({
            "reference_type": reference_type,
            "reference_id": reference_id
        })
        if doc:
            return LedgerEntry(**from_document(doc))
        return None

    async def list_entries(self, start: Optional[str] = None, end: Optional[str] = None) -> List[LedgerEntry]:
        """All entries with start <= txn_date <= end, oldest first."""
        query = {}
        date_filter = {}
        if start:
            date_filter["$gte"] = start
        if end:
            date_filter["$lte"] = end
        if date_filter:
            query["txn_date"] = date_filter

        docs = await self.collection.find(query).sort("txn_date", ASCENDING).to_list(None)
        return [LedgerEntry(**from_document(doc)) for doc in docs]

    async def recent(self, limit: int = 20) -> List[LedgerEntry]:
        """Most recently posted entries first."""
        docs = await self.collection.find().sort("created_at", DESCENDING).limit(limit).to_list(None)
        return [LedgerEntry(**from_document(doc)) for doc in docs]

    async def count(self) -> int:
        return await self.collection.count_documents({})
