from typing import Iterable, List, Set

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from teamledger.core.errors import DuplicateRecordError
from teamledger.models.bank import BankTransaction
from teamledger.models.base import from_document, to_document, to_object_id


class BankTransactionRepository:
    """Imported bank statement rows."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["bank_transactions"]

    async def existing_hashes(self, hashes: Iterable[str]) -> Set[str]:
        """Which of `hashes` are already stored."""
        wanted = list(set(hashes))
        if not wanted:
            return set()
        docs = await self.collection.find(
            {"import_hash": {"$in": wanted}},
            {"import_hash": 1}
        ).to_list(None)
        return {doc["import_hash"] for doc in docs}

    async def insert_transaction(self, txn: BankTransaction, session=None) -> BankTransaction:
        """Insert one row; the unique import_hash index rejects re-imports."""
        try:
            result = await self.collection.insert_one(to_document(txn), session=session)
        except DuplicateKeyError:
            raise DuplicateRecordError(f"Bank transaction {txn.import_hash} already imported")
        txn.id = str(result.inserted_id)
        return txn

    async def delete_transaction(self, txn_id: str, session=None) -> None:
        await self.collection.delete_one({"_id": to_object_id(txn_id)}, session=session)

    async def list_recent(self, limit: int = 50) -> List[BankTransaction]:
        docs = await self.collection.find().sort("txn_date", -1).limit(limit).to_list(None)
        return [BankTransaction(**from_document(doc)) for doc in docs]

    async def count_between(self, start: str, end: str) -> int:
        return await self.collection.count_documents({"txn_date": {"$gte": start, "$lte": end}})

    async def count(self) -> int:
        return await self.collection.count_documents({})
