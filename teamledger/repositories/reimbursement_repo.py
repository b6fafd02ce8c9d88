from datetime import date, datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.base import PaymentStatus, from_document, to_document, to_object_id
from teamledger.models.reimbursement import Reimbursement, ReimbursementCreate


class ReimbursementRepository:
    """Reimbursement operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["reimbursements"]

    async def create_reimbursement(self, data: ReimbursementCreate) -> Reimbursement:
        reimbursement = Reimbursement(**data.model_dump())
        result = await self.collection.insert_one(to_document(reimbursement))
        reimbursement.id = str(result.inserted_id)
        return reimbursement

    async def get_reimbursement(self, reimbursement_id: str, session=None) -> Optional[Reimbursement]:
        oid = to_object_id(reimbursement_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid}, session=session)
        if doc:
            return Reimbursement(**from_document(doc))
        return None

    async def list_reimbursements(self, status: Optional[PaymentStatus] = None) -> List[Reimbursement]:
        query = {}
        if status is not None:
            query["payment_status"] = status.value
        docs = await self.collection.find(query).sort("purchase_date", -1).to_list(None)
        return [Reimbursement(**from_document(doc)) for doc in docs]

    async def count_unpaid(self) -> int:
        return await self.collection.count_documents({"payment_status": PaymentStatus.UNPAID.value})

    async def mark_paid(self, reimbursement_id: str, payment_method: str, payment_date: date, session=None) -> bool:
        """Flip unpaid -> paid. False if it was not unpaid."""
        result = await self.collection.update_one(
            {"_id": to_object_id(reimbursement_id), "payment_status": PaymentStatus.UNPAID.value},
            {"$set": {
                "payment_status": PaymentStatus.PAID.value,
                "payment_method": payment_method,
                "payment_date": payment_date.isoformat(),
                "updated_at": datetime.now(timezone.utc)
            }},
            session=session
        )
        return result.modified_count > 0

    async def revert_paid(self, reimbursement_id: str, session=None) -> None:
        """Undo mark_paid: back to unpaid with no payment details."""
        await self.collection.update_one(
            {"_id": to_object_id(reimbursement_id), "payment_status": PaymentStatus.PAID.value},
            {"$set": {
                "payment_status": PaymentStatus.UNPAID.value,
                "payment_method": None,
                "payment_date": None,
                "updated_at": datetime.now(timezone.utc)
            }},
            session=session
        )
