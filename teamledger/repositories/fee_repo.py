from datetime import date, datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from teamledger.models.base import PaymentStatus, from_document, to_object_id, utcnow
from teamledger.models.fee import MembershipFee


class FeeRepository:
    """Membership fee operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["membership_fees"]

    async def insert_if_absent(self, member_id: str, fee_month: date, amount_cents: int) -> bool:
        """
        Create an unpaid fee for (member, month) unless one exists.

        Existing fees are never modified, whatever their amount or status.
        Returns True if a new fee row was created.
        """
        now = utcnow()
        try:
            result = await self.collection.update_one(
                {"member_id": member_id, "fee_month": fee_month.isoformat()},
                {"$setOnInsert": {
                    "amount_cents": amount_cents,
                    "payment_status": PaymentStatus.UNPAID.value,
                    "payment_method": None,
                    "payment_date": None,
                    "notes": "",
                    "created_at": now,
                    "updated_at": now
                }},
                upsert=True
            )
        except DuplicateKeyError:
            return False
        return result.upserted_id is not None

    async def get_fee(self, fee_id: str, session=None) -> Optional[MembershipFee]:
        oid = to_object_id(fee_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid}, session=session)
        if doc:
            return MembershipFee(**from_document(doc))
        return None

    async def list_for_month(self, fee_month: date) -> List[MembershipFee]:
        docs = await self.collection.find({"fee_month": fee_month.isoformat()}).to_list(None)
        return [MembershipFee(**from_document(doc)) for doc in docs]

    async def list_unpaid(self) -> List[MembershipFee]:
        docs = await self.collection.find({"payment_status": PaymentStatus.UNPAID.value}).to_list(None)
        return [MembershipFee(**from_document(doc)) for doc in docs]

    async def count(self) -> int:
        return await self.collection.count_documents({})

    async def mark_paid(self, fee_id: str, payment_method: str, payment_date: date, session=None) -> bool:
        """Flip unpaid -> paid. False if the fee was not unpaid."""
        result = await self.collection.update_one(
            {"_id": to_object_id(fee_id), "payment_status": PaymentStatus.UNPAID.value},
            {"$set": {
                "payment_status": PaymentStatus.PAID.value,
                "payment_method": payment_method,
                "payment_date": payment_date.isoformat(),
                "updated_at": datetime.now(timezone.utc)
            }},
            session=session
        )
        return result.modified_count > 0

    async def revert_paid(self, fee_id: str, session=None) -> None:
        """Undo mark_paid: back to unpaid with no payment details."""
        await self.collection.update_one(
            {"_id": to_object_id(fee_id), "payment_status": PaymentStatus.PAID.value},
            {"$set": {
                "payment_status": PaymentStatus.UNPAID.value,
                "payment_method": None,
                "payment_date": None,
                "updated_at": datetime.now(timezone.utc)
            }},
            session=session
        )
