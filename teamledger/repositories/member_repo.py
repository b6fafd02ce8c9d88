from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from teamledger.core.errors import DuplicateRecordError, LedgerValidationError
from teamledger.models.base import from_document, to_document, to_object_id
from teamledger.models.member import Member, MemberCreate


class MemberRepository:
    """Member database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["members"]

    async def create_member(self, member_data: MemberCreate) -> Member:
        """Create a new member. Raises DuplicateRecordError on a name clash."""
        member = Member(**member_data.model_dump())
        try:
            result = await self.collection.insert_one(to_document(member))
        except DuplicateKeyError:
            raise DuplicateRecordError(f"Member '{member.full_name}' already exists")
        member.id = str(result.inserted_id)
        return member

    async def insert_members(self, members: Iterable[MemberCreate]) -> Tuple[List[Member], int]:
        """
        Insert members one by one, letting the unique name index reject
        anything another writer inserted first.

        Returns (inserted members, conflicts).
        """
        inserted = []
        conflicts = 0
        for member_data in members:
            try:
                inserted.append(await self.create_member(member_data))
            except DuplicateRecordError:
                conflicts += 1
        return inserted, conflicts

    async def get_member(self, member_id: str) -> Optional[Member]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return Member(**from_document(doc))
        return None

    async def get_members(self, member_ids: Iterable[str]) -> Dict[str, Member]:
        """Look up several members at once, keyed by id."""
        oids = [oid for oid in (to_object_id(m) for m in set(member_ids)) if oid is not None]
        if not oids:
            return {}
        docs = await self.collection.find({"_id": {"$in": oids}}).to_list(None)
        members = [Member(**from_document(doc)) for doc in docs]
        return {m.id: m for m in members}

    async def list_members(self, search: Optional[str] = None, status: str = "all") -> List[Member]:
        """
        List members, newest join first.

        status: all | active (no leave date) | inactive (left).
        """
        query = {}
        if status == "active":
            query["leave_date"] = None
        elif status == "inactive":
            query["leave_date"] = {"$ne": None}

        docs = await self.collection.find(query).sort("join_date", -1).to_list(None)
        members = [Member(**from_document(doc)) for doc in docs]
        if search:
            needle = search.lower()
            members = [m for m in members if needle in m.full_name.lower()]
        return members

    async def list_joined_by(self, day: date) -> List[Member]:
        """Members whose join_date is on or before `day`."""
        docs = await self.collection.find({"join_date": {"$lte": day.isoformat()}}).to_list(None)
        return [Member(**from_document(doc)) for doc in docs]

    async def existing_names(self) -> List[str]:
        docs = await self.collection.find({}, {"full_name": 1}).to_list(None)
        return [doc["full_name"] for doc in docs]

    async def mark_left(self, member_id: str, leave_date: date) -> Optional[Member]:
        member = await self.get_member(member_id)
        if member is None:
            return None
        if leave_date < member.join_date:
            raise LedgerValidationError("leave_date must not be before join_date")

        result = await self.collection.find_one_and_update(
            {"_id": to_object_id(member_id)},
            {"$set": {
                "leave_date": leave_date.isoformat(),
                "updated_at": datetime.now(timezone.utc)
            }},
            return_document=True
        )
        if result:
            return Member(**from_document(result))
        return None
