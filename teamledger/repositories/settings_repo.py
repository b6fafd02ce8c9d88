from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.base import utcnow
from teamledger.models.org_settings import OrgSettings, OrgSettingsUpdate

SETTINGS_ID = "global"


class SettingsRepository:
    """The single organization settings document."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["settings"]

    async def get_settings(self) -> OrgSettings:
        """Stored settings, or the defaults when nothing was saved yet."""
        doc = await self.collection.find_one({"_id": SETTINGS_ID})
        if not doc:
            return OrgSettings()
        doc.pop("_id", None)
        return OrgSettings(**doc)

    async def update_settings(self, update_data: OrgSettingsUpdate) -> OrgSettings:
        current = await self.get_settings()
        updates = update_data.model_dump(exclude_unset=True, exclude_none=True)
        merged = current.model_copy(update={**updates, "updated_at": utcnow()})

        await self.collection.update_one(
            {"_id": SETTINGS_ID},
            {"$set": merged.model_dump()},
            upsert=True
        )
        return merged
