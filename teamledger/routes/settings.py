from fastapi import APIRouter, Depends

from teamledger.db.mongo import get_db
from teamledger.models.org_settings import OrgSettings, OrgSettingsUpdate
from teamledger.repositories.settings_repo import SettingsRepository
from teamledger.schemas.imports import DemoDataResult
from teamledger.services.demo_data import DemoDataService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=OrgSettings)
async def get_settings(db = Depends(get_db)):
    """Fee amount and the category/project choices."""
    repo = SettingsRepository(db)
    return await repo.get_settings()


@router.put("", response_model=OrgSettings)
async def update_settings(update_data: OrgSettingsUpdate, db = Depends(get_db)):
    repo = SettingsRepository(db)
    return await repo.update_settings(update_data)


@router.post("/demo-data", response_model=DemoDataResult)
async def load_demo_data(db = Depends(get_db)):
    """Add sample members and merch products (skips names that exist)."""
    return await DemoDataService(db).load()
