from fastapi import Depends, HTTPException, UploadFile, status

from teamledger.core.config import settings
from teamledger.db.mongo import get_db
from teamledger.models.org_settings import OrgSettings
from teamledger.repositories.settings_repo import SettingsRepository


async def get_org_settings(db = Depends(get_db)) -> OrgSettings:
    """Persisted organization settings, injected into handlers that need them."""
    return await SettingsRepository(db).get_settings()


async def read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.MAX_UPLOAD_SIZE} bytes"
        )
    return content
