from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from teamledger.models.base import utcnow

DEFAULT_CATEGORIES = ["materials", "travel", "event", "food", "other"]
DEFAULT_PROJECTS = ["Corsa", "Doruk", "General"]


class OrgSettings(BaseModel):
    """Persisted organization configuration, passed explicitly to services."""
    membership_fee_cents: int = Field(20000, ge=0)
    default_categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    default_projects: List[str] = Field(default_factory=lambda: list(DEFAULT_PROJECTS))
    updated_at: datetime = Field(default_factory=utcnow)


class OrgSettingsUpdate(BaseModel):
    membership_fee_cents: Optional[int] = Field(None, ge=0)
    default_categories: Optional[List[str]] = None
    default_projects: Optional[List[str]] = None
