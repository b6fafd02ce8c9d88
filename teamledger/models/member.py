from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from teamledger.models.base import MongoModel, utcnow


def name_key(full_name: str) -> str:
    """Dedup key for member names (case-insensitive exact match)."""
    return full_name.strip().lower()


class MemberBase(BaseModel):
    """Base member schema."""
    full_name: str = Field(..., min_length=1, max_length=200)
    team: str = ""
    join_date: date = Field(default_factory=date.today)
    notes: str = ""

    @field_validator("full_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("full_name must not be blank")
        return value


class MemberCreate(MemberBase):
    """Member creation schema."""
    pass


class MemberLeave(BaseModel):
    """Mark-left request."""
    leave_date: date = Field(default_factory=date.today)


class Member(MemberBase, MongoModel):
    """Member database schema."""
    leave_date: Optional[date] = None
    name_key: str = ""
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_dates(self) -> "Member":
        if self.leave_date is not None and self.leave_date < self.join_date:
            raise ValueError("leave_date must not be before join_date")
        if not self.name_key:
            self.name_key = name_key(self.full_name)
        return self

    def is_active_in(self, month_start: date, month_end: date) -> bool:
        """True if the member was on the team at any point of the month."""
        if self.join_date > month_end:
            return False
        return self.leave_date is None or self.leave_date >= month_start
