from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from teamledger.models.base import MongoModel, PaymentStatus, utcnow


class MembershipFee(MongoModel):
    """Monthly due. Unique per (member_id, fee_month)."""
    member_id: str
    fee_month: date
    amount_cents: int = Field(..., ge=0)
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_method: Optional[str] = None
    payment_date: Optional[date] = None
    notes: str = ""
    updated_at: datetime = Field(default_factory=utcnow)


class MembershipFeeView(MembershipFee):
    member_name: str = "Unknown"


class FeeGenerateRequest(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    # Falls back to the persisted fee amount
    amount_cents: Optional[int] = Field(None, ge=0)


class FeeGenerationResult(BaseModel):
    month: str
    fee_month: date
    amount_cents: int
    candidates: int
    created: int
