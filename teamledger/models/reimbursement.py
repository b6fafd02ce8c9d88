from datetime import date, datetime
from typing import Optional

from pydantic import Field

from teamledger.models.base import MongoModel, PaymentStatus, ReceiptMetadata, utcnow


class ReimbursementCreate(ReceiptMetadata):
    member_id: str
    purchase_date: date = Field(default_factory=date.today)
    vendor: str = ""
    description: str = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0)
    category: str = "other"
    project: str = "General"


class Reimbursement(ReimbursementCreate, MongoModel):
    """A member's purchase for the team; the team owes the member until paid."""
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    updated_at: datetime = Field(default_factory=utcnow)


class ReimbursementView(Reimbursement):
    member_name: str = "Unknown"
