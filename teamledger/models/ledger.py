"""
Ledger model - the single source of truth for reporting.

Design principles:
- Append-only: entries are never updated, and only deleted when the write
  that posted them is rolled back
- One entry per originating record (reference_type, reference_id)
- Signed integer cents: positive = money into the team, negative = out
- Sign is decided by the event kind, never by the caller
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from teamledger.models.bank import Direction
from teamledger.models.base import MongoModel


class TxnType(str, Enum):
    CASH_EXPENSE = "cash_expense"
    BANK_TRANSACTION = "bank_transaction"
    MEMBERSHIP_FEE_PAYMENT = "membership_fee_payment"
    REIMBURSEMENT_PAYMENT = "reimbursement_payment"
    MERCH_SALE = "merch_sale"


class LedgerEvent(BaseModel):
    """A realized cash movement waiting to be posted."""
    kind: TxnType
    amount_cents: int = Field(..., ge=0)  # Unsigned source amount
    txn_date: str
    description: str
    category: str = "other"
    project: str = "General"
    member_id: Optional[str] = None
    source: str = "manual"
    reference_type: str
    reference_id: str
    direction: Optional[Direction] = None  # bank_transaction only


class LedgerEntry(MongoModel):
    txn_date: str
    txn_type: TxnType
    amount_cents: int
    member_id: Optional[str] = None
    project: str = "General"
    category: str = "other"
    description: str
    source: str = "manual"
    reference_type: str
    reference_id: str

    @property
    def month(self) -> str:
        return self.txn_date[:7]


