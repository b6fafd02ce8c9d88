from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from teamledger.models.base import MongoModel


class Direction(str, Enum):
    IN = "in"
    OUT = "out"


class ColumnMapping(BaseModel):
    """Spreadsheet header name for each canonical transaction field."""
    txn_date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    direction: Optional[str] = None
    counterparty: Optional[str] = None
    reference: Optional[str] = None


class BankTransaction(MongoModel):
    """
    Imported statement row. Immutable except for the reconciliation
    fields (matched_to_type, matched_to_id, notes).
    """
    # Normalized when recognizable, otherwise the raw cell text
    txn_date: str
    description: str = ""
    amount_cents: int = Field(..., ge=0)
    direction: Direction = Direction.IN
    counterparty: str = ""
    reference: str = ""
    import_hash: str
    import_filename: str = ""
    matched_to_type: Optional[str] = None
    matched_to_id: Optional[str] = None
    notes: str = ""

    @property
    def signed_amount_cents(self) -> int:
        return -self.amount_cents if self.direction == Direction.OUT else self.amount_cents
