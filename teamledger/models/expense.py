from datetime import date

from pydantic import Field

from teamledger.models.base import MongoModel, ReceiptMetadata


class CashExpenseCreate(ReceiptMetadata):
    expense_date: date = Field(default_factory=date.today)
    amount_cents: int = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    category: str = "other"
    project: str = "General"
    vendor: str = ""


class CashExpense(CashExpenseCreate, MongoModel):
    pass
