from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from teamledger.db.mongo import get_db
from teamledger.models.expense import CashExpense, CashExpenseCreate
from teamledger.services.expense_service import ExpenseService

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", response_model=CashExpense, status_code=status.HTTP_201_CREATED)
async def record_expense(expense_in: CashExpenseCreate, db = Depends(get_db)):
    """Record a cash expense; it is posted to the ledger right away."""
    return await ExpenseService(db).record_expense(expense_in)


@router.get("", response_model=List[CashExpense])
async def list_expenses(
    category: Optional[str] = Query(None),
    project: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matches description or vendor"),
    db = Depends(get_db)
):
    return await ExpenseService(db).list_expenses(category, project, search)
