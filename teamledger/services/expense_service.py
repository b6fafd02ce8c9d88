from typing import List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.db.session import paired_write
from teamledger.models.expense import CashExpense, CashExpenseCreate
from teamledger.models.ledger import LedgerEvent, TxnType
from teamledger.repositories.expense_repo import ExpenseRepository
from teamledger.services.ledger_service import LedgerService

logger = structlog.get_logger(__name__)


def expense_ledger_event(expense: CashExpense) -> LedgerEvent:
    return LedgerEvent(
        kind=TxnType.CASH_EXPENSE,
        amount_cents=expense.amount_cents,
        txn_date=expense.expense_date.isoformat(),
        description=expense.description,
        category=expense.category,
        project=expense.project,
        source="cash",
        reference_type="cash_expense",
        reference_id=expense.id,
    )


class ExpenseService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.expenses = ExpenseRepository(db)
        self.ledger = LedgerService(db)

    async def record_expense(self, expense_in: CashExpenseCreate) -> CashExpense:
        """Store a cash expense and post it to the ledger as an outflow."""
        async with paired_write(self.db, "record_expense") as scope:
            expense = await self.expenses.insert_expense(expense_in, scope.session)
            scope.on_abort(lambda: self.expenses.delete_expense(expense.id))
            scope.on_abort(lambda: self.ledger.retract("cash_expense", expense.id))
            await self.ledger.record(expense_ledger_event(expense), scope.session)

        logger.info(
            "cash_expense_recorded",
            expense_id=expense.id,
            amount_cents=expense.amount_cents,
            category=expense.category,
            project=expense.project,
        )
        return expense

    async def list_expenses(
        self,
        category: Optional[str] = None,
        project: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[CashExpense]:
        return await self.expenses.list_expenses(category, project, search)
