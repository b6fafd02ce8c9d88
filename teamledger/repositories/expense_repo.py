from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.base import from_document, to_document, to_object_id
from teamledger.models.expense import CashExpense, CashExpenseCreate


class ExpenseRepository:
    """Cash expense operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["cash_expenses"]

    async def insert_expense(self, data: CashExpenseCreate, session=None) -> CashExpense:
        expense = CashExpense(**data.model_dump())
        result = await self.collection.insert_one(to_document(expense), session=session)
        expense.id = str(result.inserted_id)
        return expense

    async def delete_expense(self, expense_id: str, session=None) -> None:
        await self.collection.delete_one({"_id": to_object_id(expense_id)}, session=session)

    async def list_expenses(
        self,
        category: Optional[str] = None,
        project: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[CashExpense]:
        query = {}
        if category:
            query["category"] = category
        if project:
            query["project"] = project

        docs = await self.collection.find(query).sort("expense_date", -1).to_list(None)
        expenses = [CashExpense(**from_document(doc)) for doc in docs]
        if search:
            needle = search.lower()
            expenses = [
                e for e in expenses
                if needle in e.description.lower() or needle in e.vendor.lower()
            ]
        return expenses
