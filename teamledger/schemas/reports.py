from typing import List

from pydantic import BaseModel

from teamledger.models.ledger import LedgerEntry


class ProfitLossRow(BaseModel):
    category: str
    project: str
    income_cents: int = 0
    expense_cents: int = 0
    net_cents: int = 0


class MemberBalanceRow(BaseModel):
    member_id: str
    member_name: str
    fees_owed_cents: int = 0
    sales_owed_cents: int = 0
    reimb_owed_cents: int = 0
    # Positive = member owes the team, negative = team owes the member
    net_balance_cents: int = 0


class CashflowRow(BaseModel):
    month: str
    inflow_cents: int = 0
    outflow_cents: int = 0
    net_cents: int = 0


class InventoryRow(BaseModel):
    product_id: str
    product_name: str
    stock: int
    unit_price_cents: int
    total_sold: int = 0
    total_revenue_cents: int = 0


class DashboardSummary(BaseModel):
    month: str
    month_income_cents: int = 0
    month_expense_cents: int = 0
    bank_transactions_count: int = 0
    pending_reimbursements: int = 0
    recent_activity: List[LedgerEntry] = []
