"""
Balance aggregator.

Every view is recomputed from stored state on each request: the folds below
take plain lists of records and have no side effects, so re-running them in
any order over the same data yields the same rows.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.base import PaymentStatus
from teamledger.models.fee import MembershipFee
from teamledger.models.ledger import LedgerEntry
from teamledger.models.member import Member
from teamledger.models.product import Product, SalesOrder, SalesOrderItem
from teamledger.models.reimbursement import Reimbursement
from teamledger.repositories.bank_repo import BankTransactionRepository
from teamledger.repositories.fee_repo import FeeRepository
from teamledger.repositories.ledger_repo import LedgerRepository
from teamledger.repositories.member_repo import MemberRepository
from teamledger.repositories.product_repo import ProductRepository
from teamledger.repositories.reimbursement_repo import ReimbursementRepository
from teamledger.repositories.sales_repo import SalesRepository
from teamledger.schemas.reports import (
    CashflowRow,
    DashboardSummary,
    InventoryRow,
    MemberBalanceRow,
    ProfitLossRow,
)
from teamledger.services.fee_service import month_bounds


def _split(amount_cents: int) -> Tuple[int, int]:
    """(inflow, outflow) contribution of one signed amount."""
    if amount_cents >= 0:
        return amount_cents, 0
    return 0, -amount_cents


def profit_and_loss(entries: Iterable[LedgerEntry]) -> List[ProfitLossRow]:
    groups: Dict[Tuple[str, str], ProfitLossRow] = {}
    for entry in entries:
        key = (entry.category, entry.project)
        row = groups.setdefault(key, ProfitLossRow(category=entry.category, project=entry.project))
        income, expense = _split(entry.amount_cents)
        row.income_cents += income
        row.expense_cents += expense

    for row in groups.values():
        row.net_cents = row.income_cents - row.expense_cents
    return [groups[key] for key in sorted(groups)]


def member_balances(
    members: Iterable[Member],
    fees: Iterable[MembershipFee],
    orders: Iterable[SalesOrder],
    reimbursements: Iterable[Reimbursement],
) -> List[MemberBalanceRow]:
    """
    What each member owes the team (positive) or is owed (negative).
    Only unpaid records count; paid ones are already settled in cash.
    """
    fees_owed = defaultdict(int)
    for fee in fees:
        if fee.payment_status == PaymentStatus.UNPAID:
            fees_owed[fee.member_id] += fee.amount_cents

    sales_owed = defaultdict(int)
    for order in orders:
        if order.payment_status == PaymentStatus.UNPAID:
            sales_owed[order.member_id] += order.total_amount_cents

    reimb_owed = defaultdict(int)
    for reimbursement in reimbursements:
        if reimbursement.payment_status == PaymentStatus.UNPAID:
            reimb_owed[reimbursement.member_id] += reimbursement.amount_cents

    rows = []
    for member in members:
        fees_total = fees_owed[member.id]
        sales_total = sales_owed[member.id]
        reimb_total = reimb_owed[member.id]
        rows.append(MemberBalanceRow(
            member_id=member.id,
            member_name=member.full_name,
            fees_owed_cents=fees_total,
            sales_owed_cents=sales_total,
            reimb_owed_cents=reimb_total,
            net_balance_cents=fees_total + sales_total - reimb_total,
        ))
    return sorted(rows, key=lambda r: (r.member_name.lower(), r.member_id))


def monthly_cashflow(entries: Iterable[LedgerEntry]) -> List[CashflowRow]:
    months: Dict[str, CashflowRow] = {}
    for entry in entries:
        row = months.setdefault(entry.month, CashflowRow(month=entry.month))
        inflow, outflow = _split(entry.amount_cents)
        row.inflow_cents += inflow
        row.outflow_cents += outflow

    for row in months.values():
        row.net_cents = row.inflow_cents - row.outflow_cents
    return [months[key] for key in sorted(months)]


def inventory(products: Iterable[Product], items: Iterable[SalesOrderItem]) -> List[InventoryRow]:
    # Counts items from every order, paid or not
    sold = defaultdict(int)
    revenue = defaultdict(int)
    for item in items:
        sold[item.product_id] += item.quantity
        revenue[item.product_id] += item.line_total_cents

    rows = [
        InventoryRow(
            product_id=product.id,
            product_name=product.name,
            stock=product.stock_quantity,
            unit_price_cents=product.unit_price_cents,
            total_sold=sold[product.id],
            total_revenue_cents=revenue[product.id],
        )
        for product in products
    ]
    return sorted(rows, key=lambda r: (r.product_name.lower(), r.product_id))


class ReportService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.ledger = LedgerRepository(db)
        self.members = MemberRepository(db)
        self.fees = FeeRepository(db)
        self.sales = SalesRepository(db)
        self.reimbursements = ReimbursementRepository(db)
        self.products = ProductRepository(db)
        self.bank = BankTransactionRepository(db)

    async def profit_and_loss(self, start: Optional[date] = None, end: Optional[date] = None) -> List[ProfitLossRow]:
        entries = await self.ledger.list_entries(_iso(start), _iso(end))
        return profit_and_loss(entries)

    async def member_balances(self) -> List[MemberBalanceRow]:
        members = await self.members.list_members()
        fees = await self.fees.list_unpaid()
        orders = await self.sales.list_unpaid_orders()
        reimbursements = await self.reimbursements.list_reimbursements(PaymentStatus.UNPAID)
        return member_balances(members, fees, orders, reimbursements)

    async def monthly_cashflow(self, start: Optional[date] = None, end: Optional[date] = None) -> List[CashflowRow]:
        entries = await self.ledger.list_entries(_iso(start), _iso(end))
        return monthly_cashflow(entries)

    async def inventory(self) -> List[InventoryRow]:
        products = await self.products.list_products()
        items = await self.sales.list_items()
        return inventory(products, items)

    async def dashboard(self, today: Optional[date] = None) -> DashboardSummary:
        today = today or date.today()
        month = f"{today:%Y-%m}"
        month_start, month_end = month_bounds(month)

        entries = await self.ledger.list_entries(month_start.isoformat(), month_end.isoformat())
        income = sum(e.amount_cents for e in entries if e.amount_cents > 0)
        expense = sum(-e.amount_cents for e in entries if e.amount_cents < 0)

        return DashboardSummary(
            month=month,
            month_income_cents=income,
            month_expense_cents=expense,
            bank_transactions_count=await self.bank.count_between(
                month_start.isoformat(), month_end.isoformat()
            ),
            pending_reimbursements=await self.reimbursements.count_unpaid(),
            recent_activity=await self.ledger.recent(20),
        )


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None
