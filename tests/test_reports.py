"""Tests for the report folds (pure, no database)."""

from datetime import date

from teamledger.models.base import PaymentStatus
from teamledger.models.fee import MembershipFee
from teamledger.models.ledger import LedgerEntry, TxnType
from teamledger.models.member import Member
from teamledger.models.product import Product, SalesOrder, SalesOrderItem
from teamledger.models.reimbursement import Reimbursement
from teamledger.services.report_service import (
    inventory,
    member_balances,
    monthly_cashflow,
    profit_and_loss,
)
from teamledger.utils.csv_export import rows_to_csv
from teamledger.schemas.reports import MemberBalanceRow, ProfitLossRow


def _entry(amount_cents, txn_date="2026-01-10", category="other", project="General", ref="r"):
    return LedgerEntry(
        txn_date=txn_date,
        txn_type=TxnType.CASH_EXPENSE if amount_cents < 0 else TxnType.MERCH_SALE,
        amount_cents=amount_cents,
        category=category,
        project=project,
        description="x",
        reference_type="test",
        reference_id=ref,
    )


def test_profit_and_loss_groups_by_category_and_project():
    entries = [
        _entry(20000, category="membership"),
        _entry(20000, category="membership"),
        _entry(-5000, category="materials", project="Corsa"),
        _entry(3000, category="materials", project="Corsa"),
    ]

    rows = profit_and_loss(entries)

    assert [(r.category, r.project) for r in rows] == [("materials", "Corsa"), ("membership", "General")]
    materials, membership = rows
    assert materials.income_cents == 3000
    assert materials.expense_cents == 5000
    assert materials.net_cents == -2000
    assert membership.net_cents == 40000


def test_member_balance_fee_minus_reimbursement():
    member = Member(id="m1", full_name="Ayşe", join_date=date(2025, 1, 1))
    fee = MembershipFee(member_id="m1", fee_month=date(2026, 1, 1), amount_cents=20000)
    reimbursement = Reimbursement(member_id="m1", description="Tires", amount_cents=5000)

    (row,) = member_balances([member], [fee], [], [reimbursement])

    assert row.fees_owed_cents == 20000
    assert row.reimb_owed_cents == 5000
    assert row.net_balance_cents == 15000


def test_paid_records_do_not_count_toward_balance():
    member = Member(id="m1", full_name="Ayşe", join_date=date(2025, 1, 1))
    fee = MembershipFee(
        member_id="m1", fee_month=date(2026, 1, 1), amount_cents=20000,
        payment_status=PaymentStatus.PAID
    )
    order = SalesOrder(member_id="m1", order_date=date(2026, 1, 5), total_amount_cents=8000)

    (row,) = member_balances([member], [fee], [order], [])

    assert row.fees_owed_cents == 0
    assert row.sales_owed_cents == 8000
    assert row.net_balance_cents == 8000


def test_member_without_records_has_zero_balance():
    members = [
        Member(id="m2", full_name="Zeynep", join_date=date(2025, 1, 1)),
        Member(id="m1", full_name="Ali", join_date=date(2025, 1, 1)),
    ]
    rows = member_balances(members, [], [], [])
    assert [r.member_name for r in rows] == ["Ali", "Zeynep"]
    assert all(r.net_balance_cents == 0 for r in rows)


def test_cashflow_ordered_by_month_key():
    entries = [
        _entry(1000, txn_date="2026-03-01", ref="a"),
        _entry(-400, txn_date="2026-01-20", ref="b"),
        _entry(2500, txn_date="2026-01-02", ref="c"),
    ]

    rows = monthly_cashflow(entries)

    assert [r.month for r in rows] == ["2026-01", "2026-03"]
    january = rows[0]
    assert january.inflow_cents == 2500
    assert january.outflow_cents == 400
    assert january.net_cents == 2100


def test_folds_are_order_independent():
    entries = [
        _entry(1000, txn_date="2026-02-01", category="a", ref="1"),
        _entry(-300, txn_date="2026-01-01", category="b", ref="2"),
        _entry(700, txn_date="2026-02-11", category="a", ref="3"),
    ]
    assert profit_and_loss(entries) == profit_and_loss(list(reversed(entries)))
    assert monthly_cashflow(entries) == monthly_cashflow(list(reversed(entries)))


def test_inventory_counts_all_order_items():
    hoodie = Product(id="p1", name="Hoodie", unit_price_cents=5000, stock_quantity=8)
    cap = Product(id="p2", name="Cap", unit_price_cents=2000, stock_quantity=3)
    items = [
        SalesOrderItem(order_id="o1", product_id="p1", product_name="Hoodie",
                       quantity=2, unit_price_cents=5000, line_total_cents=10000),
        SalesOrderItem(order_id="o2", product_id="p1", product_name="Hoodie",
                       quantity=1, unit_price_cents=4500, line_total_cents=4500),
    ]

    rows = inventory([hoodie, cap], items)

    assert [r.product_name for r in rows] == ["Cap", "Hoodie"]
    assert rows[0].total_sold == 0
    assert rows[1].total_sold == 3
    assert rows[1].total_revenue_cents == 14500
    assert rows[1].stock == 8


def test_csv_quotes_free_text():
    rows = [ProfitLossRow(category='food, "team" dinner', project="General", income_cents=0,
                          expense_cents=1200, net_cents=-1200)]

    lines = rows_to_csv(rows, ProfitLossRow).splitlines()

    assert lines[0] == "category,project,income_cents,expense_cents,net_cents"
    assert lines[1] == '"food, ""team"" dinner",General,0,1200,-1200'


def test_csv_header_without_rows():
    text = rows_to_csv([], MemberBalanceRow)
    assert text.splitlines() == [
        "member_id,member_name,fees_owed_cents,sales_owed_cents,reimb_owed_cents,net_balance_cents"
    ]
