"""Tests for reimbursements and cash expenses."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from pymongo.errors import PyMongoError

from teamledger.core.errors import LedgerValidationError, StoreError
from teamledger.models.base import PaymentRequest, PaymentStatus
from teamledger.models.expense import CashExpenseCreate
from teamledger.models.reimbursement import ReimbursementCreate
from teamledger.repositories.expense_repo import ExpenseRepository
from teamledger.repositories.ledger_repo import LedgerRepository
from teamledger.repositories.reimbursement_repo import ReimbursementRepository
from teamledger.services.expense_service import ExpenseService
from teamledger.services.reimbursement_service import ReimbursementService


@pytest.mark.asyncio
class TestReimbursements:
    async def test_paying_posts_negative_entry(self, test_db, member):
        service = ReimbursementService(test_db)
        reimbursement = await service.create_reimbursement(ReimbursementCreate(
            member_id=member.id,
            description="Brake pads",
            amount_cents=10000,
            category="materials",
            project="Corsa",
        ))
        assert await LedgerRepository(test_db).count() == 0

        paid = await service.mark_paid(
            reimbursement.id, PaymentRequest(payment_method="bank", payment_date=date(2026, 1, 9))
        )

        assert paid.payment_status == PaymentStatus.PAID
        entry = await LedgerRepository(test_db).find_by_reference("reimbursement", reimbursement.id)
        assert entry.amount_cents == -10000
        assert entry.project == "Corsa"
        assert entry.description == "Reimbursement paid: Brake pads"

    async def test_failed_ledger_post_keeps_reimbursement_unpaid(self, test_db, member):
        reimbursement = await ReimbursementService(test_db).create_reimbursement(
            ReimbursementCreate(member_id=member.id, description="Brake pads", amount_cents=10000)
        )
        failing = ReimbursementService(test_db)
        failing.ledger.record = AsyncMock(side_effect=PyMongoError("connection reset"))

        with pytest.raises(StoreError):
            await failing.mark_paid(reimbursement.id, PaymentRequest(payment_method="bank"))

        stored = await ReimbursementRepository(test_db).get_reimbursement(reimbursement.id)
        assert stored.payment_status == PaymentStatus.UNPAID
        assert stored.payment_method is None
        assert stored.payment_date is None
        assert await LedgerRepository(test_db).count() == 0

    async def test_status_filter(self, test_db, member):
        service = ReimbursementService(test_db)
        first = await service.create_reimbursement(ReimbursementCreate(member_id=member.id, description="A", amount_cents=100))
        await service.create_reimbursement(ReimbursementCreate(member_id=member.id, description="B", amount_cents=200))
        await service.mark_paid(first.id, PaymentRequest(payment_method="cash"))

        unpaid = await service.list_reimbursements(PaymentStatus.UNPAID)

        assert [r.description for r in unpaid] == ["B"]
        assert unpaid[0].member_name == member.full_name

    async def test_unknown_member_rejected(self, test_db):
        with pytest.raises(LedgerValidationError):
            await ReimbursementService(test_db).create_reimbursement(
                ReimbursementCreate(member_id="nobody", description="A", amount_cents=100)
            )


@pytest.mark.asyncio
class TestCashExpenses:
    async def test_recording_posts_negative_entry(self, test_db):
        expense = await ExpenseService(test_db).record_expense(CashExpenseCreate(
            expense_date=date(2026, 1, 3),
            amount_cents=2500,
            description="Zip ties",
            category="materials",
            project="Doruk",
            vendor="Hardware store",
        ))

        entry = await LedgerRepository(test_db).find_by_reference("cash_expense", expense.id)
        assert entry.amount_cents == -2500
        assert entry.source == "cash"
        assert entry.txn_date == "2026-01-03"

    async def test_failed_ledger_post_removes_expense(self, test_db):
        service = ExpenseService(test_db)
        service.ledger.record = AsyncMock(side_effect=PyMongoError("connection reset"))

        with pytest.raises(StoreError):
            await service.record_expense(CashExpenseCreate(amount_cents=900, description="Fuel"))

        assert await ExpenseRepository(test_db).list_expenses() == []

    async def test_search_matches_vendor(self, test_db):
        service = ExpenseService(test_db)
        await service.record_expense(CashExpenseCreate(amount_cents=100, description="Fuel", vendor="Shell"))
        await service.record_expense(CashExpenseCreate(amount_cents=200, description="Snacks", vendor="Migros"))

        found = await service.list_expenses(search="shell")

        assert [e.description for e in found] == ["Fuel"]
