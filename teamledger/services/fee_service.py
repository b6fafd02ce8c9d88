import calendar
from datetime import date
from typing import List, Optional, Tuple

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.core.errors import LedgerValidationError, RecordNotFoundError
from teamledger.db.session import paired_write
from teamledger.models.base import PaymentRequest, PaymentStatus
from teamledger.models.fee import FeeGenerationResult, MembershipFee, MembershipFeeView
from teamledger.models.ledger import LedgerEvent, TxnType
from teamledger.models.member import Member
from teamledger.models.org_settings import OrgSettings
from teamledger.repositories.fee_repo import FeeRepository
from teamledger.repositories.member_repo import MemberRepository
from teamledger.services.ledger_service import LedgerService

logger = structlog.get_logger(__name__)


def month_bounds(month: str) -> Tuple[date, date]:
    """"YYYY-MM" -> (first day, last day)."""
    try:
        year, month_number = (int(part) for part in month.split("-"))
        last_day = calendar.monthrange(year, month_number)[1]
        return date(year, month_number, 1), date(year, month_number, last_day)
    except (ValueError, TypeError, calendar.IllegalMonthError):
        raise LedgerValidationError(f"Invalid month '{month}', expected YYYY-MM")


def select_fee_candidates(members: List[Member], month_start: date, month_end: date) -> List[Member]:
    """Members on the team at any point during the month."""
    return [m for m in members if m.is_active_in(month_start, month_end)]


def fee_ledger_event(fee: MembershipFee, member_name: str) -> LedgerEvent:
    return LedgerEvent(
        kind=TxnType.MEMBERSHIP_FEE_PAYMENT,
        amount_cents=fee.amount_cents,
        txn_date=(fee.payment_date or date.today()).isoformat(),
        description=f"Membership fee payment for {fee.fee_month:%Y-%m} - {member_name}",
        category="membership",
        project="General",
        member_id=fee.member_id,
        source=fee.payment_method or "other",
        reference_type="membership_fee",
        reference_id=fee.id,
    )


class FeeService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.fees = FeeRepository(db)
        self.members = MemberRepository(db)
        self.ledger = LedgerService(db)

    async def generate_fees(
        self,
        month: str,
        org_settings: OrgSettings,
        amount_cents: Optional[int] = None,
    ) -> FeeGenerationResult:
        """
        Create one unpaid fee per active member for the month.

        Safe to re-run: fees that already exist for a (member, month) are left
        exactly as they are, paid or not.
        """
        month_start, month_end = month_bounds(month)
        amount = org_settings.membership_fee_cents if amount_cents is None else amount_cents

        joined = await self.members.list_joined_by(month_end)
        candidates = select_fee_candidates(joined, month_start, month_end)

        created = 0
        for member in candidates:
            if await self.fees.insert_if_absent(member.id, month_start, amount):
                created += 1

        logger.info(
            "fees_generated",
            month=month,
            amount_cents=amount,
            candidates=len(candidates),
            created=created,
        )
        return FeeGenerationResult(
            month=month,
            fee_month=month_start,
            amount_cents=amount,
            candidates=len(candidates),
            created=created,
        )

    async def list_fees(self, month: str) -> List[MembershipFeeView]:
        month_start, _ = month_bounds(month)
        fees = await self.fees.list_for_month(month_start)
        members = await self.members.get_members(f.member_id for f in fees)

        views = [
            MembershipFeeView(
                **fee.model_dump(),
                member_name=members[fee.member_id].full_name if fee.member_id in members else "Unknown",
            )
            for fee in fees
        ]
        return sorted(views, key=lambda v: v.member_name.lower())

    async def mark_paid(self, fee_id: str, payment: PaymentRequest) -> MembershipFee:
        """
        Mark a fee paid and post +amount to the ledger.

        If either write fails the fee is left unpaid with no entry. Calling
        this again for an already-paid fee posts nothing new.
        """
        fee = await self.fees.get_fee(fee_id)
        if fee is None:
            raise RecordNotFoundError("Membership fee not found")
        member = await self.members.get_member(fee.member_id)
        member_name = member.full_name if member else "Unknown"

        async with paired_write(self.db, "mark_fee_paid") as scope:
            if fee.payment_status == PaymentStatus.UNPAID:
                flipped = await self.fees.mark_paid(
                    fee_id, payment.payment_method, payment.payment_date, scope.session
                )
                if flipped:
                    scope.on_abort(lambda: self.fees.revert_paid(fee_id))
                    scope.on_abort(lambda: self.ledger.retract("membership_fee", fee_id))
            fee = await self.fees.get_fee(fee_id, scope.session)
            await self.ledger.record(fee_ledger_event(fee, member_name), scope.session)

        logger.info("fee_marked_paid", fee_id=fee_id, amount_cents=fee.amount_cents)
        return fee
