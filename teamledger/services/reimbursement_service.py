from typing import List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.core.errors import LedgerValidationError, RecordNotFoundError
from teamledger.db.session import paired_write
from teamledger.models.base import PaymentRequest, PaymentStatus
from teamledger.models.ledger import LedgerEvent, TxnType
from teamledger.models.reimbursement import Reimbursement, ReimbursementCreate, ReimbursementView
from teamledger.repositories.member_repo import MemberRepository
from teamledger.repositories.reimbursement_repo import ReimbursementRepository
from teamledger.services.ledger_service import LedgerService

logger = structlog.get_logger(__name__)


def reimbursement_ledger_event(reimbursement: Reimbursement) -> LedgerEvent:
    return LedgerEvent(
        kind=TxnType.REIMBURSEMENT_PAYMENT,
        amount_cents=reimbursement.amount_cents,
        txn_date=reimbursement.payment_date.isoformat(),
        description=f"Reimbursement paid: {reimbursement.description}",
        category=reimbursement.category,
        project=reimbursement.project,
        member_id=reimbursement.member_id,
        source=reimbursement.payment_method or "other",
        reference_type="reimbursement",
        reference_id=reimbursement.id,
    )


class ReimbursementService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.reimbursements = ReimbursementRepository(db)
        self.members = MemberRepository(db)
        self.ledger = LedgerService(db)

    async def create_reimbursement(self, data: ReimbursementCreate) -> Reimbursement:
        """Record a member's purchase. Nothing is posted until it is paid."""
        if await self.members.get_member(data.member_id) is None:
            raise LedgerValidationError(f"Unknown member: {data.member_id}")
        reimbursement = await self.reimbursements.create_reimbursement(data)
        logger.info(
            "reimbursement_created",
            reimbursement_id=reimbursement.id,
            member_id=reimbursement.member_id,
            amount_cents=reimbursement.amount_cents,
        )
        return reimbursement

    async def list_reimbursements(self, status: Optional[PaymentStatus] = None) -> List[ReimbursementView]:
        reimbursements = await self.reimbursements.list_reimbursements(status)
        members = await self.members.get_members(r.member_id for r in reimbursements)
        return [
            ReimbursementView(
                **r.model_dump(),
                member_name=members[r.member_id].full_name if r.member_id in members else "Unknown",
            )
            for r in reimbursements
        ]

    async def mark_paid(self, reimbursement_id: str, payment: PaymentRequest) -> Reimbursement:
        """Mark paid and post -amount; both happen or neither does."""
        reimbursement = await self.reimbursements.get_reimbursement(reimbursement_id)
        if reimbursement is None:
            raise RecordNotFoundError("Reimbursement not found")

        async with paired_write(self.db, "mark_reimbursement_paid") as scope:
            if reimbursement.payment_status == PaymentStatus.UNPAID:
                flipped = await self.reimbursements.mark_paid(
                    reimbursement_id, payment.payment_method, payment.payment_date, scope.session
                )
                if flipped:
                    scope.on_abort(lambda: self.reimbursements.revert_paid(reimbursement_id))
                    scope.on_abort(lambda: self.ledger.retract("reimbursement", reimbursement_id))
            reimbursement = await self.reimbursements.get_reimbursement(reimbursement_id, scope.session)
            await self.ledger.record(reimbursement_ledger_event(reimbursement), scope.session)

        logger.info(
            "reimbursement_marked_paid",
            reimbursement_id=reimbursement_id,
            amount_cents=reimbursement.amount_cents,
        )
        return reimbursement
