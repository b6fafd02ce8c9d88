"""
Ledger writer.

Turns realized cash movements into signed ledger entries. The sign comes from
the event kind alone:

- membership_fee_payment, merch_sale: positive (team receives)
- reimbursement_payment, cash_expense: negative (team pays)
- bank_transaction: follows the row's direction
"""

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.core.errors import LedgerValidationError
from teamledger.models.bank import Direction
from teamledger.models.ledger import LedgerEntry, LedgerEvent, TxnType
from teamledger.repositories.ledger_repo import LedgerRepository

logger = structlog.get_logger(__name__)

INFLOW_KINDS = {TxnType.MEMBERSHIP_FEE_PAYMENT, TxnType.MERCH_SALE}
OUTFLOW_KINDS = {TxnType.REIMBURSEMENT_PAYMENT, TxnType.CASH_EXPENSE}


def signed_amount(event: LedgerEvent) -> int:
    """Signed cents for an event; the caller's sign never matters."""
    amount = abs(event.amount_cents)
    if event.kind in INFLOW_KINDS:
        return amount
    if event.kind in OUTFLOW_KINDS:
        return -amount
    if event.kind == TxnType.BANK_TRANSACTION:
        if event.direction is None:
            raise LedgerValidationError("Bank transaction event needs a direction")
        return -amount if event.direction == Direction.OUT else amount
    raise LedgerValidationError(f"Unknown ledger event kind: {event.kind}")


def build_entry(event: LedgerEvent) -> LedgerEntry:
    if not event.reference_id:
        raise LedgerValidationError("Ledger event must reference its source record")
    return LedgerEntry(
        txn_date=event.txn_date,
        txn_type=event.kind,
        amount_cents=signed_amount(event),
        member_id=event.member_id,
        project=event.project,
        category=event.category,
        description=event.description,
        source=event.source,
        reference_type=event.reference_type,
        reference_id=event.reference_id,
    )


class LedgerService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = LedgerRepository(db)

    async def record(self, event: LedgerEvent, session=None) -> LedgerEntry:
        """
        Post one event. Re-posting an event whose (reference_type,
        reference_id) is already in the ledger returns the existing entry.
        """
        entry, created = await self.repo.append(build_entry(event), session=session)
        if created:
            logger.info(
                "ledger_entry_recorded",
                txn_type=entry.txn_type.value,
                amount_cents=entry.amount_cents,
                reference_type=entry.reference_type,
                reference_id=entry.reference_id,
            )
        else:
            logger.info(
                "ledger_entry_already_posted",
                reference_type=entry.reference_type,
                reference_id=entry.reference_id,
            )
        return entry

    async def retract(self, reference_type: str, reference_id: str) -> None:
        """Remove the entry of a source write that is being rolled back."""
        await self.repo.remove_reference(reference_type, reference_id)
        logger.warning("ledger_entry_retracted", reference_type=reference_type, reference_id=reference_id)
