from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from teamledger.db.mongo import get_db
from teamledger.models.base import PaymentRequest, PaymentStatus
from teamledger.models.reimbursement import Reimbursement, ReimbursementCreate, ReimbursementView
from teamledger.services.reimbursement_service import ReimbursementService

router = APIRouter(prefix="/reimbursements", tags=["reimbursements"])


@router.post("", response_model=Reimbursement, status_code=status.HTTP_201_CREATED)
async def create_reimbursement(data: ReimbursementCreate, db = Depends(get_db)):
    return await ReimbursementService(db).create_reimbursement(data)


@router.get("", response_model=List[ReimbursementView])
async def list_reimbursements(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    db = Depends(get_db)
):
    return await ReimbursementService(db).list_reimbursements(status_filter)


@router.post("/{reimbursement_id}/pay", response_model=Reimbursement)
async def mark_reimbursement_paid(reimbursement_id: str, payment: PaymentRequest, db = Depends(get_db)):
    """Pay the member back; posts a negative ledger entry."""
    return await ReimbursementService(db).mark_paid(reimbursement_id, payment)
