from typing import List

from fastapi import APIRouter, Depends, Query

from teamledger.db.mongo import get_db
from teamledger.models.base import PaymentRequest
from teamledger.models.fee import FeeGenerateRequest, FeeGenerationResult, MembershipFee, MembershipFeeView
from teamledger.models.org_settings import OrgSettings
from teamledger.routes.deps import get_org_settings
from teamledger.services.fee_service import FeeService

router = APIRouter(prefix="/fees", tags=["fees"])


@router.post("/generate", response_model=FeeGenerationResult)
async def generate_fees(
    request: FeeGenerateRequest,
    org_settings: OrgSettings = Depends(get_org_settings),
    db = Depends(get_db)
):
    """
    Create unpaid fees for every member active during the month.
    Re-running for the same month creates nothing new.
    """
    return await FeeService(db).generate_fees(request.month, org_settings, request.amount_cents)


@router.get("", response_model=List[MembershipFeeView])
async def list_fees(
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM"),
    db = Depends(get_db)
):
    return await FeeService(db).list_fees(month)


@router.post("/{fee_id}/pay", response_model=MembershipFee)
async def mark_fee_paid(fee_id: str, payment: PaymentRequest, db = Depends(get_db)):
    return await FeeService(db).mark_paid(fee_id, payment)
