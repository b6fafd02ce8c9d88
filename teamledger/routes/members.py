from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from teamledger.db.mongo import get_db
from teamledger.models.member import Member, MemberCreate, MemberLeave
from teamledger.repositories.member_repo import MemberRepository
from teamledger.routes.deps import read_upload
from teamledger.schemas.imports import MemberImportResult
from teamledger.services.member_import import MemberImportService, load_member_file

router = APIRouter(prefix="/members", tags=["members"])


@router.post("", response_model=Member, status_code=status.HTTP_201_CREATED)
async def create_member(member_data: MemberCreate, db = Depends(get_db)):
    """Add a member. Names are unique, ignoring case."""
    repo = MemberRepository(db)
    return await repo.create_member(member_data)


@router.get("", response_model=List[Member])
async def list_members(
    search: Optional[str] = Query(None, description="Substring of the member name"),
    status_filter: Literal["all", "active", "inactive"] = Query("all", alias="status"),
    db = Depends(get_db)
):
    repo = MemberRepository(db)
    return await repo.list_members(search, status_filter)


@router.post("/{member_id}/leave", response_model=Member)
async def mark_member_left(member_id: str, leave: MemberLeave, db = Depends(get_db)):
    """Set the member's leave date. Members are never deleted."""
    repo = MemberRepository(db)
    member = await repo.mark_left(member_id, leave.leave_date)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.post("/import", response_model=MemberImportResult)
async def import_members_file(file: UploadFile = File(...), db = Depends(get_db)):
    """Import members from an uploaded JSON file (array or single object)."""
    records = load_member_file(await read_upload(file))
    return await MemberImportService(db).import_members(records)


@router.post("/import/records", response_model=MemberImportResult)
async def import_member_records(records: List[Dict[str, Any]], db = Depends(get_db)):
    return await MemberImportService(db).import_members(records)
