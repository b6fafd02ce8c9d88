from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError

from teamledger.core.errors import LedgerValidationError
from teamledger.db.mongo import get_db
from teamledger.models.bank import BankTransaction, ColumnMapping
from teamledger.repositories.bank_repo import BankTransactionRepository
from teamledger.routes.deps import read_upload
from teamledger.schemas.imports import BankImportResult, BankPreview
from teamledger.services.bank_import import BankImportService, read_grid

router = APIRouter(prefix="/bank", tags=["bank"])


def _parse_mapping(raw: Optional[str]) -> Optional[ColumnMapping]:
    if not raw:
        return None
    try:
        return ColumnMapping.model_validate_json(raw)
    except ValidationError as exc:
        raise LedgerValidationError(f"Invalid column mapping: {exc.errors()[0]['msg']}")


@router.post("/preview", response_model=BankPreview)
async def preview_statement(file: UploadFile = File(...), db = Depends(get_db)):
    """Headers, first rows and the auto-detected column mapping of a statement."""
    rows = read_grid(await read_upload(file), file.filename or "")
    return BankImportService(db).preview(rows)


@router.post("/import", response_model=BankImportResult)
async def import_statement(
    file: UploadFile = File(...),
    mapping: Optional[str] = Form(None, description="ColumnMapping as JSON"),
    db = Depends(get_db)
):
    """
    Import a bank statement. Rows already imported (same date, description
    and amount) are skipped and never posted to the ledger twice.
    """
    filename = file.filename or ""
    rows = read_grid(await read_upload(file), filename)
    return await BankImportService(db).import_rows(rows, filename, _parse_mapping(mapping))


@router.get("", response_model=List[BankTransaction])
async def list_bank_transactions(limit: int = Query(50, ge=1, le=500), db = Depends(get_db)):
    repo = BankTransactionRepository(db)
    return await repo.list_recent(limit)
