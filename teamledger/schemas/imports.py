from typing import Dict, List

from pydantic import BaseModel

from teamledger.models.bank import BankTransaction, ColumnMapping
from teamledger.models.member import Member


class MemberImportResult(BaseModel):
    received: int
    imported: int
    skipped: int
    members: List[Member] = []


class BankPreview(BaseModel):
    """What the upload looks like before committing to a column mapping."""
    header_row: int
    columns: List[str]
    rows: List[Dict[str, str]]
    mapping: ColumnMapping


class BankImportResult(BaseModel):
    filename: str
    total_rows: int
    imported: int
    skipped_duplicates: int
    transactions: List[BankTransaction] = []


class DemoDataResult(BaseModel):
    members_created: int
    products_created: int
