"""
Bank statement import.

Pipeline:
1. read_grid: first sheet of the upload as a 2-D list of cells (pandas)
2. parse_bank_file: locate the header row, turn data rows into records
3. resolve_mapping: which header feeds which transaction field
4. normalize_transactions: dates, absolute cents, direction, dedup hash
5. BankImportService: skip known hashes, insert the rest, post each new row
   to the ledger

Steps 2-4 are pure; only step 5 touches the store.
"""

import io
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pandas as pd
import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.core.config import settings
from teamledger.core.errors import DuplicateRecordError, LedgerValidationError
from teamledger.db.session import paired_write
from teamledger.models.bank import BankTransaction, ColumnMapping, Direction
from teamledger.models.ledger import LedgerEvent, TxnType
from teamledger.repositories.bank_repo import BankTransactionRepository
from teamledger.schemas.imports import BankImportResult, BankPreview
from teamledger.services.ledger_service import LedgerService

logger = structlog.get_logger(__name__)

# A row holding one of these cells is the header row
HEADER_MARKERS = ("Tarih/Saat", "Date")

# Header names recognized without user mapping, per transaction field
KNOWN_COLUMNS = {
    "txn_date": ("Tarih/Saat", "Date"),
    "description": ("Açıklama", "Description"),
    "amount": ("İşlem Tutarı*", "Amount"),
    "direction": ("Direction",),
    "counterparty": ("Counterparty",),
    "reference": ("Referans", "Reference"),
}

REQUIRED_FIELDS = ("txn_date", "description", "amount")


@dataclass
class ParsedSheet:
    header_row: int
    columns: List[str]
    records: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def data_start(self) -> int:
        return self.header_row + 1


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _cell_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_grid(content: bytes, filename: str = "") -> List[List[Any]]:
    """First sheet of an .xls/.xlsx (or .csv) upload as rows of cells."""
    buffer = io.BytesIO(content)
    try:
        if filename.lower().endswith(".csv"):
            frame = pd.read_csv(buffer, header=None, dtype=str, keep_default_na=False)
        else:
            frame = pd.read_excel(buffer, sheet_name=0, header=None)
    except (ValueError, ImportError) as exc:
        raise LedgerValidationError(f"Could not read spreadsheet: {exc}")

    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.values.tolist()


def find_header_row(rows: List[List[Any]], scan_rows: int = 25) -> Optional[int]:
    """Index of the first row (within scan_rows) holding a header marker."""
    for index, row in enumerate(rows[:scan_rows]):
        if row and any(_cell_text(cell) in HEADER_MARKERS for cell in row):
            return index
    return None


def parse_bank_file(rows: List[List[Any]], scan_rows: int = 25) -> ParsedSheet:
    """
    Split a grid into header and records.

    Without a recognizable header row, row 0 is taken as the header. Blank
    header cells are ignored and rows with no populated cell are dropped.
    """
    if not rows:
        raise LedgerValidationError("The uploaded file has no rows")

    header_row = find_header_row(rows, scan_rows)
    if header_row is None:
        header_row = 0

    headers = {
        index: _cell_text(cell)
        for index, cell in enumerate(rows[header_row] or [])
        if _cell_text(cell)
    }

    records = []
    for row in rows[header_row + 1:]:
        row = row or []
        record = {
            name: row[index]
            for index, name in headers.items()
            if index < len(row) and not _is_blank(row[index])
        }
        if record:
            records.append(record)

    return ParsedSheet(header_row=header_row, columns=list(headers.values()), records=records)


def detect_mapping(columns: Iterable[str]) -> ColumnMapping:
    """
    Map known header names. Only used when the date column is among them,
    otherwise the caller has to supply the mapping.
    """
    available = set(columns)
    detected = {}
    for field_name, candidates in KNOWN_COLUMNS.items():
        for candidate in candidates:
            if candidate in available:
                detected[field_name] = candidate
                break

    if "txn_date" not in detected:
        return ColumnMapping()
    return ColumnMapping(**detected)


def resolve_mapping(columns: List[str], explicit: Optional[ColumnMapping] = None) -> ColumnMapping:
    """Detected mapping overlaid with explicit choices, then validated."""
    mapping = detect_mapping(columns)
    if explicit is not None:
        mapping = mapping.model_copy(update=explicit.model_dump(exclude_none=True))

    missing = [name for name in REQUIRED_FIELDS if not getattr(mapping, name)]
    if missing:
        raise LedgerValidationError(
            "Map at least Date, Description and Amount columns (missing: "
            + ", ".join(missing) + ")"
        )

    unknown = [
        column for column in mapping.model_dump(exclude_none=True).values()
        if column not in columns
    ]
    if unknown:
        raise LedgerValidationError("Unknown columns in mapping: " + ", ".join(unknown))

    return mapping


def normalize_date(value: Any) -> str:
    """
    DD/MM/YYYY (optionally followed by "-HH:MM:SS" or " HH:MM") becomes
    YYYY-MM-DD. Anything else is returned as-is; day and month ranges are
    not checked.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = "" if value is None else str(value)
    if "/" in text:
        date_part = re.split(r"[- ]", text.strip(), maxsplit=1)[0]
        parts = date_part.split("/")
        if len(parts) == 3:
            day, month, year = parts
            if (
                1 <= len(day) <= 2 and 1 <= len(month) <= 2 and len(year) == 4
                and day.isdigit() and month.isdigit() and year.isdigit()
            ):
                return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return text


def parse_amount(value: Any) -> Decimal:
    """
    Signed amount from a cell. Blank is zero; strings may use a decimal comma
    ("1.234,56", "-150,5") or a decimal point ("1,234.56").
    """
    if _is_blank(value):
        return Decimal(0)
    if isinstance(value, bool):
        raise LedgerValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))

    text = re.sub(r"[^\d,.\-+]", "", str(value))
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".")

    try:
        return Decimal(text)
    except InvalidOperation:
        raise LedgerValidationError(f"Invalid amount: {value!r}")


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def import_hash(txn_date: str, description: str, amount: Decimal) -> str:
    """Dedup key: date, description and amount with non-alphanumerics removed."""
    amount_text = format(amount.normalize(), "f")
    return re.sub(r"[^a-zA-Z0-9]", "", f"{txn_date}-{description}-{amount_text}")


def normalize_transactions(
    records: List[Dict[str, Any]],
    mapping: ColumnMapping,
    filename: str = "",
) -> List[BankTransaction]:
    transactions = []
    for position, record in enumerate(records, start=1):
        raw_date = record.get(mapping.txn_date)
        if _is_blank(raw_date):
            raise LedgerValidationError(f"Row {position}: missing transaction date")

        txn_date = normalize_date(raw_date)
        description = _cell_text(record.get(mapping.description))
        try:
            amount = parse_amount(record.get(mapping.amount))
        except LedgerValidationError as exc:
            raise LedgerValidationError(f"Row {position}: {exc}")

        if mapping.direction:
            raw_direction = _cell_text(record.get(mapping.direction)) or "in"
        else:
            raw_direction = "in" if amount >= 0 else "out"
        direction = Direction.OUT if "out" in raw_direction.lower() or amount < 0 else Direction.IN

        transactions.append(BankTransaction(
            txn_date=txn_date,
            description=description,
            amount_cents=abs(to_cents(amount)),
            direction=direction,
            counterparty=_cell_text(record.get(mapping.counterparty)) if mapping.counterparty else "",
            reference=_cell_text(record.get(mapping.reference)) if mapping.reference else "",
            import_hash=import_hash(txn_date, description, amount),
            import_filename=filename,
        ))
    return transactions


def select_new_transactions(
    transactions: List[BankTransaction],
    existing_hashes: Set[str],
) -> Tuple[List[BankTransaction], int]:
    """Drop rows already stored or repeated earlier in the same file."""
    seen = set(existing_hashes)
    fresh = []
    skipped = 0
    for txn in transactions:
        if txn.import_hash in seen:
            skipped += 1
            continue
        seen.add(txn.import_hash)
        fresh.append(txn)
    return fresh, skipped


def ledger_event_for(txn: BankTransaction) -> LedgerEvent:
    return LedgerEvent(
        kind=TxnType.BANK_TRANSACTION,
        amount_cents=txn.amount_cents,
        direction=txn.direction,
        txn_date=txn.txn_date,
        description=txn.description,
        category="bank",
        project="General",
        source="bank",
        reference_type="bank_transaction",
        reference_id=txn.id,
    )


class BankImportService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.bank = BankTransactionRepository(db)
        self.ledger = LedgerService(db)

    def preview(self, rows: List[List[Any]], limit: int = 20) -> BankPreview:
        sheet = parse_bank_file(rows, settings.BANK_HEADER_SCAN_ROWS)
        return BankPreview(
            header_row=sheet.header_row,
            columns=sheet.columns,
            rows=[
                {name: _cell_text(value) for name, value in record.items()}
                for record in sheet.records[:limit]
            ],
            mapping=detect_mapping(sheet.columns),
        )

    async def import_rows(
        self,
        rows: List[List[Any]],
        filename: str = "",
        mapping: Optional[ColumnMapping] = None,
    ) -> BankImportResult:
        sheet = parse_bank_file(rows, settings.BANK_HEADER_SCAN_ROWS)
        resolved = resolve_mapping(sheet.columns, mapping)
        transactions = normalize_transactions(sheet.records, resolved, filename)

        known = await self.bank.existing_hashes(t.import_hash for t in transactions)
        fresh, skipped = select_new_transactions(transactions, known)

        imported = []
        for txn in fresh:
            try:
                async with paired_write(self.db, "bank_import") as scope:
                    stored = await self.bank.insert_transaction(txn, scope.session)
                    scope.on_abort(lambda: self.bank.delete_transaction(stored.id))
                    scope.on_abort(lambda: self.ledger.retract("bank_transaction", stored.id))
                    await self.ledger.record(ledger_event_for(stored), scope.session)
            except DuplicateRecordError:
                # Imported concurrently by someone else
                skipped += 1
                continue
            imported.append(stored)

        logger.info(
            "bank_import_completed",
            filename=filename,
            header_row=sheet.header_row,
            total_rows=len(transactions),
            imported=len(imported),
            skipped_duplicates=skipped,
        )
        return BankImportResult(
            filename=filename,
            total_rows=len(transactions),
            imported=len(imported),
            skipped_duplicates=skipped,
            transactions=imported,
        )
