"""
Member import.

Accepts member-like mappings from a JSON upload. Keys may be the canonical
ones (full_name, team, join_date, notes) or the Turkish labels used by the
team's spreadsheet exports ("İsim Soyisim" for the name, "Ekip" for the team).
"""

import json
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from teamledger.core.errors import LedgerValidationError
from teamledger.models.member import MemberCreate, name_key
from teamledger.repositories.member_repo import MemberRepository
from teamledger.schemas.imports import MemberImportResult

logger = structlog.get_logger(__name__)

NAME_FIELDS = ("full_name", "İsim Soyisim")
TEAM_FIELDS = ("team", "Ekip")


def _first_present(record: dict, fields: Tuple[str, ...]) -> Any:
    for field in fields:
        value = record.get(field)
        if value not in (None, ""):
            return value
    return None


def normalize_member_record(record: Any, run_date: date, position: int = 0) -> MemberCreate:
    """Map one raw record onto MemberCreate. join_date defaults to run_date."""
    if not isinstance(record, dict):
        raise LedgerValidationError(f"Record {position}: expected an object")

    full_name = _first_present(record, NAME_FIELDS)
    if full_name is None or not str(full_name).strip():
        raise LedgerValidationError(f"Record {position}: missing member name")

    try:
        return MemberCreate(
            full_name=str(full_name),
            team=str(_first_present(record, TEAM_FIELDS) or ""),
            join_date=record.get("join_date") or run_date,
            notes=str(record.get("notes") or ""),
        )
    except ValidationError as exc:
        raise LedgerValidationError(f"Record {position}: {exc.errors()[0]['msg']}")


def normalize_members(
    existing_names: Iterable[str],
    raw_records: Iterable[Any],
    run_date: date,
) -> Tuple[List[MemberCreate], int]:
    """
    Normalize raw records and drop names that already exist.

    Matching is case-insensitive and exact. Within the input the first
    occurrence of a name wins. Returns (new members, skipped count).
    """
    seen = {name_key(name) for name in existing_names}
    fresh = []
    skipped = 0

    for position, record in enumerate(raw_records):
        member = normalize_member_record(record, run_date, position)
        key = name_key(member.full_name)
        if key in seen:
            skipped += 1
            continue
        seen.add(key)
        fresh.append(member)

    return fresh, skipped


def load_member_file(content: bytes) -> List[Any]:
    """Parse an uploaded JSON file: an array of records or a single record."""
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise LedgerValidationError(f"Invalid JSON file: {exc}")
    return data if isinstance(data, list) else [data]


class MemberImportService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.members = MemberRepository(db)

    async def import_members(self, raw_records: List[Any], run_date: Optional[date] = None) -> MemberImportResult:
        run_date = run_date or date.today()
        existing = await self.members.existing_names()
        fresh, skipped = normalize_members(existing, raw_records, run_date)

        inserted, conflicts = await self.members.insert_members(fresh)

        logger.info(
            "members_imported",
            received=len(raw_records),
            imported=len(inserted),
            skipped=skipped + conflicts,
        )
        return MemberImportResult(
            received=len(raw_records),
            imported=len(inserted),
            skipped=skipped + conflicts,
            members=inserted,
        )
