from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class MongoModel(BaseModel):
    """Stored record. `_id` is kept as a string once loaded."""
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )


class ReceiptMetadata(BaseModel):
    """Receipt details kept as text only; no binary attachments."""
    receipt_note: str = ""
    receipt_date: Optional[date] = None
    receipt_no: str = ""
    receipt_text: str = ""


class PaymentRequest(BaseModel):
    """Body for every "mark paid" action."""
    payment_method: str = Field(..., min_length=1, max_length=50)
    payment_date: date = Field(default_factory=date.today)


def _encode(value: Any) -> Any:
    # BSON has no date-only type; dates are stored as ISO strings so range
    # queries and month prefixes work lexically.
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_encode(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    return value


def to_document(model: BaseModel, exclude: Optional[set] = None) -> dict:
    """Dump a model as a Mongo document (without its id)."""
    excluded = {"id"} | (exclude or set())
    return _encode(model.model_dump(exclude=excluded))


def from_document(doc: dict) -> dict:
    """Stringify `_id` so documents validate into models."""
    doc = dict(doc)
    doc["_id"] = str(doc["_id"])
    return doc


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a record id, None when it is not a valid ObjectId."""
    if not value:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
