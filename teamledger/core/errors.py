"""Error taxonomy shared by services, repositories and routes."""

from pymongo.errors import PyMongoError


class LedgerError(Exception):
    """Base exception for bookkeeping operations."""
    pass


class LedgerValidationError(LedgerError):
    """Required field missing or malformed. Raised before any write."""
    pass


class DuplicateRecordError(LedgerError):
    """A uniqueness constraint rejected the write (record already exists)."""
    pass


class RecordNotFoundError(LedgerError):
    """Referenced record does not exist."""
    pass


class StoreError(LedgerError):
    """The record store could not complete the operation."""

    def __init__(self, message: str, cause: PyMongoError | None = None):
        super().__init__(message)
        self.cause = cause
