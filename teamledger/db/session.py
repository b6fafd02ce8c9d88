from contextlib import asynccontextmanager
from typing import Awaitable, Callable, List

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from teamledger.core.config import settings
from teamledger.core.errors import StoreError

logger = structlog.get_logger(__name__)


class WriteScope:
    """
    Handle passed to the body of a paired write.

    `session` is the Motor session to hand to every write (None when running
    without transactions). `on_abort` registers an undo step that only runs
    when there is no transaction to roll back.
    """

    def __init__(self, session=None):
        self.session = session
        self._undo: List[Callable[[], Awaitable]] = []

    def on_abort(self, undo: Callable[[], Awaitable]) -> None:
        if self.session is None:
            self._undo.append(undo)

    async def rollback(self, operation: str) -> None:
        for undo in reversed(self._undo):
            try:
                await undo()
            except PyMongoError as exc:
                logger.error("paired_write_undo_failed", operation=operation, error=str(exc))


@asynccontextmanager
async def paired_write(db: AsyncIOMotorDatabase, operation: str):
    """
    Scope for a source-record write plus its ledger post.

    With MONGODB_TRANSACTIONS enabled both writes commit or abort together.
    Without transactions every write in the body registers its undo step
    through `scope.on_abort`, for example deleting a created record or
    reverting a status flip. The steps run newest first when the body raises.
    """
    try:
        if settings.MONGODB_TRANSACTIONS:
            async with await db.client.start_session() as session:
                async with session.start_transaction():
                    yield WriteScope(session)
        else:
            scope = WriteScope()
            try:
                yield scope
            except Exception:
                await scope.rollback(operation)
                raise
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        logger.error("paired_write_failed", operation=operation, error=str(exc))
        raise StoreError(f"{operation} failed, retry the operation", exc) from exc
