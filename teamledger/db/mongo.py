import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from teamledger.core.config import settings

logger = structlog.get_logger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes(mongodb.db)
    logger.info("mongo_connected", database=settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("mongo_disconnected")

async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create database indexes.

    The unique indexes are the dedup guarantees: the store rejects the second
    writer instead of callers doing read-then-write checks.
    """
    # Members: case-insensitive name dedup
    await db["members"].create_index("name_key", unique=True)
    await db["members"].create_index("join_date")
    await db["members"].create_index("leave_date")

    # Sales
    await db["sales_orders"].create_index("member_id")
    await db["sales_orders"].create_index("order_date")
    await db["sales_order_items"].create_index("order_id")
    await db["sales_order_items"].create_index("product_id")

    # One fee per member per month
    await db["membership_fees"].create_index(
        [("member_id", ASCENDING), ("fee_month", ASCENDING)], unique=True
    )
    await db["membership_fees"].create_index("fee_month")

    await db["reimbursements"].create_index("member_id")
    await db["reimbursements"].create_index("purchase_date")
    await db["cash_expenses"].create_index("expense_date")

    # Bank import dedup
    await db["bank_transactions"].create_index("import_hash", unique=True)
    await db["bank_transactions"].create_index("txn_date")

    # Ledger: one entry per originating record
    await db["transactions_ledger"].create_index(
        [("reference_type", ASCENDING), ("reference_id", ASCENDING)], unique=True
    )
    await db["transactions_ledger"].create_index("txn_date")
    await db["transactions_ledger"].create_index("member_id")
    await db["transactions_ledger"].create_index([("created_at", DESCENDING)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
