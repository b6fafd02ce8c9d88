import asyncio
from datetime import date

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.db.mongo import create_indexes, get_db
from teamledger.main import app
from teamledger.models.member import MemberCreate
from teamledger.models.product import ProductCreate
from teamledger.repositories.member_repo import MemberRepository
from teamledger.repositories.product_repo import ProductRepository

TEST_DATABASE_NAME = "teamledger_test"


@pytest_asyncio.fixture
async def test_db() -> AsyncIOMotorDatabase:
    """In-memory Motor database with the production indexes."""
    client = AsyncMongoMockClient()
    db = client[TEST_DATABASE_NAME]
    await create_indexes(db)
    yield db


@pytest_asyncio.fixture
async def member(test_db):
    repo = MemberRepository(test_db)
    return await repo.create_member(MemberCreate(
        full_name="Ayşe Yılmaz",
        team="Corsa",
        join_date=date(2025, 9, 1)
    ))


@pytest_asyncio.fixture
async def products(test_db):
    repo = ProductRepository(test_db)
    hoodie = await repo.create_product(ProductCreate(name="Hoodie", unit_price_cents=5000, stock_quantity=10))
    sticker = await repo.create_product(ProductCreate(name="Sticker", unit_price_cents=3000, stock_quantity=5))
    return hoodie, sticker


@pytest.fixture
def test_client():
    """
    FastAPI test client backed by an in-memory database.

    The client is not entered as a context manager, so the lifespan hook
    (which connects to a real MongoDB) does not run.
    """
    db = AsyncMongoMockClient()[TEST_DATABASE_NAME]
    asyncio.run(create_indexes(db))

    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
