"""Sample members and merch for trying the application out."""

from datetime import date

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.product import ProductCreate
from teamledger.repositories.product_repo import ProductRepository
from teamledger.schemas.imports import DemoDataResult
from teamledger.services.member_import import MemberImportService

logger = structlog.get_logger(__name__)

DEMO_MEMBERS = [
    {"full_name": "Ahmet Yılmaz", "join_date": date(2024, 1, 15), "notes": "Team lead"},
    {"full_name": "Ayşe Demir", "join_date": date(2024, 2, 1), "notes": "Electronics"},
    {"full_name": "Mehmet Kaya", "join_date": date(2024, 1, 20), "notes": "Mechanical"},
]

DEMO_PRODUCTS = [
    ProductCreate(name="Team T-Shirt", category="apparel", unit_price_cents=15000, stock_quantity=50),
    ProductCreate(name="Racing Jacket", category="apparel", unit_price_cents=40000, stock_quantity=20),
    ProductCreate(name="Sticker Pack", category="accessories", unit_price_cents=2500, stock_quantity=100),
]


class DemoDataService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.members = MemberImportService(db)
        self.products = ProductRepository(db)

    async def load(self) -> DemoDataResult:
        """
        Add the sample members and products. Entries whose name already
        exists are skipped, so loading twice adds nothing.
        """
        member_result = await self.members.import_members(DEMO_MEMBERS)

        existing = {p.name.lower() for p in await self.products.list_products()}
        created_products = 0
        for product in DEMO_PRODUCTS:
            if product.name.lower() in existing:
                continue
            await self.products.create_product(product)
            created_products += 1

        logger.info(
            "demo_data_loaded",
            members=member_result.imported,
            products=created_products,
        )
        return DemoDataResult(members_created=member_result.imported, products_created=created_products)
