from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.base import from_document, to_document, to_object_id
from teamledger.models.product import Product, ProductCreate


class ProductRepository:
    """Merch inventory operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["products"]

    async def create_product(self, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        result = await self.collection.insert_one(to_document(product))
        product.id = str(result.inserted_id)
        return product

    async def list_products(self) -> List[Product]:
        docs = await self.collection.find().sort("name", 1).to_list(None)
        return [Product(**from_document(doc)) for doc in docs]

    async def get_product(self, product_id: str) -> Optional[Product]:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return Product(**from_document(doc))
        return None

    async def get_products(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        oids = [oid for oid in (to_object_id(p) for p in set(product_ids)) if oid is not None]
        if not oids:
            return {}
        docs = await self.collection.find({"_id": {"$in": oids}}).to_list(None)
        products = [Product(**from_document(doc)) for doc in docs]
        return {p.id: p for p in products}

    async def adjust_stock(self, product_id: str, delta: int, session=None) -> bool:
        """Atomically add `delta` (negative on sale) to the stock count."""
        result = await self.collection.update_one(
            {"_id": to_object_id(product_id)},
            {
                "$inc": {"stock_quantity": delta},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            },
            session=session
        )
        return result.modified_count > 0

    async def delete_product(self, product_id: str) -> bool:
        oid = to_object_id(product_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0
