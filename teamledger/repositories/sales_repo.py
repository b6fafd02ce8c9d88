from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.models.base import PaymentStatus, from_document, to_document, to_object_id
from teamledger.models.product import SalesOrder, SalesOrderItem


class SalesRepository:
    """Sales orders and their line items (two collections)."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.orders = db["sales_orders"]
        self.items = db["sales_order_items"]

    async def insert_order(self, order: SalesOrder, session=None) -> SalesOrder:
        result = await self.orders.insert_one(to_document(order), session=session)
        order.id = str(result.inserted_id)
        return order

    async def insert_items(self, items: List[SalesOrderItem], session=None) -> List[SalesOrderItem]:
        if not items:
            return []
        result = await self.items.insert_many([to_document(item) for item in items], session=session)
        for item, inserted_id in zip(items, result.inserted_ids):
            item.id = str(inserted_id)
        return items

    async def delete_order(self, order_id: str, session=None) -> None:
        """Remove an order and its items (used to undo a failed creation)."""
        await self.items.delete_many({"order_id": order_id}, session=session)
        await self.orders.delete_one({"_id": to_object_id(order_id)}, session=session)

    async def get_order(self, order_id: str, session=None) -> Optional[SalesOrder]:
        oid = to_object_id(order_id)
        if oid is None:
            return None
        doc = await self.orders.find_one({"_id": oid}, session=session)
        if doc:
            return SalesOrder(**from_document(doc))
        return None

    async def list_orders(self) -> List[SalesOrder]:
        docs = await self.orders.find().sort("order_date", -1).to_list(None)
        return [SalesOrder(**from_document(doc)) for doc in docs]

    async def list_unpaid_orders(self) -> List[SalesOrder]:
        docs = await self.orders.find({"payment_status": PaymentStatus.UNPAID.value}).to_list(None)
        return [SalesOrder(**from_document(doc)) for doc in docs]

    async def items_for_order(self, order_id: str) -> List[SalesOrderItem]:
        docs = await self.items.find({"order_id": order_id}).to_list(None)
        return [SalesOrderItem(**from_document(doc)) for doc in docs]

    async def list_items(self) -> List[SalesOrderItem]:
        docs = await self.items.find().to_list(None)
        return [SalesOrderItem(**from_document(doc)) for doc in docs]

    async def mark_paid(self, order_id: str, payment_method: str, session=None) -> bool:
        """Flip unpaid -> paid. False if the order was not unpaid."""
        result = await self.orders.update_one(
            {"_id": to_object_id(order_id), "payment_status": PaymentStatus.UNPAID.value},
            {"$set": {
                "payment_status": PaymentStatus.PAID.value,
                "payment_method": payment_method,
                "updated_at": datetime.now(timezone.utc)
            }},
            session=session
        )
        return result.modified_count > 0

    async def revert_paid(self, order_id: str, session=None) -> None:
        """Undo mark_paid."""
        await self.orders.update_one(
            {"_id": to_object_id(order_id), "payment_status": PaymentStatus.PAID.value},
            {"$set": {
                "payment_status": PaymentStatus.UNPAID.value,
                "payment_method": "unpaid",
                "updated_at": datetime.now(timezone.utc)
            }},
            session=session
        )
