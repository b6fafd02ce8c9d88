from datetime import date
from typing import Dict, List

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamledger.core.errors import LedgerValidationError, RecordNotFoundError
from teamledger.db.session import paired_write
from teamledger.models.base import PaymentRequest, PaymentStatus
from teamledger.models.ledger import LedgerEvent, TxnType
from teamledger.models.product import (
    Product,
    SalesOrder,
    SalesOrderCreate,
    SalesOrderDetail,
    SalesOrderItem,
    SalesOrderView,
)
from teamledger.repositories.member_repo import MemberRepository
from teamledger.repositories.product_repo import ProductRepository
from teamledger.repositories.sales_repo import SalesRepository
from teamledger.services.ledger_service import LedgerService

logger = structlog.get_logger(__name__)


def price_order(order_in: SalesOrderCreate, products: Dict[str, Product]) -> List[SalesOrderItem]:
    """
    Snapshot line items: product name, unit price (the product's current
    price unless overridden) and quantity x price.
    """
    items = []
    for line in order_in.items:
        product = products.get(line.product_id)
        if product is None:
            raise LedgerValidationError(f"Unknown product: {line.product_id}")
        unit_price = product.unit_price_cents if line.unit_price_cents is None else line.unit_price_cents
        items.append(SalesOrderItem(
            order_id="",
            product_id=product.id,
            product_name=product.name,
            quantity=line.quantity,
            unit_price_cents=unit_price,
            line_total_cents=line.quantity * unit_price,
        ))
    return items


def sale_ledger_event(order: SalesOrder, txn_date: date) -> LedgerEvent:
    return LedgerEvent(
        kind=TxnType.MERCH_SALE,
        amount_cents=order.total_amount_cents,
        txn_date=txn_date.isoformat(),
        description="Merch sale",
        category="merch",
        project="General",
        member_id=order.member_id,
        source=order.payment_method,
        reference_type="sale_order",
        reference_id=order.id,
    )


class SalesService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.sales = SalesRepository(db)
        self.products = ProductRepository(db)
        self.members = MemberRepository(db)
        self.ledger = LedgerService(db)

    async def create_sale(self, order_in: SalesOrderCreate) -> SalesOrderDetail:
        """
        Record an order with its items and decrement stock.

        A sale recorded as paid posts its total to the ledger immediately;
        an unpaid one posts when it is marked paid.
        """
        if await self.members.get_member(order_in.member_id) is None:
            raise LedgerValidationError(f"Unknown member: {order_in.member_id}")

        products = await self.products.get_products(line.product_id for line in order_in.items)
        items = price_order(order_in, products)

        order = SalesOrder(
            member_id=order_in.member_id,
            order_date=order_in.order_date,
            payment_status=order_in.payment_status,
            payment_method=order_in.payment_method,
            total_amount_cents=sum(item.line_total_cents for item in items),
            notes=order_in.notes,
        )

        async with paired_write(self.db, "create_sale") as scope:
            order = await self.sales.insert_order(order, scope.session)
            scope.on_abort(lambda: self.sales.delete_order(order.id))

            for item in items:
                item.order_id = order.id
            items = await self.sales.insert_items(items, scope.session)

            for item in items:
                await self.products.adjust_stock(item.product_id, -item.quantity, scope.session)
                scope.on_abort(
                    lambda product_id=item.product_id, quantity=item.quantity:
                        self.products.adjust_stock(product_id, quantity)
                )

            # Ledger post stays the last write of the block
            if order.payment_status == PaymentStatus.PAID:
                scope.on_abort(lambda: self.ledger.retract("sale_order", order.id))
                await self.ledger.record(sale_ledger_event(order, order.order_date), scope.session)

        logger.info(
            "sale_recorded",
            order_id=order.id,
            items=len(items),
            total_amount_cents=order.total_amount_cents,
            payment_status=order.payment_status.value,
        )
        return SalesOrderDetail(**order.model_dump(), items=items)

    async def mark_paid(self, order_id: str, payment: PaymentRequest) -> SalesOrder:
        order = await self.sales.get_order(order_id)
        if order is None:
            raise RecordNotFoundError("Sales order not found")

        async with paired_write(self.db, "mark_sale_paid") as scope:
            if order.payment_status == PaymentStatus.UNPAID:
                if await self.sales.mark_paid(order_id, payment.payment_method, scope.session):
                    scope.on_abort(lambda: self.sales.revert_paid(order_id))
                    scope.on_abort(lambda: self.ledger.retract("sale_order", order_id))
            order = await self.sales.get_order(order_id, scope.session)
            await self.ledger.record(sale_ledger_event(order, payment.payment_date), scope.session)

        logger.info("sale_marked_paid", order_id=order_id, total_amount_cents=order.total_amount_cents)
        return order

    async def list_orders(self) -> List[SalesOrderView]:
        orders = await self.sales.list_orders()
        members = await self.members.get_members(o.member_id for o in orders)
        return [
            SalesOrderView(
                **order.model_dump(),
                member_name=members[order.member_id].full_name if order.member_id in members else "Unknown",
            )
            for order in orders
        ]

    async def get_order_detail(self, order_id: str) -> SalesOrderDetail:
        order = await self.sales.get_order(order_id)
        if order is None:
            raise RecordNotFoundError("Sales order not found")
        items = await self.sales.items_for_order(order_id)
        return SalesOrderDetail(**order.model_dump(), items=items)
