from typing import List

from fastapi import APIRouter, Depends, status

from teamledger.db.mongo import get_db
from teamledger.models.base import PaymentRequest
from teamledger.models.product import (
    SalesOrder,
    SalesOrderCreate,
    SalesOrderDetail,
    SalesOrderItem,
    SalesOrderView,
)
from teamledger.services.sales_service import SalesService

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("", response_model=SalesOrderDetail, status_code=status.HTTP_201_CREATED)
async def create_sale(order_in: SalesOrderCreate, db = Depends(get_db)):
    """Record a sale with its line items; stock is decremented."""
    return await SalesService(db).create_sale(order_in)


@router.get("", response_model=List[SalesOrderView])
async def list_sales(db = Depends(get_db)):
    return await SalesService(db).list_orders()


@router.post("/{order_id}/pay", response_model=SalesOrder)
async def mark_sale_paid(order_id: str, payment: PaymentRequest, db = Depends(get_db)):
    return await SalesService(db).mark_paid(order_id, payment)


@router.get("/{order_id}/items", response_model=List[SalesOrderItem])
async def list_sale_items(order_id: str, db = Depends(get_db)):
    detail = await SalesService(db).get_order_detail(order_id)
    return detail.items
