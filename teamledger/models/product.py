from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from teamledger.models.base import MongoModel, PaymentStatus, utcnow


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str = "general"
    unit_price_cents: int = Field(0, ge=0)
    # Negative stock is accepted: it signals a data-entry error, not a sale block
    stock_quantity: int = 0


class Product(ProductCreate, MongoModel):
    updated_at: datetime = Field(default_factory=utcnow)


class SaleItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    # Defaults to the product's current price
    unit_price_cents: Optional[int] = Field(None, ge=0)


class SalesOrderCreate(BaseModel):
    member_id: str
    order_date: date = Field(default_factory=date.today)
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_method: str = "unpaid"
    notes: str = ""
    items: List[SaleItemCreate] = Field(..., min_length=1)


class SalesOrderItem(MongoModel):
    """Line item snapshot: name and price as they were at sale time."""
    order_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int
    line_total_cents: int


class SalesOrder(MongoModel):
    member_id: str
    order_date: date
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_method: str = "unpaid"
    total_amount_cents: int = 0
    notes: str = ""
    updated_at: datetime = Field(default_factory=utcnow)


class SalesOrderView(SalesOrder):
    member_name: str = "Unknown"


class SalesOrderDetail(SalesOrder):
    items: List[SalesOrderItem] = []
