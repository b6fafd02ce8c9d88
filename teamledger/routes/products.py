from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from teamledger.db.mongo import get_db
from teamledger.models.product import Product, ProductCreate
from teamledger.repositories.product_repo import ProductRepository

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(product_data: ProductCreate, db = Depends(get_db)):
    repo = ProductRepository(db)
    return await repo.create_product(product_data)


@router.get("", response_model=List[Product])
async def list_products(db = Depends(get_db)):
    repo = ProductRepository(db)
    return await repo.list_products()


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, db = Depends(get_db)):
    """Delete a product. Past sale items keep their own snapshot."""
    repo = ProductRepository(db)
    deleted = await repo.delete_product(product_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Product not found")
