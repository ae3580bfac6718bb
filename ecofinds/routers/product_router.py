from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from .. import crud
from ..auth import get_current_user
from ..database import get_storage
from ..schemas import Identity, Product, ProductCreate, ProductMessage, ProductUpdate
from ..storage import Storage

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=List[Product])
def list_products(
    search: Optional[str] = Query(None, description="Search in title or description"),
    category: Optional[str] = Query(None, description="Exact category, 'all' for any"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    storage: Storage = Depends(get_storage),
):
    return crud.get_products(
        storage,
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
    )


@router.get("/categories/list", response_model=List[str])
def list_categories(storage: Storage = Depends(get_storage)):
    return crud.get_categories(storage)


@router.get("/user/{user_id}", response_model=List[Product])
def list_user_products(
    user_id: str,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return crud.get_products_by_seller(storage, user_id)


@router.get("/{product_id}", response_model=Product)
def view_product(product_id: str, storage: Storage = Depends(get_storage)):
    return crud.get_product(storage, product_id)


@router.post("", response_model=ProductMessage, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    product = crud.create_product(storage, body, current_user)
    return ProductMessage(message="Product created successfully", product=product)


@router.put("/{product_id}", response_model=ProductMessage)
def update_product(
    product_id: str,
    body: ProductUpdate,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    product = crud.update_product(storage, product_id, body, current_user)
    return ProductMessage(message="Product updated successfully", product=product)


@router.delete("/{product_id}", response_model=ProductMessage)
def delete_product(
    product_id: str,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    product = crud.delete_product(storage, product_id, current_user)
    return ProductMessage(message="Product deleted successfully", product=product)
