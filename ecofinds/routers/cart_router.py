from typing import List

from fastapi import APIRouter, Depends

from .. import crud
from ..auth import get_current_user
from ..database import get_storage
from ..schemas import (
    CartClearResponse,
    CartCount,
    CartItemAdd,
    CartItemMessage,
    CartItemUpdate,
    CartLineWithProduct,
    CartUpdateResponse,
    Identity,
)
from ..storage import Storage

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=List[CartLineWithProduct])
def get_my_cart(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Return the caller's cart lines with the current state of each product."""
    return crud.get_cart(storage, current_user)


@router.post("", response_model=CartItemMessage)
def add_to_cart(
    body: CartItemAdd,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Add a product to the caller's cart.

    Adding a product that is already in the cart increases that line's quantity.
    """
    line = crud.add_to_cart(storage, current_user, body.product_id, body.quantity)
    return CartItemMessage(message="Item added to cart successfully", cart_item=line)


@router.get("/count", response_model=CartCount)
def get_cart_count(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return CartCount(count=crud.get_cart_count(storage, current_user))


@router.put("/{item_id}", response_model=CartUpdateResponse, response_model_exclude_none=True)
def update_cart_item(
    item_id: str,
    body: CartItemUpdate,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Overwrite a line's quantity; zero or less removes the line."""
    line, removed = crud.set_cart_quantity(storage, current_user, item_id, body.quantity)
    if removed:
        return CartUpdateResponse(message="Item removed from cart", removed_item=line)
    return CartUpdateResponse(message="Cart item updated successfully", cart_item=line)


@router.delete("/{item_id}", response_model=CartUpdateResponse, response_model_exclude_none=True)
def remove_cart_item(
    item_id: str,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    line = crud.remove_cart_item(storage, current_user, item_id)
    return CartUpdateResponse(message="Item removed from cart successfully", removed_item=line)


@router.delete("", response_model=CartClearResponse)
def clear_cart(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    removed = crud.clear_cart(storage, current_user)
    return CartClearResponse(message="Cart cleared successfully", removed_items=removed)
