from typing import List

from fastapi import APIRouter, Depends, status

from .. import crud
from ..auth import get_current_user
from ..checkout import checkout
from ..database import get_storage
from ..schemas import CheckoutResponse, Identity, Purchase, PurchaseWithProduct, StatsSummary
from ..storage import Storage

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.get("", response_model=List[PurchaseWithProduct])
def get_my_purchases(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Purchase history of the caller, newest first."""
    return crud.get_purchase_history(storage, current_user)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def checkout_my_cart(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Buy every purchasable line in the caller's cart.

    - Lines whose product is gone, already sold or owned by the caller are skipped
      and listed under ``errors``; the rest are purchased.
    - Fails with 400 when the cart is empty or no line can be bought.
    """
    plan = checkout(storage, current_user)
    return CheckoutResponse(
        message="Purchase completed successfully",
        purchases=plan.created,
        total_amount=plan.total_amount,
        errors=plan.errors or None,
    )


@router.get("/sales/history", response_model=List[Purchase])
def get_my_sales(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return crud.get_sales_history(storage, current_user)


@router.get("/stats/summary", response_model=StatsSummary)
def get_my_stats(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return crud.get_purchase_stats(storage, current_user)


@router.get("/{purchase_id}", response_model=PurchaseWithProduct)
def get_purchase(
    purchase_id: str,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return crud.get_purchase(storage, current_user, purchase_id)
