"""
Checkout: turn a user's cart lines into purchases.

``plan_checkout`` is a pure function over a snapshot of the cart, product and
purchase collections. It returns the next snapshot of all three plus what was
bought and what was skipped. ``checkout`` loads the snapshot, plans, and writes
the result back while holding the storage lock, so overlapping checkouts in one
process run one after the other and a product can only be sold once.

Lines are validated independently. Invalid lines are reported as errors and
stay in the cart; valid lines are purchased even when siblings fail. When no
line is valid the whole checkout fails and nothing is written.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from ecofinds.crud import load, new_id, refresh_identity, save, utcnow_iso
from ecofinds.errors import DomainError
from ecofinds.schemas import CartLine, Identity, Product, Purchase
from ecofinds.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class CheckoutPlan:
    cart: List[CartLine]
    products: List[Product]
    purchases: List[Purchase]
    created: List[Purchase] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum((p.total_amount for p in self.created), Decimal("0"))


def plan_checkout(
    identity: Identity,
    cart: List[CartLine],
    products: List[Product],
    purchases: List[Purchase],
    now: Optional[str] = None,
) -> CheckoutPlan:
    """Compute the collections as they should look after checking out ``identity``'s cart.

    The input lists and the records in them are not modified.

    Raises:
        DomainError: the caller's cart is empty, or none of its lines can be bought.
    """
    now = now or utcnow_iso()

    user_lines = [line for line in cart if line.user_id == identity.user_id]
    if not user_lines:
        raise DomainError("Cart is empty")

    next_products = [p.model_copy() for p in products]
    products_by_id = {p.id: p for p in next_products}

    created: List[Purchase] = []
    errors: List[str] = []
    purchased_line_ids = set()

    for line in user_lines:
        product = products_by_id.get(line.product_id)

        if product is None:
            errors.append(f"Product {line.product_id} no longer exists")
            continue
        if not product.is_available:
            errors.append(f"Product {product.title} is no longer available")
            continue
        if product.seller_id == identity.user_id:
            errors.append(f"Cannot purchase your own product: {product.title}")
            continue

        created.append(
            Purchase(
                id=new_id(),
                buyer_id=identity.user_id,
                buyer_email=identity.email,
                product_id=product.id,
                product_title=product.title,
                product_price=product.price,
                quantity=line.quantity,
                total_amount=product.price * line.quantity,
                seller_id=product.seller_id,
                seller_email=product.seller_email,
                purchased_at=now,
                status="completed",
            )
        )

        product.is_available = False
        product.sold_at = now
        product.sold_to = identity.user_id
        purchased_line_ids.add(line.id)

    if not created:
        raise DomainError("No valid items to purchase", details=errors)

    return CheckoutPlan(
        cart=[line for line in cart if line.id not in purchased_line_ids],
        products=next_products,
        purchases=list(purchases) + created,
        created=created,
        errors=errors,
    )


def checkout(storage: Storage, identity: Identity) -> CheckoutPlan:
    with storage.lock():
        identity = refresh_identity(storage, identity)
        plan = plan_checkout(
            identity,
            cart=load(storage, "cart", CartLine),
            products=load(storage, "products", Product),
            purchases=load(storage, "purchases", Purchase),
        )

        save(storage, "purchases", plan.purchases)
        save(storage, "products", plan.products)
        save(storage, "cart", plan.cart)

    logger.info(
        "Checkout by %s: %d purchased, %d skipped, total %s",
        identity.user_id, len(plan.created), len(plan.errors), plan.total_amount,
    )
    return plan
