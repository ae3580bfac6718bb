import datetime as dt
import logging
import uuid
from decimal import Decimal
from typing import List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from ecofinds import config
from ecofinds.auth import get_password_hash, verify_password
from ecofinds.errors import AuthenticationError, DomainError, NotFound, PermissionDenied
from ecofinds.schemas import (
    CartLine,
    CartLineWithProduct,
    Identity,
    Product,
    ProductCreate,
    ProductUpdate,
    ProfileUpdate,
    Purchase,
    PurchaseStats,
    PurchaseWithProduct,
    RegisterRequest,
    SalesStats,
    StatsSummary,
    User,
)
from ecofinds.storage import Storage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso_z(value: str) -> dt.datetime:
    """Parse ISO8601 string that may end with 'Z'."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    parsed = dt.datetime.fromisoformat(v)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def load(storage: Storage, name: str, model: Type[M]) -> List[M]:
    return [model.model_validate(record) for record in storage.get_all(name)]


def save(storage: Storage, name: str, items: List[BaseModel]) -> None:
    storage.put_all(name, [item.model_dump(by_alias=True, exclude_none=True) for item in items])


# -----------------------------
# Users
# -----------------------------

def get_user(storage: Storage, user_id: str) -> Optional[User]:
    return next((u for u in load(storage, "users", User) if u.id == user_id), None)


def get_user_by_email(storage: Storage, email: str) -> Optional[User]:
    normalized = (email or "").strip().lower()
    if not normalized:
        return None
    return next((u for u in load(storage, "users", User) if u.email.lower() == normalized), None)


def refresh_identity(storage: Storage, identity: Identity) -> Identity:
    """The caller with the email currently stored for them.

    Tokens keep the email they were issued with, which goes stale once the
    profile email changes.
    """
    user = get_user(storage, identity.user_id)
    if user is None or user.email == identity.email:
        return identity
    return Identity(user_id=user.id, email=user.email)


def create_user(storage: Storage, data: RegisterRequest) -> User:
    hashed_password = get_password_hash(data.password)

    with storage.lock():
        users = load(storage, "users", User)
        if any(u.email.lower() == data.email.lower() for u in users):
            raise DomainError("User with this email already exists")

        user = User(
            id=new_id(),
            email=data.email,
            username=data.username,
            password=hashed_password,
            created_at=utcnow_iso(),
        )
        users.append(user)
        save(storage, "users", users)

    return user


def authenticate_user(storage: Storage, email: str, password: str) -> User:
    user = get_user_by_email(storage, email)
    if not user or not verify_password(password, user.password):
        raise AuthenticationError("Invalid credentials")
    return user


def update_profile(storage: Storage, identity: Identity, data: ProfileUpdate) -> User:
    with storage.lock():
        users = load(storage, "users", User)
        user = next((u for u in users if u.id == identity.user_id), None)
        if user is None:
            raise NotFound("User not found")

        if data.email is not None and data.email.lower() != user.email.lower():
            if any(u.email.lower() == data.email.lower() for u in users if u.id != user.id):
                raise DomainError("User with this email already exists")
            user.email = data.email

        if data.username is not None:
            user.username = data.username

        save(storage, "users", users)

    return user


# -----------------------------
# Catalog
# -----------------------------

def get_products(
    storage: Storage,
    search: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
) -> List[Product]:
    products = load(storage, "products", Product)

    if search:
        needle = search.lower()
        products = [
            p for p in products
            if needle in p.title.lower() or needle in p.description.lower()
        ]

    if category and category != "all":
        products = [p for p in products if p.category == category]

    if min_price is not None:
        products = [p for p in products if p.price >= min_price]
    if max_price is not None:
        products = [p for p in products if p.price <= max_price]

    return products


def get_product(storage: Storage, product_id: str) -> Product:
    product = next((p for p in load(storage, "products", Product) if p.id == product_id), None)
    if product is None:
        raise NotFound("Product not found")
    return product


def get_products_by_seller(storage: Storage, seller_id: str) -> List[Product]:
    return [p for p in load(storage, "products", Product) if p.seller_id == seller_id]


def get_categories(storage: Storage) -> List[str]:
    # distinct, first-seen order
    return list(dict.fromkeys(p.category for p in load(storage, "products", Product)))


def create_product(storage: Storage, data: ProductCreate, identity: Identity) -> Product:
    with storage.lock():
        identity = refresh_identity(storage, identity)
        product = Product(
            id=new_id(),
            title=data.title,
            description=data.description,
            category=data.category,
            price=data.price,
            image_url=data.image_url or config.DEFAULT_IMAGE_URL,
            seller_id=identity.user_id,
            seller_email=identity.email,
            created_at=utcnow_iso(),
            is_available=True,
        )

        products = load(storage, "products", Product)
        products.append(product)
        save(storage, "products", products)

    logger.info("Product %s listed by %s", product.id, identity.user_id)
    return product


def _owned_product(products: List[Product], product_id: str, identity: Identity, action: str) -> Product:
    product = next((p for p in products if p.id == product_id), None)
    if product is None:
        raise NotFound("Product not found")
    if product.seller_id != identity.user_id:
        logger.warning("User %s tried to %s product %s", identity.user_id, action, product_id)
        raise PermissionDenied(f"You can only {action} your own products")
    return product


def update_product(storage: Storage, product_id: str, data: ProductUpdate, identity: Identity) -> Product:
    update_data = data.model_dump(exclude_none=True)

    with storage.lock():
        products = load(storage, "products", Product)
        product = _owned_product(products, product_id, identity, "update")
        for key, value in update_data.items():
            setattr(product, key, value)
        save(storage, "products", products)

    logger.info("Product %s updated (%s)", product_id, ", ".join(sorted(update_data)) or "no changes")
    return product


def delete_product(storage: Storage, product_id: str, identity: Identity) -> Product:
    with storage.lock():
        products = load(storage, "products", Product)
        product = _owned_product(products, product_id, identity, "delete")
        products = [p for p in products if p.id != product_id]
        save(storage, "products", products)

    logger.info("Product %s deleted by %s", product_id, identity.user_id)
    return product


# -----------------------------
# Cart
# -----------------------------

def get_cart(storage: Storage, identity: Identity) -> List[CartLineWithProduct]:
    products_by_id = {p.id: p for p in load(storage, "products", Product)}
    lines = [c for c in load(storage, "cart", CartLine) if c.user_id == identity.user_id]

    # lines whose product was deleted are dropped
    return [
        CartLineWithProduct(**line.model_dump(), product=products_by_id[line.product_id])
        for line in lines
        if line.product_id in products_by_id
    ]


def add_to_cart(storage: Storage, identity: Identity, product_id: str, quantity: int = 1) -> CartLine:
    with storage.lock():
        product = get_product(storage, product_id)

        if not product.is_available:
            raise DomainError("Product is not available")
        if product.seller_id == identity.user_id:
            raise DomainError("You cannot add your own product to cart")

        cart = load(storage, "cart", CartLine)
        now = utcnow_iso()
        line = next(
            (c for c in cart if c.user_id == identity.user_id and c.product_id == product_id),
            None,
        )
        if line is not None:
            line.quantity += quantity
            line.updated_at = now
        else:
            line = CartLine(
                id=new_id(),
                user_id=identity.user_id,
                product_id=product_id,
                quantity=quantity,
                added_at=now,
                updated_at=now,
            )
            cart.append(line)

        save(storage, "cart", cart)

    return line


def _own_line(cart: List[CartLine], item_id: str, identity: Identity) -> CartLine:
    line = next((c for c in cart if c.id == item_id and c.user_id == identity.user_id), None)
    if line is None:
        raise NotFound("Cart item not found")
    return line


def set_cart_quantity(storage: Storage, identity: Identity, item_id: str, quantity: int) -> Tuple[CartLine, bool]:
    """Overwrite a line's quantity. Returns the line and whether it was removed."""
    with storage.lock():
        cart = load(storage, "cart", CartLine)
        line = _own_line(cart, item_id, identity)

        if quantity <= 0:
            cart = [c for c in cart if c.id != line.id]
            save(storage, "cart", cart)
            return line, True

        line.quantity = quantity
        line.updated_at = utcnow_iso()
        save(storage, "cart", cart)
        return line, False


def remove_cart_item(storage: Storage, identity: Identity, item_id: str) -> CartLine:
    with storage.lock():
        cart = load(storage, "cart", CartLine)
        line = _own_line(cart, item_id, identity)
        save(storage, "cart", [c for c in cart if c.id != line.id])
    return line


def clear_cart(storage: Storage, identity: Identity) -> List[CartLine]:
    with storage.lock():
        cart = load(storage, "cart", CartLine)
        removed = [c for c in cart if c.user_id == identity.user_id]
        save(storage, "cart", [c for c in cart if c.user_id != identity.user_id])
    return removed


def get_cart_count(storage: Storage, identity: Identity) -> int:
    return sum(c.quantity for c in load(storage, "cart", CartLine) if c.user_id == identity.user_id)


# -----------------------------
# Purchases and sales
# -----------------------------

def _newest_first(purchases):
    return sorted(purchases, key=lambda p: parse_iso_z(p.purchased_at), reverse=True)


def get_purchase_history(storage: Storage, identity: Identity) -> List[PurchaseWithProduct]:
    products_by_id = {p.id: p for p in load(storage, "products", Product)}
    history = [
        PurchaseWithProduct(**p.model_dump(), product=products_by_id.get(p.product_id))
        for p in load(storage, "purchases", Purchase)
        if p.buyer_id == identity.user_id
    ]
    return _newest_first(history)


def get_purchase(storage: Storage, identity: Identity, purchase_id: str) -> PurchaseWithProduct:
    purchase = next((p for p in load(storage, "purchases", Purchase) if p.id == purchase_id), None)
    if purchase is None:
        raise NotFound("Purchase not found")
    if purchase.buyer_id != identity.user_id:
        raise PermissionDenied("Access denied")

    product = next((p for p in load(storage, "products", Product) if p.id == purchase.product_id), None)
    return PurchaseWithProduct(**purchase.model_dump(), product=product)


def get_sales_history(storage: Storage, identity: Identity) -> List[Purchase]:
    return _newest_first(p for p in load(storage, "purchases", Purchase) if p.seller_id == identity.user_id)


def get_purchase_stats(storage: Storage, identity: Identity) -> StatsSummary:
    purchases = load(storage, "purchases", Purchase)
    bought = [p for p in purchases if p.buyer_id == identity.user_id]
    sold = [p for p in purchases if p.seller_id == identity.user_id]

    return StatsSummary(
        purchases=PurchaseStats(
            count=len(bought),
            total_spent=sum((p.total_amount for p in bought), Decimal("0")),
            total_items_purchased=sum(p.quantity for p in bought),
        ),
        sales=SalesStats(
            count=len(sold),
            total_earned=sum((p.total_amount for p in sold), Decimal("0")),
            total_items_sold=sum(p.quantity for p in sold),
        ),
    )
