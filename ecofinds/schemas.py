from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

# Prices and totals are computed as Decimal and rendered as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float)]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire and on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class RecordModel(CamelModel):
    """A stored record. Keys it does not declare are kept when it is written back."""

    model_config = ConfigDict(extra="allow")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# -----------------------------
# Stored records
# -----------------------------

class User(RecordModel):
    id: str
    email: str
    username: str
    password: str
    created_at: str


class Product(RecordModel):
    id: str
    title: str
    description: str
    category: str
    price: Money
    image_url: str
    seller_id: str
    seller_email: str
    created_at: str
    is_available: bool = True
    sold_at: Optional[str] = None
    sold_to: Optional[str] = None


class CartLine(RecordModel):
    id: str
    user_id: str
    product_id: str
    quantity: int
    added_at: str
    updated_at: str


class Purchase(RecordModel):
    id: str
    buyer_id: str
    buyer_email: str
    product_id: str
    product_title: str
    product_price: Money
    quantity: int
    total_amount: Money
    seller_id: str
    seller_email: str
    purchased_at: str
    status: str = "completed"


class Identity(BaseModel):
    """The authenticated caller, taken from a verified bearer token."""

    user_id: str
    email: str


# -----------------------------
# Auth
# -----------------------------

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72, description="Password (minimum 6 characters)")
    username: str = Field(..., min_length=1, max_length=50)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None

    @field_validator("username", "email", mode="before")
    @classmethod
    def empty_means_unchanged(cls, value):
        return _blank_to_none(value)


class UserOut(CamelModel):
    id: str
    email: str
    username: str


class UserProfile(UserOut):
    created_at: str


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserOut


class ProfileResponse(CamelModel):
    message: str
    user: UserOut


# -----------------------------
# Catalog
# -----------------------------

class ProductCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0, description="Price, coerced to a non-negative decimal")
    image_url: Optional[str] = None

    @field_validator("image_url", mode="before")
    @classmethod
    def blank_image(cls, value):
        return _blank_to_none(value)


class ProductUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = None

    @field_validator("title", "description", "category", "image_url", "price", mode="before")
    @classmethod
    def empty_means_unchanged(cls, value):
        return _blank_to_none(value)


class ProductMessage(CamelModel):
    message: str
    product: Product


# -----------------------------
# Cart
# -----------------------------

class CartItemAdd(CamelModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)


class CartItemUpdate(CamelModel):
    quantity: int


class CartLineWithProduct(CartLine):
    product: Product


class CartItemMessage(CamelModel):
    message: str
    cart_item: CartLine


class CartUpdateResponse(CamelModel):
    message: str
    cart_item: Optional[CartLine] = None
    removed_item: Optional[CartLine] = None


class CartClearResponse(CamelModel):
    message: str
    removed_items: List[CartLine]


class CartCount(CamelModel):
    count: int


# -----------------------------
# Purchases
# -----------------------------

class PurchaseWithProduct(Purchase):
    product: Optional[Product] = None


class CheckoutResponse(CamelModel):
    message: str
    purchases: List[Purchase]
    total_amount: Money
    errors: Optional[List[str]] = None


class PurchaseStats(CamelModel):
    count: int
    total_spent: Money
    total_items_purchased: int


class SalesStats(CamelModel):
    count: int
    total_earned: Money
    total_items_sold: int


class StatsSummary(CamelModel):
    purchases: PurchaseStats
    sales: SalesStats
