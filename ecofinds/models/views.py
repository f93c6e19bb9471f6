"""
Pydantic models for service results.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ProductView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    description: str | None = None
    category: str
    price: Decimal
    image_url: str
    created_at: datetime | None = None


class CartLine(BaseModel):
    id: int
    product: ProductView
    added_at: datetime | None = None


class CartView(BaseModel):
    items: list[CartLine] = []
    item_count: int = 0
    total_price: Decimal = Decimal("0")
    # Estimate only, redrawn on every read
    co2_estimate: int = 0


class PurchaseView(BaseModel):
    id: int
    purchased_at: datetime
    product: ProductView
    co2_saved: int


class CheckoutResult(BaseModel):
    purchases: list[PurchaseView] = []
    total_price: Decimal = Decimal("0")
    total_co2_saved: int = 0


class ReviewView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    buyer_id: str
    seller_id: str
    product_id: int
    rating: int
    review_text: str | None = None
    created_at: datetime | None = None


class SellerRating(BaseModel):
    # 0.0 with count 0 means "no rating yet"
    average: float = 0.0
    count: int = 0


class ProfileStats(BaseModel):
    total_sales: int = 0
    total_purchases: int = 0
    avg_rating: float = 0.0
    total_reviews: int = 0
    co2_saved: int = 0
    badge: str | None = None


class ProfileView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str | None = None
    created_at: datetime | None = None
