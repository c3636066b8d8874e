"""Storefront request/response models with stricter types.

- Use Enum for drink options to prevent invalid values.
- Use datetime for timestamps so ISO strings are parsed.
"""
from enum import Enum
from datetime import datetime
from pydantic import Field, field_validator
from typing import List, Optional

from .io_models import ActiveCode, CamelModel


class BaseDrink(str, Enum):
    espresso = "espresso"
    tea = "tea"
    matcha = "matcha"

class MilkType(str, Enum):
    whole = "whole"
    oat = "oat"
    almond = "almond"
    soy = "soy"

class NotificationType(str, Enum):
    tier_upgrade = "tier_upgrade"
    points_reminder = "points_reminder"
    reward_available = "reward_available"


class MenuItemOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category: str
    image_url: Optional[str] = None
    average_rating: float = 0.0
    review_count: int = 0


class CartItemCreate(CamelModel):
    product_name: str
    quantity: int = Field(default=1, ge=1)
    size: Optional[str] = None

class CartItemUpdate(CamelModel):
    quantity: int

class CartItemOut(CamelModel):
    id: str
    product_name: str
    price: float
    quantity: int
    size: Optional[str] = None

class CartOut(CamelModel):
    items: List[CartItemOut]
    total: float
    profile_incomplete: bool = False


class CheckoutRequest(CamelModel):
    discount: Optional[ActiveCode] = None

class GuestCheckoutRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    discount: Optional[ActiveCode] = None

class OrderItemOut(CamelModel):
    product_name: str
    quantity: int
    price: float
    size: Optional[str] = None

class OrderOut(CamelModel):
    id: int
    total_amount: float
    status: str
    discount_code: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemOut] = Field(default_factory=list)


class RewardStatus(CamelModel):
    points: int
    tier: str
    next_tier: str
    progress: float

class RewardUpdate(CamelModel):
    points_earned: int
    points: int
    tier: str
    previous_tier: str
    upgraded: bool

class CheckoutResponse(CamelModel):
    order: OrderOut
    reward: Optional[RewardUpdate] = None
    discount_applied: bool = False
    discount_note: Optional[str] = None

class LeaderboardEntry(CamelModel):
    username: str
    points: int
    tier: str
    is_anonymous: bool


class CustomDrinkCreate(CamelModel):
    name: Optional[str] = None
    base_drink: BaseDrink = BaseDrink.espresso
    milk_type: MilkType = MilkType.whole
    sweetness_level: int = Field(default=50, ge=0, le=100)
    addons: List[str] = Field(default_factory=list)

    @field_validator("sweetness_level")
    @classmethod
    def sweetness_step(cls, v: int) -> int:
        if v % 10 != 0:
            raise ValueError("sweetness level moves in steps of 10")
        return v

class DrinkAddonOut(CamelModel):
    addon_type: str
    addon_name: str

class CustomDrinkOut(CamelModel):
    id: int
    name: str
    base_drink: str
    milk_type: str
    sweetness_level: int
    addons: List[DrinkAddonOut] = Field(default_factory=list)


class ReviewCreate(CamelModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None

class ReviewOut(CamelModel):
    id: int
    user_id: str
    reviewer_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

class ReviewSummary(CamelModel):
    product_name: str
    average_rating: float
    review_count: int
    reviews: List[ReviewOut]


class ProfileUpdate(CamelModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    birthdate: Optional[str] = None
    favorite_product: Optional[str] = None
    show_on_leaderboard: Optional[bool] = None

class ProfileOut(ProfileUpdate):
    id: str


class RewardNotificationRequest(CamelModel):
    user_id: str
    type: NotificationType
    new_tier: Optional[str] = None
    points: Optional[int] = None

class NotificationResult(CamelModel):
    sent: bool
    message: str
