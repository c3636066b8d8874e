"""Read-only lookups the virtual barista performs against the store.

Every row is converted into a pydantic record so callers never see ORM objects
or loosely shaped dictionaries.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from .models import MenuItem, Order, Profile
from ..schemas.io_models import MenuItemRecord, OrderItemRecord, OrderRecord, ProfileRecord


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive timestamps; they are stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StoreRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        profile = self.db.get(Profile, user_id)
        if profile is None:
            return None
        return ProfileRecord(
            id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            favorite_product=profile.favorite_product,
        )

    def get_order_rows(self, user_id: str) -> List[Order]:
        """Orders with their items, newest first."""
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def get_orders(self, user_id: str) -> List[OrderRecord]:
        orders = self.get_order_rows(user_id)
        return [
            OrderRecord(
                id=order.id,
                created_at=as_utc(order.created_at),
                total_amount=order.total_amount,
                items=[
                    OrderItemRecord(product_name=i.product_name, quantity=i.quantity, price=i.price)
                    for i in order.items
                ],
            )
            for order in orders
        ]

    def get_menu(self) -> List[MenuItemRecord]:
        items = self.db.query(MenuItem).order_by(MenuItem.category, MenuItem.id).all()
        return [
            MenuItemRecord(name=i.name, price=i.price, category=i.category, description=i.description)
            for i in items
        ]
