from sqlalchemy import (Boolean, Column, Integer, String, Float, DateTime, ForeignKey, Enum,
                        UniqueConstraint)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base
import enum

class OrderStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    cancelled = "cancelled"

class AddonType(str, enum.Enum):
    flavor = "flavor"
    topping = "topping"

class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    category = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    product_name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    size = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=True)  # None for guest orders
    total_amount = Column(Float, nullable=False)
    discount_code = Column(String, nullable=True)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.pending)
    # Guest contact details
    guest_name = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    guest_address = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_name = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    size = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)  # same as the user id
    email = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    birthdate = Column(String, nullable=True)
    favorite_product = Column(String, nullable=True)
    show_on_leaderboard = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Reward(Base):
    __tablename__ = "rewards"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)
    points = Column(Integer, nullable=False, default=0)
    tier = Column(String, nullable=False, default="Bronze")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class CustomDrink(Base):
    __tablename__ = "custom_drinks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    base_drink = Column(String, nullable=False)
    milk_type = Column(String, nullable=False)
    sweetness_level = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    addons = relationship("DrinkAddon", back_populates="drink", cascade="all, delete-orphan",
                          order_by="DrinkAddon.id")

class DrinkAddon(Base):
    __tablename__ = "drink_addons"

    id = Column(Integer, primary_key=True, index=True)
    custom_drink_id = Column(Integer, ForeignKey("custom_drinks.id"), nullable=False)
    addon_type = Column(Enum(AddonType), nullable=False)
    addon_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    drink = relationship("CustomDrink", back_populates="addons")

class ProductReview(Base):
    __tablename__ = "product_reviews"
    __table_args__ = (UniqueConstraint("user_id", "product_name", name="uq_review_user_product"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    product_name = Column(String, index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)
