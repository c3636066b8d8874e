"""Shared fixtures for the test suite."""
from datetime import datetime, timedelta, timezone

from brewbarn.data.database import SessionLocal, create_tables, drop_tables
from brewbarn.data.models import Order, OrderItem, OrderStatus
from brewbarn.data.populate_db import populate_menu
from brewbarn.schemas.io_models import CustomerContext, OrderItemRecord, OrderRecord

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def reset_database(seed_menu: bool = True):
    drop_tables()
    create_tables()
    if seed_menu:
        populate_menu()


def order_record(days_ago: float, items=(("Caramel Latte", 1),), order_id: int = 1) -> OrderRecord:
    return OrderRecord(
        id=order_id,
        created_at=NOW - timedelta(days=days_ago),
        total_amount=4.95,
        items=[OrderItemRecord(product_name=name, quantity=qty, price=4.95) for name, qty in items],
    )


def customer(user_id="user-1", orders=()) -> CustomerContext:
    return CustomerContext(user_id=user_id, orders=list(orders))


def insert_order(user_id, items, days_ago=0.0, now=None):
    """Insert a completed order directly; items are (name, quantity, price)."""
    now = now or datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        order = Order(user_id=user_id, status=OrderStatus.completed,
                      total_amount=sum(q * p for _, q, p in items),
                      created_at=(now - timedelta(days=days_ago)).replace(tzinfo=None))
        for name, quantity, price in items:
            order.items.append(OrderItem(product_name=name, quantity=quantity, price=price))
        db.add(order)
        db.commit()
        return order.id
    finally:
        db.close()
