"""Cart and checkout for signed-in customers and guests."""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from .config import Config
from .errors import EmptyCartError, NotFoundError, ValidationFailure
from .rewards import RewardService
from .session import GuestCartStore
from ..data.menu_store import MenuStore
from ..data.models import CartItem, Order, OrderItem, OrderStatus, Profile
from ..nlu.entity_extractor import ProductTypeExtractor
from ..schemas.io_models import ActiveCode
from ..utils.logger import get_logger

logger = get_logger()

GUEST_REQUIRED_FIELDS = ["first_name", "last_name", "email", "phone", "address", "city", "state", "zip_code"]

_products = ProductTypeExtractor()


def cart_total(items: Iterable) -> float:
    """Sum of price * quantity over dicts or rows, rounded to cents."""
    total = 0.0
    for item in items:
        price = item["price"] if isinstance(item, dict) else item.price
        quantity = item["quantity"] if isinstance(item, dict) else item.quantity
        total += price * quantity
    return round(total, 2)


def apply_discount(items: List[Dict], discount: Optional[ActiveCode],
                   now: Optional[datetime] = None) -> Tuple[float, bool, Optional[str]]:
    """
    Apply a client-held discount to cart lines.

    Returns (total, applied, note). Expired codes, percentages outside
    1..MAX_DISCOUNT_PERCENTAGE and codes whose product type matches nothing in
    the cart leave the total unchanged.
    """
    total = cart_total(items)
    if discount is None:
        return total, False, None
    now = now or datetime.now(timezone.utc)
    expiry = discount.expiry if discount.expiry.tzinfo else discount.expiry.replace(tzinfo=timezone.utc)
    if expiry < now:
        return total, False, f"Code {discount.code} has expired"
    if not 0 < discount.percentage <= Config.MAX_DISCOUNT_PERCENTAGE:
        logger.warning(f"[CHECKOUT] Rejected code {discount.code} at {discount.percentage}%")
        return total, False, f"Code {discount.code} is not a valid discount"

    if discount.product_type:
        eligible = [i for i in items if _products.from_item_name(i["product_name"]) == discount.product_type]
    else:
        eligible = items
    if not eligible:
        return total, False, f"Code {discount.code} only applies to {discount.product_type}"

    reduction = cart_total(eligible) * discount.percentage / 100
    return max(0.0, round(total - reduction, 2)), True, f"{discount.percentage}% off with {discount.code}"


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.menu = MenuStore(db)

    def resolve_product(self, product_name: str):
        item, score = self.menu.find_best_match(product_name)
        if item is None:
            candidates = self.menu.whole_word_matches(product_name)
            if len(candidates) > 1:
                raise ValidationFailure(f"'{product_name}' matches several items: "
                                        f"{', '.join(c.name for c in candidates)}")
            raise NotFoundError(f"'{product_name}' is not on the menu")
        return item

    def list_items(self, user_id: str) -> List[CartItem]:
        return (self.db.query(CartItem).filter(CartItem.user_id == user_id)
                .order_by(CartItem.id).all())

    def profile_incomplete(self, user_id: str) -> bool:
        profile = self.db.get(Profile, user_id)
        return profile is None or not (profile.full_name or "").strip()

    def add_item(self, user_id: str, product_name: str, quantity: int = 1,
                 size: Optional[str] = None) -> CartItem:
        menu_item = self.resolve_product(product_name)
        item = CartItem(user_id=user_id, product_name=menu_item.name, price=menu_item.price,
                        quantity=quantity, size=size)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"[CART] {user_id} added {quantity} x {menu_item.name}")
        return item

    def _get_owned(self, user_id: str, item_id: int) -> CartItem:
        item = self.db.get(CartItem, item_id)
        if item is None or item.user_id != user_id:
            raise NotFoundError("Item not found")
        return item

    def update_quantity(self, user_id: str, item_id: int, quantity: int) -> CartItem:
        item = self._get_owned(user_id, item_id)
        item.quantity = max(1, quantity)
        self.db.commit()
        self.db.refresh(item)
        return item

    def remove_item(self, user_id: str, item_id: int):
        item = self._get_owned(user_id, item_id)
        self.db.delete(item)
        self.db.commit()

    def clear(self, user_id: str):
        self.db.query(CartItem).filter(CartItem.user_id == user_id).delete()
        self.db.commit()

    def _create_order(self, lines: List[Dict], total: float, user_id: Optional[str],
                      discount_code: Optional[str], **guest_fields) -> Order:
        order = Order(user_id=user_id, total_amount=total, discount_code=discount_code,
                      status=OrderStatus.completed, **guest_fields)
        for line in lines:
            order.items.append(OrderItem(product_name=line["product_name"], quantity=line["quantity"],
                                         price=line["price"], size=line.get("size")))
        self.db.add(order)
        self.db.flush()
        return order

    def checkout(self, user_id: str, discount: Optional[ActiveCode] = None) -> Dict:
        """Turn the cart into a completed order, clear it and award points."""
        rows = self.list_items(user_id)
        if not rows:
            raise EmptyCartError()
        lines = [{"product_name": r.product_name, "quantity": r.quantity, "price": r.price, "size": r.size}
                 for r in rows]
        total, applied, note = apply_discount(lines, discount)
        try:
            order = self._create_order(lines, total, user_id, discount.code if applied else None)
            for row in rows:
                self.db.delete(row)
            reward = RewardService(self.db).award(user_id, total)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(order)
        logger.info(f"[CHECKOUT] order {order.id} for {user_id}: ${total:.2f}, "
                    f"+{reward['points_earned']} pts ({reward['tier']})")
        return {"order": order, "reward": reward, "discount_applied": applied, "discount_note": note}

    def guest_checkout(self, store: GuestCartStore, guest_id: str, details: Dict,
                       discount: Optional[ActiveCode] = None) -> Dict:
        """Checkout for guests: contact details required, no reward points."""
        missing = [f for f in GUEST_REQUIRED_FIELDS if not (details.get(f) or "").strip()]
        if missing:
            raise ValidationFailure(f"Please fill in all required fields: {', '.join(missing)}")
        lines = store.get_items(guest_id)
        if not lines:
            raise EmptyCartError()
        total, applied, note = apply_discount(lines, discount)
        address = ", ".join(details[f] for f in ("address", "city", "state", "zip_code"))
        try:
            order = self._create_order(
                lines, total, None, discount.code if applied else None,
                guest_name=f"{details['first_name']} {details['last_name']}",
                guest_email=details["email"],
                guest_phone=details["phone"],
                guest_address=address,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        store.clear(guest_id)
        self.db.refresh(order)
        logger.info(f"[CHECKOUT] guest order {order.id}: ${total:.2f}")
        return {"order": order, "reward": None, "discount_applied": applied, "discount_note": note}
