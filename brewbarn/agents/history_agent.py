"""Purchase-history analysis: favourites and recency."""
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from .base_agent import BaseAgent
from ..schemas.io_models import AgentResult, CustomerContext, OrderRecord

SECONDS_PER_DAY = 24 * 3600


def favorite_items(orders: List[OrderRecord], limit: int = 3) -> List[Tuple[str, int]]:
    """Most purchased product names by summed quantity; ties keep first-seen order."""
    counts = Counter()
    for order in orders:
        for item in order.items:
            counts[item.product_name] += item.quantity
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def days_since(moment: datetime, now: datetime) -> int:
    """Whole days elapsed, rounded down."""
    return int((now - moment).total_seconds() // SECONDS_PER_DAY)


class HistoryAgent(BaseAgent):
    name = "history"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, query: str, customer: CustomerContext) -> AgentResult:
        orders = customer.orders
        favorites = favorite_items(orders)
        last_days = None
        if orders:
            latest = max(o.created_at for o in orders)
            last_days = days_since(latest, self.clock())
        facts = {
            "order_count": len(orders),
            "days_since_last_order": last_days,
            "favorites": favorites,
            "top_item": favorites[0][0] if favorites else None,
        }
        return self._ok("purchase_history", facts)
