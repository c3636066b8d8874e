"""Discount eligibility for the virtual barista.

Rules are checked in order and the first one that holds decides:

1. the customer asked for a discount (keyword in the message)
2. lapsed customer, latest order at least ``LAPSED_AFTER_DAYS`` old
3. loyal customer, at least ``LOYAL_ORDER_COUNT`` orders, 20% of the time
4. signed-in customer without any order
5. guest, 10% of the time

If none holds the barista is told not to mention discounts at all.
"""
import random
from typing import Optional

from pydantic import BaseModel

from .base_agent import BaseAgent
from .history_agent import HistoryAgent
from ..nlu.entity_extractor import ProductTypeExtractor
from ..nlu.rules import asks_for_discount
from ..schemas.io_models import AgentResult, CustomerContext
from ..utils.logger import get_logger

logger = get_logger()

LAPSED_AFTER_DAYS = 3
LOYAL_ORDER_COUNT = 5
LOYAL_OFFER_PROBABILITY = 0.2
GUEST_OFFER_PROBABILITY = 0.1


class DiscountDecision(BaseModel):
    eligible: bool
    reason: str
    min_percentage: Optional[int] = None
    max_percentage: Optional[int] = None
    product_type: Optional[str] = None
    days_since_last_order: Optional[int] = None


class DiscountAgent(BaseAgent):
    name = "discount"

    def __init__(self, rng: Optional[random.Random] = None, history: Optional[HistoryAgent] = None):
        self.rng = rng or random.Random()
        self.history = history or HistoryAgent()
        self.products = ProductTypeExtractor()

    def decide(self, message: str, customer: CustomerContext) -> DiscountDecision:
        facts = self.history.handle(message, customer).facts
        order_count = facts["order_count"]
        days = facts["days_since_last_order"]

        if asks_for_discount(message):
            decision = DiscountDecision(eligible=True, reason="requested", min_percentage=10, max_percentage=20)
        elif days is not None and days >= LAPSED_AFTER_DAYS:
            decision = DiscountDecision(eligible=True, reason="lapsed", min_percentage=20, max_percentage=25)
        elif order_count >= LOYAL_ORDER_COUNT and self.rng.random() < LOYAL_OFFER_PROBABILITY:
            decision = DiscountDecision(eligible=True, reason="loyal", min_percentage=10, max_percentage=15)
        elif order_count == 0 and not customer.is_guest:
            decision = DiscountDecision(eligible=True, reason="new_customer", min_percentage=15, max_percentage=15)
        elif customer.is_guest and self.rng.random() < GUEST_OFFER_PROBABILITY:
            decision = DiscountDecision(eligible=True, reason="guest", min_percentage=10, max_percentage=15)
        else:
            decision = DiscountDecision(eligible=False, reason="none")

        decision.days_since_last_order = days
        decision.product_type = (
            self.products.from_item_name(facts["top_item"])
            or self.products.from_text(message)
        )
        logger.info(f"[DISCOUNT] reason={decision.reason} eligible={decision.eligible} "
                    f"orders={order_count} days={days} product_type={decision.product_type}")
        return decision

    def handle(self, query: str, customer: CustomerContext) -> AgentResult:
        decision = self.decide(query, customer)
        return self._ok("discount_eligibility", decision.model_dump())
