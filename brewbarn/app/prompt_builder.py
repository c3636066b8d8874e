#!/usr/bin/env python3
"""
Prompt builder module for the virtual barista.

This module constructs the chat messages for the LLM from the menu, the
customer's history, their active codes and the discount decision.
"""

from collections import OrderedDict
from typing import Any, Dict, List, Optional

from .config import Config
from ..agents.discount_agent import DiscountDecision
from ..agents.history_agent import favorite_items
from ..nlu.rules import asks_for_discount
from ..schemas.io_models import ActiveCode, ChatTurn, CustomerContext, MenuItemRecord

SYSTEM_PROMPT = """You are a friendly and knowledgeable virtual barista at The Brew Barn coffee shop. Your role is to:
- Help customers choose drinks from our menu
- Answer questions about coffee and our offerings
- Share interesting coffee facts and occasional coffee-related jokes
- Keep responses concise and friendly

PERSONALIZATION:
- If the customer has purchase history, recommend items similar to what they enjoy
- Suggest complementary products to what they usually buy
- Only recommend items that appear on our current menu

DISCOUNT CODES:
- The customer may already have active discount codes; list them when asked
- Only create a new discount when the DISCOUNT GUIDANCE section below allows it
- A new code must be UNIQUE and follow the format [ITEM][PERCENTAGE] (e.g. LATTE15 for 15% off a latte)
- Always state the percentage, the code and that it is valid for one week

Always maintain a warm, welcoming tone while being informative and helpful."""

DISCOUNT_REASONS = {
    "requested": "The customer is asking about discounts.",
    "lapsed": "This customer hasn't ordered in {days} days. Offer a \"We miss you\" discount.",
    "loyal": "This is a loyal regular customer. Offer a \"Thanks for being a regular!\" discount.",
    "new_customer": "This customer has an account but hasn't ordered yet. Offer a first-time customer discount.",
    "guest": "This is a guest visitor. Offer a welcome discount.",
}


class PromptBuilder:
    """Builds chat messages for the LLM with menu, history and discount guidance."""

    def __init__(self, system_prompt: str = SYSTEM_PROMPT):
        """Initialize the prompt builder."""
        self.system_prompt = system_prompt

    def format_menu(self, menu: List[MenuItemRecord]) -> str:
        if not menu:
            return ""
        by_category: "OrderedDict[str, List[MenuItemRecord]]" = OrderedDict()
        for item in menu:
            by_category.setdefault(item.category, []).append(item)

        text = "\n\nOur current menu includes:\n"
        for category, items in by_category.items():
            text += f"\n{category.upper()}:\n"
            for item in items:
                text += f"- {item.name} (${item.price:.2f})"
                if item.description:
                    text += f": {item.description}"
                text += "\n"
        return text

    def format_history(self, customer: CustomerContext) -> str:
        if customer.orders:
            text = "\n\nThis customer has the following order history:\n"
            for index, order in enumerate(customer.orders, 1):
                text += f"Order #{index} ({order.created_at.date().isoformat()}):\n"
                for item in order.items:
                    text += f"- {item.product_name} x{item.quantity} (${item.price:.2f})\n"
            favorites = favorite_items(customer.orders)
            if favorites:
                listed = ", ".join(f"{name} (ordered {count} times)" for name, count in favorites)
                text += f"\nThe customer's favorite items appear to be: {listed}.\n"
            return text
        if customer.user_id:
            return "\n\nThis customer is logged in but hasn't made any purchases yet."
        return "\n\nThis is a guest user. Offer general recommendations."

    def format_profile(self, customer: CustomerContext) -> str:
        if customer.profile is None or not customer.profile.full_name:
            return ""
        return (f"\n\nThis customer's name is {customer.profile.full_name}.\n"
                "Use their name in your responses to make it more personalized.")

    def format_active_codes(self, active_codes: List[ActiveCode], message: str) -> str:
        if not active_codes:
            return ""
        text = "\n\nThe customer currently has the following active discount codes:\n"
        for code in active_codes:
            text += f"- {code.code}: {code.percentage}% off"
            if code.product_type:
                text += f" on {code.product_type}"
            text += f", valid until {code.expiry.date().isoformat()}\n"
        if asks_for_discount(message):
            text += "\nIf the user is asking about their discount codes, provide this list of active codes."
        return text

    def format_discount_guidance(self, decision: DiscountDecision) -> str:
        text = "\n\nDISCOUNT GUIDANCE:\n"
        if not decision.eligible:
            return text + ("Do NOT mention, offer or invent any discount, coupon or promo code in this reply. "
                           "Existing active codes may still be listed if the customer asks for them.")

        reason = DISCOUNT_REASONS.get(decision.reason, "")
        text += reason.format(days=decision.days_since_last_order) + "\n"
        if decision.min_percentage == decision.max_percentage:
            text += f"Offer exactly {decision.min_percentage}% off."
        else:
            text += f"Offer between {decision.min_percentage}% and {decision.max_percentage}% off."
        text += f" Never exceed {Config.MAX_DISCOUNT_PERCENTAGE}%."
        if decision.product_type:
            text += (f"\nThe discount must apply ONLY to {decision.product_type} drinks; "
                     f"say so explicitly (e.g. \"off your next {decision.product_type}\").")
        return text

    def build_system_prompt(self, menu: List[MenuItemRecord], customer: CustomerContext,
                            active_codes: List[ActiveCode], decision: DiscountDecision,
                            message: str) -> str:
        return (
            self.system_prompt
            + self.format_menu(menu)
            + self.format_history(customer)
            + self.format_profile(customer)
            + self.format_active_codes(active_codes, message)
            + self.format_discount_guidance(decision)
        )

    def trim_history(self, chat_history: Optional[List[ChatTurn]]) -> List[Dict[str, str]]:
        """Keep the most recent turns; anything that isn't the user is the assistant."""
        turns = [
            {"role": "user" if turn.role == "user" else "assistant", "content": turn.content}
            for turn in (chat_history or [])
        ]
        return turns[-Config.MAX_CHAT_HISTORY:]

    def build_messages(self, message: str, menu: List[MenuItemRecord], customer: CustomerContext,
                       active_codes: List[ActiveCode], chat_history: List[ChatTurn],
                       decision: DiscountDecision) -> List[Dict[str, Any]]:
        system = self.build_system_prompt(menu, customer, active_codes, decision, message)
        return (
            [{"role": "system", "content": system}]
            + self.trim_history(chat_history)
            + [{"role": "user", "content": message}]
        )
