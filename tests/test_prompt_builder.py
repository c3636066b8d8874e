#!/usr/bin/env python3
"""
Prompt assembly tests

PURPOSE:
    Checks the system prompt sections and the chat messages sent to the LLM.
"""

import unittest
from datetime import datetime, timezone

from brewbarn.agents.discount_agent import DiscountDecision
from brewbarn.app.prompt_builder import PromptBuilder
from brewbarn.schemas.io_models import (ActiveCode, ChatTurn, CustomerContext, MenuItemRecord,
                                        ProfileRecord)

from helpers import customer, order_record

MENU = [
    MenuItemRecord(name="Americano", price=3.5, category="Coffee", description="Smooth"),
    MenuItemRecord(name="Cold Brew", price=4.5, category="Cold Drinks"),
    MenuItemRecord(name="Mocha", price=4.95, category="Coffee"),
]
NOT_ELIGIBLE = DiscountDecision(eligible=False, reason="none")


class TestPromptBuilder(unittest.TestCase):

    def setUp(self):
        self.builder = PromptBuilder()

    def test_menu_grouped_by_category(self):
        text = self.builder.format_menu(MENU)
        self.assertIn("COFFEE:\n- Americano ($3.50): Smooth\n- Mocha ($4.95)\n", text)
        self.assertIn("COLD DRINKS:\n- Cold Brew ($4.50)\n", text)

    def test_empty_menu_adds_nothing(self):
        self.assertEqual(self.builder.format_menu([]), "")

    def test_history_lists_orders_and_favourites(self):
        orders = [order_record(1, items=[("Mocha", 2)], order_id=1),
                  order_record(4, items=[("Americano", 1)], order_id=2)]
        text = self.builder.format_history(customer(orders=orders))
        self.assertIn("Order #1", text)
        self.assertIn("- Mocha x2 ($4.95)", text)
        self.assertIn("favorite items appear to be: Mocha (ordered 2 times), Americano (ordered 1 times)", text)

    def test_history_for_new_and_guest_customers(self):
        self.assertIn("logged in but hasn't made any purchases", self.builder.format_history(customer()))
        self.assertIn("guest user", self.builder.format_history(CustomerContext()))

    def test_profile_name(self):
        ctx = CustomerContext(user_id="u", profile=ProfileRecord(id="u", full_name="Ada"))
        self.assertIn("name is Ada", self.builder.format_profile(ctx))
        self.assertEqual(self.builder.format_profile(customer()), "")

    def test_active_codes_listed_with_hint_when_asked(self):
        codes = [ActiveCode(code="LATTE15", percentage=15, product_type="Latte",
                            expiry=datetime(2025, 3, 17, tzinfo=timezone.utc))]
        text = self.builder.format_active_codes(codes, "what codes do I have?")
        self.assertIn("- LATTE15: 15% off on Latte, valid until 2025-03-17", text)
        self.assertIn("provide this list of active codes", text)
        self.assertNotIn("provide this list", self.builder.format_active_codes(codes, "hi"))

    def test_guidance_forbids_discounts_when_not_eligible(self):
        text = self.builder.format_discount_guidance(NOT_ELIGIBLE)
        self.assertIn("Do NOT mention", text)

    def test_guidance_for_lapsed_customer_scoped_to_product(self):
        decision = DiscountDecision(eligible=True, reason="lapsed", min_percentage=20, max_percentage=25,
                                    product_type="Latte", days_since_last_order=6)
        text = self.builder.format_discount_guidance(decision)
        self.assertIn("hasn't ordered in 6 days", text)
        self.assertIn("between 20% and 25% off", text)
        self.assertIn("ONLY to Latte drinks", text)

    def test_guidance_for_fixed_percentage(self):
        decision = DiscountDecision(eligible=True, reason="new_customer", min_percentage=15, max_percentage=15)
        self.assertIn("exactly 15% off", self.builder.format_discount_guidance(decision))

    def test_history_trimmed_to_last_ten_turns(self):
        history = [ChatTurn(role="user" if i % 2 == 0 else "bot", content=f"turn {i}") for i in range(14)]
        messages = self.builder.build_messages("latest", MENU, customer(), [], history, NOT_ELIGIBLE)
        self.assertEqual(len(messages), 12)
        self.assertEqual(messages[0]["role"], "system")
        self.assertEqual(messages[1], {"role": "user", "content": "turn 4"})
        self.assertEqual(messages[2], {"role": "assistant", "content": "turn 5"})
        self.assertEqual(messages[-1], {"role": "user", "content": "latest"})


if __name__ == '__main__':
    unittest.main()
