#!/usr/bin/env python3
"""
Discount eligibility tests

PURPOSE:
    Checks the rule ladder the barista uses to decide whether a reply may
    carry a discount, and the product type the offer gets scoped to.

TEST COVERAGE:
    - Explicit requests, lapsed, loyal, new and guest customers
    - The three-day boundary
    - Probability rolls with a stubbed random source
    - Product scoping from favourites and from the message

USAGE:
    Run from project root: python -m pytest tests/test_discount_agent.py -v
"""

import unittest
from unittest.mock import Mock

from brewbarn.agents.discount_agent import DiscountAgent
from brewbarn.agents.history_agent import HistoryAgent, favorite_items
from brewbarn.schemas.io_models import CustomerContext

from helpers import NOW, customer, order_record


def make_agent(roll: float = 0.99) -> DiscountAgent:
    rng = Mock()
    rng.random.return_value = roll
    return DiscountAgent(rng=rng, history=HistoryAgent(clock=lambda: NOW))


class TestDiscountEligibility(unittest.TestCase):

    def test_order_exactly_three_days_old_is_lapsed(self):
        decision = make_agent().decide("What's good today?", customer(orders=[order_record(3)]))
        self.assertTrue(decision.eligible)
        self.assertEqual(decision.reason, "lapsed")
        self.assertEqual((decision.min_percentage, decision.max_percentage), (20, 25))
        self.assertEqual(decision.days_since_last_order, 3)

    def test_two_day_old_order_without_keyword_is_not_eligible(self):
        orders = [order_record(2, order_id=1), order_record(10, order_id=2)]
        decision = make_agent(roll=0.0).decide("What's good today?", customer(orders=orders))
        self.assertFalse(decision.eligible)
        self.assertEqual(decision.reason, "none")

    def test_just_under_three_days_rounds_down(self):
        decision = make_agent().decide("hello", customer(orders=[order_record(2.99)]))
        self.assertFalse(decision.eligible)
        self.assertEqual(decision.days_since_last_order, 2)

    def test_promo_code_request_forces_eligibility(self):
        orders = [order_record(0.5)]
        decision = make_agent().decide("Do you have a promo code for me?", customer(orders=orders))
        self.assertTrue(decision.eligible)
        self.assertEqual(decision.reason, "requested")

    def test_keyword_match_is_case_insensitive(self):
        decision = make_agent().decide("Any DEALS this week?", customer(orders=[order_record(1)]))
        self.assertTrue(decision.eligible)

    def test_loyal_customer_wins_the_roll(self):
        orders = [order_record(1, order_id=i) for i in range(5)]
        decision = make_agent(roll=0.1).decide("hi", customer(orders=orders))
        self.assertTrue(decision.eligible)
        self.assertEqual(decision.reason, "loyal")
        self.assertEqual((decision.min_percentage, decision.max_percentage), (10, 15))

    def test_loyal_customer_loses_the_roll(self):
        orders = [order_record(1, order_id=i) for i in range(5)]
        decision = make_agent(roll=0.2).decide("hi", customer(orders=orders))
        self.assertFalse(decision.eligible)

    def test_four_orders_is_not_loyal(self):
        orders = [order_record(1, order_id=i) for i in range(4)]
        decision = make_agent(roll=0.0).decide("hi", customer(orders=orders))
        self.assertFalse(decision.eligible)

    def test_new_signed_in_customer_gets_fifteen_percent(self):
        decision = make_agent().decide("hi", customer(orders=[]))
        self.assertTrue(decision.eligible)
        self.assertEqual(decision.reason, "new_customer")
        self.assertEqual((decision.min_percentage, decision.max_percentage), (15, 15))

    def test_guest_rolls_ten_percent(self):
        self.assertTrue(make_agent(roll=0.05).decide("hi", CustomerContext()).eligible)
        self.assertFalse(make_agent(roll=0.5).decide("hi", CustomerContext()).eligible)

    def test_guest_asking_for_coupon_is_eligible(self):
        decision = make_agent(roll=0.99).decide("got a coupon?", CustomerContext())
        self.assertTrue(decision.eligible)
        self.assertEqual(decision.reason, "requested")


class TestProductScoping(unittest.TestCase):

    def test_scoped_to_favourite_item_type(self):
        orders = [order_record(4, items=[("Caramel Latte", 3), ("Mocha", 1)])]
        decision = make_agent().decide("hi", customer(orders=orders))
        self.assertEqual(decision.product_type, "Latte")

    def test_scoped_to_type_mentioned_in_message(self):
        decision = make_agent().decide("any discount on cold brew?", customer(orders=[]))
        self.assertEqual(decision.product_type, "Cold Brew")

    def test_favourite_without_type_falls_back_to_message(self):
        orders = [order_record(4, items=[("Butter Croissant", 2)])]
        decision = make_agent().decide("I fancy a mocha", customer(orders=orders))
        self.assertEqual(decision.product_type, "Mocha")

    def test_no_product_type(self):
        orders = [order_record(4, items=[("Butter Croissant", 2)])]
        decision = make_agent().decide("hello", customer(orders=orders))
        self.assertIsNone(decision.product_type)


class TestHistory(unittest.TestCase):

    def test_favourites_sum_quantities_across_orders(self):
        orders = [
            order_record(1, items=[("Mocha", 1), ("Americano", 2)], order_id=1),
            order_record(2, items=[("Mocha", 2)], order_id=2),
        ]
        self.assertEqual(favorite_items(orders), [("Mocha", 3), ("Americano", 2)])

    def test_history_facts(self):
        agent = HistoryAgent(clock=lambda: NOW)
        result = agent.handle("", customer(orders=[order_record(5, order_id=1), order_record(1, order_id=2)]))
        self.assertEqual(result.facts["order_count"], 2)
        self.assertEqual(result.facts["days_since_last_order"], 1)
        self.assertEqual(result.facts["top_item"], "Caramel Latte")


if __name__ == '__main__':
    unittest.main()
