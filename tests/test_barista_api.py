#!/usr/bin/env python3
"""
Virtual barista endpoint tests

PURPOSE:
    Drives POST /virtual-barista end to end against an in-memory database
    with the chat-completion client replaced by a stub.

TEST COVERAGE:
    - Successful replies with and without a surfaced discount
    - Error bodies for missing input, missing configuration and provider failures
    - Lookups that fail degrade instead of aborting
"""

import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from brewbarn.app import main
from brewbarn.app.config import Config
from brewbarn.app.generate import CompletionError
from brewbarn.data.repository import StoreRepository

from helpers import insert_order, reset_database


class StubClient:
    def __init__(self, reply="Try our Mocha!", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate_reply(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


class TestVirtualBaristaAPI(unittest.TestCase):

    def setUp(self):
        reset_database()
        self.client = TestClient(main.app)
        self.stub = StubClient()
        patcher = patch.object(main.controller, "client_factory", lambda: self.stub)
        patcher.start()
        self.addCleanup(patcher.stop)
        # guests never roll a discount unless they ask for one
        rng_patcher = patch.object(main.controller.discount_agent, "rng", MagicMock(random=lambda: 0.99))
        rng_patcher.start()
        self.addCleanup(rng_patcher.stop)

    def post(self, body):
        return self.client.post("/virtual-barista", json=body)

    def test_plain_reply(self):
        response = self.post({"message": "What do you recommend?"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"reply": "Try our Mocha!"})

        system = self.stub.calls[0][0]["content"]
        self.assertIn("Our current menu includes", system)
        self.assertIn("Caramel Latte ($4.95)", system)
        self.assertIn("Do NOT mention", system)

    def test_lapsed_customer_gets_structured_discount(self):
        insert_order("user-7", [("Caramel Latte", 2, 4.95)], days_ago=5)
        self.stub.reply = "We miss you! Enjoy 20% off your next Latte with code LATTE20."
        response = self.post({"message": "Hi there", "userId": "user-7"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "reply": "We miss you! Enjoy 20% off your next Latte with code LATTE20.",
            "discountCode": "LATTE20",
            "discountPercentage": 20,
            "expiryDays": 7,
            "productType": "Latte",
        })
        system = self.stub.calls[0][0]["content"]
        self.assertIn("hasn't ordered in 5 days", system)
        self.assertIn("ONLY to Latte drinks", system)

    def test_code_in_reply_ignored_when_not_eligible(self):
        insert_order("user-8", [("Mocha", 1, 4.95)], days_ago=1)
        self.stub.reply = "Here's 15% off with code MOCHA15!"
        response = self.post({"message": "hello", "userId": "user-8"})
        self.assertEqual(response.json(), {"reply": "Here's 15% off with code MOCHA15!"})

    def test_active_code_not_surfaced_again(self):
        self.stub.reply = "You still have LATTE15 for 15% off your next Latte."
        response = self.post({
            "message": "what discount codes do I have?",
            "activeCodes": [{"code": "LATTE15", "percentage": 15, "expiry": "2099-01-01T00:00:00Z",
                             "productType": "Latte"}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("discountCode", response.json())
        self.assertIn("LATTE15: 15% off on Latte", self.stub.calls[0][0]["content"])

    def test_chat_history_is_forwarded(self):
        history = [{"role": "user", "content": f"m{i}"} for i in range(12)]
        self.post({"message": "and now?", "chatHistory": history})
        messages = self.stub.calls[0]
        self.assertEqual(len(messages), 12)
        self.assertEqual(messages[1]["content"], "m2")

    def test_missing_message(self):
        response = self.post({"userId": "user-1"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "No message provided"})
        self.assertEqual(self.stub.calls, [])

    def test_body_that_is_not_json(self):
        response = self.client.post("/virtual-barista", content=b"not json",
                                    headers={"Content-Type": "application/json"})
        self.assertEqual(response.status_code, 500)
        self.assertIn("error", response.json())

    def test_missing_api_key(self):
        with patch.object(Config, "OPENAI_API_KEY", None):
            response = self.post({"message": "hi"})
        self.assertEqual(response.status_code, 500)
        self.assertIn("OPENAI_API_KEY", response.json()["error"])

    def test_provider_failure(self):
        self.stub.error = CompletionError("OpenAI API error: model overloaded")
        response = self.post({"message": "hi"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "OpenAI API error: model overloaded"})

    def test_lookup_failures_degrade(self):
        boom = OperationalError("SELECT", {}, Exception("db down"))
        with patch.object(StoreRepository, "get_orders", side_effect=boom), \
                patch.object(StoreRepository, "get_menu", side_effect=boom), \
                patch.object(StoreRepository, "get_profile", side_effect=boom):
            response = self.post({"message": "hi", "userId": "user-9"})
        self.assertEqual(response.status_code, 200)
        system = self.stub.calls[0][0]["content"]
        self.assertNotIn("Our current menu includes", system)
        # no orders found counts as a new customer
        self.assertIn("first-time customer discount", system)


if __name__ == '__main__':
    unittest.main()
