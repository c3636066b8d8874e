#!/usr/bin/env python3
"""
Generation client tests

PURPOSE:
    Checks the chat-completion request and how provider failures surface.
"""

import unittest
from unittest.mock import MagicMock, patch

import requests

from brewbarn.app.config import Config, ConfigurationError
from brewbarn.app.generate import CompletionError, GenerationClient

MESSAGES = [{"role": "system", "content": "be nice"}, {"role": "user", "content": "hi"}]


def fake_response(status=200, payload=None, text=""):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.text = text
    response.json.return_value = payload
    return response


class TestGenerationClient(unittest.TestCase):

    def setUp(self):
        self.http = MagicMock()
        self.client = GenerationClient(session=self.http)

    def test_sends_openai_payload(self):
        self.http.post.return_value = fake_response(
            payload={"choices": [{"message": {"content": "Try a Mocha!"}}]})
        self.assertEqual(self.client.generate_reply(MESSAGES), "Try a Mocha!")

        url = self.http.post.call_args.args[0]
        kwargs = self.http.post.call_args.kwargs
        self.assertTrue(url.endswith("/chat/completions"))
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer test-key")
        self.assertEqual(kwargs["json"]["model"], "gpt-4o-mini")
        self.assertEqual(kwargs["json"]["temperature"], 0.7)
        self.assertEqual(kwargs["json"]["max_tokens"], 500)
        self.assertEqual(kwargs["json"]["messages"], MESSAGES)

    def test_provider_error_text_is_kept(self):
        self.http.post.return_value = fake_response(status=429, text="rate limit reached")
        with self.assertRaises(CompletionError) as ctx:
            self.client.generate_reply(MESSAGES)
        self.assertIn("rate limit reached", str(ctx.exception))

    def test_malformed_body(self):
        self.http.post.return_value = fake_response(payload={"choices": []})
        with self.assertRaises(CompletionError):
            self.client.generate_reply(MESSAGES)

    def test_network_failure(self):
        self.http.post.side_effect = requests.exceptions.ConnectionError("down")
        with self.assertRaises(CompletionError):
            self.client.generate_reply(MESSAGES)

    def test_missing_key(self):
        with patch.object(Config, "OPENAI_API_KEY", None):
            with self.assertRaises(ConfigurationError):
                GenerationClient(session=self.http)


if __name__ == '__main__':
    unittest.main()
