#!/usr/bin/env python3
"""
Generation module for the virtual barista.

This module handles reply generation through an OpenAI-compatible
chat-completions endpoint.
"""

import requests
from typing import Any, Dict, List

from .config import Config
from ..utils.logger import get_logger

logger = get_logger()


class CompletionError(Exception):
    """The chat-completion provider failed or answered with something unusable."""


class GenerationClient:
    """Client for generating replies with a chat-completion API."""

    def __init__(self, session: requests.Session = None):
        """Initialize the generation client. Raises ConfigurationError without a key."""
        Config.validate()
        self.api_key = Config.OPENAI_API_KEY
        self.llm_model = Config.OPENAI_MODEL
        self.api_url = f"{Config.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
        self.http = session or requests.Session()

    def generate_reply(self, messages: List[Dict[str, Any]]) -> str:
        """
        Generate a reply for the given chat messages.

        Args:
            messages: system, history and user messages in chat-completion format

        Returns:
            Generated reply text
        """
        payload = {
            "model": self.llm_model,
            "messages": messages,
            "temperature": Config.OPENAI_TEMPERATURE,
            "max_tokens": Config.OPENAI_MAX_TOKENS,
        }
        logger.info(f"[BARISTA] Sending {len(messages)} messages to {self.llm_model}, "
                    f"system prompt length: {len(messages[0]['content']) if messages else 0}")

        try:
            response = self.http.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=Config.OPENAI_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            raise CompletionError(f"Chat completion request failed: {e}") from e

        if not response.ok:
            logger.error(f"[BARISTA] Provider error {response.status_code}: {response.text}")
            raise CompletionError(f"OpenAI API error: {response.text}")

        try:
            data = response.json()
            reply = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionError("Invalid response format from OpenAI API") from e
        if reply is None:
            raise CompletionError("Invalid response format from OpenAI API")

        logger.info(f"[BARISTA] Reply received, length: {len(reply)}")
        return reply
