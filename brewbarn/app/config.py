#!/usr/bin/env python3
"""
Configuration management for the Brew Barn backend.
"""

import os
from dotenv import load_dotenv

from ..utils.logger import get_logger, set_level

# Load environment variables from .env file
load_dotenv()

logger = get_logger()

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "brewbarn.db")


class ConfigurationError(Exception):
    """Raised when a required setting is missing."""


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Configuration class for the application."""

    # Chat completion (OpenAI-compatible) configuration
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", 0.7))
    OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", 500))
    OPENAI_TIMEOUT = int(os.getenv("OPENAI_TIMEOUT", 60))

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.abspath(DEFAULT_DB_PATH)}")

    # Redis Configuration (guest carts)
    USE_REDIS = _flag("USE_REDIS", "true")
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB = int(os.getenv("REDIS_DB", 0))
    GUEST_CART_TTL_SECONDS = int(os.getenv("GUEST_CART_TTL_SECONDS", 7 * 24 * 3600))

    # E-mail (Resend) Configuration
    RESEND_API_KEY = os.getenv("RESEND_API_KEY")
    RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "The Brew Barn <hello@brewbarn.example>")
    SITE_URL = os.getenv("SITE_URL", "http://localhost:5173")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Application Configuration
    MAX_CHAT_HISTORY = 10
    DISCOUNT_EXPIRY_DAYS = 7
    MAX_DISCOUNT_PERCENTAGE = 25
    LEADERBOARD_SIZE = 10

    @classmethod
    def debug_print(cls):
        logger.info(f"[CONFIG] OPENAI_MODEL={cls.OPENAI_MODEL} set={bool(cls.OPENAI_API_KEY)}")
        logger.info(f"[CONFIG] DATABASE_URL={cls.DATABASE_URL}")
        logger.info(f"[CONFIG] USE_REDIS={cls.USE_REDIS} host={cls.REDIS_HOST}:{cls.REDIS_PORT}")
        logger.info(f"[CONFIG] RESEND set={bool(cls.RESEND_API_KEY)}")
        logger.info(f"[CONFIG] LOG_LEVEL={cls.LOG_LEVEL}")

    @classmethod
    def validate(cls):
        """Validate that the assistant's required configuration is present."""
        missing = []

        if not cls.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")
        if not cls.OPENAI_MODEL:
            missing.append("OPENAI_MODEL")

        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

        return True


set_level(Config.LOG_LEVEL)
