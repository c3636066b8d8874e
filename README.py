"""
BREW BARN - System Documentation
================================

This module-style README documents the architecture, components and
operational practices of the Brew Barn coffee-shop backend. It can be
imported to inspect sections or printed for human consumption.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.
- Import `README` in tools or scripts to surface sections.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Virtual Barista
4. Storefront
5. Data & Persistence
6. Configuration & Environment
7. Testing Strategy
8. Security & PII Handling
9. Troubleshooting

"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    Brew Barn is the backend of a coffee shop's online store. Besides the
    menu, cart and checkout it hosts a virtual barista: a chat endpoint that
    answers with an LLM and may hand out a personalised discount code that the
    client stores and redeems at checkout.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    - API: FastAPI app in `brewbarn/app/main.py`.
    - Barista pipeline: `Controller` -> `DiscountAgent` / `HistoryAgent` ->
      `PromptBuilder` -> `GenerationClient` -> `Postprocessor`.
    - Storefront services: cart, rewards, drinks, reviews, profiles, notifications.
    - Data: SQLAlchemy models in `brewbarn/data/models.py`, SQLite by default.
    - Guest carts: Redis when reachable, process memory otherwise.
    """,
)


VIRTUAL_BARISTA = section(
    "3. Virtual Barista",
    """
    POST /virtual-barista {message, userId?, activeCodes?, chatHistory?}
    - Profile, order history and menu are loaded; a failed lookup degrades to empty.
    - Discount ladder: asked for (10-20%), lapsed 3+ days (20-25%), loyal 5+ orders
      (20% chance, 10-15%), new account (15%), guest (10% chance, 10-15%).
    - The product type comes from the customer's favourite item, else the message.
    - The reply is scanned for a code like LATTE15; it is surfaced only when the
      customer was eligible, the code is new and the percentage is within 1-25.
    - Any failure answers 500 {"error": "..."}.
    """,
)


STOREFRONT = section(
    "4. Storefront",
    """
    - Signed-in calls carry `X-User-Id`; guest cart calls carry `X-Guest-Id`.
    - /menu, /cart, /checkout, /orders, /guest/cart, /guest/checkout
    - /rewards, /rewards/leaderboard (Bronze, Silver 100, Gold 500, Platinum 1000)
    - /custom-drinks, /reviews/{product}, /profile, /notifications/reward
    - Checkout accepts the client-held discount and awards loyalty points.
    """,
)


DATA_AND_PERSISTENCE = section(
    "5. Data & Persistence",
    """
    - Tables are created on startup and the menu is seeded from
      `brewbarn/data/raw/menu.csv` when empty (`python -m brewbarn.data.populate_db`).
    - Orders snapshot item names and prices; carts reference names, not ids.
    """,
)


CONFIG_ENV = section(
    "6. Configuration & Environment",
    """
    - `.env` is loaded by `brewbarn/app/config.py`.
    - Required for chat: OPENAI_API_KEY. Optional: OPENAI_MODEL, OPENAI_BASE_URL.
    - DATABASE_URL, USE_REDIS, REDIS_HOST/PORT/DB, RESEND_API_KEY, EMAIL_FROM, SITE_URL.
    """,
)


TESTING = section(
    "7. Testing Strategy",
    """
    - `pip install -e .[test]` then `pytest`.
    - Tests run against in-memory SQLite with the LLM client stubbed out.
    """,
)


SECURITY = section(
    "8. Security & PII Handling",
    """
    - E-mail addresses and phone numbers are masked in logs (`brewbarn/utils/security.py`).
    - Discount codes are never stored server-side; the client owns them.
    """,
)


TROUBLESHOOTING = section(
    "9. Troubleshooting",
    """
    - 500 "Missing required configuration": set OPENAI_API_KEY.
    - Guest carts vanish on restart: Redis is not reachable, memory fallback in use.
    - E-mails not sent: RESEND_API_KEY is unset; the API reports sent=false.
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            VIRTUAL_BARISTA,
            STOREFRONT,
            DATA_AND_PERSISTENCE,
            CONFIG_ENV,
            TESTING,
            SECURITY,
            TROUBLESHOOTING,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
