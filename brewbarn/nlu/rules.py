"""Keyword vocabularies used to read customer messages and barista replies."""
import re
from typing import List

# Any of these in a customer message counts as asking for a discount.
DISCOUNT_REQUEST = ["discount", "deal", "coupon", "promo", "offer", "code"]

# Any of these in a generated reply marks it as talking about a discount.
DISCOUNT_MENTION = ["discount", "off", "code"]

# Drink categories a discount can be scoped to, checked in this order.
PRODUCT_TYPES = ["Latte", "Cold Brew", "Espresso", "Tea", "Mocha", "Cappuccino", "Americano", "Macchiato"]


def _contains_any(text: str, vocab: List[str]) -> bool:
    tl = (text or "").lower()
    return any(word in tl for word in vocab)


def asks_for_discount(message: str) -> bool:
    return _contains_any(message, DISCOUNT_REQUEST)


def mentions_discount(reply: str) -> bool:
    # Whole words only: "off" must not match "coffee".
    words = re.findall(r"[a-z]+", (reply or "").lower())
    return any(w in DISCOUNT_MENTION or w in ("discounts", "discounted", "codes") for w in words)
