"""Very small rule-based extractor for coffee product types."""
import re
from typing import Optional

from .rules import PRODUCT_TYPES

# "15% off your next Latte", "20% off any Cold Brew", "discount on a Mocha"
_SCOPE_PHRASE = re.compile(
    r"\b(?:off|on)\s+(?:your\s+|a\s+|any\s+|all\s+|one\s+)?(?:next\s+)?(?:\w+\s+)?("
    + "|".join(re.escape(p) for p in PRODUCT_TYPES)
    + r")s?\b",
    re.IGNORECASE,
)


def _canonical(found: str) -> str:
    for product_type in PRODUCT_TYPES:
        if product_type.lower() == found.lower():
            return product_type
    return found


class ProductTypeExtractor:
    def from_text(self, text: str) -> Optional[str]:
        """First product type mentioned anywhere in the text."""
        if not text:
            return None
        tl = text.lower()
        best = None
        for product_type in PRODUCT_TYPES:
            m = re.search(r"\b" + re.escape(product_type.lower()) + r"s?\b", tl)
            if m and (best is None or m.start() < best[0]):
                best = (m.start(), product_type)
        return best[1] if best else None

    def from_item_name(self, name: str) -> Optional[str]:
        """Product type contained in a menu item name, e.g. 'Caramel Latte' -> 'Latte'."""
        if not name:
            return None
        nl = name.lower()
        for product_type in PRODUCT_TYPES:
            if product_type.lower() in nl:
                return product_type
        return None

    def from_scope_phrase(self, reply: str) -> Optional[str]:
        m = _SCOPE_PHRASE.search(reply or "")
        return _canonical(m.group(1)) if m else None

    def from_code(self, code: str) -> Optional[str]:
        """Product type spelled inside a code, e.g. 'COLDBREW20' -> 'Cold Brew'."""
        squashed = (code or "").upper()
        for product_type in PRODUCT_TYPES:
            if product_type.replace(" ", "").upper() in squashed:
                return product_type
        return None
