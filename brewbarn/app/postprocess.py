#!/usr/bin/env python3
"""
Postprocessing module for the virtual barista.

This module turns the raw LLM reply into the API response and picks out any
discount code the barista handed out so the client can keep track of it.
"""

import re
from typing import List, Optional

from .config import Config
from ..agents.discount_agent import DiscountDecision
from ..nlu.entity_extractor import ProductTypeExtractor
from ..nlu.rules import mentions_discount
from ..schemas.io_models import ActiveCode, BaristaResponse, DiscountOffer
from ..utils.logger import get_logger

logger = get_logger()

# 4-15 upper-case letters/digits with at least one of each, e.g. LATTE15, MISSYOU20
CODE_RE = re.compile(r"\b(?=[A-Z0-9]*[A-Z])(?=[A-Z0-9]*[0-9])[A-Z0-9]{4,15}\b")
PERCENT_RE = re.compile(r"(\d{1,3})\s?%")
CODE_DIGITS_RE = re.compile(r"(\d+)$")


class Postprocessor:
    """Postprocesses LLM replies for the virtual barista."""

    def __init__(self):
        """Initialize the postprocessor."""
        self.products = ProductTypeExtractor()

    def format_response(self, response: str) -> str:
        # Keep line breaks; the widget renders markdown lists.
        lines = [line.rstrip() for line in response.strip().splitlines()]
        return re.sub(r"\n{3,}", "\n\n", "\n".join(lines))

    def _find_new_code(self, reply: str, active_codes: List[ActiveCode]) -> Optional[re.Match]:
        active = {c.code.upper() for c in active_codes}
        for match in CODE_RE.finditer(reply):
            if match.group(0) not in active:
                return match
        return None

    def _find_percentage(self, reply: str, code_match) -> Optional[int]:
        """First N% after the code, else the code's trailing digits when in range, else the first N%."""
        m = PERCENT_RE.search(reply, code_match.end())
        if m:
            return int(m.group(1))
        digits = CODE_DIGITS_RE.search(code_match.group(0))
        if digits and 0 < int(digits.group(1)) <= Config.MAX_DISCOUNT_PERCENTAGE:
            return int(digits.group(1))
        m = PERCENT_RE.search(reply)
        return int(m.group(1)) if m else None

    def extract_discount(self, reply: str, eligible: bool,
                         active_codes: List[ActiveCode]) -> Optional[DiscountOffer]:
        """
        Return the discount offered in the reply, if it should be surfaced.

        Args:
            reply: Raw LLM reply
            eligible: Whether this request was allowed to carry a discount
            active_codes: Codes the client already tracks

        Returns:
            DiscountOffer or None
        """
        if not eligible or not mentions_discount(reply):
            return None
        match = self._find_new_code(reply, active_codes)
        if match is None:
            return None
        percentage = self._find_percentage(reply, match)
        if percentage is None or not 0 < percentage <= Config.MAX_DISCOUNT_PERCENTAGE:
            logger.info(f"[BARISTA] Ignoring code {match.group(0)} with percentage {percentage}")
            return None
        code = match.group(0)
        product_type = self.products.from_scope_phrase(reply) or self.products.from_code(code)
        logger.info(f"[BARISTA] Detected new discount code: {code} for {percentage}% off "
                    f"(product_type={product_type})")
        return DiscountOffer(code=code, percentage=percentage,
                             expiry_days=Config.DISCOUNT_EXPIRY_DAYS, product_type=product_type)

    def process_response(self, reply: str, decision: DiscountDecision,
                         active_codes: List[ActiveCode]) -> BaristaResponse:
        """
        Process the complete reply with formatting and discount extraction.
        """
        formatted = self.format_response(reply)
        offer = self.extract_discount(formatted, decision.eligible, active_codes)
        if offer is None:
            return BaristaResponse(reply=formatted)
        return BaristaResponse(
            reply=formatted,
            discount_code=offer.code,
            discount_percentage=offer.percentage,
            expiry_days=offer.expiry_days,
            product_type=offer.product_type,
        )
