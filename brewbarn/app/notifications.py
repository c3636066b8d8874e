#!/usr/bin/env python3
"""
E-mail notifications for the storefront.

Welcome and reward e-mails are rendered here and delivered through the
Resend HTTP API.
"""

import requests
from typing import Dict, Optional

from .config import Config
from .rewards import TIERS_BY_NAME, next_tier, points_to_next_tier
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger()


class NotificationError(Exception):
    """The e-mail provider rejected the message."""


BASE_OPEN = ('<div style="font-family: \'Helvetica Neue\', Helvetica, Arial, sans-serif; max-width: 600px; '
             'margin: 0 auto; padding: 20px; background-color: #FAF7F2; border-radius: 8px;">')
BASE_CLOSE = "</div>"
BUTTON = ('<div style="text-align: center;"><a href="{href}" style="display: inline-block; '
          'background-color: #8B7355; color: #FFFFFF; text-decoration: none; padding: 12px 24px; '
          'border-radius: 4px; font-weight: 500;">{label}</a></div>')
HEADING = ('<h1 style="color: #8B7355; margin-bottom: 10px; font-size: 28px;">{text}</h1>')
PARAGRAPH = '<p style="color: #4A3C32; font-size: 16px; line-height: 1.6;">{text}</p>'


def tier_benefits_html(tier_name: str) -> str:
    tier = TIERS_BY_NAME.get(tier_name)
    if tier is None:
        return ""
    items = "".join(
        f'<li style="margin-bottom: 12px; padding: 12px; background-color: #FAF7F2; '
        f'border-radius: 4px; color: #4A3C32;">&#10024; {benefit}</li>'
        for benefit in tier.benefits
    )
    return f'<ul style="list-style-type: none; padding: 0; margin: 0;">{items}</ul>'


def next_tier_message(points: int) -> str:
    upcoming = next_tier(points)
    if upcoming is None:
        return "You're at our highest tier. Thank you for being a Platinum member!"
    return f"You're only {points_to_next_tier(points)} points away from reaching {upcoming.name} tier!"


def render_template(kind: str, name: str, new_tier: Optional[str] = None,
                    points: Optional[int] = None) -> Dict[str, str]:
    """Return {'subject', 'html'} for one of the notification kinds."""
    site = Config.SITE_URL.rstrip("/")
    if kind == "welcome":
        subject = "Welcome to The Brew Barn! ☕"
        body = (HEADING.format(text=f"Welcome, {name}!")
                + PARAGRAPH.format(text="Thanks for joining The Brew Barn. You start at Bronze tier "
                                        "and earn a point for every dollar you spend.")
                + BUTTON.format(href=f"{site}/menu", label="Browse the Menu"))
    elif kind == "tier_upgrade":
        subject = f"\U0001F389 Congratulations on Reaching {new_tier} Tier!"
        body = (HEADING.format(text=f"Congratulations {name}! \U0001F389")
                + PARAGRAPH.format(text=f"You've reached our {new_tier} Tier! Here are your enhanced benefits:")
                + tier_benefits_html(new_tier or "")
                + BUTTON.format(href=f"{site}/rewards", label="View Your Rewards"))
    elif kind == "points_reminder":
        points = points or 0
        subject = "Don't Forget Your Reward Points! ⭐"
        body = (HEADING.format(text=f"Hello {name}! ☕")
                + PARAGRAPH.format(text=f"You currently have <strong>{points} points</strong>!")
                + PARAGRAPH.format(text=next_tier_message(points))
                + BUTTON.format(href=f"{site}/menu", label="Order Now"))
    elif kind == "reward_available":
        subject = "\U0001F381 Your Free Reward is Waiting!"
        body = (HEADING.format(text=f"Hello {name}! \U0001F381")
                + PARAGRAPH.format(text="You have a free reward waiting to be claimed! "
                                        "Don't miss out on your special treat.")
                + BUTTON.format(href=f"{site}/rewards", label="Claim Your Reward"))
    else:
        raise ValueError(f"Unknown notification type: {kind}")
    return {"subject": subject, "html": BASE_OPEN + body + BASE_CLOSE}


class EmailNotifier:
    """Sends rendered e-mails through Resend."""

    def __init__(self, session: requests.Session = None):
        self.api_key = Config.RESEND_API_KEY
        self.http = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def send(self, to: str, kind: str, name: Optional[str] = None, new_tier: Optional[str] = None,
             points: Optional[int] = None) -> bool:
        """
        Render and send one e-mail.

        Returns False when sending is switched off (no API key); raises
        NotificationError when the provider refuses the message.
        """
        if not self.enabled:
            logger.warning(f"[EMAIL] RESEND_API_KEY not set, skipping {kind} e-mail")
            return False
        if not to:
            logger.warning(f"[EMAIL] No recipient for {kind} e-mail")
            return False
        template = render_template(kind, name or "there", new_tier=new_tier, points=points)
        try:
            response = self.http.post(
                Config.RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
                json={"from": Config.EMAIL_FROM, "to": [to], "subject": template["subject"],
                      "html": template["html"]},
                timeout=30,
            )
        except requests.exceptions.RequestException as e:
            raise NotificationError(f"E-mail request failed: {e}") from e
        if not response.ok:
            raise NotificationError(f"E-mail provider error: {response.text}")
        logger.info(f"[EMAIL] Sent {kind} e-mail to {mask_pii(to)}")
        return True
