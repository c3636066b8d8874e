"""Security helpers: PII masking and safe logging (minimal)."""
import re

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{8,}\d")


def mask_pii(text: str) -> str:
    if not text:
        return text
    masked = EMAIL_RE.sub("[EMAIL]", text)
    masked = PHONE_RE.sub("[REDACTED]", masked)
    return masked
