"""Shared "brewbarn" logger; the level comes from LOG_LEVEL via Config."""
import logging

logger = logging.getLogger("brewbarn")
if not logger.handlers:
    h = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s [%(module)s] %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)
    logger.setLevel(logging.INFO)


def set_level(level_name: str):
    """Apply a level name such as "DEBUG"; unknown names fall back to INFO."""
    level = logging.getLevelName((level_name or "").upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)


def get_logger():
    return logger
