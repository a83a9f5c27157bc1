# utils.py
from __future__ import annotations

import logging
from typing import Optional

from config import settings


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Returns a named logger with a single stream handler attached.

    Safe to call repeatedly at import time; the handler is only added once.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger


# ---------------------------------------------------------------------------
# Shopify GID helpers
# ---------------------------------------------------------------------------

def gid_tail(gid: Optional[str]) -> Optional[str]:
    """
    'gid://shopify/Product/123' -> '123'. Bare ids are returned stripped.
    """
    if not gid:
        return None
    tail = str(gid).strip().rstrip("/").split("/")[-1]
    return tail or None


__all__ = [
    "get_logger",
    "gid_tail",
]
