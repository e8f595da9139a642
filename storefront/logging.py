"""
Logging for the storefront.

All module loggers live under the ``storefront`` logger, which owns the one
stdout handler. Shopper identifiers (cart ids, user ids, order ids) and
backend error texts go through ``mask_id``/``mask_cart_key``/``clip`` before
they are written.

Environment:
    LOG_LEVEL   DEBUG, INFO (default), WARNING, ...
    LOG_STYLE   "full" (default, with timestamps) or "compact" for hosts
                that timestamp stdout themselves
"""

import logging
import os
import sys
from functools import cache
from typing import Any, Optional

ROOT_LOGGER = "storefront"

_STYLES = {
    "full": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
    "compact": "%(levelname)s [%(name)s] %(message)s",
}

# Transport loggers of the supabase and upstash clients
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")

_ID_KEEP = 8


def configure_logging(level: Optional[str] = None, style: Optional[str] = None) -> logging.Logger:
    """Attach the stdout handler to the storefront logger (first call only)."""
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    fmt = _STYLES.get(style or os.environ.get("LOG_STYLE", "full"), _STYLES["full"])
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Logger for a module; names outside the package are nested under it."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def _escape(value: Any) -> str:
    # Keep one log record per line
    return (
        str(value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def mask_id(value: Any) -> str:
    """First 8 chars of an identifier, or "N/A"."""
    if not value:
        return "N/A"
    return _escape(value)[:_ID_KEEP]


def mask_cart_key(key: str) -> str:
    """mlb_cart:<owner id> with the owner id masked."""
    prefix, sep, owner = key.partition(":")
    if not sep:
        return _escape(key)
    return f"{_escape(prefix)}:{mask_id(owner)}"


def clip(text: Any, max_length: int = 120) -> str:
    """Escaped, truncated text for error messages coming from the backends."""
    if not text:
        return "N/A"
    safe = _escape(text)
    if len(safe) <= max_length:
        return safe
    return safe[:max_length] + "..."


__all__ = [
    "ROOT_LOGGER",
    "configure_logging",
    "get_logger",
    "mask_id",
    "mask_cart_key",
    "clip",
]
