"""
Neon Market - Shared Helpers
=============================
Pure utility functions with NO database or module dependencies.
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional

from config.settings import CURRENCY


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def format_cents(value, currency: str = CURRENCY) -> str:
    """Format minor units as '$1,234.50 MXN'."""
    if value is None:
        value = 0
    try:
        cents = int(value)
    except (ValueError, TypeError):
        return str(value)
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}${whole:,}.{frac:02d} {currency}"


def format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M")


def new_public_id() -> str:
    """Opaque, unguessable identifier (32 hex chars)."""
    return uuid.uuid4().hex


_WHITESPACE = re.compile(r"\s+")


def strip_whitespace(value: str) -> str:
    return _WHITESPACE.sub("", value or "")
