# aquadash/utils/dates.py
"""
Formatting helpers used by the templates.

Dates arrive from the API as ISO strings ("2025-09-19T05:17:29.439Z").
Anything unparsable renders as "Invalid Date" / "Invalid Time" instead of
breaking the page.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

INVALID_DATE = "Invalid Date"
INVALID_TIME = "Invalid Time"
INVALID_PRICE = "Invalid Price"


def parse_iso(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def is_valid_date(value: Any) -> bool:
    return parse_iso(value) is not None


def format_date(value: Any) -> str:
    """"2025-09-19T05:17:29Z" → "19 Sep 2025" """
    dt = parse_iso(value)
    if dt is None:
        return INVALID_DATE
    return dt.strftime("%d %b %Y")


def format_datetime(value: Any) -> str:
    """"2025-09-19T05:17:29Z" → "19 Sep 2025, 05:17" """
    dt = parse_iso(value)
    if dt is None:
        return INVALID_DATE
    return dt.strftime("%d %b %Y, %H:%M")


def format_time(value: Any) -> str:
    dt = parse_iso(value)
    if dt is None:
        return INVALID_TIME
    return dt.strftime("%H:%M")


def format_role(user: Any) -> str:
    """{"role": {"name": "STORE_MANAGER"}} → "STORE MANAGER" """
    role = user.get("role") if isinstance(user, dict) else getattr(user, "role", None)
    if role is None:
        return ""
    name = role.get("name") if isinstance(role, dict) else getattr(role, "name", "")
    return (name or "").replace("_", " ")


def format_price(value: Any, currency: str = "RWF") -> str:
    """1234.5 → "RWF 1,234.50" """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return INVALID_PRICE
    if not amount.is_finite():
        return INVALID_PRICE
    return f"{currency} {amount:,.2f}"
