"""
Value formatting for placeholder layers.

All helpers return strings and treat missing input as an empty value, so the
context builder can call them on optional record fields without guards.
"""

import re
from datetime import date, datetime
from typing import Iterable, Optional, Union

DateLike = Union[date, datetime, str, None]

_NON_DIGITS = re.compile(r"\D")
_RECORD_CODE_DISALLOWED = re.compile(r"[^A-Za-z0-9-]")


def phone_number(phone: Optional[str]) -> str:
    """
    Format a 10-digit phone number as "(555) 123-4567".

    Numbers with any other digit count are returned unchanged.
    """
    if not phone:
        return ""
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def money(value: Optional[float]) -> str:
    """Fixed two-decimal amount without grouping (e.g., 1250.5 -> "1250.50")."""
    return f"{(value or 0):.2f}"


def currency(value: Optional[float]) -> str:
    """Two-decimal amount with thousands grouping (e.g., 1250.5 -> "1,250.50")."""
    return f"{(value or 0):,.2f}"


def _to_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def long_date(value: DateLike) -> str:
    """Format as "January 5, 2026"; empty string when missing or unparseable."""
    parsed = _to_date(value)
    if parsed is None:
        return ""
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def short_date(value: DateLike) -> str:
    """Format as "01/05/2026"; empty string when missing or unparseable."""
    parsed = _to_date(value)
    if parsed is None:
        return ""
    return parsed.strftime("%m/%d/%Y")


def join_present(parts: Iterable[Optional[str]], separator: str = ", ") -> str:
    """Join the non-empty parts."""
    return separator.join(p for p in parts if p)


def website_with_protocol(website: Optional[str]) -> str:
    """Prefix "http://" unless the address already carries a scheme."""
    if not website:
        return ""
    if website.startswith("http://") or website.startswith("https://"):
        return website
    return f"http://{website}"


def sanitize_record_code(code: Optional[str]) -> str:
    """Keep only ASCII letters, digits and hyphens."""
    if not code:
        return ""
    return _RECORD_CODE_DISALLOWED.sub("", code)
