"""
Money and date normalization.

Pure functions shared by every ledger component. The same input always
produces the same output, so a re-submitted request normalizes identically.

Money is Decimal rounded half-up (never binary float rounding). Dates are
plain calendar dates rendered as YYYY-MM-DD, independent of time zone.
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from club_ledger.core.exceptions import InvalidFormat

CENT = Decimal("0.01")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_decimal(value: Any, places: int = 2, field: str = "amount") -> Decimal:
    """Parse a numeric or string value into a Decimal rounded half-up to `places`."""
    if value is None or isinstance(value, bool):
        raise InvalidFormat(f"{field} must be a number", field=field)

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float, str)):
        text = str(value).strip()
        if not text:
            raise InvalidFormat(f"{field} must be a number", field=field)
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise InvalidFormat(f"{field} must be a number", field=field) from None
    else:
        raise InvalidFormat(f"{field} must be a number", field=field)

    if not number.is_finite():
        raise InvalidFormat(f"{field} must be a finite number", field=field)

    try:
        return number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context holds, e.g. "1e40"
        raise InvalidFormat(f"{field} must be a finite number", field=field) from None


def to_money(value: Any, field: str = "amount") -> Decimal:
    return to_decimal(value, places=2, field=field)


def round_money(value: Decimal) -> Decimal:
    """Round an already-parsed aggregate once, half-up to cents."""
    if value is None:
        return Decimal("0.00")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_date(value: Any, field: str = "date") -> date:
    """
    Accepts:
      - YYYY-MM-DD strings
      - date / datetime objects (datetime is truncated)
      - ISO datetime strings such as 2025-03-01T18:30:00Z (truncated)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        candidate = text if _DATE_RE.match(text) else text[:10]
        if _DATE_RE.match(candidate) and (len(text) == 10 or text[10] in "T "):
            try:
                return date.fromisoformat(candidate)
            except ValueError:
                pass

    raise InvalidFormat(f"{field} must be a valid date (YYYY-MM-DD)", field=field)


def to_date_string(value: Any, field: str = "date") -> str:
    return to_date(value, field=field).isoformat()
