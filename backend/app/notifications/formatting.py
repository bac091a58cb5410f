"""
Display formatting for notification content.

Pure string helpers: currency amounts, booking dates and times, due dates
and SMS truncation.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import re
from typing import Any, Union

from ..core.constants import SMS_ELLIPSIS, SMS_MAX_LENGTH
from ..core.exceptions import ValidationException

CURRENCY_SYMBOLS = {
    "NGN": "₦",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}
DEFAULT_CURRENCY_SYMBOL = "$"

_CENTS = Decimal("0.01")
_AMOUNT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

DateLike = Union[date, datetime, str]
TimeLike = Union[time, datetime, str]


def currency_symbol(currency: str | None) -> str:
    return CURRENCY_SYMBOLS.get((currency or "").upper(), DEFAULT_CURRENCY_SYMBOL)


def _to_decimal(amount: Any) -> Decimal:
    try:
        return amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationException(f"Invalid amount: {amount!r}", code="INVALID_AMOUNT")


def format_currency(amount: Any, currency: str | None = "USD") -> str:
    """
    Render an amount with its currency symbol, thousands separators and two
    decimals, rounding half-up: ``format_currency(1234.5, "NGN") == "₦1,234.50"``.

    Unknown currencies use the dollar sign.
    """
    value = _to_decimal(amount if amount is not None else 0).quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(value):,.2f}"


def parse_currency_amount(text: str) -> Decimal:
    """Inverse of format_currency: ``"₦1,234.50"`` -> ``Decimal("1234.50")``."""
    match = _AMOUNT_PATTERN.search((text or "").replace(",", "").replace(" ", ""))
    if not match:
        raise ValidationException(f"No amount found in {text!r}", code="INVALID_AMOUNT")
    raw = match.group(0)
    value = Decimal(raw)
    if not raw.startswith("-") and (text or "").strip().startswith("-"):
        value = -value
    return value


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            pass
    raise ValidationException(f"Invalid date value: {value!r}", code="INVALID_DATE")


def _to_time(value: TimeLike) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        for fmt in ("%H:%M:%S", "%H:%M"):
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
        # Full ISO timestamps such as a scheduled call time
        try:
            return datetime.fromisoformat(value.strip()).time()
        except ValueError:
            pass
    raise ValidationException(f"Invalid time value: {value!r}", code="INVALID_TIME")


def format_booking_date(value: DateLike) -> str:
    """``2025-09-05`` -> ``September 5, 2025``."""
    day = _to_date(value)
    return f"{day:%B} {day.day}, {day.year}"


def format_booking_time(value: TimeLike) -> str:
    """``14:30`` -> ``02:30 PM``."""
    return _to_time(value).strftime("%I:%M %p")


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_due_date(value: DateLike) -> str:
    """``2025-09-05`` -> ``5th September 2025``."""
    day = _to_date(value)
    return f"{ordinal(day.day)} {day:%B} {day.year}"


def truncate_sms(text: str, max_length: int = SMS_MAX_LENGTH) -> str:
    """Cut ``text`` to ``max_length`` characters, ending in an ellipsis when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(SMS_ELLIPSIS)] + SMS_ELLIPSIS
