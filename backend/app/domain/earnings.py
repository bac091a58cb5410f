# backend/app/domain/earnings.py
"""
Earnings calculation for teaching sessions.

A session earns ``hourly_rate * duration_hours`` in every currency the
teacher has a rate for. Duration is fractional (a 90 minute session is
1.5 hours) unless whole-hour billing is requested, in which case partial
hours are dropped.

Everything here is pure: no database, no settings lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

from ..core.exceptions import TimeParseError, ValidationException

TimeLike = Union[time, datetime, str]
RateLike = Union[Decimal, int, float, str, None]

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")
_SECONDS_PER_HOUR = Decimal(3600)
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class SessionEarning:
    """Earned amount per currency for one session."""

    amount_usd: Decimal
    amount_ngn: Decimal
    duration_hours: Decimal

    def amount_for(self, currency: str) -> Decimal:
        return self.amount_usd if currency.upper() == "USD" else self.amount_ngn


def parse_session_time(value: TimeLike) -> time:
    """
    Normalize a session time to ``datetime.time``.

    Accepts ``time`` and ``datetime`` objects or ``HH:MM`` / ``HH:MM:SS``
    strings. Anything else raises TimeParseError.
    """
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(cleaned, fmt).time()
            except ValueError:
                continue
    raise TimeParseError(value)


def _to_rate(value: RateLike, currency: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationException(
            f"Invalid hourly rate for {currency}: {value!r}",
            code="INVALID_RATE",
            details={"currency": currency},
        )
    if rate < 0:
        raise ValidationException(
            f"Hourly rate for {currency} cannot be negative",
            code="INVALID_RATE",
            details={"currency": currency, "rate": str(rate)},
        )
    return rate


def has_configured_rate(hourly_rate_usd: RateLike, hourly_rate_ngn: RateLike) -> bool:
    """True when the teacher has a positive rate in at least one currency."""
    for value in (hourly_rate_usd, hourly_rate_ngn):
        try:
            if value is not None and Decimal(str(value)) > 0:
                return True
        except InvalidOperation:
            continue
    return False


def session_duration_hours(start_time: TimeLike, end_time: TimeLike, whole_hours: bool = False) -> Decimal:
    """Hours between start and end on the same day; end must be after start."""
    start = parse_session_time(start_time)
    end = parse_session_time(end_time)
    if end <= start:
        raise ValidationException(
            "Session end time must be after start time",
            code="INVALID_TIME_RANGE",
            details={"start_time": start.isoformat(), "end_time": end.isoformat()},
        )

    start_seconds = start.hour * 3600 + start.minute * 60 + start.second
    end_seconds = end.hour * 3600 + end.minute * 60 + end.second
    elapsed = end_seconds - start_seconds
    if whole_hours:
        return Decimal(elapsed // 3600)
    return Decimal(elapsed) / _SECONDS_PER_HOUR


def compute_earning(
    hourly_rate_usd: RateLike,
    hourly_rate_ngn: RateLike,
    start_time: TimeLike,
    end_time: TimeLike,
    whole_hours: bool = False,
) -> SessionEarning:
    """
    Compute what a session earns in USD and NGN.

    A missing or zero rate yields a zero amount for that currency.
    """
    usd = _to_rate(hourly_rate_usd, "USD")
    ngn = _to_rate(hourly_rate_ngn, "NGN")
    hours = session_duration_hours(start_time, end_time, whole_hours=whole_hours)
    return SessionEarning(amount_usd=usd * hours, amount_ngn=ngn * hours, duration_hours=hours)


def round_amount(amount: Optional[Any]) -> Decimal:
    """Round to cents, half-up."""
    if amount is None:
        return Decimal("0.00")
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)
