# backend/app/schemas/__init__.py
"""
Pydantic schemas for the TutorConnect platform.

Request models forbid unknown fields; response models are built from ORM
objects (``from_attributes``) or from service dictionaries.
"""

from .booking import (
    BookingCancel,
    BookingCreate,
    BookingHistoryResponse,
    BookingReassign,
    BookingReschedule,
    BookingResponse,
    BookingResubmit,
    DeliveryAttemptResponse,
    SessionReminderResponse,
)
from .earnings import UpcomingEarning, UpcomingEarningsResponse

__all__ = [
    # Booking schemas
    "BookingCreate",
    "BookingCancel",
    "BookingReschedule",
    "BookingResubmit",
    "BookingReassign",
    "BookingResponse",
    "BookingHistoryResponse",
    "DeliveryAttemptResponse",
    "SessionReminderResponse",
    # Earnings schemas
    "UpcomingEarning",
    "UpcomingEarningsResponse",
]
