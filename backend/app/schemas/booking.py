# backend/app/schemas/booking.py
"""
Booking schemas for the TutorConnect platform.

Request models validate shape only; scheduling rules (end after start,
duration bounds, dates in the future) are enforced by BookingService so
the same rules apply to every caller.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from ..core.constants import MAX_REASON_LENGTH
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Create a pending booking."""

    teacher_id: str = Field(..., description="Teacher to book")
    student_id: Optional[str] = Field(
        None, description="Student the booking is for (admins only; defaults to the caller)"
    )
    subject_id: Optional[str] = None
    booking_date: date = Field(..., description="Date of the session")
    start_time: time
    end_time: time
    notes: Optional[str] = Field(None, max_length=2000)
    total_fee: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class BookingCancel(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)


class BookingReschedule(StrictRequestModel):
    new_date: date
    new_start_time: time
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)
    notify_parties: bool = True


class BookingResubmit(StrictRequestModel):
    notes: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)


class BookingReassign(StrictRequestModel):
    new_teacher_id: str
    admin_note: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)
    notify_parties: bool = True


class BookingResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, validate_assignment=False)

    id: str
    booking_uuid: str
    student_id: str
    teacher_id: str
    subject_id: Optional[str] = None
    subject_name: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    status: str
    total_fee: Optional[Decimal] = None
    currency: str
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class BookingHistoryResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, validate_assignment=False)

    id: str
    action: str
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    performed_by_id: Optional[str] = None
    notes: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class DeliveryAttemptResponse(StrictModel):
    recipient_id: str
    audience: str
    channel: str
    status: str
    error: Optional[str] = None


class SessionReminderResponse(StrictModel):
    booking_id: str
    attempts: List[DeliveryAttemptResponse]
