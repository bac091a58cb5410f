# backend/app/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST / - Create a pending booking
    GET /{booking_id} - Booking details
    GET /{booking_id}/history - Audit trail
    POST /{booking_id}/approve - Approve a pending booking (teacher/admin)
    POST /{booking_id}/cancel - Cancel a booking
    POST /{booking_id}/reschedule - Move an approved booking
    POST /{booking_id}/resubmit - Send a rescheduled booking back for approval
    POST /{booking_id}/complete - Mark an approved booking as completed
    POST /{booking_id}/reassign - Hand the booking to another teacher (admin)
    POST /{booking_id}/send-reminder - Send the session reminder (admin)
"""

import asyncio
import logging
from typing import Any, List, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.params import Path

from ...api.dependencies import get_booking_service, get_current_active_user
from ...core.exceptions import DomainException
from ...core.ulid_helper import ULID_PATTERN
from ...models.user import User
from ...schemas.booking import (
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
from ...services.base import ensure_admin
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _booking_id_path() -> Any:
    return Path(
        ...,
        description="Booking ULID",
        pattern=ULID_PATTERN,
        examples=["01HF4G12ABCDEF3456789XYZAB"],
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Student or teacher not found"},
        403: {"description": "Caller may not book for this student"},
    },
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Create a pending booking; the student defaults to the caller."""
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            current_user,
            booking_data.student_id or current_user.id,
            booking_data.teacher_id,
            booking_data.booking_date,
            booking_data.start_time,
            booking_data.end_time,
            subject_id=booking_data.subject_id,
            notes=booking_data.notes,
            total_fee=booking_data.total_fee,
            currency=booking_data.currency,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking_details(
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Booking details for its participants and admins."""
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
        if not current_user.is_admin and current_user.id not in (
            booking.student_id,
            booking.teacher_id,
        ):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/{booking_id}/history",
    response_model=List[BookingHistoryResponse],
    responses={404: {"description": "Booking not found"}},
)
async def get_booking_history(
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingHistoryResponse]:
    try:
        ensure_admin(current_user, "view_booking_history")
        history = await asyncio.to_thread(booking_service.get_booking_history, booking_id)
        return [BookingHistoryResponse.model_validate(entry) for entry in history]
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/approve",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def approve_booking(
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.approve_booking, booking_id, current_user)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def cancel_booking(
    booking_id: str = _booking_id_path(),
    cancel_data: BookingCancel = Body(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a booking."""
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_booking, booking_id, current_user, cancel_data.reason
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/reschedule",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def reschedule_booking(
    booking_id: str = _booking_id_path(),
    payload: BookingReschedule = Body(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Move an approved booking; the booked duration is kept."""
    try:
        booking = await asyncio.to_thread(
            booking_service.reschedule_booking,
            booking_id,
            current_user,
            payload.new_date,
            payload.new_start_time,
            reason=payload.reason,
            notify_parties=payload.notify_parties,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/resubmit",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def resubmit_booking(
    booking_id: str = _booking_id_path(),
    payload: BookingResubmit = Body(default_factory=BookingResubmit),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.resubmit_booking, booking_id, current_user, payload.notes
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/complete",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def complete_booking(
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Mark booking as completed."""
    try:
        booking = await asyncio.to_thread(booking_service.complete_booking, booking_id, current_user)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/reassign",
    response_model=BookingResponse,
    responses={404: {"description": "Booking or teacher not found"}},
)
async def reassign_booking(
    booking_id: str = _booking_id_path(),
    payload: BookingReassign = Body(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Hand the booking to another teacher without changing its status."""
    try:
        booking = await asyncio.to_thread(
            booking_service.reassign_booking,
            booking_id,
            current_user,
            payload.new_teacher_id,
            admin_note=payload.admin_note,
            notify_parties=payload.notify_parties,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/send-reminder",
    response_model=SessionReminderResponse,
    responses={404: {"description": "Booking not found"}},
)
async def send_session_reminder(
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> SessionReminderResponse:
    """Send the session reminder to both participants (admin only)."""
    try:
        ensure_admin(current_user, "send_session_reminder")
        attempts = await asyncio.to_thread(booking_service.send_session_reminder, booking_id)
        return SessionReminderResponse(
            booking_id=booking_id,
            attempts=[
                DeliveryAttemptResponse(
                    recipient_id=attempt.recipient_id,
                    audience=attempt.audience,
                    channel=attempt.channel.value,
                    status=attempt.status.value,
                    error=attempt.error,
                )
                for attempt in attempts
            ],
        )
    except DomainException as e:
        handle_domain_exception(e)
