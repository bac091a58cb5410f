"""
Notification events and the builders that derive them from domain entities.

An event is ephemeral: an event type, a JSON-safe payload and the list of
recipients. Nothing here is persisted; the database channel writes the
inbox record as a side effect of delivery.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple


class NotificationEventType(str, Enum):
    ACCOUNT_DELETED = "account_deleted"
    ACCOUNT_SUSPENDED = "account_suspended"
    ACCOUNT_UNSUSPENDED = "account_unsuspended"
    BOOKING_CREATED = "booking_created"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_RESCHEDULED = "booking_rescheduled"
    BOOKING_REASSIGNED = "booking_reassigned"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_REJECTED = "document_rejected"
    DOCUMENT_VERIFIED = "document_verified"
    MESSAGE_RECEIVED = "message_received"
    PAYSTACK_RESTRICTION = "paystack_restriction"
    PAYOUT_PROCESSED = "payout_processed"
    PAYOUT_SMS = "payout_sms"
    SESSION_REMINDER = "session_reminder"
    SESSION_REQUEST = "session_request"
    SYSTEM_NOTIFICATION = "system_notification"
    VERIFICATION_APPROVED = "verification_approved"
    VERIFICATION_REJECTED = "verification_rejected"
    VERIFICATION_CALL_SCHEDULED = "verification_call_scheduled"
    VERIFICATION_CALL_STARTED = "verification_call_started"
    VERIFICATION_CALL_COMPLETED = "verification_call_completed"


class Audience(str, Enum):
    """Which content variant a recipient gets."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    # Reassignment variants
    ASSIGNED = "assigned"
    REMOVED = "removed"


@dataclass(frozen=True)
class Recipient:
    user_id: str
    role: str
    audience: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_user(cls, user: Any, audience: Optional[str] = None) -> "Recipient":
        role = _value(getattr(user, "role", None)) or ""
        return cls(
            user_id=user.id,
            role=role,
            audience=_value(audience) or role,
            name=getattr(user, "name", None),
            email=getattr(user, "email", None),
            phone=getattr(user, "phone", None),
        )


@dataclass(frozen=True)
class NotificationEvent:
    event_type: NotificationEventType
    payload: Dict[str, Any] = field(default_factory=dict)
    recipients: Tuple[Recipient, ...] = ()


def _value(raw: Any) -> Any:
    return raw.value if isinstance(raw, Enum) else raw


def _json_safe(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, Decimal):
        return str(value)
    return value


def _clean(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _json_safe(value) for key, value in payload.items()}


def _participant(user: Any, user_id: Optional[str], role: str, audience: str) -> Optional[Recipient]:
    if user is not None:
        return Recipient.from_user(user, audience)
    if user_id:
        return Recipient(user_id=user_id, role=role, audience=audience)
    return None


def _recipients(items: Iterable[Optional[Recipient]]) -> Tuple[Recipient, ...]:
    return tuple(item for item in items if item is not None)


# ---------------------------------------------------------------------------
# Booking events
# ---------------------------------------------------------------------------


def booking_payload(booking: Any) -> Dict[str, Any]:
    """Fields shared by every booking notification."""
    subject = getattr(booking, "subject", None)
    student = getattr(booking, "student", None)
    teacher = getattr(booking, "teacher", None)
    return _clean(
        {
            "booking_id": booking.id,
            "booking_uuid": getattr(booking, "booking_uuid", None),
            "subject_name": getattr(subject, "name", None),
            "student_name": getattr(student, "name", None),
            "teacher_name": getattr(teacher, "name", None),
            "booking_date": booking.booking_date,
            "start_time": booking.start_time,
            "end_time": booking.end_time,
            "status": booking.status,
        }
    )


def student_recipient(booking: Any, audience: str = Audience.STUDENT.value) -> Optional[Recipient]:
    return _participant(getattr(booking, "student", None), booking.student_id, "student", audience)


def teacher_recipient(booking: Any, audience: str = Audience.TEACHER.value) -> Optional[Recipient]:
    return _participant(getattr(booking, "teacher", None), booking.teacher_id, "teacher", audience)


def booking_event(
    event_type: NotificationEventType,
    booking: Any,
    to_student: bool = True,
    to_teacher: bool = True,
    extra: Optional[Dict[str, Any]] = None,
) -> NotificationEvent:
    payload = booking_payload(booking)
    payload.update(_clean(extra or {}))
    recipients = _recipients(
        [
            student_recipient(booking) if to_student else None,
            teacher_recipient(booking) if to_teacher else None,
        ]
    )
    return NotificationEvent(event_type=event_type, payload=payload, recipients=recipients)


def booking_reassigned_event(
    booking: Any,
    old_teacher: Any,
    new_teacher: Any,
    admin_note: Optional[str] = None,
) -> NotificationEvent:
    """
    One event, three audiences: the new teacher (assigned), the previous
    teacher (removed) and the student.
    """
    payload = booking_payload(booking)
    payload.update(
        _clean(
            {
                "old_teacher_id": old_teacher.id,
                "old_teacher_name": getattr(old_teacher, "name", None),
                "new_teacher_id": new_teacher.id,
                "new_teacher_name": getattr(new_teacher, "name", None),
                "teacher_name": getattr(new_teacher, "name", None),
                "admin_note": admin_note,
            }
        )
    )
    recipients = _recipients(
        [
            Recipient.from_user(new_teacher, Audience.ASSIGNED.value),
            Recipient.from_user(old_teacher, Audience.REMOVED.value),
            student_recipient(booking),
        ]
    )
    return NotificationEvent(
        event_type=NotificationEventType.BOOKING_REASSIGNED,
        payload=payload,
        recipients=recipients,
    )


def session_reminder_event(booking: Any, meeting_link: Optional[str] = None) -> NotificationEvent:
    return booking_event(
        NotificationEventType.SESSION_REMINDER,
        booking,
        extra={"meeting_link": meeting_link},
    )


# ---------------------------------------------------------------------------
# Teacher verification
# ---------------------------------------------------------------------------


def _admin_recipients(admins: Sequence[Any]) -> List[Recipient]:
    return [Recipient.from_user(admin, Audience.ADMIN.value) for admin in admins]


def document_event(
    event_type: NotificationEventType,
    document: Any,
    admins: Sequence[Any] = (),
    rejection_reason: Optional[str] = None,
) -> NotificationEvent:
    teacher = getattr(document, "teacher", None)
    payload = _clean(
        {
            "document_id": document.id,
            "document_type": document.document_type,
            "document_label": getattr(document, "document_label", None),
            "teacher_id": document.teacher_id,
            "teacher_name": getattr(teacher, "name", None),
            "status": document.status,
            "rejection_reason": rejection_reason,
        }
    )
    recipients = _recipients(
        [_participant(teacher, document.teacher_id, "teacher", Audience.TEACHER.value)]
        + _admin_recipients(admins)
    )
    return NotificationEvent(event_type=event_type, payload=payload, recipients=recipients)


def verification_event(
    event_type: NotificationEventType,
    verification: Any,
    admins: Sequence[Any] = (),
    reason: Optional[str] = None,
) -> NotificationEvent:
    teacher = getattr(verification, "teacher", None)
    payload = _clean(
        {
            "verification_request_id": verification.id,
            "teacher_id": verification.teacher_id,
            "teacher_name": getattr(teacher, "name", None),
            "status": verification.status,
            "scheduled_call_at": getattr(verification, "scheduled_call_at", None),
            "meeting_link": getattr(verification, "meeting_link", None),
            "reason": reason,
        }
    )
    recipients = _recipients(
        [_participant(teacher, verification.teacher_id, "teacher", Audience.TEACHER.value)]
        + _admin_recipients(admins)
    )
    return NotificationEvent(event_type=event_type, payload=payload, recipients=recipients)


# ---------------------------------------------------------------------------
# Payouts
# ---------------------------------------------------------------------------


def _payout_payload(payout: Any) -> Dict[str, Any]:
    return _clean(
        {
            "payout_request_id": payout.id,
            "amount": payout.amount,
            "currency": payout.currency,
            "payment_method": payout.payment_method,
            "gateway_reference": payout.gateway_reference,
            "status": payout.status,
        }
    )


def payout_processed_event(payout: Any) -> NotificationEvent:
    teacher = _participant(getattr(payout, "teacher", None), payout.teacher_id, "teacher", "teacher")
    return NotificationEvent(
        event_type=NotificationEventType.PAYOUT_PROCESSED,
        payload=_payout_payload(payout),
        recipients=_recipients([teacher]),
    )


def payout_sms_event(payout: Any) -> NotificationEvent:
    teacher = _participant(getattr(payout, "teacher", None), payout.teacher_id, "teacher", "teacher")
    return NotificationEvent(
        event_type=NotificationEventType.PAYOUT_SMS,
        payload=_payout_payload(payout),
        recipients=_recipients([teacher]),
    )


# ---------------------------------------------------------------------------
# Accounts, messaging, system
# ---------------------------------------------------------------------------


def account_event(
    event_type: NotificationEventType, user: Any, reason: Optional[str] = None
) -> NotificationEvent:
    return NotificationEvent(
        event_type=event_type,
        payload=_clean({"user_id": user.id, "user_name": user.name, "reason": reason}),
        recipients=(Recipient.from_user(user),),
    )


def message_received_event(
    recipient: Any,
    sender: Any,
    conversation_id: Optional[str] = None,
    preview: Optional[str] = None,
) -> NotificationEvent:
    return NotificationEvent(
        event_type=NotificationEventType.MESSAGE_RECEIVED,
        payload=_clean(
            {
                "sender_id": getattr(sender, "id", None),
                "sender_name": getattr(sender, "name", None),
                "conversation_id": conversation_id,
                "preview": preview,
            }
        ),
        recipients=(Recipient.from_user(recipient),),
    )


def paystack_restriction_event(user: Any, reason: Optional[str] = None) -> NotificationEvent:
    return NotificationEvent(
        event_type=NotificationEventType.PAYSTACK_RESTRICTION,
        payload=_clean({"user_id": user.id, "user_name": user.name, "reason": reason}),
        recipients=(Recipient.from_user(user),),
    )


def system_notification_event(
    users: Sequence[Any],
    title: str,
    message: str,
    action_url: Optional[str] = None,
    action_text: Optional[str] = None,
) -> NotificationEvent:
    return NotificationEvent(
        event_type=NotificationEventType.SYSTEM_NOTIFICATION,
        payload={
            "title": title,
            "message": message,
            "action_url": action_url,
            "action_text": action_text,
        },
        recipients=tuple(Recipient.from_user(user) for user in users),
    )
