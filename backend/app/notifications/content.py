"""
Per-audience notification content.

Content is a lookup table keyed by ``(event_type, audience)`` with a
``(event_type, "*")`` fallback. Rendering is plain ``str.format`` over a
display context in which missing fields degrade to labels such as
"Unknown Subject" instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..core.constants import BRAND_NAME
from ..core.exceptions import ValidationException
from .events import Audience, NotificationEventType as E
from .formatting import format_booking_date, format_booking_time, format_currency

logger = logging.getLogger(__name__)

ANY_AUDIENCE = "*"

UNKNOWN_SUBJECT = "Unknown Subject"
STUDENT_FALLBACK = "Student"
TEACHER_FALLBACK = "Teacher"
DOCUMENT_FALLBACK = "Document"
DATE_FALLBACK = "TBD"


@dataclass(frozen=True)
class ContentTemplate:
    title: str
    message: str
    subject: Optional[str] = None
    action_text: Optional[str] = None
    action_url: Optional[str] = None
    type: Optional[str] = None


@dataclass(frozen=True)
class NotificationContent:
    title: str
    subject: str
    message: str
    action_text: Optional[str]
    action_url: Optional[str]
    template_key: str
    type: str


STUDENT = Audience.STUDENT.value
TEACHER = Audience.TEACHER.value
ADMIN = Audience.ADMIN.value

_STUDENT_BOOKING_URL = "/student/bookings/{booking_id}"
_TEACHER_BOOKING_URL = "/teacher/bookings/{booking_id}"
_TEACHER_VERIFICATION_URL = "/teacher/verification"
_ADMIN_VERIFICATION_URL = "/admin/teachers/{teacher_id}/verification"
_ADMIN_DOCUMENT_URL = "/admin/verification/documents/{document_id}"

CONTENT_TABLE: Dict[Tuple[E, str], ContentTemplate] = {
    # Booking created
    (E.BOOKING_CREATED, STUDENT): ContentTemplate(
        title="Booking Confirmed",
        subject="Booking Request Confirmed",
        message="Your booking for {subject} with {teacher} has been created and is pending approval.",
        action_text="View Booking",
        action_url=_STUDENT_BOOKING_URL,
    ),
    (E.BOOKING_CREATED, TEACHER): ContentTemplate(
        title="New Booking Request",
        subject="New Booking Request Received",
        message="You have a new booking request from {student} for {subject}.",
        action_text="Review Booking",
        action_url=_TEACHER_BOOKING_URL,
    ),
    # Booking approved
    (E.BOOKING_APPROVED, STUDENT): ContentTemplate(
        title="Booking Approved!",
        subject="Booking Approved - Session Details",
        message="Great news! Your booking for {subject} with {teacher} has been approved.",
        action_text="View Booking",
        action_url=_STUDENT_BOOKING_URL,
    ),
    (E.BOOKING_APPROVED, TEACHER): ContentTemplate(
        title="Booking Approved",
        subject="Booking Approved - Session Details",
        message="You have approved the booking request from {student} for {subject}.",
        action_text="View Booking",
        action_url=_TEACHER_BOOKING_URL,
    ),
    # Booking cancelled
    (E.BOOKING_CANCELLED, STUDENT): ContentTemplate(
        title="Booking Cancelled",
        message="Your {subject} session with {teacher} on {date} at {time} has been cancelled.{reason_suffix}",
        action_text="Find Another Teacher",
        action_url="/student/teachers",
    ),
    (E.BOOKING_CANCELLED, TEACHER): ContentTemplate(
        title="Booking Cancelled",
        message="Your {subject} session with {student} on {date} at {time} has been cancelled.{reason_suffix}",
        action_text="View Bookings",
        action_url="/teacher/bookings",
    ),
    # Booking rescheduled
    (E.BOOKING_RESCHEDULED, STUDENT): ContentTemplate(
        title="Booking Rescheduled",
        message=(
            "Your {subject} session with {teacher} has been moved from {old_date} at {old_time} "
            "to {new_date} at {new_time}.{reason_suffix}"
        ),
        action_text="View Booking",
        action_url=_STUDENT_BOOKING_URL,
    ),
    (E.BOOKING_RESCHEDULED, TEACHER): ContentTemplate(
        title="Booking Rescheduled",
        message=(
            "Your {subject} session with {student} has been moved from {old_date} at {old_time} "
            "to {new_date} at {new_time}.{reason_suffix}"
        ),
        action_text="View Booking",
        action_url=_TEACHER_BOOKING_URL,
    ),
    # Booking reassigned
    (E.BOOKING_REASSIGNED, Audience.ASSIGNED.value): ContentTemplate(
        title="New Booking Assignment",
        subject="New Booking Assignment - Action Required",
        message="You have been assigned to teach {subject} for {student} on {date} at {time}.",
        action_text="View Booking",
        action_url=_TEACHER_BOOKING_URL,
        type="booking_reassigned_assigned",
    ),
    (E.BOOKING_REASSIGNED, Audience.REMOVED.value): ContentTemplate(
        title="Booking Reassigned",
        subject="Booking Reassignment - You Have Been Removed",
        message="You have been removed from teaching {subject} for {student} on {date} at {time}.",
        action_text="View Bookings",
        action_url="/teacher/bookings",
        type="booking_reassigned_removed",
    ),
    (E.BOOKING_REASSIGNED, STUDENT): ContentTemplate(
        title="Teacher Changed",
        subject="Booking Teacher Changed - Important Update",
        message="Your {subject} session on {date} at {time} has been reassigned to a different teacher.",
        action_text="View Booking",
        action_url=_STUDENT_BOOKING_URL,
        type="booking_reassigned_student",
    ),
    # Sessions
    (E.SESSION_REMINDER, STUDENT): ContentTemplate(
        title="Session Starting Soon",
        subject="Session Starting Soon - Join Now",
        message="Your {subject} session with {teacher} is starting in 15 minutes!",
        action_text="Join Session",
        action_url="{join_url}",
    ),
    (E.SESSION_REMINDER, TEACHER): ContentTemplate(
        title="Session Starting Soon",
        subject="Session Starting Soon - Join Now",
        message="Your {subject} session with {student} is starting in 15 minutes!",
        action_text="Join Session",
        action_url="{join_url}",
    ),
    (E.SESSION_REQUEST, ANY_AUDIENCE): ContentTemplate(
        title="Session Request",
        subject="Booking Resubmitted for Approval",
        message="{student} has resubmitted the {subject} booking for {date} at {time}. Please review it.",
        action_text="Review Booking",
        action_url=_TEACHER_BOOKING_URL,
    ),
    # Documents
    (E.DOCUMENT_UPLOADED, TEACHER): ContentTemplate(
        title="Document Received",
        message="Your {document} has been uploaded and is awaiting review.",
        action_text="View Verification",
        action_url=_TEACHER_VERIFICATION_URL,
    ),
    (E.DOCUMENT_UPLOADED, ADMIN): ContentTemplate(
        title="New Document Uploaded",
        message="{teacher} uploaded a {document} for verification.",
        action_text="Review Document",
        action_url=_ADMIN_DOCUMENT_URL,
    ),
    (E.DOCUMENT_VERIFIED, TEACHER): ContentTemplate(
        title="Document Verified",
        message="Your {document} has been verified.",
        action_text="View Verification",
        action_url=_TEACHER_VERIFICATION_URL,
    ),
    (E.DOCUMENT_VERIFIED, ADMIN): ContentTemplate(
        title="Document Verified",
        message="{teacher}'s {document} has been verified.",
        action_text="View Teacher",
        action_url=_ADMIN_VERIFICATION_URL,
    ),
    (E.DOCUMENT_REJECTED, TEACHER): ContentTemplate(
        title="Document Rejected",
        message="Your {document} was rejected.{reason_suffix} Please upload a new copy.",
        action_text="Upload Again",
        action_url=_TEACHER_VERIFICATION_URL,
    ),
    (E.DOCUMENT_REJECTED, ADMIN): ContentTemplate(
        title="Document Rejected",
        message="{teacher}'s {document} was rejected.{reason_suffix}",
        action_text="View Teacher",
        action_url=_ADMIN_VERIFICATION_URL,
    ),
    # Verification
    (E.VERIFICATION_APPROVED, TEACHER): ContentTemplate(
        title="Verification Approved",
        message="Congratulations! Your teacher verification has been approved.",
        action_text="Go to Dashboard",
        action_url="/teacher/dashboard",
    ),
    (E.VERIFICATION_APPROVED, ADMIN): ContentTemplate(
        title="Teacher Verified",
        message="{teacher} has been approved as a verified teacher.",
        action_text="View Teacher",
        action_url=_ADMIN_VERIFICATION_URL,
    ),
    (E.VERIFICATION_REJECTED, TEACHER): ContentTemplate(
        title="Verification Rejected",
        message="Your teacher verification was not approved.{reason_suffix}",
        action_text="View Verification",
        action_url=_TEACHER_VERIFICATION_URL,
    ),
    (E.VERIFICATION_REJECTED, ADMIN): ContentTemplate(
        title="Teacher Verification Rejected",
        message="{teacher}'s verification was rejected.{reason_suffix}",
        action_text="View Teacher",
        action_url=_ADMIN_VERIFICATION_URL,
    ),
    (E.VERIFICATION_CALL_SCHEDULED, TEACHER): ContentTemplate(
        title="Verification Call Scheduled",
        message="Your verification call is scheduled for {call_date} at {call_time}.",
        action_text="View Details",
        action_url=_TEACHER_VERIFICATION_URL,
    ),
    (E.VERIFICATION_CALL_SCHEDULED, ADMIN): ContentTemplate(
        title="Verification Call Scheduled",
        message="A verification call with {teacher} is scheduled for {call_date} at {call_time}.",
        action_text="View Teacher",
        action_url=_ADMIN_VERIFICATION_URL,
    ),
    (E.VERIFICATION_CALL_STARTED, TEACHER): ContentTemplate(
        title="Verification Call Started",
        message="Your verification call has started. Please join now.",
        action_text="Join Call",
        action_url="{join_url}",
    ),
    (E.VERIFICATION_CALL_STARTED, ADMIN): ContentTemplate(
        title="Verification Call Started",
        message="The verification call with {teacher} has started.",
        action_text="Join Call",
        action_url="{join_url}",
    ),
    (E.VERIFICATION_CALL_COMPLETED, TEACHER): ContentTemplate(
        title="Verification Call Completed",
        message="Your verification call is complete. We will let you know the outcome soon.",
        action_text="View Verification",
        action_url=_TEACHER_VERIFICATION_URL,
    ),
    (E.VERIFICATION_CALL_COMPLETED, ADMIN): ContentTemplate(
        title="Verification Call Completed",
        message="The verification call with {teacher} is complete and awaiting a decision.",
        action_text="Review Teacher",
        action_url=_ADMIN_VERIFICATION_URL,
    ),
    # Payouts
    (E.PAYOUT_PROCESSED, ANY_AUDIENCE): ContentTemplate(
        title="Payout Processed",
        message="Your payout of {amount} has been processed successfully.",
        action_text="View Earnings",
        action_url="/teacher/earnings",
    ),
    (E.PAYOUT_SMS, ANY_AUDIENCE): ContentTemplate(
        title="Payout Processed",
        message=BRAND_NAME + ": Your payout of {amount} has been sent. Ref: {reference}.",
    ),
    # Accounts
    (E.ACCOUNT_SUSPENDED, ANY_AUDIENCE): ContentTemplate(
        title="Account Suspended",
        message="Your account has been suspended.{reason_suffix}",
        action_text="Contact Support",
        action_url="/support",
    ),
    (E.ACCOUNT_UNSUSPENDED, ANY_AUDIENCE): ContentTemplate(
        title="Account Reinstated",
        message="Your account has been reinstated. You can sign in again.",
        action_text="Sign In",
        action_url="/login",
    ),
    (E.ACCOUNT_DELETED, ANY_AUDIENCE): ContentTemplate(
        title="Account Deleted",
        message="Your account has been deleted.{reason_suffix}",
        action_text="Contact Support",
        action_url="/support",
    ),
    # Messaging, payments, system
    (E.MESSAGE_RECEIVED, ANY_AUDIENCE): ContentTemplate(
        title="New Message",
        message="{sender} sent you a message: {preview}",
        action_text="View Message",
        action_url="/messages/{conversation_id}",
    ),
    (E.PAYSTACK_RESTRICTION, ANY_AUDIENCE): ContentTemplate(
        title="Payment Account Restricted",
        message="Your PayStack account has been restricted.{reason_suffix} Please update your payout details.",
        action_text="Update Payout Details",
        action_url="/teacher/payment-methods",
    ),
    (E.SYSTEM_NOTIFICATION, ANY_AUDIENCE): ContentTemplate(
        title="{title}",
        message="{message}",
        action_text="{action_text}",
        action_url="{action_url}",
    ),
}


class _DisplayContext(dict):
    """Format mapping where unknown placeholders render empty."""

    def __missing__(self, key: str) -> str:
        logger.debug("Missing notification field %s", key)
        return ""


def _display(formatter: Callable[[Any], str], value: Any, fallback: str) -> str:
    if value in (None, ""):
        return fallback
    try:
        return formatter(value)
    except ValidationException:
        return str(value)


def _label(value: Any, fallback: str) -> str:
    return str(value) if value not in (None, "") else fallback


def build_display_context(payload: Mapping[str, Any]) -> _DisplayContext:
    """Raw payload values plus the formatted display fields templates use."""
    context = _DisplayContext({k: v for k, v in payload.items() if v is not None})

    reason = payload.get("reason") or payload.get("rejection_reason") or payload.get("admin_note")
    context.update(
        subject=_label(payload.get("subject_name"), UNKNOWN_SUBJECT),
        student=_label(payload.get("student_name"), STUDENT_FALLBACK),
        teacher=_label(payload.get("teacher_name"), TEACHER_FALLBACK),
        document=_label(payload.get("document_label") or payload.get("document_type"), DOCUMENT_FALLBACK),
        sender=_label(payload.get("sender_name"), "Someone"),
        date=_display(format_booking_date, payload.get("booking_date"), DATE_FALLBACK),
        time=_display(format_booking_time, payload.get("start_time"), DATE_FALLBACK),
        end_time=_display(format_booking_time, payload.get("end_time"), DATE_FALLBACK),
        old_date=_display(format_booking_date, payload.get("old_date"), DATE_FALLBACK),
        old_time=_display(format_booking_time, payload.get("old_time"), DATE_FALLBACK),
        new_date=_display(format_booking_date, payload.get("new_date"), DATE_FALLBACK),
        new_time=_display(format_booking_time, payload.get("new_time"), DATE_FALLBACK),
        call_date=_display(format_booking_date, payload.get("scheduled_call_at"), DATE_FALLBACK),
        call_time=_display(format_booking_time, payload.get("scheduled_call_at"), DATE_FALLBACK),
        reason_suffix=f" Reason: {reason}" if reason else "",
        reference=_label(payload.get("gateway_reference"), "N/A"),
    )
    if payload.get("amount") is not None:
        context["amount"] = format_currency(payload["amount"], payload.get("currency"))

    join_url = payload.get("meeting_link")
    if not join_url and payload.get("booking_id"):
        join_url = f"/bookings/{payload['booking_id']}"
    context["join_url"] = join_url or ""
    return context


def get_template(event_type: E | str, audience: str) -> ContentTemplate:
    event = E(event_type)
    template = CONTENT_TABLE.get((event, audience)) or CONTENT_TABLE.get((event, ANY_AUDIENCE))
    if template is None:
        raise ValidationException(
            f"No notification content for {event.value} / {audience}",
            code="MISSING_NOTIFICATION_CONTENT",
            details={"event_type": event.value, "audience": audience},
        )
    return template


def render_content(event_type: E | str, audience: str, context: Mapping[str, Any]) -> NotificationContent:
    """Resolve and render the content variant for one recipient."""
    event = E(event_type)
    template = get_template(event, audience)
    values = context if isinstance(context, _DisplayContext) else build_display_context(context)

    title = template.title.format_map(values)
    action_url = template.action_url.format_map(values) if template.action_url else None
    action_text = template.action_text.format_map(values) if template.action_text else None
    return NotificationContent(
        title=title,
        subject=template.subject.format_map(values) if template.subject else title,
        message=template.message.format_map(values),
        action_text=action_text or None,
        action_url=action_url or None,
        template_key=f"{event.value}.{audience}",
        type=template.type or event.value,
    )
