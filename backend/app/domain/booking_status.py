# backend/app/domain/booking_status.py
"""
Booking status machine.

    pending ──approve──▶ approved ──reschedule──▶ rescheduled
       │                    │  │                      │
     cancel              cancel complete            resubmit
       ▼                    ▼  ▼                      │
    cancelled          cancelled completed      pending ◀┘

``cancelled`` and ``completed`` are terminal. Reassignment (changing the
teacher) is a side channel: it never changes the status.

The machine only decides. It never mutates the booking; it returns the new
status, the notification events to dispatch and the audit entry to persist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from ..core.enums import RoleName
from ..core.exceptions import (
    InvalidBookingTransitionException,
    PolicyViolationException,
    ValidationException,
)
from ..models.booking import BookingStatus
from ..notifications.events import (
    NotificationEvent,
    NotificationEventType,
    booking_event,
    booking_reassigned_event,
)

logger = logging.getLogger(__name__)


class BookingAction(str, Enum):
    CREATE = "create"
    APPROVE = "approve"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    RESUBMIT = "resubmit"
    COMPLETE = "complete"
    REASSIGN = "reassign"


TRANSITIONS: Mapping[Tuple[BookingStatus, BookingAction], BookingStatus] = {
    (BookingStatus.PENDING, BookingAction.APPROVE): BookingStatus.APPROVED,
    (BookingStatus.PENDING, BookingAction.CANCEL): BookingStatus.CANCELLED,
    (BookingStatus.APPROVED, BookingAction.RESCHEDULE): BookingStatus.RESCHEDULED,
    (BookingStatus.APPROVED, BookingAction.CANCEL): BookingStatus.CANCELLED,
    (BookingStatus.APPROVED, BookingAction.COMPLETE): BookingStatus.COMPLETED,
    (BookingStatus.RESCHEDULED, BookingAction.RESUBMIT): BookingStatus.PENDING,
}

TERMINAL_STATUSES: FrozenSet[BookingStatus] = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.COMPLETED}
)


@dataclass(frozen=True)
class Actor:
    """The user performing a booking action."""

    user_id: str
    role: RoleName
    name: Optional[str] = None

    @classmethod
    def from_user(cls, user: Any) -> "Actor":
        return cls(user_id=user.id, role=RoleName(user.role), name=getattr(user, "name", None))

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN


@dataclass(frozen=True)
class AuditEntry:
    booking_id: str
    action: BookingAction
    from_status: Optional[BookingStatus]
    to_status: BookingStatus
    actor_id: str
    timestamp: datetime
    notes: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TransitionResult:
    new_status: BookingStatus
    events: List[NotificationEvent]
    audit: AuditEntry


def _status(booking: Any) -> BookingStatus:
    try:
        return BookingStatus(booking.status)
    except ValueError:
        raise ValidationException(
            f"Unknown booking status: {booking.status!r}",
            code="UNKNOWN_BOOKING_STATUS",
        )


def _format_date(value: Any) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _format_time(value: Any) -> Optional[str]:
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value


class BookingStatusMachine:
    """
    Guarded booking transitions.

    Args:
        allow_student_cancellation: whether the booking's student may cancel
    """

    def __init__(self, allow_student_cancellation: bool = True):
        self.allow_student_cancellation = allow_student_cancellation

    # Guards

    def _is_participant(self, booking: Any, actor: Actor) -> bool:
        return actor.user_id in (booking.student_id, booking.teacher_id)

    def _is_booking_teacher(self, booking: Any, actor: Actor) -> bool:
        return actor.role == RoleName.TEACHER and actor.user_id == booking.teacher_id

    def _is_booking_student(self, booking: Any, actor: Actor) -> bool:
        return actor.role == RoleName.STUDENT and actor.user_id == booking.student_id

    def can_perform(self, booking: Any, action: BookingAction, actor: Actor) -> bool:
        if actor.is_admin:
            return True
        if action in (BookingAction.APPROVE, BookingAction.COMPLETE):
            return self._is_booking_teacher(booking, actor)
        if action == BookingAction.CANCEL:
            if self._is_booking_teacher(booking, actor):
                return True
            return self.allow_student_cancellation and self._is_booking_student(booking, actor)
        if action in (BookingAction.RESCHEDULE, BookingAction.RESUBMIT):
            return self._is_participant(booking, actor)
        if action == BookingAction.CREATE:
            return self._is_booking_student(booking, actor)
        return False

    def _guard(self, booking: Any, action: BookingAction, actor: Actor) -> None:
        if not self.can_perform(booking, action, actor):
            raise PolicyViolationException(action=action.value, role=actor.role.value)

    # Transitions

    def next_status(self, current: BookingStatus, action: BookingAction) -> BookingStatus:
        try:
            return TRANSITIONS[(current, action)]
        except KeyError:
            raise InvalidBookingTransitionException(from_status=current.value, action=action.value)

    def create(self, booking: Any, actor: Actor) -> TransitionResult:
        """A new booking enters as pending and notifies both participants."""
        self._guard(booking, BookingAction.CREATE, actor)
        audit = self._audit(booking, BookingAction.CREATE, None, BookingStatus.PENDING, actor)
        events = [booking_event(NotificationEventType.BOOKING_CREATED, booking)]
        return TransitionResult(new_status=BookingStatus.PENDING, events=events, audit=audit)

    def transition(
        self,
        booking: Any,
        action: BookingAction,
        actor: Actor,
        **context: Any,
    ) -> TransitionResult:
        """
        Decide the outcome of ``action`` on ``booking``.

        Context keys by action:
            cancel: reason
            reschedule: new_date, new_start_time, new_end_time, reason, notify_parties
            resubmit/complete/approve: notes

        Raises:
            InvalidBookingTransitionException: action illegal from current status
            PolicyViolationException: actor not allowed to perform action
        """
        action = BookingAction(action)
        if action in (BookingAction.CREATE, BookingAction.REASSIGN):
            raise ValidationException(
                f"{action.value} is not a status transition", code="UNSUPPORTED_ACTION"
            )

        current = _status(booking)
        new_status = self.next_status(current, action)
        self._guard(booking, action, actor)

        data: Dict[str, Any] = {}
        events: List[NotificationEvent] = []
        notes = context.get("notes") or context.get("reason")

        if action == BookingAction.APPROVE:
            events.append(
                booking_event(
                    NotificationEventType.BOOKING_APPROVED,
                    booking,
                    extra={"status": new_status.value},
                )
            )

        elif action == BookingAction.CANCEL:
            data = {
                "cancelled_by": actor.name or actor.role.value,
                "cancelled_by_role": actor.role.value,
                "reason": context.get("reason"),
            }
            events.append(
                booking_event(
                    NotificationEventType.BOOKING_CANCELLED,
                    booking,
                    extra={**data, "status": new_status.value},
                )
            )

        elif action == BookingAction.RESCHEDULE:
            # Captured before the service moves the booking in place
            data = {
                "old_date": _format_date(booking.booking_date),
                "old_time": _format_time(booking.start_time),
                "new_date": _format_date(context.get("new_date")),
                "new_time": _format_time(context.get("new_start_time")),
                "reason": context.get("reason"),
            }
            if context.get("notify_parties", True):
                extra = dict(data, status=new_status.value)
                if context.get("new_date") is not None:
                    extra["booking_date"] = data["new_date"]
                if context.get("new_start_time") is not None:
                    extra["start_time"] = data["new_time"]
                if context.get("new_end_time") is not None:
                    extra["end_time"] = _format_time(context.get("new_end_time"))
                events.append(
                    booking_event(NotificationEventType.BOOKING_RESCHEDULED, booking, extra=extra)
                )

        elif action == BookingAction.RESUBMIT:
            events.append(
                booking_event(
                    NotificationEventType.SESSION_REQUEST,
                    booking,
                    to_student=False,
                    extra={"status": new_status.value, "notes": context.get("notes")},
                )
            )

        # complete: no notification

        audit = self._audit(booking, action, current, new_status, actor, notes=notes, data=data)
        logger.info(
            "Booking %s: %s %s -> %s by %s",
            booking.id,
            action.value,
            current.value,
            new_status.value,
            actor.user_id,
        )
        return TransitionResult(new_status=new_status, events=events, audit=audit)

    def reassign(
        self,
        booking: Any,
        new_teacher: Any,
        actor: Actor,
        notify_parties: bool = True,
        admin_note: Optional[str] = None,
    ) -> TransitionResult:
        """
        Move a booking to a different teacher without changing its status.

        Admin only, non-terminal bookings only. Emits a single
        ``booking_reassigned`` event addressed to the new teacher
        (assigned), the old teacher (removed) and the student.
        """
        current = _status(booking)
        if not actor.is_admin:
            raise PolicyViolationException(action=BookingAction.REASSIGN.value, role=actor.role.value)
        if current in TERMINAL_STATUSES:
            raise InvalidBookingTransitionException(
                from_status=current.value, action=BookingAction.REASSIGN.value
            )
        if new_teacher.id == booking.teacher_id:
            raise ValidationException(
                "Booking is already assigned to this teacher",
                code="SAME_TEACHER",
                details={"teacher_id": new_teacher.id},
            )

        old_teacher = booking.teacher
        data = {
            "old_teacher_id": booking.teacher_id,
            "new_teacher_id": new_teacher.id,
            "notify_parties": notify_parties,
        }
        events: List[NotificationEvent] = []
        if notify_parties:
            events.append(booking_reassigned_event(booking, old_teacher, new_teacher, admin_note))

        audit = self._audit(
            booking, BookingAction.REASSIGN, current, current, actor, notes=admin_note, data=data
        )
        return TransitionResult(new_status=current, events=events, audit=audit)

    def _audit(
        self,
        booking: Any,
        action: BookingAction,
        from_status: Optional[BookingStatus],
        to_status: BookingStatus,
        actor: Actor,
        notes: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        return AuditEntry(
            booking_id=booking.id,
            action=action,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor.user_id,
            timestamp=datetime.now(timezone.utc),
            notes=notes,
            data=dict(data or {}),
        )
