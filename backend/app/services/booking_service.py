# backend/app/services/booking_service.py
"""
Booking Service for the TutorConnect platform

Orchestrates the booking lifecycle on top of the BookingStatusMachine:
the machine decides (new status, events, audit entry), this service
applies the mutation, persists the audit row, commits, and only then
dispatches notifications. A failed notification never rolls back a
committed booking change.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    BOOKING_REFERENCE_ATTEMPTS,
    MAX_REASON_LENGTH,
    MAX_SESSION_DURATION,
    MIN_SESSION_DURATION,
)
from ..core.enums import AccountStatus, Currency, RoleName
from ..core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from ..domain.booking_status import Actor, BookingAction, BookingStatusMachine, TransitionResult
from ..domain.earnings import compute_earning, has_configured_rate, parse_session_time, round_amount
from ..models.booking import Booking, BookingHistory, BookingStatus, generate_booking_reference
from ..models.teaching_session import SessionStatus, TeachingSession
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..notifications.dispatcher import DeliveryAttempt
from ..notifications.events import NotificationEvent, session_reminder_event
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


def _minutes_between(start: time, end: time) -> int:
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Every public action returns the updated booking; the delivery attempts
    of the last dispatch are kept on ``last_delivery_attempts``.
    """

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        status_machine: Optional[BookingStatusMachine] = None,
    ):
        super().__init__(db)
        self.notification_service = notification_service or NotificationService(db)
        self.status_machine = status_machine or BookingStatusMachine(
            allow_student_cancellation=settings.allow_student_cancellation
        )
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.session_repository = RepositoryFactory.create_teaching_session_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.last_delivery_attempts: List[DeliveryAttempt] = []

    # Lookups

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_booking_with_details(booking_id)
        if not booking:
            raise NotFoundException(f"Booking {booking_id} not found", code="BOOKING_NOT_FOUND")
        return booking

    def get_booking_history(self, booking_id: str) -> List[BookingHistory]:
        self.get_booking(booking_id)
        return self.repository.get_history(booking_id)

    def _get_user_with_role(self, user_id: str, role: RoleName) -> User:
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if not user:
            raise NotFoundException(f"{role.value.title()} {user_id} not found", code="USER_NOT_FOUND")
        if user.role != role:
            raise ValidationException(
                f"User {user_id} is not a {role.value}",
                code="INVALID_ROLE",
                details={"user_id": user_id, "expected_role": role.value},
            )
        if user.account_status != AccountStatus.ACTIVE:
            raise BusinessRuleException(
                f"{role.value.title()} account is not active", code="ACCOUNT_NOT_ACTIVE"
            )
        return user

    def _new_booking_reference(self) -> str:
        """Draw a ``BK-<yymmdd><nnn>`` reference not yet used by any booking."""
        for _ in range(BOOKING_REFERENCE_ATTEMPTS):
            reference = generate_booking_reference()
            if self.repository.find_one_by(booking_uuid=reference) is None:
                return reference
            logger.debug("Booking reference %s already taken; drawing again", reference)
        raise ServiceException(
            "Could not allocate a unique booking reference", code="BOOKING_REFERENCE_EXHAUSTED"
        )

    # Validation helpers

    def _validate_schedule(self, start_time: Any, end_time: Any) -> tuple[time, time, int]:
        start = parse_session_time(start_time)
        end = parse_session_time(end_time)
        if end <= start:
            raise ValidationException(
                "End time must be after start time",
                code="INVALID_TIME_RANGE",
                details={"start_time": start.isoformat(), "end_time": end.isoformat()},
            )
        duration = _minutes_between(start, end)
        if not MIN_SESSION_DURATION <= duration <= MAX_SESSION_DURATION:
            raise ValidationException(
                f"Session duration must be between {MIN_SESSION_DURATION} and "
                f"{MAX_SESSION_DURATION} minutes",
                code="INVALID_DURATION",
                details={"duration_minutes": duration},
            )
        return start, end, duration

    @staticmethod
    def _validate_reason(reason: Optional[str]) -> Optional[str]:
        if reason and len(reason) > MAX_REASON_LENGTH:
            raise ValidationException(
                f"Reason must be at most {MAX_REASON_LENGTH} characters", code="REASON_TOO_LONG"
            )
        return reason

    def _default_fee(self, teacher: User, currency: str, start: time, end: time) -> Optional[Decimal]:
        profile = teacher.teacher_profile
        if profile is None or not has_configured_rate(profile.hourly_rate_usd, profile.hourly_rate_ngn):
            return None
        earning = compute_earning(
            profile.hourly_rate_usd,
            profile.hourly_rate_ngn,
            start,
            end,
            whole_hours=settings.earnings_whole_hour_billing,
        )
        return round_amount(earning.amount_for(currency))

    # Persistence helpers

    def _record(self, result: TransitionResult) -> None:
        audit = result.audit
        self.repository.add_history(
            booking_id=audit.booking_id,
            action=audit.action.value,
            from_status=audit.from_status.value if audit.from_status else None,
            to_status=audit.to_status.value,
            performed_by_id=audit.actor_id,
            notes=audit.notes,
            data=audit.data or None,
        )
        prometheus_metrics.inc_booking_transition(audit.action.value, audit.to_status.value)

    def _dispatch(self, events: List[NotificationEvent]) -> List[DeliveryAttempt]:
        self.last_delivery_attempts = self.notification_service.notify_all(events)
        return self.last_delivery_attempts

    # Actions

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        actor_user: User,
        student_id: str,
        teacher_id: str,
        booking_date: date,
        start_time: Any,
        end_time: Any,
        subject_id: Optional[str] = None,
        notes: Optional[str] = None,
        total_fee: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> Booking:
        """
        Create a pending booking and notify student and teacher.

        Raises:
            ValidationException: bad times or past date
            PolicyViolationException: actor may not book for this student
        """
        start, end, duration = self._validate_schedule(start_time, end_time)
        if booking_date < date.today():
            raise ValidationException("Cannot book a session in the past", code="DATE_IN_PAST")

        student = self._get_user_with_role(student_id, RoleName.STUDENT)
        teacher = self._get_user_with_role(teacher_id, RoleName.TEACHER)
        profile = teacher.teacher_profile
        currency = Currency(
            (currency or (profile.preferred_currency if profile else None) or Currency.NGN.value).upper()
        ).value
        if total_fee is None:
            total_fee = self._default_fee(teacher, currency, start, end)

        actor = Actor.from_user(actor_user)
        with self.transaction():
            booking = self.repository.create(
                booking_uuid=self._new_booking_reference(),
                student_id=student.id,
                teacher_id=teacher.id,
                subject_id=subject_id,
                booking_date=booking_date,
                start_time=start,
                end_time=end,
                duration_minutes=duration,
                status=BookingStatus.PENDING.value,
                total_fee=total_fee,
                currency=currency,
                notes=notes,
                created_by_id=actor.user_id,
            )
            self.db.refresh(booking)
            result = self.status_machine.create(booking, actor)
            self._record(result)

        self.log_operation("booking_created", booking_id=booking.id, booking_uuid=booking.booking_uuid)
        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("approve_booking")
    def approve_booking(self, booking_id: str, actor_user: User) -> Booking:
        """Approve a pending booking and create its teaching session."""
        booking = self.get_booking(booking_id)
        actor = Actor.from_user(actor_user)
        result = self.status_machine.transition(booking, BookingAction.APPROVE, actor)

        with self.transaction():
            booking.status = result.new_status.value
            booking.approved_by_id = actor.user_id
            booking.approved_at = datetime.now(timezone.utc)
            session = booking.teaching_session
            if session is None:
                session = TeachingSession(booking_id=booking.id)
                self.db.add(session)
                booking.teaching_session = session
            session.teacher_id = booking.teacher_id
            session.student_id = booking.student_id
            session.subject_id = booking.subject_id
            session.session_date = booking.booking_date
            session.start_time = booking.start_time
            session.end_time = booking.end_time
            session.status = SessionStatus.SCHEDULED.value
            self._record(result)

        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, actor_user: User, reason: Optional[str] = None) -> Booking:
        booking = self.get_booking(booking_id)
        actor = Actor.from_user(actor_user)
        reason = self._validate_reason(reason)
        result = self.status_machine.transition(booking, BookingAction.CANCEL, actor, reason=reason)

        with self.transaction():
            booking.status = result.new_status.value
            booking.cancelled_by_id = actor.user_id
            booking.cancelled_at = datetime.now(timezone.utc)
            booking.cancellation_reason = reason
            if booking.teaching_session is not None:
                booking.teaching_session.status = SessionStatus.CANCELLED.value
            self._record(result)

        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("reschedule_booking")
    def reschedule_booking(
        self,
        booking_id: str,
        actor_user: User,
        new_date: date,
        new_start_time: Any,
        reason: Optional[str] = None,
        notify_parties: bool = True,
    ) -> Booking:
        """
        Move an approved booking to a new date/time.

        The new date must be after today; the end time keeps the booked
        duration. The previous date/time travel in the notification payload.
        """
        booking = self.get_booking(booking_id)
        actor = Actor.from_user(actor_user)
        reason = self._validate_reason(reason)
        if new_date <= date.today():
            raise ValidationException(
                "New date must be after today", code="INVALID_RESCHEDULE_DATE"
            )
        start = parse_session_time(new_start_time)
        end_dt = datetime.combine(new_date, start) + timedelta(minutes=booking.duration_minutes)
        if end_dt.date() != new_date:
            raise ValidationException(
                "Rescheduled session must end on the same day", code="INVALID_TIME_RANGE"
            )
        end = end_dt.time()

        result = self.status_machine.transition(
            booking,
            BookingAction.RESCHEDULE,
            actor,
            new_date=new_date,
            new_start_time=start,
            new_end_time=end,
            reason=reason,
            notify_parties=notify_parties,
        )

        with self.transaction():
            booking.status = result.new_status.value
            booking.booking_date = new_date
            booking.start_time = start
            booking.end_time = end
            session = booking.teaching_session
            if session is not None:
                session.session_date = new_date
                session.start_time = start
                session.end_time = end
            self._record(result)

        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("resubmit_booking")
    def resubmit_booking(self, booking_id: str, actor_user: User, notes: Optional[str] = None) -> Booking:
        """Send a rescheduled booking back to the teacher for approval."""
        booking = self.get_booking(booking_id)
        actor = Actor.from_user(actor_user)
        result = self.status_machine.transition(booking, BookingAction.RESUBMIT, actor, notes=notes)

        with self.transaction():
            booking.status = result.new_status.value
            booking.approved_by_id = None
            booking.approved_at = None
            self._record(result)

        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: str, actor_user: User) -> Booking:
        booking = self.get_booking(booking_id)
        actor = Actor.from_user(actor_user)
        result = self.status_machine.transition(booking, BookingAction.COMPLETE, actor)

        with self.transaction():
            booking.status = result.new_status.value
            booking.completed_at = datetime.now(timezone.utc)
            if booking.teaching_session is not None:
                booking.teaching_session.status = SessionStatus.COMPLETED.value
            self._record(result)

        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("reassign_booking")
    def reassign_booking(
        self,
        booking_id: str,
        actor_user: User,
        new_teacher_id: str,
        admin_note: Optional[str] = None,
        notify_parties: bool = True,
    ) -> Booking:
        """Hand a booking to another teacher (admin only, status unchanged)."""
        booking = self.get_booking(booking_id)
        actor = Actor.from_user(actor_user)
        admin_note = self._validate_reason(admin_note)
        new_teacher = self._get_user_with_role(new_teacher_id, RoleName.TEACHER)
        result = self.status_machine.reassign(
            booking, new_teacher, actor, notify_parties=notify_parties, admin_note=admin_note
        )

        with self.transaction():
            booking.teacher_id = new_teacher.id
            booking.teacher = new_teacher
            if booking.teaching_session is not None:
                booking.teaching_session.teacher_id = new_teacher.id
            self._record(result)

        self._dispatch(result.events)
        return booking

    @BaseService.measure_operation("send_session_reminder")
    def send_session_reminder(self, booking_id: str) -> List[DeliveryAttempt]:
        """Remind both participants that an approved session is about to start."""
        booking = self.get_booking(booking_id)
        if booking.status != BookingStatus.APPROVED:
            raise BusinessRuleException(
                "Reminders are only sent for approved bookings",
                code="BOOKING_NOT_APPROVED",
                details={"status": booking.status},
            )
        session = booking.teaching_session
        meeting_link = session.meeting_link if session is not None else None
        return self._dispatch([session_reminder_event(booking, meeting_link)])
