from datetime import date, time
from types import SimpleNamespace

import pytest

from app.core.enums import RoleName
from app.core.exceptions import (
    InvalidBookingTransitionException,
    PolicyViolationException,
    ValidationException,
)
from app.domain.booking_status import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    Actor,
    BookingAction,
    BookingStatusMachine,
)
from app.models.booking import BookingStatus
from app.notifications.events import NotificationEventType

STUDENT = Actor(user_id="student-1", role=RoleName.STUDENT, name="Ada")
TEACHER = Actor(user_id="teacher-1", role=RoleName.TEACHER, name="Tunde")
OTHER_TEACHER = Actor(user_id="teacher-9", role=RoleName.TEACHER, name="Stranger")
ADMIN = Actor(user_id="admin-1", role=RoleName.ADMIN, name="Amaka")


def _user(user_id, name, role="teacher"):
    return SimpleNamespace(id=user_id, name=name, role=role, email=f"{user_id}@example.com", phone=None)


def _booking(status=BookingStatus.PENDING):
    return SimpleNamespace(
        id="booking-1",
        booking_uuid="BK-250905001",
        status=status.value,
        student_id="student-1",
        teacher_id="teacher-1",
        student=_user("student-1", "Ada", "student"),
        teacher=_user("teacher-1", "Tunde"),
        subject=SimpleNamespace(name="Mathematics"),
        booking_date=date(2025, 9, 5),
        start_time=time(10, 0),
        end_time=time(11, 0),
    )


@pytest.fixture
def machine():
    return BookingStatusMachine()


class TestTransitionTable:
    @pytest.mark.parametrize(
        "status,action,expected",
        [
            (BookingStatus.PENDING, BookingAction.APPROVE, BookingStatus.APPROVED),
            (BookingStatus.PENDING, BookingAction.CANCEL, BookingStatus.CANCELLED),
            (BookingStatus.APPROVED, BookingAction.RESCHEDULE, BookingStatus.RESCHEDULED),
            (BookingStatus.APPROVED, BookingAction.CANCEL, BookingStatus.CANCELLED),
            (BookingStatus.APPROVED, BookingAction.COMPLETE, BookingStatus.COMPLETED),
            (BookingStatus.RESCHEDULED, BookingAction.RESUBMIT, BookingStatus.PENDING),
        ],
    )
    def test_legal_transitions(self, machine, status, action, expected):
        assert machine.next_status(status, action) == expected

    def test_terminal_statuses_have_no_outgoing_transitions(self):
        for status, _action in TRANSITIONS:
            assert status not in TERMINAL_STATUSES

    @pytest.mark.parametrize(
        "status,action",
        [
            (BookingStatus.PENDING, BookingAction.COMPLETE),
            (BookingStatus.PENDING, BookingAction.RESCHEDULE),
            (BookingStatus.APPROVED, BookingAction.APPROVE),
            (BookingStatus.RESCHEDULED, BookingAction.APPROVE),
            (BookingStatus.CANCELLED, BookingAction.APPROVE),
            (BookingStatus.COMPLETED, BookingAction.CANCEL),
        ],
    )
    def test_illegal_transition_raises_and_emits_nothing(self, machine, status, action):
        booking = _booking(status)
        with pytest.raises(InvalidBookingTransitionException):
            machine.transition(booking, action, ADMIN)
        assert booking.status == status.value

    def test_create_and_reassign_are_not_status_transitions(self, machine):
        with pytest.raises(ValidationException):
            machine.transition(_booking(), BookingAction.REASSIGN, ADMIN)


class TestGuards:
    def test_teacher_approves_own_booking(self, machine):
        result = machine.transition(_booking(), BookingAction.APPROVE, TEACHER)
        assert result.new_status == BookingStatus.APPROVED

    def test_student_cannot_approve(self, machine):
        with pytest.raises(PolicyViolationException):
            machine.transition(_booking(), BookingAction.APPROVE, STUDENT)

    def test_other_teacher_cannot_approve(self, machine):
        with pytest.raises(PolicyViolationException):
            machine.transition(_booking(), BookingAction.APPROVE, OTHER_TEACHER)

    def test_legality_is_checked_before_policy(self, machine):
        with pytest.raises(InvalidBookingTransitionException):
            machine.transition(_booking(BookingStatus.COMPLETED), BookingAction.APPROVE, STUDENT)

    def test_student_cancellation_can_be_disabled(self):
        strict = BookingStatusMachine(allow_student_cancellation=False)
        with pytest.raises(PolicyViolationException):
            strict.transition(_booking(), BookingAction.CANCEL, STUDENT)
        assert strict.transition(_booking(), BookingAction.CANCEL, TEACHER).new_status == BookingStatus.CANCELLED

    def test_student_may_create_only_for_self(self, machine):
        assert machine.create(_booking(), STUDENT).new_status == BookingStatus.PENDING
        other_student = Actor(user_id="student-2", role=RoleName.STUDENT)
        with pytest.raises(PolicyViolationException):
            machine.create(_booking(), other_student)


class TestEvents:
    def test_create_notifies_student_and_teacher(self, machine):
        result = machine.create(_booking(), STUDENT)
        (event,) = result.events
        assert event.event_type == NotificationEventType.BOOKING_CREATED
        assert [r.audience for r in event.recipients] == ["student", "teacher"]
        assert result.audit.from_status is None
        assert result.audit.to_status == BookingStatus.PENDING

    def test_approve_emits_booking_approved(self, machine):
        result = machine.transition(_booking(), BookingAction.APPROVE, TEACHER)
        (event,) = result.events
        assert event.event_type == NotificationEventType.BOOKING_APPROVED
        assert event.payload["status"] == "approved"
        assert event.payload["subject_name"] == "Mathematics"

    def test_cancel_carries_reason_and_canceller(self, machine):
        result = machine.transition(_booking(), BookingAction.CANCEL, STUDENT, reason="Sick")
        (event,) = result.events
        assert event.event_type == NotificationEventType.BOOKING_CANCELLED
        assert event.payload["reason"] == "Sick"
        assert event.payload["cancelled_by"] == "Ada"
        assert event.payload["cancelled_by_role"] == "student"
        assert result.audit.notes == "Sick"

    def test_reschedule_reports_old_and_new_schedule(self, machine):
        result = machine.transition(
            _booking(BookingStatus.APPROVED),
            BookingAction.RESCHEDULE,
            TEACHER,
            new_date=date(2025, 9, 8),
            new_start_time=time(14, 0),
            new_end_time=time(15, 0),
        )
        (event,) = result.events
        payload = event.payload
        assert (payload["old_date"], payload["old_time"]) == ("2025-09-05", "10:00")
        assert (payload["new_date"], payload["new_time"]) == ("2025-09-08", "14:00")
        assert payload["booking_date"] == "2025-09-08"
        assert payload["start_time"] == "14:00"
        assert payload["end_time"] == "15:00"
        assert result.audit.data["old_date"] == "2025-09-05"

    def test_reschedule_without_notification(self, machine):
        result = machine.transition(
            _booking(BookingStatus.APPROVED),
            BookingAction.RESCHEDULE,
            ADMIN,
            new_date=date(2025, 9, 8),
            new_start_time=time(14, 0),
            notify_parties=False,
        )
        assert result.events == []
        assert result.new_status == BookingStatus.RESCHEDULED

    def test_resubmit_goes_to_teacher_only(self, machine):
        result = machine.transition(_booking(BookingStatus.RESCHEDULED), BookingAction.RESUBMIT, STUDENT)
        (event,) = result.events
        assert event.event_type == NotificationEventType.SESSION_REQUEST
        assert [r.user_id for r in event.recipients] == ["teacher-1"]

    def test_complete_is_silent(self, machine):
        result = machine.transition(_booking(BookingStatus.APPROVED), BookingAction.COMPLETE, TEACHER)
        assert result.events == []
        assert result.audit.action == BookingAction.COMPLETE


class TestReassign:
    def test_single_event_with_three_audiences(self, machine):
        booking = _booking(BookingStatus.APPROVED)
        new_teacher = _user("teacher-2", "Bola")
        result = machine.reassign(booking, new_teacher, ADMIN, admin_note="Schedule clash")

        assert result.new_status == BookingStatus.APPROVED
        (event,) = result.events
        assert event.event_type == NotificationEventType.BOOKING_REASSIGNED
        assert {r.audience: r.user_id for r in event.recipients} == {
            "assigned": "teacher-2",
            "removed": "teacher-1",
            "student": "student-1",
        }
        assert event.payload["teacher_name"] == "Bola"
        assert event.payload["old_teacher_name"] == "Tunde"
        assert result.audit.from_status == result.audit.to_status

    def test_admin_only(self, machine):
        with pytest.raises(PolicyViolationException):
            machine.reassign(_booking(), _user("teacher-2", "Bola"), TEACHER)

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_bookings_cannot_be_reassigned(self, machine, status):
        with pytest.raises(InvalidBookingTransitionException):
            machine.reassign(_booking(status), _user("teacher-2", "Bola"), ADMIN)

    def test_same_teacher_rejected(self, machine):
        with pytest.raises(ValidationException) as exc_info:
            machine.reassign(_booking(), _user("teacher-1", "Tunde"), ADMIN)
        assert exc_info.value.code == "SAME_TEACHER"

    def test_notify_parties_false_emits_nothing(self, machine):
        result = machine.reassign(_booking(), _user("teacher-2", "Bola"), ADMIN, notify_parties=False)
        assert result.events == []
        assert result.audit.data["notify_parties"] is False
