import pytest

from app.core.exceptions import ValidationException
from app.notifications.content import (
    CONTENT_TABLE,
    build_display_context,
    get_template,
    render_content,
)
from app.notifications.events import NotificationEventType as E

BOOKING_PAYLOAD = {
    "booking_id": "bk1",
    "subject_name": "Mathematics",
    "student_name": "Ada",
    "teacher_name": "Tunde",
    "booking_date": "2025-09-05",
    "start_time": "10:00",
    "end_time": "11:00",
}


def test_every_event_has_content():
    covered = {event for event, _audience in CONTENT_TABLE}
    assert covered == set(E)


def test_booking_created_variants_differ_by_audience():
    student = render_content(E.BOOKING_CREATED, "student", BOOKING_PAYLOAD)
    teacher = render_content(E.BOOKING_CREATED, "teacher", BOOKING_PAYLOAD)

    assert student.title == "Booking Confirmed"
    assert student.message == (
        "Your booking for Mathematics with Tunde has been created and is pending approval."
    )
    assert student.action_url == "/student/bookings/bk1"
    assert teacher.title == "New Booking Request"
    assert teacher.message == "You have a new booking request from Ada for Mathematics."
    assert teacher.subject == "New Booking Request Received"
    assert teacher.template_key == "booking_created.teacher"
    assert teacher.type == "booking_created"


def test_reassignment_variants_and_types():
    payload = dict(BOOKING_PAYLOAD, teacher_name="Bola")
    assigned = render_content(E.BOOKING_REASSIGNED, "assigned", payload)
    removed = render_content(E.BOOKING_REASSIGNED, "removed", payload)
    student = render_content(E.BOOKING_REASSIGNED, "student", payload)

    assert assigned.type == "booking_reassigned_assigned"
    assert removed.type == "booking_reassigned_removed"
    assert student.type == "booking_reassigned_student"
    assert assigned.message == (
        "You have been assigned to teach Mathematics for Ada on September 5, 2025 at 10:00 AM."
    )
    assert "removed" in removed.message
    assert student.title == "Teacher Changed"


def test_cancellation_reason_suffix():
    with_reason = render_content(E.BOOKING_CANCELLED, "student", dict(BOOKING_PAYLOAD, reason="Sick"))
    without = render_content(E.BOOKING_CANCELLED, "student", BOOKING_PAYLOAD)
    assert with_reason.message.endswith("has been cancelled. Reason: Sick")
    assert without.message.endswith("has been cancelled.")


def test_missing_fields_use_fallback_labels():
    content = render_content(E.BOOKING_CREATED, "student", {"booking_id": "bk1"})
    assert content.message == (
        "Your booking for Unknown Subject with Teacher has been created and is pending approval."
    )
    cancelled = render_content(E.BOOKING_CANCELLED, "teacher", {})
    assert "with Student on TBD at TBD" in cancelled.message


def test_unparsable_date_is_shown_raw():
    context = build_display_context({"booking_date": "someday", "start_time": "10:00"})
    assert context["date"] == "someday"
    assert context["time"] == "10:00 AM"


def test_unknown_placeholders_render_empty():
    context = build_display_context({})
    assert "{nothing}".format_map(context) == ""


def test_wildcard_audience_fallback():
    content = render_content(E.PAYOUT_PROCESSED, "teacher", {"amount": "50000", "currency": "NGN"})
    assert content.message == "Your payout of ₦50,000.00 has been processed successfully."
    assert content.template_key == "payout_processed.teacher"


def test_session_reminder_join_url():
    with_link = render_content(
        E.SESSION_REMINDER, "student", dict(BOOKING_PAYLOAD, meeting_link="https://meet.example.com/x")
    )
    without = render_content(E.SESSION_REMINDER, "teacher", BOOKING_PAYLOAD)
    assert with_link.action_url == "https://meet.example.com/x"
    assert without.action_url == "/bookings/bk1"
    assert with_link.message == "Your Mathematics session with Tunde is starting in 15 minutes!"


def test_system_notification_passes_through():
    content = render_content(
        E.SYSTEM_NOTIFICATION, "student", {"title": "Maintenance", "message": "Down at 2am"}
    )
    assert (content.title, content.message) == ("Maintenance", "Down at 2am")
    assert content.action_url is None
    assert content.action_text is None


def test_missing_variant_raises():
    with pytest.raises(ValidationException) as exc_info:
        get_template(E.BOOKING_CREATED, "admin")
    assert exc_info.value.code == "MISSING_NOTIFICATION_CONTENT"
