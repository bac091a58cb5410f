from unittest.mock import patch

import pytest

from app.core.enums import DeliveryProfile, NotificationChannel
from app.notifications.dispatcher import DeliveryStatus, NotificationDispatcher
from app.notifications.events import NotificationEvent, NotificationEventType as E, Recipient

from tests.helpers.channels import FailingChannel, RecordingChannel

STUDENT = Recipient(user_id="s1", role="student", audience="student", name="Ada", email="ada@example.com")
TEACHER = Recipient(user_id="t1", role="teacher", audience="teacher", name="Tunde", email="t@example.com")
ADMIN = Recipient(user_id="a1", role="admin", audience="admin", name="Amaka")

PAYLOAD = {"booking_id": "bk1", "subject_name": "Mathematics", "student_name": "Ada", "teacher_name": "Tunde"}


@pytest.fixture
def recording():
    return {channel: RecordingChannel(channel.value) for channel in NotificationChannel}


def test_fans_out_per_recipient_and_channel(recording):
    dispatcher = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)
    attempts = dispatcher.dispatch(E.BOOKING_CREATED, PAYLOAD, [STUDENT, TEACHER])

    assert [(a.recipient_id, a.channel) for a in attempts] == [
        ("s1", NotificationChannel.DATABASE),
        ("s1", NotificationChannel.MAIL),
        ("t1", NotificationChannel.DATABASE),
        ("t1", NotificationChannel.MAIL),
    ]
    assert all(a.status == DeliveryStatus.SENT for a in attempts)
    student_mail, teacher_mail = recording[NotificationChannel.MAIL].messages
    assert student_mail.content.title == "Booking Confirmed"
    assert teacher_mail.content.title == "New Booking Request"
    assert teacher_mail.data["booking_id"] == "bk1"


def test_profile_gates_mail_for_approvals(recording):
    non_prod = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)
    non_prod.dispatch(E.BOOKING_APPROVED, PAYLOAD, [STUDENT])
    assert recording[NotificationChannel.MAIL].messages == []
    assert len(recording[NotificationChannel.DATABASE].messages) == 1

    prod = NotificationDispatcher(recording, profile="production")
    prod.dispatch(E.BOOKING_APPROVED, PAYLOAD, [STUDENT])
    assert len(recording[NotificationChannel.MAIL].messages) == 1


def test_failing_channel_does_not_stop_siblings(recording):
    recording[NotificationChannel.MAIL] = FailingChannel("mail")
    dispatcher = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)

    attempts = dispatcher.dispatch(E.DOCUMENT_REJECTED, {"reason": "Blurry"}, [TEACHER, ADMIN])

    by_channel = {(a.recipient_id, a.channel): a for a in attempts}
    assert by_channel[("t1", NotificationChannel.MAIL)].status == DeliveryStatus.FAILED
    assert "transport unavailable" in by_channel[("t1", NotificationChannel.MAIL)].error
    assert by_channel[("t1", NotificationChannel.BROADCAST)].status == DeliveryStatus.SENT
    assert by_channel[("a1", NotificationChannel.DATABASE)].status == DeliveryStatus.SENT
    assert len(recording[NotificationChannel.BROADCAST].messages) == 2


def test_unexpected_adapter_error_is_contained(recording):
    recording[NotificationChannel.DATABASE] = FailingChannel("database", error=RuntimeError("boom"))
    dispatcher = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)

    attempts = dispatcher.dispatch(E.SESSION_REQUEST, PAYLOAD, [TEACHER])

    assert [a.status for a in attempts] == [DeliveryStatus.FAILED, DeliveryStatus.SENT]
    assert attempts[0].error == "boom"


def test_missing_adapter_is_skipped():
    dispatcher = NotificationDispatcher({}, profile=DeliveryProfile.NON_PRODUCTION)
    (attempt,) = dispatcher.dispatch(E.PAYOUT_SMS, {"amount": "10"}, [TEACHER])
    assert attempt.status == DeliveryStatus.SKIPPED
    assert attempt.channel == NotificationChannel.SMS


def test_missing_content_marks_recipient_failed(recording):
    dispatcher = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)
    attempts = dispatcher.dispatch(E.BOOKING_CREATED, PAYLOAD, [ADMIN, STUDENT])

    admin_attempts = [a for a in attempts if a.recipient_id == "a1"]
    assert {a.status for a in admin_attempts} == {DeliveryStatus.FAILED}
    assert recording[NotificationChannel.DATABASE].recipients == ["s1"]


def test_reassignment_renders_one_variant_per_audience(recording):
    dispatcher = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)
    recipients = [
        Recipient(user_id="t2", role="teacher", audience="assigned"),
        Recipient(user_id="t1", role="teacher", audience="removed"),
        Recipient(user_id="s1", role="student", audience="student"),
    ]
    dispatcher.dispatch_event(NotificationEvent(E.BOOKING_REASSIGNED, PAYLOAD, tuple(recipients)))

    types = [m.content.type for m in recording[NotificationChannel.DATABASE].messages]
    assert types == [
        "booking_reassigned_assigned",
        "booking_reassigned_removed",
        "booking_reassigned_student",
    ]


def test_metrics_recorded_per_attempt(recording):
    dispatcher = NotificationDispatcher(recording, profile=DeliveryProfile.NON_PRODUCTION)
    with patch(
        "app.notifications.dispatcher.PrometheusMetrics.record_notification_delivery"
    ) as record:
        dispatcher.dispatch(E.MESSAGE_RECEIVED, {"sender_name": "Ada"}, [TEACHER])
    record.assert_any_call("message_received", "broadcast", "sent")
    assert record.call_count == 3


def test_default_profile_comes_from_settings(recording):
    dispatcher = NotificationDispatcher(recording)
    assert dispatcher.profile == DeliveryProfile.NON_PRODUCTION


def test_profile_defaults_to_configured_profile(recording):
    with patch("app.notifications.dispatcher.settings") as configured:
        configured.delivery_profile = DeliveryProfile.PRODUCTION
        dispatcher = NotificationDispatcher(recording)

    assert dispatcher.profile == DeliveryProfile.PRODUCTION
    attempts = dispatcher.dispatch(E.BOOKING_APPROVED, PAYLOAD, [STUDENT])
    assert [a.channel for a in attempts] == [NotificationChannel.DATABASE, NotificationChannel.MAIL]
