# backend/tests/services/test_verification_service.py
"""Tests for VerificationService: the verification call workflow."""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import BusinessRuleException, PolicyViolationException, ValidationException
from app.models.notification import Notification
from app.models.verification import VerificationStatus
from app.notifications.formatting import format_booking_date
from app.services.verification_service import VerificationService


@pytest.fixture
def verification_service(db, notification_service) -> VerificationService:
    return VerificationService(db, notification_service)


@pytest.fixture
def request_(verification_service, test_teacher, test_admin):
    return verification_service.create_request(test_teacher)


@pytest.fixture
def call_time() -> datetime:
    return (datetime.now(timezone.utc) + timedelta(days=2)).replace(hour=14, minute=0, second=0, microsecond=0)


def test_create_request_reuses_pending(verification_service, request_, test_teacher):
    assert request_.status == VerificationStatus.PENDING
    assert verification_service.create_request(test_teacher).id == request_.id


def test_students_cannot_request(verification_service, test_student):
    with pytest.raises(ValidationException):
        verification_service.create_request(test_student)


def test_full_workflow(verification_service, request_, db, broadcast_channel, test_admin, test_teacher, call_time):
    scheduled = verification_service.schedule_call(
        request_.id, test_admin, call_time, meeting_link="https://meet.example.com/verify"
    )
    assert scheduled.status == VerificationStatus.CALL_SCHEDULED
    message = (
        db.query(Notification)
        .filter(Notification.user_id == test_teacher.id)
        .one()
        .message
    )
    assert message == f"Your verification call is scheduled for {format_booking_date(call_time)} at 02:00 PM."

    started = verification_service.start_call(request_.id, test_admin)
    assert started.status == VerificationStatus.CALL_IN_PROGRESS
    join = broadcast_channel.for_event("verification_call_started")
    assert {m.content.action_url for m in join} == {"https://meet.example.com/verify"}

    completed = verification_service.complete_call(request_.id, test_admin, notes="Looks good")
    assert completed.status == VerificationStatus.CALL_COMPLETED
    assert completed.notes == "Looks good"

    approved = verification_service.approve(request_.id, test_admin)
    assert approved.status == VerificationStatus.APPROVED
    assert approved.reviewed_by_id == test_admin.id


def test_cannot_approve_before_call(verification_service, request_, test_admin):
    with pytest.raises(BusinessRuleException) as exc:
        verification_service.approve(request_.id, test_admin)
    assert exc.value.code == "INVALID_VERIFICATION_TRANSITION"
    assert exc.value.details == {"from_status": "pending", "step": "approve"}


def test_reject_from_any_open_step(verification_service, request_, db, test_admin, test_teacher, call_time):
    verification_service.schedule_call(request_.id, test_admin, call_time)

    rejected = verification_service.reject(request_.id, test_admin, "Credentials could not be confirmed")

    assert rejected.status == VerificationStatus.REJECTED
    assert rejected.rejection_reason == "Credentials could not be confirmed"
    latest = (
        db.query(Notification)
        .filter(Notification.user_id == test_teacher.id, Notification.type == "verification_rejected")
        .one()
    )
    assert latest.message.endswith("Reason: Credentials could not be confirmed")

    with pytest.raises(BusinessRuleException):
        verification_service.reject(request_.id, test_admin, "Again")


def test_call_must_be_in_future(verification_service, request_, test_admin):
    with pytest.raises(ValidationException) as exc:
        verification_service.schedule_call(request_.id, test_admin, datetime(2020, 1, 1, 9, 0))
    assert exc.value.code == "DATE_IN_PAST"


def test_reject_requires_reason(verification_service, request_, test_admin):
    with pytest.raises(ValidationException):
        verification_service.reject(request_.id, test_admin, " ")


def test_admin_only(verification_service, request_, test_teacher, call_time):
    with pytest.raises(PolicyViolationException):
        verification_service.schedule_call(request_.id, test_teacher, call_time)
