# backend/tests/services/test_document_service.py
"""Tests for DocumentService."""

import pytest

from app.core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    PolicyViolationException,
    ValidationException,
)
from app.models.document import DocumentStatus
from app.models.notification import Notification
from app.services.document_service import DocumentService


@pytest.fixture
def document_service(db, notification_service) -> DocumentService:
    return DocumentService(db, notification_service)


@pytest.fixture
def document(document_service, test_teacher, test_admin):
    return document_service.upload_document(test_teacher, "National_ID ", file_name="id.pdf")


def _inbox(db, user_id, event_type=None):
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if event_type:
        query = query.filter(Notification.type == event_type)
    return query.all()


def test_upload_notifies_teacher_and_admins(document, db, mail_channel, test_teacher, test_admin):
    assert document.document_type == "national_id"
    assert document.status == DocumentStatus.PENDING

    assert _inbox(db, test_teacher.id)[0].message == "Your National Id has been uploaded and is awaiting review."
    assert _inbox(db, test_admin.id)[0].message == "Tunde Teacher uploaded a National Id for verification."
    assert _inbox(db, test_admin.id)[0].action_url == f"/admin/verification/documents/{document.id}"
    assert mail_channel.recipients == [test_teacher.id, test_admin.id]


def test_only_teachers_upload(document_service, test_student):
    with pytest.raises(ForbiddenException):
        document_service.upload_document(test_student, "national_id")


def test_document_type_required(document_service, test_teacher):
    with pytest.raises(ValidationException) as exc:
        document_service.upload_document(test_teacher, "   ")
    assert exc.value.code == "DOCUMENT_TYPE_REQUIRED"


def test_verify_broadcasts(document_service, document, broadcast_channel, test_admin, test_teacher):
    result = document_service.verify_document(document.id, test_admin)

    assert result.status == DocumentStatus.VERIFIED
    assert result.verified_by_id == test_admin.id
    assert test_teacher.id in broadcast_channel.recipients
    assert [m.content.title for m in broadcast_channel.for_event("document_verified")] == [
        "Document Verified",
        "Document Verified",
    ]

    with pytest.raises(BusinessRuleException) as exc:
        document_service.verify_document(document.id, test_admin)
    assert exc.value.code == "DOCUMENT_ALREADY_VERIFIED"


def test_reject_with_reason(document_service, document, db, test_admin, test_teacher):
    result = document_service.reject_document(document.id, test_admin, " Blurry scan ")

    assert result.status == DocumentStatus.REJECTED
    assert result.rejection_reason == "Blurry scan"
    assert _inbox(db, test_teacher.id, "document_rejected")[0].message == (
        "Your National Id was rejected. Reason: Blurry scan Please upload a new copy."
    )


def test_reject_requires_reason_and_pending(document_service, document, test_admin):
    with pytest.raises(ValidationException) as exc:
        document_service.reject_document(document.id, test_admin, "")
    assert exc.value.code == "REASON_REQUIRED"

    document_service.verify_document(document.id, test_admin)
    with pytest.raises(BusinessRuleException) as exc:
        document_service.reject_document(document.id, test_admin, "Too late")
    assert exc.value.code == "DOCUMENT_NOT_PENDING"


def test_only_admins_review(document_service, document, test_teacher):
    with pytest.raises(PolicyViolationException):
        document_service.verify_document(document.id, test_teacher)
    with pytest.raises(PolicyViolationException):
        document_service.reject_document(document.id, test_teacher, "No")
