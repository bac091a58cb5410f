# backend/tests/services/test_account_service.py
"""Tests for AccountService: suspend, reinstate and delete."""

import pytest

from app.core.enums import AccountStatus
from app.core.exceptions import BusinessRuleException, NotFoundException, PolicyViolationException
from app.models.notification import Notification
from app.services.account_service import AccountService


@pytest.fixture
def account_service(db, notification_service) -> AccountService:
    return AccountService(db, notification_service)


def test_suspend_and_reinstate(account_service, db, mail_channel, test_admin, test_student):
    suspended = account_service.suspend(test_student.id, test_admin, reason="Payment dispute")

    assert suspended.account_status == AccountStatus.SUSPENDED
    assert suspended.suspension_reason == "Payment dispute"
    inbox = db.query(Notification).filter(Notification.user_id == test_student.id).all()
    assert inbox[0].message == "Your account has been suspended. Reason: Payment dispute"
    assert mail_channel.for_event("account_suspended")[0].recipient.email == "ada.student@example.com"

    reinstated = account_service.unsuspend(test_student.id, test_admin)
    assert reinstated.account_status == AccountStatus.ACTIVE
    assert reinstated.suspension_reason is None


def test_unsuspend_requires_suspended_account(account_service, test_admin, test_student):
    with pytest.raises(BusinessRuleException) as exc:
        account_service.unsuspend(test_student.id, test_admin)
    assert exc.value.code == "INVALID_ACCOUNT_STATUS"


def test_delete_from_any_status_once(account_service, test_admin, test_teacher):
    account_service.suspend(test_teacher.id, test_admin)

    deleted = account_service.delete(test_teacher.id, test_admin, reason="Requested by user")
    assert deleted.account_status == AccountStatus.DELETED

    with pytest.raises(BusinessRuleException):
        account_service.delete(test_teacher.id, test_admin)


def test_admin_cannot_act_on_self(account_service, test_admin):
    with pytest.raises(BusinessRuleException) as exc:
        account_service.suspend(test_admin.id, test_admin)
    assert exc.value.code == "SELF_ACTION"


def test_admin_only(account_service, test_student, test_teacher):
    with pytest.raises(PolicyViolationException):
        account_service.suspend(test_student.id, test_teacher)


def test_unknown_user(account_service, test_admin):
    with pytest.raises(NotFoundException):
        account_service.suspend("01ARZ3NDEKTSV4RRFFQ69G5FAV", test_admin)
