# backend/app/services/account_service.py
"""
Account Service for the TutorConnect platform

Admin-driven account lifecycle: suspend, reinstate and (soft) delete.
The affected user is told by mail and in their inbox.
"""

from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_REASON_LENGTH
from ..core.enums import AccountStatus
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.user import User
from ..notifications.events import NotificationEventType, account_event
from ..repositories.factory import RepositoryFactory
from .base import BaseService, ensure_admin
from .notification_service import NotificationService


class AccountService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.notification_service = notification_service or NotificationService(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def _get_user(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if not user:
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    @staticmethod
    def _check_reason(reason: Optional[str]) -> Optional[str]:
        if reason and len(reason) > MAX_REASON_LENGTH:
            raise ValidationException("Reason is too long", code="REASON_TOO_LONG")
        return reason

    def _change_status(
        self,
        user_id: str,
        admin: User,
        action: str,
        allowed_from: AccountStatus,
        new_status: AccountStatus,
        event_type: NotificationEventType,
        reason: Optional[str],
    ) -> User:
        ensure_admin(admin, action)
        reason = self._check_reason(reason)
        user = self._get_user(user_id)
        if user.id == admin.id:
            raise BusinessRuleException("Admins cannot change their own account status", code="SELF_ACTION")
        if user.account_status != allowed_from:
            raise BusinessRuleException(
                f"Cannot {action.replace('_', ' ')}: account is {user.account_status}",
                code="INVALID_ACCOUNT_STATUS",
                details={"account_status": user.account_status},
            )

        with self.transaction():
            user.account_status = new_status.value
            user.suspension_reason = reason if new_status == AccountStatus.SUSPENDED else None

        self.log_operation(action, user_id=user.id, performed_by=admin.id)
        self.notification_service.notify(account_event(event_type, user, reason))
        return user

    @BaseService.measure_operation("suspend_account")
    def suspend(self, user_id: str, admin: User, reason: Optional[str] = None) -> User:
        return self._change_status(
            user_id,
            admin,
            "suspend_account",
            AccountStatus.ACTIVE,
            AccountStatus.SUSPENDED,
            NotificationEventType.ACCOUNT_SUSPENDED,
            reason,
        )

    @BaseService.measure_operation("unsuspend_account")
    def unsuspend(self, user_id: str, admin: User, reason: Optional[str] = None) -> User:
        return self._change_status(
            user_id,
            admin,
            "unsuspend_account",
            AccountStatus.SUSPENDED,
            AccountStatus.ACTIVE,
            NotificationEventType.ACCOUNT_UNSUSPENDED,
            reason,
        )

    @BaseService.measure_operation("delete_account")
    def delete(self, user_id: str, admin: User, reason: Optional[str] = None) -> User:
        """Soft delete: the row stays, the account can no longer be used."""
        ensure_admin(admin, "delete_account")
        user = self._get_user(user_id)
        if user.account_status == AccountStatus.DELETED:
            raise BusinessRuleException("Account is already deleted", code="INVALID_ACCOUNT_STATUS")
        return self._change_status(
            user_id,
            admin,
            "delete_account",
            AccountStatus(user.account_status),
            AccountStatus.DELETED,
            NotificationEventType.ACCOUNT_DELETED,
            reason,
        )
