# backend/app/services/verification_service.py
"""
Teacher Verification Service for the TutorConnect platform

A verification request moves through a live video call before an admin
decides on it:

    pending -> call_scheduled -> call_in_progress -> call_completed -> approved

Any step before the decision can end in ``rejected`` instead.

All steps are admin-only; each one notifies the teacher and the admins.
"""

from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.user import User
from ..models.verification import VerificationRequest, VerificationStatus
from ..notifications.events import NotificationEventType, verification_event
from ..repositories.factory import RepositoryFactory
from .base import BaseService, ensure_admin
from .notification_service import NotificationService

S = VerificationStatus

ALLOWED_FROM: Dict[str, FrozenSet[VerificationStatus]] = {
    "schedule_call": frozenset({S.PENDING, S.CALL_SCHEDULED}),
    "start_call": frozenset({S.CALL_SCHEDULED}),
    "complete_call": frozenset({S.CALL_IN_PROGRESS}),
    "approve": frozenset({S.CALL_COMPLETED}),
    "reject": frozenset({S.PENDING, S.CALL_SCHEDULED, S.CALL_IN_PROGRESS, S.CALL_COMPLETED}),
}


class VerificationService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.notification_service = notification_service or NotificationService(db)
        self.repository = RepositoryFactory.create_base_repository(db, VerificationRequest)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def get_request(self, request_id: str) -> VerificationRequest:
        request = self.repository.get_by_id(request_id, load_relationships=False)
        if not request:
            raise NotFoundException(
                f"Verification request {request_id} not found", code="VERIFICATION_NOT_FOUND"
            )
        return request

    @BaseService.measure_operation("create_verification_request")
    def create_request(self, teacher: User) -> VerificationRequest:
        if teacher.role != RoleName.TEACHER:
            raise ValidationException("Only teachers can request verification", code="INVALID_ROLE")
        open_request = self.repository.find_one_by(
            teacher_id=teacher.id, status=VerificationStatus.PENDING.value
        )
        if open_request:
            return open_request
        with self.transaction():
            request = self.repository.create(
                teacher_id=teacher.id, status=VerificationStatus.PENDING.value
            )
        return request

    def _advance(
        self,
        request_id: str,
        admin: User,
        step: str,
        new_status: VerificationStatus,
        event_type: NotificationEventType,
        reason: Optional[str] = None,
        **changes: object,
    ) -> VerificationRequest:
        ensure_admin(admin, f"{step}_verification")
        request = self.get_request(request_id)
        current = VerificationStatus(request.status)
        if current not in ALLOWED_FROM[step]:
            raise BusinessRuleException(
                f"Cannot {step.replace('_', ' ')} for a verification that is {current.value}",
                code="INVALID_VERIFICATION_TRANSITION",
                details={"from_status": current.value, "step": step},
            )

        with self.transaction():
            request.status = new_status.value
            request.reviewed_by_id = admin.id
            for key, value in changes.items():
                setattr(request, key, value)

        self.log_operation("verification_" + step, request_id=request.id, status=new_status.value)
        self.notification_service.notify(
            verification_event(
                event_type,
                request,
                admins=self.user_repository.get_active_admins(),
                reason=reason,
            )
        )
        return request

    @BaseService.measure_operation("schedule_verification_call")
    def schedule_call(
        self,
        request_id: str,
        admin: User,
        scheduled_at: datetime,
        meeting_link: Optional[str] = None,
    ) -> VerificationRequest:
        when = scheduled_at if scheduled_at.tzinfo else scheduled_at.replace(tzinfo=timezone.utc)
        if when <= datetime.now(timezone.utc):
            raise ValidationException("Verification call must be in the future", code="DATE_IN_PAST")
        return self._advance(
            request_id,
            admin,
            "schedule_call",
            S.CALL_SCHEDULED,
            NotificationEventType.VERIFICATION_CALL_SCHEDULED,
            scheduled_call_at=when,
            meeting_link=meeting_link,
        )

    @BaseService.measure_operation("start_verification_call")
    def start_call(self, request_id: str, admin: User) -> VerificationRequest:
        return self._advance(
            request_id,
            admin,
            "start_call",
            S.CALL_IN_PROGRESS,
            NotificationEventType.VERIFICATION_CALL_STARTED,
        )

    @BaseService.measure_operation("complete_verification_call")
    def complete_call(self, request_id: str, admin: User, notes: Optional[str] = None) -> VerificationRequest:
        return self._advance(
            request_id,
            admin,
            "complete_call",
            S.CALL_COMPLETED,
            NotificationEventType.VERIFICATION_CALL_COMPLETED,
            notes=notes,
        )

    @BaseService.measure_operation("approve_verification")
    def approve(self, request_id: str, admin: User) -> VerificationRequest:
        return self._advance(
            request_id,
            admin,
            "approve",
            S.APPROVED,
            NotificationEventType.VERIFICATION_APPROVED,
        )

    @BaseService.measure_operation("reject_verification")
    def reject(self, request_id: str, admin: User, reason: str) -> VerificationRequest:
        if not reason or not reason.strip():
            raise ValidationException("A rejection reason is required", code="REASON_REQUIRED")
        return self._advance(
            request_id,
            admin,
            "reject",
            S.REJECTED,
            NotificationEventType.VERIFICATION_REJECTED,
            reason=reason.strip(),
            rejection_reason=reason.strip(),
        )
