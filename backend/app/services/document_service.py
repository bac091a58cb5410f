# backend/app/services/document_service.py
"""
Document Service for the TutorConnect platform

Teachers upload verification documents (ID, certificates, ...); admins
verify or reject them. Every step notifies the teacher and the admins.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_REASON_LENGTH
from ..core.enums import RoleName
from ..core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..models.document import Document, DocumentStatus
from ..models.user import User
from ..notifications.events import NotificationEventType, document_event
from ..repositories.factory import RepositoryFactory
from .base import BaseService, ensure_admin
from .notification_service import NotificationService


class DocumentService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.notification_service = notification_service or NotificationService(db)
        self.repository = RepositoryFactory.create_base_repository(db, Document)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def get_document(self, document_id: str) -> Document:
        document = self.repository.get_by_id(document_id, load_relationships=False)
        if not document:
            raise NotFoundException(f"Document {document_id} not found", code="DOCUMENT_NOT_FOUND")
        return document

    @BaseService.measure_operation("upload_document")
    def upload_document(
        self, teacher: User, document_type: str, file_name: Optional[str] = None
    ) -> Document:
        if teacher.role != RoleName.TEACHER:
            raise ForbiddenException("Only teachers can upload verification documents")
        if not document_type or not document_type.strip():
            raise ValidationException("Document type is required", code="DOCUMENT_TYPE_REQUIRED")

        with self.transaction():
            document = self.repository.create(
                teacher_id=teacher.id,
                document_type=document_type.strip().lower(),
                file_name=file_name,
                status=DocumentStatus.PENDING.value,
            )

        self.notification_service.notify(
            document_event(
                NotificationEventType.DOCUMENT_UPLOADED,
                document,
                admins=self.user_repository.get_active_admins(),
            )
        )
        return document

    @BaseService.measure_operation("verify_document")
    def verify_document(self, document_id: str, admin: User) -> Document:
        ensure_admin(admin, "verify_document")
        document = self.get_document(document_id)
        if document.status == DocumentStatus.VERIFIED:
            raise BusinessRuleException("Document is already verified", code="DOCUMENT_ALREADY_VERIFIED")

        with self.transaction():
            document.status = DocumentStatus.VERIFIED.value
            document.rejection_reason = None
            document.verified_by_id = admin.id
            document.verified_at = datetime.now(timezone.utc)

        self.notification_service.notify(
            document_event(
                NotificationEventType.DOCUMENT_VERIFIED,
                document,
                admins=self.user_repository.get_active_admins(),
            )
        )
        return document

    @BaseService.measure_operation("reject_document")
    def reject_document(self, document_id: str, admin: User, reason: str) -> Document:
        ensure_admin(admin, "reject_document")
        if not reason or not reason.strip():
            raise ValidationException("A rejection reason is required", code="REASON_REQUIRED")
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationException("Rejection reason is too long", code="REASON_TOO_LONG")
        document = self.get_document(document_id)
        if document.status != DocumentStatus.PENDING:
            raise BusinessRuleException(
                f"Only pending documents can be rejected (document is {document.status})",
                code="DOCUMENT_NOT_PENDING",
            )

        with self.transaction():
            document.status = DocumentStatus.REJECTED.value
            document.rejection_reason = reason.strip()
            document.verified_by_id = admin.id
            document.verified_at = None

        self.notification_service.notify(
            document_event(
                NotificationEventType.DOCUMENT_REJECTED,
                document,
                admins=self.user_repository.get_active_admins(),
                rejection_reason=document.rejection_reason,
            )
        )
        return document
