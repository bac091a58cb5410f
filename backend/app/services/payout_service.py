# backend/app/services/payout_service.py
"""
Payout Service for the TutorConnect platform

Payout requests are settled by an external payment gateway; this service
records the gateway's verdict and tells the teacher when money went out
(inbox record plus a short SMS).
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..core.enums import Currency, RoleName
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.payout import PayoutRequest, PayoutStatus
from ..notifications.events import payout_processed_event, payout_sms_event
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

GATEWAY_OUTCOMES = frozenset(
    {PayoutStatus.SUCCESS, PayoutStatus.FAILED, PayoutStatus.REQUIRES_MANUAL_PROCESSING}
)


class PayoutService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.notification_service = notification_service or NotificationService(db)
        self.repository = RepositoryFactory.create_base_repository(db, PayoutRequest)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def get_payout(self, payout_id: str) -> PayoutRequest:
        payout = self.repository.get_by_id(payout_id, load_relationships=False)
        if not payout:
            raise NotFoundException(f"Payout request {payout_id} not found", code="PAYOUT_NOT_FOUND")
        return payout

    @BaseService.measure_operation("create_payout_request")
    def create_payout_request(
        self,
        teacher_id: str,
        amount: Any,
        currency: str = Currency.NGN.value,
        payment_method: str = "bank_transfer",
    ) -> PayoutRequest:
        teacher = self.user_repository.get_by_id(teacher_id, load_relationships=False)
        if not teacher or teacher.role != RoleName.TEACHER:
            raise NotFoundException(f"Teacher {teacher_id} not found", code="TEACHER_NOT_FOUND")
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise ValidationException(f"Invalid payout amount: {amount!r}", code="INVALID_AMOUNT")
        if value <= 0:
            raise ValidationException("Payout amount must be positive", code="INVALID_AMOUNT")

        with self.transaction():
            payout = self.repository.create(
                teacher_id=teacher.id,
                amount=value,
                currency=Currency(currency.upper()).value,
                payment_method=payment_method,
                status=PayoutStatus.PENDING.value,
            )
        return payout

    @BaseService.measure_operation("record_gateway_result")
    def record_gateway_result(
        self,
        payout_id: str,
        outcome: str,
        gateway_reference: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> PayoutRequest:
        """
        Apply a gateway callback to a pending payout.

        Only ``success`` notifies the teacher (payout_processed + payout_sms).
        """
        try:
            status = PayoutStatus(outcome)
        except ValueError:
            raise ValidationException(f"Unknown payout outcome: {outcome!r}", code="INVALID_PAYOUT_OUTCOME")
        if status not in GATEWAY_OUTCOMES:
            raise ValidationException(f"Unknown payout outcome: {outcome!r}", code="INVALID_PAYOUT_OUTCOME")

        payout = self.get_payout(payout_id)
        if payout.status != PayoutStatus.PENDING:
            raise BusinessRuleException(
                f"Payout request is already {payout.status}",
                code="PAYOUT_ALREADY_PROCESSED",
                details={"status": payout.status},
            )

        with self.transaction():
            payout.status = status.value
            payout.gateway_reference = gateway_reference or payout.gateway_reference
            if status == PayoutStatus.SUCCESS:
                payout.processed_at = datetime.now(timezone.utc)
                payout.failure_reason = None
            else:
                payout.failure_reason = failure_reason

        self.log_operation("payout_result", payout_id=payout.id, status=status.value)
        if status == PayoutStatus.SUCCESS:
            self.notification_service.notify_all(
                [payout_processed_event(payout), payout_sms_event(payout)]
            )
        return payout
