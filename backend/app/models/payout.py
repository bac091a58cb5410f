"""
Payout request model.

A payout transfers earned funds to a teacher through a payment gateway.
Status changes arrive through gateway callbacks.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import Currency
from ..core.ulid_helper import generate_ulid
from ..database import Base


class PayoutStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    REQUIRES_MANUAL_PROCESSING = "requires_manual_processing"


class PayoutRequest(Base):
    """Teacher payout request."""

    __tablename__ = "payout_requests"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default=Currency.NGN.value)
    payment_method = Column(String(30), nullable=False, default="bank_transfer")
    status = Column(String(30), nullable=False, default=PayoutStatus.PENDING.value, index=True)
    gateway_reference = Column(String(255), nullable=True)
    failure_reason = Column(Text, nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("User")

    __table_args__ = (CheckConstraint("amount > 0", name="ck_payout_amount_positive"),)

    def __repr__(self) -> str:
        return f"<PayoutRequest {self.id}: {self.currency} {self.amount} ({self.status})>"
