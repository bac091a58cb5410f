"""
Teacher verification requests.

After documents are uploaded an admin schedules a verification video call,
runs it, and finally approves or rejects the teacher.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class VerificationStatus(str, Enum):
    PENDING = "pending"
    CALL_SCHEDULED = "call_scheduled"
    CALL_IN_PROGRESS = "call_in_progress"
    CALL_COMPLETED = "call_completed"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationRequest(Base):
    __tablename__ = "verification_requests"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(30), nullable=False, default=VerificationStatus.PENDING.value)
    scheduled_call_at = Column(DateTime(timezone=True), nullable=True)
    meeting_link = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    reviewed_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("User", foreign_keys=[teacher_id])
