# backend/app/models/booking.py
"""
Booking model for the TutorConnect platform.

A booking is a scheduled tutoring engagement between a student and a
teacher. It starts out pending, needs teacher/admin approval, and once
approved is bound 1:1 to a TeachingSession.

Every status change is recorded as a BookingHistory row.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
import random
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import Currency
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Awaiting approval
    APPROVED = "approved"  # Session created
    RESCHEDULED = "rescheduled"  # Moved; needs re-approval
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def generate_booking_reference(now: Optional[datetime] = None) -> str:
    """Return a human-facing booking reference such as ``BK-250905042``."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%y%m%d")
    return f"BK-{stamp}{random.randint(1, 999):03d}"


class Booking(Base):
    """
    Booking between a student and a teacher.

    Scheduling data (date, start/end time) is stored directly on the row;
    the TeachingSession created on approval copies it.
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_uuid = Column(String(20), nullable=False, index=True, default=generate_booking_reference)

    # Participants
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    subject_id = Column(String(26), ForeignKey("subjects.id"), nullable=True)

    # Scheduling
    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_fee = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), nullable=False, default=Currency.NGN.value)
    notes = Column(Text, nullable=True)

    # Audit
    created_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    approved_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    student = relationship("User", foreign_keys=[student_id])
    teacher = relationship("User", foreign_keys=[teacher_id])
    subject = relationship("Subject")
    teaching_session = relationship("TeachingSession", back_populates="booking", uselist=False)
    history = relationship(
        "BookingHistory",
        back_populates="booking",
        order_by="BookingHistory.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rescheduled', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
        CheckConstraint("duration_minutes > 0", name="check_duration_positive"),
        CheckConstraint("start_time < end_time", name="check_time_order"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: student={self.student_id}, "
            f"teacher={self.teacher_id}, date={self.booking_date}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def subject_name(self) -> Optional[str]:
        return self.subject.name if self.subject is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for notification payloads and history snapshots."""
        return {
            "id": self.id,
            "booking_uuid": self.booking_uuid,
            "student_id": self.student_id,
            "teacher_id": self.teacher_id,
            "subject_id": self.subject_id,
            "booking_date": self.booking_date.isoformat() if self.booking_date else None,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "duration_minutes": self.duration_minutes,
            "status": self.status,
            "total_fee": str(self.total_fee) if self.total_fee is not None else None,
            "currency": self.currency,
        }


class BookingHistory(Base):
    """Audit trail entry written for every booking transition."""

    __tablename__ = "booking_history"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, index=True)
    action = Column(String(50), nullable=False)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=True)
    performed_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    notes = Column(Text, nullable=True)
    data = Column(JSON, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    booking = relationship("Booking", back_populates="history")

    def __repr__(self) -> str:
        return (
            f"<BookingHistory {self.booking_id}: {self.action} "
            f"{self.from_status}->{self.to_status}>"
        )
