"""
Teaching session model.

Created when a booking is approved and bound 1:1 to it. Meeting metadata
(platform, join link, external meeting id) is filled in by the meeting
integrations after creation; reminder jobs and the upcoming earnings
widget read it.
"""

from enum import Enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TeachingSession(Base):
    """Approved, schedulable instance of a booking."""

    __tablename__ = "teaching_sessions"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, unique=True)
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    subject_id = Column(String(26), ForeignKey("subjects.id"), nullable=True)

    session_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value, index=True)

    # Populated by meeting integrations
    meeting_platform = Column(String(30), nullable=True)
    meeting_link = Column(Text, nullable=True)
    external_meeting_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    booking = relationship("Booking", back_populates="teaching_session")
    teacher = relationship("User", foreign_keys=[teacher_id])
    student = relationship("User", foreign_keys=[student_id])
    subject = relationship("Subject")

    def __repr__(self) -> str:
        return (
            f"<TeachingSession {self.id}: booking={self.booking_id} "
            f"{self.session_date} {self.start_time}-{self.end_time} ({self.status})>"
        )
