"""
Teacher profile model.

Holds the per-currency hourly rates used by the earnings calculation.
A zero or NULL rate means the teacher has not set a rate in that currency.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import Currency
from ..core.ulid_helper import generate_ulid
from ..database import Base


class TeacherProfile(Base):
    """Teacher-specific profile data."""

    __tablename__ = "teacher_profiles"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True)
    hourly_rate_usd = Column(Numeric(10, 2), nullable=True, default=Decimal("0"))
    hourly_rate_ngn = Column(Numeric(12, 2), nullable=True, default=Decimal("0"))
    preferred_currency = Column(String(3), nullable=False, default=Currency.NGN.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="teacher_profile")

    __table_args__ = (
        CheckConstraint(
            "hourly_rate_usd IS NULL OR hourly_rate_usd >= 0", name="ck_teacher_rate_usd"
        ),
        CheckConstraint(
            "hourly_rate_ngn IS NULL OR hourly_rate_ngn >= 0", name="ck_teacher_rate_ngn"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<TeacherProfile {self.user_id}: USD={self.hourly_rate_usd} "
            f"NGN={self.hourly_rate_ngn}>"
        )
