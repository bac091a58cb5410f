# backend/app/models/user.py
"""
User model for the TutorConnect platform.

Students, teachers and admins share this table and are told apart by the
role column. Teachers additionally own a TeacherProfile carrying their
hourly rates.

Classes:
    User: Account, contact details and role
"""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import AccountStatus, RoleName
from ..core.ulid_helper import generate_ulid
from ..database import Base


class User(Base):
    """
    Main user model.

    Attributes:
        id: ULID primary key
        name: Display name used in notifications
        email: Address used by the mail channel (optional)
        phone: E.164 number used by the SMS channel (optional)
        role: One of RoleName
        account_status: Lifecycle status (active, suspended, deleted)
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True, index=True)
    phone = Column(String(32), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value, index=True)
    account_status = Column(String(20), nullable=False, default=AccountStatus.ACTIVE.value)
    suspension_reason = Column(String(1000), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher_profile = relationship("TeacherProfile", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.name} ({self.role})>"
