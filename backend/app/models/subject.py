"""Subject model - what a booking is about."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Subject(Base):
    """A teachable subject (e.g. 'Mathematics', 'Yoruba Language')."""

    __tablename__ = "subjects"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Subject {self.id}: {self.name}>"
