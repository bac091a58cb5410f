"""Teacher verification documents (ID card, certificates, ...)."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class DocumentStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Document(Base):
    """A document uploaded by a teacher for admin verification."""

    __tablename__ = "documents"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    document_type = Column(String(50), nullable=False)
    file_name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=DocumentStatus.PENDING.value)
    rejection_reason = Column(Text, nullable=True)
    verified_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("User", foreign_keys=[teacher_id])

    @property
    def document_label(self) -> str:
        return (self.document_type or "document").replace("_", " ").title()
