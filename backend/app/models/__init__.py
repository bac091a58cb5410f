"""
Database models for the TutorConnect platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Users, subjects and teacher profiles (rates)
- Bookings, their audit history and teaching sessions
- Inbox notifications
- Payout requests
- Teacher verification (documents and verification calls)
"""

from .booking import Booking, BookingHistory, BookingStatus
from .document import Document, DocumentStatus
from .notification import Notification
from .payout import PayoutRequest, PayoutStatus
from .subject import Subject
from .teacher_profile import TeacherProfile
from .teaching_session import SessionStatus, TeachingSession
from .user import User
from .verification import VerificationRequest, VerificationStatus

__all__ = [
    "Booking",
    "BookingHistory",
    "BookingStatus",
    "Document",
    "DocumentStatus",
    "Notification",
    "PayoutRequest",
    "PayoutStatus",
    "SessionStatus",
    "Subject",
    "TeacherProfile",
    "TeachingSession",
    "User",
    "VerificationRequest",
    "VerificationStatus",
]
