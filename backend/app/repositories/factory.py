# backend/app/repositories/factory.py
"""
Repository Factory for the TutorConnect platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .notification_repository import NotificationRepository
    from .teaching_session_repository import TeachingSessionRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Models without query needs of their own (documents, payouts,
    verification requests) use the generic base repository.
    """

    @staticmethod
    def create_base_repository(db: Session, model: Any) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking and booking history queries."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_teaching_session_repository(db: Session) -> "TeachingSessionRepository":
        """Create repository for teaching session queries."""
        from .teaching_session_repository import TeachingSessionRepository

        return TeachingSessionRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for users and teacher profiles."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> "NotificationRepository":
        """Create repository for inbox notifications."""
        from .notification_repository import NotificationRepository

        return NotificationRepository(db)
