# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the TutorConnect platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- BookingRepository: Bookings with eager loading plus the audit trail
- TeachingSessionRepository: Sessions, including upcoming sessions for earnings
- UserRepository: Users, admins and teacher profiles
- NotificationRepository: Inbox records written by the database channel

Usage:
    from app.repositories import RepositoryFactory

    repository = RepositoryFactory.create_booking_repository(db)
    booking = repository.get_booking_with_details(booking_id)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .notification_repository import NotificationRepository
from .teaching_session_repository import TeachingSessionRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "BookingRepository",
    "TeachingSessionRepository",
    "UserRepository",
    "NotificationRepository",
]
