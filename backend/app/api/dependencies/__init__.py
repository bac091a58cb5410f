# backend/app/api/dependencies/__init__.py
"""
Centralized dependency injection for FastAPI routes.
"""

from .auth import get_current_active_user, get_current_user
from .database import get_db
from .services import get_booking_service, get_earnings_service, get_notification_service

__all__ = [
    "get_current_active_user",
    "get_current_user",
    "get_db",
    "get_booking_service",
    "get_earnings_service",
    "get_notification_service",
]
