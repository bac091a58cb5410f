# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.earnings_service import EarningsService
from ...services.notification_service import NotificationService
from .database import get_db


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Get notification service instance for dependency injection."""
    return NotificationService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingService:
    """Get booking service instance for dependency injection."""
    return BookingService(db, notification_service)


def get_earnings_service(db: Session = Depends(get_db)) -> EarningsService:
    """Get earnings service instance for dependency injection."""
    return EarningsService(db)
