# backend/app/core/enums.py
"""
Core enums for the TutorConnect platform.

This module contains enumeration types used throughout the application
for type safety and consistency between the models, the booking rules
and the notification layer.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Standard role names.

    Every user holds exactly one of these roles. Actors performing booking
    transitions are authorized by role plus participation in the booking.
    """

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AccountStatus(str, Enum):
    """
    User account lifecycle statuses.
    """

    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class Currency(str, Enum):
    """Currencies teachers can be paid in and amounts can be displayed in."""

    NGN = "NGN"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class NotificationChannel(str, Enum):
    """
    Delivery mechanisms for a notification.

    DATABASE is the persisted inbox record, BROADCAST the realtime push to
    connected clients.
    """

    MAIL = "mail"
    DATABASE = "database"
    BROADCAST = "broadcast"
    SMS = "sms"


class DeliveryProfile(str, Enum):
    """
    Selects which channels are active for environment-gated events.

    Production-equivalent deployments send mail for booking approvals and
    cancellations; every other environment keeps those in the inbox only.
    """

    PRODUCTION = "production"
    NON_PRODUCTION = "non_production"
