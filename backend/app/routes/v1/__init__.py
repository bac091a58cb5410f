"""
API v1 Routes

Versioned API endpoints under /api/v1.
All new endpoints should be added here.
"""

from . import bookings, earnings

__all__ = [
    "bookings",
    "earnings",
]
