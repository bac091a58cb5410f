"""Application-wide constants for the TutorConnect platform."""

from __future__ import annotations

BRAND_NAME = "TutorConnect"

# Booking constraints
MIN_SESSION_DURATION = 15  # minutes
MAX_SESSION_DURATION = 240  # minutes (4 hours)
MAX_REASON_LENGTH = 1000
BOOKING_REFERENCE_ATTEMPTS = 10

# SMS
SMS_MAX_LENGTH = 160
SMS_ELLIPSIS = "..."

# Upcoming earnings widget
DEFAULT_UPCOMING_EARNINGS_LIMIT = 5
UNKNOWN_STUDENT_LABEL = "Unknown"
DEFAULT_SUBJECT_LABEL = "General Class"

# API metadata
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Booking lifecycle, teacher earnings and notifications for the TutorConnect marketplace."
API_VERSION = "1.0.0"
