"""
Channel selection per notification event.

The table is fixed: inbox UI and mail templates depend on which channels
fire for each event. ``booking_approved`` and ``booking_cancelled`` only
send mail under the production delivery profile.
"""

from typing import Dict, Tuple

from ..core.enums import DeliveryProfile, NotificationChannel
from .events import NotificationEventType as E

MAIL = NotificationChannel.MAIL
DATABASE = NotificationChannel.DATABASE
BROADCAST = NotificationChannel.BROADCAST
SMS = NotificationChannel.SMS

CHANNEL_TABLE: Dict[E, Tuple[NotificationChannel, ...]] = {
    E.ACCOUNT_DELETED: (MAIL, DATABASE),
    E.ACCOUNT_SUSPENDED: (MAIL, DATABASE),
    E.ACCOUNT_UNSUSPENDED: (MAIL, DATABASE),
    E.BOOKING_CREATED: (DATABASE, MAIL),
    E.BOOKING_APPROVED: (DATABASE, MAIL),
    E.BOOKING_CANCELLED: (DATABASE, MAIL),
    E.BOOKING_RESCHEDULED: (DATABASE, MAIL),
    E.BOOKING_REASSIGNED: (DATABASE, MAIL),
    E.DOCUMENT_UPLOADED: (MAIL, DATABASE),
    E.DOCUMENT_REJECTED: (DATABASE, MAIL, BROADCAST),
    E.DOCUMENT_VERIFIED: (DATABASE, MAIL, BROADCAST),
    E.MESSAGE_RECEIVED: (DATABASE, MAIL, BROADCAST),
    E.PAYSTACK_RESTRICTION: (MAIL, DATABASE),
    E.PAYOUT_PROCESSED: (DATABASE,),
    E.PAYOUT_SMS: (SMS,),
    E.SESSION_REMINDER: (MAIL,),
    E.SESSION_REQUEST: (DATABASE, MAIL),
    E.SYSTEM_NOTIFICATION: (DATABASE, MAIL, BROADCAST),
    E.VERIFICATION_APPROVED: (DATABASE, MAIL, BROADCAST),
    E.VERIFICATION_REJECTED: (DATABASE, MAIL, BROADCAST),
    E.VERIFICATION_CALL_SCHEDULED: (DATABASE, MAIL, BROADCAST),
    E.VERIFICATION_CALL_STARTED: (DATABASE, MAIL, BROADCAST),
    E.VERIFICATION_CALL_COMPLETED: (DATABASE, MAIL, BROADCAST),
}

PRODUCTION_ONLY_MAIL = frozenset({E.BOOKING_APPROVED, E.BOOKING_CANCELLED})


def channels_for(
    event_type: E | str, profile: DeliveryProfile = DeliveryProfile.NON_PRODUCTION
) -> Tuple[NotificationChannel, ...]:
    """Return the ordered channels an event is delivered on under ``profile``."""
    event = E(event_type)
    channels = CHANNEL_TABLE[event]
    if event in PRODUCTION_ONLY_MAIL and DeliveryProfile(profile) != DeliveryProfile.PRODUCTION:
        return tuple(channel for channel in channels if channel != MAIL)
    return channels
