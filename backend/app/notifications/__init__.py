"""
Notification fan-out: event types and builders, the per-event channel
table, per-audience content, the dispatcher and its channel adapters.
"""

from .channels import channels_for
from .content import NotificationContent, render_content
from .dispatcher import DeliveryAttempt, DeliveryMessage, DeliveryStatus, NotificationDispatcher
from .events import Audience, NotificationEvent, NotificationEventType, Recipient

__all__ = [
    "Audience",
    "DeliveryAttempt",
    "DeliveryMessage",
    "DeliveryStatus",
    "NotificationContent",
    "NotificationDispatcher",
    "NotificationEvent",
    "NotificationEventType",
    "Recipient",
    "channels_for",
    "render_content",
]
