"""
Notification dispatcher.

Fans one event out to every (recipient, channel) pair. Each pair is an
independent attempt: a failing channel is logged and counted, and the
remaining channels and recipients are still tried. Nothing is retried
here and nothing is deduplicated; callers dispatch once per logical event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from ..core.config import settings
from ..core.enums import DeliveryProfile, NotificationChannel
from ..core.exceptions import DeliveryException, ValidationException
from ..monitoring.prometheus_metrics import PrometheusMetrics
from .channels import channels_for
from .content import NotificationContent, render_content
from .events import NotificationEvent, NotificationEventType, Recipient

logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryMessage:
    """Everything a channel adapter needs for one recipient."""

    event_type: NotificationEventType
    recipient: Recipient
    content: NotificationContent
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeliveryAttempt:
    event_type: NotificationEventType
    recipient_id: str
    audience: str
    channel: NotificationChannel
    status: DeliveryStatus
    error: Optional[str] = None


class DeliveryChannel(Protocol):
    """Transport for one channel. Raises DeliveryException on failure."""

    def deliver(self, message: DeliveryMessage) -> DeliveryStatus: ...


class NotificationDispatcher:
    """
    Resolve channels and content per recipient and hand off to adapters.

    Args:
        channels: adapter per channel; a channel without an adapter is skipped
        profile: delivery profile used for channel selection
    """

    def __init__(
        self,
        channels: Mapping[NotificationChannel, DeliveryChannel],
        profile: Optional[DeliveryProfile] = None,
    ):
        if profile is None:
            profile = settings.delivery_profile
        self.channels = dict(channels)
        self.profile = DeliveryProfile(profile)

    def dispatch_event(self, event: NotificationEvent) -> List[DeliveryAttempt]:
        return self.dispatch(event.event_type, event.payload, event.recipients)

    def dispatch(
        self,
        event_type: NotificationEventType | str,
        payload: Mapping[str, Any],
        recipients: Sequence[Recipient],
    ) -> List[DeliveryAttempt]:
        event = NotificationEventType(event_type)
        channels = channels_for(event, self.profile)
        attempts: List[DeliveryAttempt] = []
        started = time.monotonic()

        for recipient in recipients:
            try:
                content = render_content(
                    event, recipient.audience, {**payload, "recipient_name": recipient.name}
                )
            except ValidationException as exc:
                logger.error(
                    "No content for %s/%s (recipient %s): %s",
                    event.value,
                    recipient.audience,
                    recipient.user_id,
                    exc.message,
                )
                attempts.extend(
                    self._record(event, recipient, channel, DeliveryStatus.FAILED, exc.message)
                    for channel in channels
                )
                continue

            message = DeliveryMessage(
                event_type=event, recipient=recipient, content=content, data=dict(payload)
            )
            for channel in channels:
                attempts.append(self._deliver(channel, message))

        PrometheusMetrics.observe_notification_dispatch(event.value, time.monotonic() - started)
        return attempts

    def _deliver(self, channel: NotificationChannel, message: DeliveryMessage) -> DeliveryAttempt:
        event = message.event_type
        recipient = message.recipient
        adapter = self.channels.get(channel)
        if adapter is None:
            logger.debug("No adapter for %s; skipping %s", channel.value, event.value)
            return self._record(event, recipient, channel, DeliveryStatus.SKIPPED)

        try:
            status = DeliveryStatus(adapter.deliver(message))
        except DeliveryException as exc:
            logger.warning(
                "%s delivery of %s to %s failed: %s",
                channel.value,
                event.value,
                recipient.user_id,
                exc.message,
            )
            return self._record(event, recipient, channel, DeliveryStatus.FAILED, exc.message)
        except Exception as exc:
            logger.exception(
                "Unexpected %s delivery error for %s to %s", channel.value, event.value, recipient.user_id
            )
            return self._record(event, recipient, channel, DeliveryStatus.FAILED, str(exc))

        return self._record(event, recipient, channel, status)

    @staticmethod
    def _record(
        event: NotificationEventType,
        recipient: Recipient,
        channel: NotificationChannel,
        status: DeliveryStatus,
        error: Optional[str] = None,
    ) -> DeliveryAttempt:
        PrometheusMetrics.record_notification_delivery(event.value, channel.value, status.value)
        return DeliveryAttempt(
            event_type=event,
            recipient_id=recipient.user_id,
            audience=recipient.audience,
            channel=channel,
            status=status,
            error=error,
        )
