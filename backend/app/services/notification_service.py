# backend/app/services/notification_service.py
"""
Notification Service for the TutorConnect platform

Owns the NotificationDispatcher for a database session and wires it to the
configured channel adapters:
- database: inbox record (always available)
- mail: Resend, when RESEND_API_KEY is set
- broadcast: Redis pub/sub, when REDIS_URL is set
- sms: Twilio, when credentials are set

Domain services commit their mutation first and then call ``notify``.
Delivery failures are reported in the returned attempts, never raised.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.enums import DeliveryProfile, NotificationChannel
from ..core.exceptions import NotFoundException
from ..models.notification import Notification
from ..models.user import User
from ..notifications.delivery import BroadcastChannel, DatabaseChannel, MailChannel, SmsChannel
from ..notifications.dispatcher import (
    DeliveryAttempt,
    DeliveryChannel,
    DeliveryStatus,
    NotificationDispatcher,
)
from ..notifications.events import (
    NotificationEvent,
    message_received_event,
    paystack_restriction_event,
    system_notification_event,
)
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def build_default_channels(
    db: Session, config: Optional[Settings] = None
) -> Dict[NotificationChannel, DeliveryChannel]:
    """Channel adapters for the current configuration."""
    config = config or default_settings
    auth_token = config.twilio_auth_token.get_secret_value() if config.twilio_auth_token else None
    return {
        NotificationChannel.DATABASE: DatabaseChannel(db),
        NotificationChannel.MAIL: MailChannel(
            api_key=config.resend_api_key,
            from_email=config.from_email,
            frontend_url=config.frontend_url,
        ),
        NotificationChannel.BROADCAST: BroadcastChannel.from_url(config.redis_url),
        NotificationChannel.SMS: SmsChannel.from_credentials(
            config.twilio_account_sid,
            auth_token,
            sender_id=config.sms_sender_id,
            max_length=config.sms_max_length,
        ),
    }


class NotificationService(BaseService):
    """Dispatches notification events and serves the inbox."""

    def __init__(
        self,
        db: Session,
        dispatcher: Optional[NotificationDispatcher] = None,
        profile: Optional[DeliveryProfile] = None,
    ):
        super().__init__(db)
        self.dispatcher = dispatcher or NotificationDispatcher(
            build_default_channels(db), profile=profile
        )
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.notification_repository = RepositoryFactory.create_notification_repository(db)

    @BaseService.measure_operation("dispatch_notification")
    def notify(self, event: NotificationEvent) -> List[DeliveryAttempt]:
        attempts = self.dispatcher.dispatch_event(event)
        failed = [a for a in attempts if a.status == DeliveryStatus.FAILED]
        self.logger.info(
            "Dispatched %s to %d recipient(s): %d attempt(s), %d failed",
            event.event_type.value,
            len(event.recipients),
            len(attempts),
            len(failed),
        )
        return attempts

    def notify_all(self, events: Iterable[NotificationEvent]) -> List[DeliveryAttempt]:
        attempts: List[DeliveryAttempt] = []
        for event in events:
            attempts.extend(self.notify(event))
        return attempts

    def _get_user(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if not user:
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    def send_system_notification(
        self,
        user_ids: Sequence[str],
        title: str,
        message: str,
        action_url: Optional[str] = None,
        action_text: Optional[str] = None,
    ) -> List[DeliveryAttempt]:
        users = [self._get_user(user_id) for user_id in user_ids]
        return self.notify(
            system_notification_event(users, title, message, action_url, action_text)
        )

    def notify_message_received(
        self,
        recipient_id: str,
        sender_id: str,
        conversation_id: Optional[str] = None,
        preview: Optional[str] = None,
    ) -> List[DeliveryAttempt]:
        recipient = self._get_user(recipient_id)
        sender = self._get_user(sender_id)
        return self.notify(message_received_event(recipient, sender, conversation_id, preview))

    def notify_paystack_restriction(
        self, user_id: str, reason: Optional[str] = None
    ) -> List[DeliveryAttempt]:
        return self.notify(paystack_restriction_event(self._get_user(user_id), reason))

    def get_user_notifications(self, user_id: str, limit: int = 50) -> List[Notification]:
        return self.notification_repository.get_user_notifications(user_id, limit=limit)
