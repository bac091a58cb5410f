"""
Channel adapters: inbox record, email (Resend), realtime broadcast (Redis
pub/sub) and SMS (Twilio).

Every adapter returns SENT or SKIPPED (transport not configured, or the
recipient has no address for it) and raises DeliveryException when the
transport rejects the hand-off.
"""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape
import json
import logging
from typing import Any, Dict, Optional

import redis
import resend
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from ..core.constants import SMS_MAX_LENGTH
from ..core.enums import NotificationChannel
from ..core.exceptions import DeliveryException, RepositoryException
from ..repositories.notification_repository import NotificationRepository
from .dispatcher import DeliveryMessage, DeliveryStatus
from .formatting import truncate_sms

logger = logging.getLogger(__name__)

BROADCAST_SCHEMA_VERSION = 1


class DatabaseChannel:
    """Writes the inbox record and commits it on its own."""

    channel = NotificationChannel.DATABASE

    def __init__(self, db: Session, repository: Optional[NotificationRepository] = None):
        self.db = db
        self.repository = repository or NotificationRepository(db)

    def deliver(self, message: DeliveryMessage) -> DeliveryStatus:
        content = message.content
        try:
            self.repository.create_notification(
                user_id=message.recipient.user_id,
                type=content.type,
                title=content.title,
                message=content.message,
                action_url=content.action_url,
                action_text=content.action_text,
                data=message.data,
            )
            self.db.commit()
        except (SQLAlchemyError, RepositoryException) as exc:
            self.db.rollback()
            raise DeliveryException(self.channel.value, str(exc))
        return DeliveryStatus.SENT


class MailChannel:
    """Sends plain notification emails through Resend."""

    channel = NotificationChannel.MAIL

    def __init__(self, api_key: Optional[str], from_email: str, frontend_url: str = ""):
        self.api_key = api_key
        self.from_email = from_email
        self.frontend_url = frontend_url.rstrip("/")
        if not api_key:
            logger.info("Mail channel disabled - RESEND_API_KEY not configured")

    def _absolute_url(self, url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        if url.startswith("http://") or url.startswith("https://"):
            return url
        return f"{self.frontend_url}{url}"

    def build_email(self, message: DeliveryMessage) -> Dict[str, Any]:
        content = message.content
        url = self._absolute_url(content.action_url)
        greeting = f"Hello {message.recipient.name}," if message.recipient.name else "Hello,"

        html = f"<p>{escape(greeting)}</p><p>{escape(content.message)}</p>"
        text = f"{greeting}\n\n{content.message}"
        if url and content.action_text:
            html += f'<p><a href="{escape(url, quote=True)}">{escape(content.action_text)}</a></p>'
            text += f"\n\n{content.action_text}: {url}"

        return {
            "from": self.from_email,
            "to": message.recipient.email,
            "subject": content.subject,
            "html": html,
            "text": text,
            "tags": [{"name": "template", "value": content.template_key.replace(".", "_")}],
        }

    def deliver(self, message: DeliveryMessage) -> DeliveryStatus:
        if not self.api_key or not message.recipient.email:
            return DeliveryStatus.SKIPPED

        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(self.build_email(message))
        except Exception as exc:
            raise DeliveryException(self.channel.value, str(exc) or type(exc).__name__)

        logger.info(
            "Email sent to %s - Subject: %s (%s)",
            message.recipient.email,
            message.content.subject,
            (response or {}).get("id") if isinstance(response, dict) else response,
        )
        return DeliveryStatus.SENT


class BroadcastChannel:
    """Publishes a JSON envelope to the recipient's Redis channel ``user:{id}``."""

    channel = NotificationChannel.BROADCAST

    def __init__(self, client: Optional[redis.Redis]):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: Optional[str]) -> "BroadcastChannel":
        if not redis_url:
            logger.info("Broadcast channel disabled - REDIS_URL not configured")
            return cls(None)
        return cls(redis.Redis.from_url(redis_url, decode_responses=True))

    @staticmethod
    def build_envelope(message: DeliveryMessage) -> Dict[str, Any]:
        content = message.content
        return {
            "type": content.type,
            "schema_version": BROADCAST_SCHEMA_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "payload": {
                "title": content.title,
                "message": content.message,
                "action_url": content.action_url,
                "action_text": content.action_text,
                **message.data,
            },
        }

    def deliver(self, message: DeliveryMessage) -> DeliveryStatus:
        if self.client is None:
            return DeliveryStatus.SKIPPED

        channel_name = f"user:{message.recipient.user_id}"
        try:
            subscribers = self.client.publish(channel_name, json.dumps(self.build_envelope(message)))
        except redis.RedisError as exc:
            raise DeliveryException(self.channel.value, str(exc))

        logger.debug("Published %s to %s (subscribers: %s)", message.content.type, channel_name, subscribers)
        return DeliveryStatus.SENT


class SmsChannel:
    """Sends a single SMS through Twilio from the fixed sender id."""

    channel = NotificationChannel.SMS

    def __init__(self, client: Optional[Client], sender_id: str, max_length: int = SMS_MAX_LENGTH):
        self.client = client
        self.sender_id = sender_id
        self.max_length = max_length

    @classmethod
    def from_credentials(
        cls,
        account_sid: Optional[str],
        auth_token: Optional[str],
        sender_id: str,
        max_length: int = SMS_MAX_LENGTH,
    ) -> "SmsChannel":
        if not (account_sid and auth_token):
            logger.info("SMS channel disabled - Twilio credentials not configured")
            return cls(None, sender_id, max_length)
        return cls(Client(account_sid, auth_token), sender_id, max_length)

    def build_body(self, message: DeliveryMessage) -> str:
        return truncate_sms(message.content.message, self.max_length)

    def deliver(self, message: DeliveryMessage) -> DeliveryStatus:
        if self.client is None or not message.recipient.phone:
            return DeliveryStatus.SKIPPED

        try:
            sms = self.client.messages.create(
                body=self.build_body(message),
                to=message.recipient.phone,
                from_=self.sender_id,
            )
        except TwilioRestException as exc:
            raise DeliveryException(self.channel.value, str(exc), details={"code": exc.code})

        logger.info("SMS sent to %s, SID: %s", message.recipient.phone, sms.sid)
        return DeliveryStatus.SENT
