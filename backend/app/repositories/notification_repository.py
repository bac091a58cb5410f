"""Repository for persisted inbox notifications."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.notification import Notification
from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Data access for inbox entries written by the database channel."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Notification)

    def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        action_text: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        return self.create(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            action_url=action_url,
            action_text=action_text,
            data=data,
        )

    def get_user_notifications(self, user_id: str, limit: int = 50) -> List[Notification]:
        query = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def get_unread_count(self, user_id: str) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
            .count()
        )
