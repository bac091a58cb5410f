"""Repository for users and teacher profiles."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import AccountStatus, RoleName
from ..models.teacher_profile import TeacherProfile
from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_active_admins(self) -> List[User]:
        """Admins who receive operational notifications (document uploads, ...)."""
        query = self.db.query(User).filter(
            User.role == RoleName.ADMIN.value,
            User.account_status == AccountStatus.ACTIVE.value,
        )
        return self._execute_query(query.order_by(User.name))

    def get_teacher_profile(self, user_id: str) -> Optional[TeacherProfile]:
        return self.db.query(TeacherProfile).filter(TeacherProfile.user_id == user_id).first()
