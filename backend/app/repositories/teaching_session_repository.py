"""Repository for teaching sessions."""

from datetime import date
from typing import List

from sqlalchemy.orm import Session, joinedload

from ..models.booking import Booking, BookingStatus
from ..models.teaching_session import SessionStatus, TeachingSession
from .base_repository import BaseRepository


class TeachingSessionRepository(BaseRepository[TeachingSession]):
    def __init__(self, db: Session):
        super().__init__(db, TeachingSession)

    def get_upcoming_for_teacher(
        self, teacher_id: str, from_date: date, limit: int = 5
    ) -> List[TeachingSession]:
        """
        Scheduled sessions on or after ``from_date``, soonest first.

        Only sessions whose booking is currently approved count; a rescheduled
        or resubmitted booking keeps its session row until it is re-approved.
        """
        query = (
            self.db.query(TeachingSession)
            .join(Booking, Booking.id == TeachingSession.booking_id)
            .options(joinedload(TeachingSession.student), joinedload(TeachingSession.subject))
            .filter(
                TeachingSession.teacher_id == teacher_id,
                TeachingSession.status == SessionStatus.SCHEDULED.value,
                Booking.status == BookingStatus.APPROVED.value,
                TeachingSession.session_date >= from_date,
            )
            .order_by(TeachingSession.session_date.asc(), TeachingSession.start_time.asc())
            .limit(limit)
        )
        return self._execute_query(query)
