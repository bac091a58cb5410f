# backend/app/repositories/booking_repository.py
"""
Booking Repository for the TutorConnect platform.

Data access for bookings and their audit history.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..models.booking import Booking, BookingHistory
from .base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.student),
            joinedload(Booking.teacher),
            joinedload(Booking.subject),
            joinedload(Booking.teaching_session),
        )

    def get_booking_with_details(self, booking_id: str) -> Optional[Booking]:
        """Load booking with participants, subject and session for notification rendering."""
        return self.get_by_id(booking_id, load_relationships=True)

    def get_teacher_bookings(self, teacher_id: str, status: Optional[str] = None) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.teacher_id == teacher_id)
        if status:
            query = query.filter(Booking.status == status)
        return self._execute_query(query.order_by(Booking.booking_date, Booking.start_time))

    def add_history(
        self,
        booking_id: str,
        action: str,
        from_status: Optional[str],
        to_status: Optional[str],
        performed_by_id: Optional[str],
        notes: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> BookingHistory:
        """Append an audit row for a booking transition (no commit)."""
        entry = BookingHistory(
            booking_id=booking_id,
            action=action,
            from_status=from_status,
            to_status=to_status,
            performed_by_id=performed_by_id,
            notes=notes,
            data=data,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_history(self, booking_id: str) -> List[BookingHistory]:
        query = (
            self.db.query(BookingHistory)
            .filter(BookingHistory.booking_id == booking_id)
            .order_by(BookingHistory.created_at.asc(), BookingHistory.id.asc())
        )
        return list(query.all())
