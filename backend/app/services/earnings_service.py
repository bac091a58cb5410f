# backend/app/services/earnings_service.py
"""
Earnings Service for the TutorConnect platform

Builds the "upcoming earnings" list shown on the teacher dashboard: one
entry per scheduled session from today on, valued at the teacher's hourly
rates. Teachers without any rate get no entries at all rather than a list
of zero amounts.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DEFAULT_SUBJECT_LABEL, UNKNOWN_STUDENT_LABEL
from ..core.enums import Currency, RoleName
from ..core.exceptions import NotFoundException, ValidationException
from ..domain.earnings import compute_earning, has_configured_rate, round_amount
from ..models.teaching_session import TeachingSession
from ..notifications.formatting import format_due_date
from ..repositories.factory import RepositoryFactory
from .base import BaseService


class EarningsService(BaseService):
    def __init__(
        self,
        db: Session,
        whole_hour_billing: Optional[bool] = None,
        limit: Optional[int] = None,
    ):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.session_repository = RepositoryFactory.create_teaching_session_repository(db)
        self.whole_hour_billing = (
            settings.earnings_whole_hour_billing if whole_hour_billing is None else whole_hour_billing
        )
        self.limit = settings.upcoming_earnings_limit if limit is None else limit

    @BaseService.measure_operation("get_upcoming_earnings")
    def get_upcoming_earnings(self, teacher_id: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Upcoming earnings for a teacher, soonest session first.

        A session with unparsable or inverted times is skipped and logged;
        the other sessions are still reported.
        """
        teacher = self.user_repository.get_by_id(teacher_id, load_relationships=False)
        if not teacher or teacher.role != RoleName.TEACHER:
            raise NotFoundException(f"Teacher {teacher_id} not found", code="TEACHER_NOT_FOUND")

        profile = teacher.teacher_profile
        if profile is None or not has_configured_rate(profile.hourly_rate_usd, profile.hourly_rate_ngn):
            return []

        primary = Currency.USD.value if profile.preferred_currency == Currency.USD else Currency.NGN.value
        secondary = Currency.NGN.value if primary == Currency.USD.value else Currency.USD.value

        sessions = self.session_repository.get_upcoming_for_teacher(
            teacher_id, today or date.today(), limit=self.limit
        )
        entries: List[Dict[str, Any]] = []
        for session in sessions:
            entry = self._build_entry(session, profile, primary, secondary)
            if entry is not None:
                entries.append(entry)
        return entries

    def _build_entry(
        self, session: TeachingSession, profile: Any, primary: str, secondary: str
    ) -> Optional[Dict[str, Any]]:
        try:
            earning = compute_earning(
                profile.hourly_rate_usd,
                profile.hourly_rate_ngn,
                session.start_time,
                session.end_time,
                whole_hours=self.whole_hour_billing,
            )
        except ValidationException as exc:
            self.logger.warning("Skipping session %s in upcoming earnings: %s", session.id, exc.message)
            return None

        student = session.student
        subject = session.subject
        return {
            "id": session.id,
            "amount": round_amount(earning.amount_for(primary)),
            "amount_secondary": round_amount(earning.amount_for(secondary)),
            "currency": primary,
            "secondary_currency": secondary,
            "student_name": student.name if student is not None and student.name else UNKNOWN_STUDENT_LABEL,
            "subject": subject.name if subject is not None and subject.name else DEFAULT_SUBJECT_LABEL,
            "due_date": format_due_date(session.session_date),
            "status": "pending",
        }
