# backend/tests/conftest.py
"""
Pytest configuration.

Tests run against an in-memory SQLite database with every external
notification transport disabled. Mail, broadcast and SMS deliveries are
captured by recording channels; the database channel is real so inbox
records can be asserted on.
"""

import os

# CRITICAL: Set the test environment BEFORE any app imports!
os.environ["CI"] = "true"  # no .env loading
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SITE_MODE"] = "test"
for _key in (
    "NOTIFICATION_DELIVERY_PROFILE",
    "RESEND_API_KEY",
    "REDIS_URL",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "EARNINGS_WHOLE_HOUR_BILLING",
    "ALLOW_STUDENT_CANCELLATION",
):
    os.environ.pop(_key, None)

from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict

import pytest
from sqlalchemy.orm import Session

from app import models  # noqa: F401
from app.core.enums import AccountStatus, Currency, DeliveryProfile, NotificationChannel, RoleName
from app.database import Base, SessionLocal, engine
from app.models.booking import Booking, BookingStatus
from app.models.subject import Subject
from app.models.teacher_profile import TeacherProfile
from app.models.teaching_session import SessionStatus, TeachingSession
from app.models.user import User
from app.notifications.delivery import DatabaseChannel
from app.notifications.dispatcher import NotificationDispatcher
from app.services.notification_service import NotificationService
from tests.helpers.channels import RecordingChannel

# ============================================================================
# Database
# ============================================================================


@pytest.fixture(scope="function")
def db() -> Session:
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


# ============================================================================
# Notifications
# ============================================================================


@pytest.fixture
def mail_channel() -> RecordingChannel:
    return RecordingChannel("mail")


@pytest.fixture
def broadcast_channel() -> RecordingChannel:
    return RecordingChannel("broadcast")


@pytest.fixture
def sms_channel() -> RecordingChannel:
    return RecordingChannel("sms")


@pytest.fixture
def channels(db: Session, mail_channel, broadcast_channel, sms_channel) -> Dict[NotificationChannel, Any]:
    return {
        NotificationChannel.DATABASE: DatabaseChannel(db),
        NotificationChannel.MAIL: mail_channel,
        NotificationChannel.BROADCAST: broadcast_channel,
        NotificationChannel.SMS: sms_channel,
    }


@pytest.fixture
def notification_service(db: Session, channels) -> NotificationService:
    dispatcher = NotificationDispatcher(channels, profile=DeliveryProfile.NON_PRODUCTION)
    return NotificationService(db, dispatcher=dispatcher)


@pytest.fixture
def production_notification_service(db: Session, channels) -> NotificationService:
    dispatcher = NotificationDispatcher(channels, profile=DeliveryProfile.PRODUCTION)
    return NotificationService(db, dispatcher=dispatcher)


# ============================================================================
# Users and catalog
# ============================================================================


def _user(db: Session, name: str, role: RoleName, **extra: Any) -> User:
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        role=role.value,
        account_status=AccountStatus.ACTIVE.value,
        **extra,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def test_student(db: Session) -> User:
    return _user(db, "Ada Student", RoleName.STUDENT, phone="+2348000000001")


@pytest.fixture
def test_teacher(db: Session) -> User:
    teacher = _user(db, "Tunde Teacher", RoleName.TEACHER, phone="+2348000000002")
    db.add(
        TeacherProfile(
            user_id=teacher.id,
            hourly_rate_usd=Decimal("10.00"),
            hourly_rate_ngn=Decimal("2000.00"),
            preferred_currency=Currency.NGN.value,
        )
    )
    db.commit()
    db.refresh(teacher)
    return teacher


@pytest.fixture
def test_teacher_2(db: Session) -> User:
    teacher = _user(db, "Bola Teacher", RoleName.TEACHER)
    db.add(
        TeacherProfile(
            user_id=teacher.id,
            hourly_rate_usd=Decimal("12.00"),
            hourly_rate_ngn=Decimal("2500.00"),
            preferred_currency=Currency.USD.value,
        )
    )
    db.commit()
    db.refresh(teacher)
    return teacher


@pytest.fixture
def test_admin(db: Session) -> User:
    return _user(db, "Amaka Admin", RoleName.ADMIN)


@pytest.fixture
def test_subject(db: Session) -> Subject:
    subject = Subject(name="Mathematics")
    db.add(subject)
    db.commit()
    return subject


@pytest.fixture
def future_date() -> date:
    return date.today() + timedelta(days=3)


@pytest.fixture
def make_booking(db: Session, test_student: User, test_teacher: User, test_subject: Subject, future_date: date) -> Callable[..., Booking]:
    """Insert a booking directly in the given status (with a session when approved)."""

    def _make(
        status: BookingStatus = BookingStatus.PENDING,
        booking_date: date | None = None,
        start: time = time(10, 0),
        end: time = time(11, 0),
        teacher: User | None = None,
    ) -> Booking:
        teacher = teacher or test_teacher
        booking_date = booking_date or future_date
        duration = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
        booking = Booking(
            student_id=test_student.id,
            teacher_id=teacher.id,
            subject_id=test_subject.id,
            booking_date=booking_date,
            start_time=start,
            end_time=end,
            duration_minutes=duration,
            status=status.value,
            currency=Currency.NGN.value,
            total_fee=Decimal("2000.00"),
        )
        db.add(booking)
        db.flush()
        if status in (BookingStatus.APPROVED, BookingStatus.COMPLETED, BookingStatus.RESCHEDULED):
            db.add(
                TeachingSession(
                    booking_id=booking.id,
                    teacher_id=teacher.id,
                    student_id=test_student.id,
                    subject_id=test_subject.id,
                    session_date=booking_date,
                    start_time=start,
                    end_time=end,
                    status=(
                        SessionStatus.COMPLETED.value
                        if status == BookingStatus.COMPLETED
                        else SessionStatus.SCHEDULED.value
                    ),
                    meeting_link="https://meet.example.com/abc",
                )
            )
        db.commit()
        db.refresh(booking)
        return booking

    return _make
