# backend/tests/repositories/test_repositories.py
"""Tests for the booking, session, user and notification repositories."""

from datetime import timedelta

from app.core.enums import AccountStatus
from app.models.booking import BookingStatus
from app.repositories.factory import RepositoryFactory


class TestBookingRepository:
    def test_details_load_participants_and_session(self, db, make_booking):
        booking = make_booking(BookingStatus.APPROVED)
        db.expunge_all()

        loaded = RepositoryFactory.create_booking_repository(db).get_booking_with_details(booking.id)

        assert loaded.student.name == "Ada Student"
        assert loaded.teacher.name == "Tunde Teacher"
        assert loaded.subject_name == "Mathematics"
        assert loaded.teaching_session.meeting_link == "https://meet.example.com/abc"

    def test_teacher_bookings_by_status_in_date_order(self, db, make_booking, test_teacher, future_date):
        later = make_booking(booking_date=future_date + timedelta(days=1))
        sooner = make_booking(booking_date=future_date)
        make_booking(BookingStatus.APPROVED)
        repository = RepositoryFactory.create_booking_repository(db)

        pending = repository.get_teacher_bookings(test_teacher.id, status=BookingStatus.PENDING.value)

        assert [b.id for b in pending] == [sooner.id, later.id]
        assert len(repository.get_teacher_bookings(test_teacher.id)) == 3

    def test_history_round_trip(self, db, make_booking, test_teacher):
        booking = make_booking()
        repository = RepositoryFactory.create_booking_repository(db)

        repository.add_history(booking.id, "approve", "pending", "approved", test_teacher.id)
        repository.add_history(
            booking.id, "cancel", "approved", "cancelled", test_teacher.id, notes="Ill", data={"reason": "Ill"}
        )
        db.commit()

        history = repository.get_history(booking.id)
        assert [h.action for h in history] == ["approve", "cancel"]
        assert history[1].data == {"reason": "Ill"}

    def test_update_and_count(self, db, make_booking):
        booking = make_booking()
        repository = RepositoryFactory.create_booking_repository(db)

        updated = repository.update(booking.id, notes="Bring past papers")

        assert updated.notes == "Bring past papers"
        assert repository.update("01ARZ3NDEKTSV4RRFFQ69G5FAV", notes="x") is None
        assert repository.count(status=BookingStatus.PENDING.value) == 1
        assert repository.find_by(status=BookingStatus.CANCELLED.value) == []


class TestUserRepository:
    def test_active_admins_only(self, db, test_admin):
        repository = RepositoryFactory.create_user_repository(db)
        suspended = repository.create(
            name="Zed Admin",
            email="zed.admin@example.com",
            role="admin",
            account_status=AccountStatus.SUSPENDED.value,
        )
        db.commit()

        admins = repository.get_active_admins()

        assert [a.id for a in admins] == [test_admin.id]
        assert suspended.id not in [a.id for a in admins]

    def test_teacher_profile(self, db, test_teacher, test_student):
        repository = RepositoryFactory.create_user_repository(db)
        assert repository.get_teacher_profile(test_teacher.id).preferred_currency == "NGN"
        assert repository.get_teacher_profile(test_student.id) is None


class TestNotificationRepository:
    def test_unread_count(self, db, test_student):
        repository = RepositoryFactory.create_notification_repository(db)
        first = repository.create_notification(test_student.id, "system_notification", "Hi", "Welcome")
        repository.create_notification(test_student.id, "system_notification", "Hi again", "Still here")
        db.commit()
        assert repository.get_unread_count(test_student.id) == 2

        first.read_at = first.created_at
        db.commit()
        assert repository.get_unread_count(test_student.id) == 1
