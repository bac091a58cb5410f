# backend/tests/unit/core/test_init_db.py
from sqlalchemy import create_engine, inspect

from app.init_db import create_tables


def test_create_tables_on_empty_database():
    engine = create_engine("sqlite://")

    create_tables(bind=engine)

    tables = set(inspect(engine).get_table_names())
    assert {
        "users",
        "teacher_profiles",
        "bookings",
        "booking_history",
        "teaching_sessions",
        "notifications",
        "payout_requests",
        "documents",
        "verification_requests",
    } <= tables
