"""Earnings schemas."""

from decimal import Decimal
from typing import List

from ._strict_base import StrictModel


class UpcomingEarning(StrictModel):
    id: str
    amount: Decimal
    amount_secondary: Decimal
    currency: str
    secondary_currency: str
    student_name: str
    subject: str
    due_date: str
    status: str


class UpcomingEarningsResponse(StrictModel):
    teacher_id: str
    earnings: List[UpcomingEarning]
