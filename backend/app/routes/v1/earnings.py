# backend/app/routes/v1/earnings.py
"""
Teacher earnings routes - API v1

Endpoints:
    GET /teachers/{teacher_id}/upcoming-earnings - Upcoming session earnings
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Path

from ...api.dependencies import get_current_active_user, get_earnings_service
from ...core.exceptions import DomainException, ForbiddenException
from ...models.user import User
from ...schemas.earnings import UpcomingEarning, UpcomingEarningsResponse
from ...services.earnings_service import EarningsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["earnings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get(
    "/{teacher_id}/upcoming-earnings",
    response_model=UpcomingEarningsResponse,
    responses={404: {"description": "Teacher not found"}},
)
async def get_upcoming_earnings(
    teacher_id: str = Path(..., description="Teacher ULID"),
    current_user: User = Depends(get_current_active_user),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> UpcomingEarningsResponse:
    """
    Upcoming earnings for the teacher dashboard.

    Teachers see their own earnings; admins may look at any teacher.
    """
    try:
        if not current_user.is_admin and current_user.id != teacher_id:
            raise ForbiddenException(
                "You can only view your own earnings", code="EARNINGS_FORBIDDEN"
            )
        entries = await asyncio.to_thread(earnings_service.get_upcoming_earnings, teacher_id)
        return UpcomingEarningsResponse(
            teacher_id=teacher_id,
            earnings=[UpcomingEarning(**entry) for entry in entries],
        )
    except DomainException as e:
        handle_domain_exception(e)
