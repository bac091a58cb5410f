# backend/app/api/dependencies/auth.py
"""
Acting-user dependencies.

Authentication happens upstream (gateway / session layer); requests reach
this service with the authenticated user's id in the ``X-User-Id`` header.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ...core.enums import AccountStatus
from ...core.ulid_helper import is_valid_ulid
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the acting user from the ``X-User-Id`` header.

    Raises:
        HTTPException: 401 if the header is missing, malformed or names no user
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    if not is_valid_ulid(x_user_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed X-User-Id header",
        )

    user = RepositoryFactory.create_user_repository(db).get_by_id(
        x_user_id, load_relationships=False
    )
    if user is None:
        logger.warning("Unknown acting user %s", x_user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Get the current user, rejecting suspended or deleted accounts.

    Raises:
        HTTPException: 403 if the account is not active
    """
    if current_user.account_status != AccountStatus.ACTIVE.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user
