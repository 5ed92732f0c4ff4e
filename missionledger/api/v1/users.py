# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User administration API endpoints."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_admin, get_db
from missionledger.models import User
from missionledger.schemas.user import UserResponse, UserRoleUpdate
from missionledger.services import auth_service
from missionledger.services.auth_service import AuthorizationError

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = auth_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[UserResponse]:
    """List all users. Pending accounts come first."""
    users = auth_service.list_users(db, admin)
    return [UserResponse.model_validate(u) for u in users]


@router.post("/{user_id}/approve", response_model=UserResponse)
def approve_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> UserResponse:
    """Approve a pending account."""
    user = _get_user_or_404(db, user_id)
    return UserResponse.model_validate(auth_service.approve_user(db, user, admin))


@router.put("/{user_id}/role", response_model=UserResponse)
def set_user_role(
    user_id: uuid.UUID,
    data: UserRoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> UserResponse:
    """Change a user's role."""
    user = _get_user_or_404(db, user_id)
    try:
        user = auth_service.set_role(db, user, data.role, admin)
    except AuthorizationError as e:
        logger.warning(f"Role change refused: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return UserResponse.model_validate(user)
