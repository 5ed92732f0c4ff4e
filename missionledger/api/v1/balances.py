# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Balance API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_admin, get_current_user, get_db
from missionledger.models import User
from missionledger.schemas.balance import BalanceResponse
from missionledger.services import auth_service, balance_service

router = APIRouter()


def _to_response(balance: balance_service.Balance) -> BalanceResponse:
    return BalanceResponse(
        spent=balance.spent,
        received=balance.received,
        balance=balance.balance,
        owed_to_user=balance.owed_to_user,
    )


@router.get("/me", response_model=BalanceResponse)
def get_my_balance(
    mission_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BalanceResponse:
    """Outstanding position of the current user."""
    return _to_response(
        balance_service.get_user_balance(db, current_user.id, mission_id)
    )


@router.get("/{user_id}", response_model=BalanceResponse)
def get_user_balance(
    user_id: uuid.UUID,
    mission_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> BalanceResponse:
    """Outstanding position of any user."""
    if not auth_service.get_user_by_id(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return _to_response(balance_service.get_user_balance(db, user_id, mission_id))
