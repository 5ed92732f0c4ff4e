# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Settlement API endpoints."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_admin, get_current_user, get_db
from missionledger.models import User
from missionledger.schemas.settlement import SettlementCreate, SettlementResponse
from missionledger.services import settlement_service
from missionledger.services.settlement_service import (
    InvalidSettlementError,
    SettlementPersistenceError,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[SettlementResponse])
def list_settlements(
    user_id: uuid.UUID | None = None,
    mission_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[SettlementResponse]:
    """List settlements. Non-admins only see their own."""
    if not current_user.is_admin:
        user_id = current_user.id
    settlements = settlement_service.list_settlements(
        db, user_id=user_id, mission_id=mission_id
    )
    return [SettlementResponse.model_validate(s) for s in settlements]


@router.post(
    "", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED
)
def create_settlement(
    data: SettlementCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> SettlementResponse:
    """Record a reimbursement payment with its proof."""
    try:
        settlement = settlement_service.insert_settlement(db, data, admin)
    except InvalidSettlementError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    except SettlementPersistenceError as e:
        logger.warning(f"Settlement not recorded: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e
    return SettlementResponse.model_validate(settlement)


@router.post("/{settlement_id}/acknowledge", response_model=SettlementResponse)
def acknowledge_settlement(
    settlement_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SettlementResponse:
    """Confirm receipt of a payment."""
    settlement = settlement_service.get_settlement(db, settlement_id)
    if not settlement or settlement.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Settlement not found",
        )
    settlement = settlement_service.acknowledge_settlement(db, settlement, current_user)
    return SettlementResponse.model_validate(settlement)
