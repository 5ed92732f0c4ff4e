# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Settlement (reimbursement payment) service."""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from missionledger.models import Settlement, User
from missionledger.schemas.settlement import SettlementCreate
from missionledger.services import auth_service, mission_service
from missionledger.services.auth_service import require_admin

logger = logging.getLogger(__name__)


class SettlementServiceError(Exception):
    """Base exception for settlement errors."""


class InvalidSettlementError(SettlementServiceError):
    """The payment references an unknown user or mission, or is not positive."""


class SettlementPersistenceError(SettlementServiceError):
    """The database rejected the payment. Nothing was saved."""


def list_settlements(
    db: Session,
    user_id: uuid.UUID | None = None,
    mission_id: uuid.UUID | None = None,
) -> list[Settlement]:
    """List settlements, newest first."""
    query = db.query(Settlement)
    if user_id:
        query = query.filter(Settlement.user_id == user_id)
    if mission_id:
        query = query.filter(Settlement.mission_id == mission_id)
    return query.order_by(Settlement.created_at.desc()).all()


def get_settlement(db: Session, settlement_id: uuid.UUID) -> Settlement | None:
    """Get a settlement by ID."""
    return db.query(Settlement).filter(Settlement.id == settlement_id).first()


def insert_settlement(db: Session, data: SettlementCreate, admin: User) -> Settlement:
    """Record a payment to a user. Admin only.

    Raises:
        InvalidSettlementError: Unknown user, mission of another user, or a
            non-positive amount.
        SettlementPersistenceError: The database rejected the insert.
    """
    require_admin(admin)
    if data.amount <= 0:
        raise InvalidSettlementError("Settlement amount must be positive")
    if auth_service.get_user_by_id(db, data.user_id) is None:
        raise InvalidSettlementError("User not found")
    if data.mission_id is not None:
        mission = mission_service.get_mission_for_user(db, data.mission_id, data.user_id)
        if mission is None:
            raise InvalidSettlementError("Mission does not belong to this user")

    settlement = Settlement(
        user_id=data.user_id,
        mission_id=data.mission_id,
        amount=data.amount,
        proof_url=data.proof_url,
        note=data.note,
        settled_by=admin.id,
    )
    try:
        db.add(settlement)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record settlement for {data.user_id}: {e}")
        raise SettlementPersistenceError(
            "Could not record settlement. Please try again."
        ) from e
    db.refresh(settlement)

    logger.info(
        f"Settlement of {settlement.amount} to {data.user_id} recorded by {admin.username}"
    )
    return settlement


def acknowledge_settlement(db: Session, settlement: Settlement, user: User) -> Settlement:
    """Mark a payment as received by its recipient."""
    if settlement.user_id != user.id:
        raise InvalidSettlementError("Only the recipient can acknowledge a settlement")
    if not settlement.user_acknowledged:
        settlement.user_acknowledged = True
        db.commit()
        db.refresh(settlement)
    return settlement
