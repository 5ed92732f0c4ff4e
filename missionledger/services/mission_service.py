# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Mission service."""

import logging
import uuid
from datetime import date

from sqlalchemy.orm import Session

from missionledger.models import Mission, User
from missionledger.models.enums import OPEN_MISSION_STATUSES, MissionStatus
from missionledger.schemas.mission import MissionCreate
from missionledger.timeutil import today

logger = logging.getLogger(__name__)


class MissionServiceError(Exception):
    """Base exception for mission errors."""


class OpenMissionExistsError(MissionServiceError):
    """The user already has an open mission."""


class MissionClosedError(MissionServiceError):
    """The mission is archived and no longer accepts changes."""


def get_missions(db: Session, user_id: uuid.UUID) -> list[Mission]:
    """Get a user's missions, newest first."""
    return (
        db.query(Mission)
        .filter(Mission.user_id == user_id)
        .order_by(Mission.created_at.desc())
        .all()
    )


def get_mission(db: Session, mission_id: uuid.UUID) -> Mission | None:
    """Get a mission by ID."""
    return db.query(Mission).filter(Mission.id == mission_id).first()


def get_mission_for_user(
    db: Session,
    mission_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Mission | None:
    """Get a mission that belongs to a specific user."""
    return (
        db.query(Mission)
        .filter(Mission.id == mission_id, Mission.user_id == user_id)
        .first()
    )


def get_open_mission(db: Session, user_id: uuid.UUID) -> Mission | None:
    """Get the user's open mission, if any."""
    return (
        db.query(Mission)
        .filter(
            Mission.user_id == user_id,
            Mission.status.in_(OPEN_MISSION_STATUSES),
        )
        .order_by(Mission.created_at.desc())
        .first()
    )


def start_mission(db: Session, user: User, data: MissionCreate) -> Mission:
    """Start a new mission. A user may only have one open mission."""
    if get_open_mission(db, user.id) is not None:
        raise OpenMissionExistsError("Finish the current mission before starting a new one")

    mission = Mission(
        user_id=user.id,
        name=data.name,
        status=MissionStatus.ACTIVE,
        start_date=data.start_date or today(),
        address=data.address,
        companions=data.companions,
        details=data.details,
    )
    db.add(mission)
    db.commit()
    db.refresh(mission)

    logger.info(f"Mission {mission.id} started by {user.username}")
    return mission


def finish_mission(db: Session, mission: Mission, end_date: date | None = None) -> Mission:
    """Archive an open mission."""
    if not mission.is_open:
        raise MissionClosedError("Mission is already finished")

    mission.status = MissionStatus.COMPLETED
    mission.end_date = end_date or today()
    db.commit()
    db.refresh(mission)
    return mission
