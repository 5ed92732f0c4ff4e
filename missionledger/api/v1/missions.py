# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Mission API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_user, get_db
from missionledger.models import Mission, User
from missionledger.schemas.balance import MissionStatsResponse
from missionledger.schemas.mission import MissionCreate, MissionResponse
from missionledger.services import balance_service, mission_service
from missionledger.services.mission_service import (
    MissionClosedError,
    OpenMissionExistsError,
)

router = APIRouter()


def _get_mission_or_404(db: Session, mission_id: uuid.UUID, user: User) -> Mission:
    mission = mission_service.get_mission_for_user(db, mission_id, user.id)
    if not mission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Mission not found",
        )
    return mission


@router.get("", response_model=list[MissionResponse])
def list_missions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[MissionResponse]:
    """List the current user's missions."""
    missions = mission_service.get_missions(db, current_user.id)
    return [MissionResponse.model_validate(m) for m in missions]


@router.get("/current", response_model=MissionResponse | None)
def get_current_mission(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MissionResponse | None:
    """Get the current user's open mission, if any."""
    mission = mission_service.get_open_mission(db, current_user.id)
    return MissionResponse.model_validate(mission) if mission else None


@router.post("", response_model=MissionResponse, status_code=status.HTTP_201_CREATED)
def start_mission(
    data: MissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MissionResponse:
    """Start a new mission."""
    try:
        mission = mission_service.start_mission(db, current_user, data)
    except OpenMissionExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return MissionResponse.model_validate(mission)


@router.get("/{mission_id}", response_model=MissionResponse)
def get_mission(
    mission_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MissionResponse:
    """Get a specific mission."""
    return MissionResponse.model_validate(
        _get_mission_or_404(db, mission_id, current_user)
    )


@router.post("/{mission_id}/finish", response_model=MissionResponse)
def finish_mission(
    mission_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MissionResponse:
    """Archive an open mission."""
    mission = _get_mission_or_404(db, mission_id, current_user)
    try:
        mission = mission_service.finish_mission(db, mission)
    except MissionClosedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return MissionResponse.model_validate(mission)


@router.get("/{mission_id}/stats", response_model=MissionStatsResponse)
def get_mission_stats(
    mission_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MissionStatsResponse:
    """Approved spend, settlements and cash received for a mission."""
    mission = _get_mission_or_404(db, mission_id, current_user)
    stats = balance_service.get_mission_stats(db, current_user.id, mission.id)
    return MissionStatsResponse.model_validate(stats)
