# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for mission_service."""

from datetime import date
from decimal import Decimal

import pytest

from missionledger.models import Expense, Settlement
from missionledger.models.enums import ExpenseCategory, ExpenseStatus, MissionStatus
from missionledger.schemas.mission import MissionCreate
from missionledger.services import balance_service, mission_service
from missionledger.services.mission_service import (
    MissionClosedError,
    OpenMissionExistsError,
)


def test_start_mission_defaults_start_date(db_session, test_user, monkeypatch):
    monkeypatch.setattr(mission_service, "today", lambda: date(2025, 4, 2))

    mission = mission_service.start_mission(
        db_session, test_user, MissionCreate(name="  Site survey  ", address="Pune")
    )

    assert mission.name == "Site survey"
    assert mission.status == MissionStatus.ACTIVE
    assert mission.start_date == date(2025, 4, 2)
    assert mission_service.get_open_mission(db_session, test_user.id).id == mission.id


def test_only_one_open_mission(db_session, test_user):
    mission_service.start_mission(db_session, test_user, MissionCreate(name="First"))
    with pytest.raises(OpenMissionExistsError):
        mission_service.start_mission(db_session, test_user, MissionCreate(name="Second"))


def test_finish_mission(db_session, test_user):
    mission = mission_service.start_mission(
        db_session, test_user, MissionCreate(name="Trip")
    )
    finished = mission_service.finish_mission(db_session, mission, date(2025, 4, 9))

    assert finished.status == MissionStatus.COMPLETED
    assert finished.end_date == date(2025, 4, 9)
    assert mission_service.get_open_mission(db_session, test_user.id) is None

    with pytest.raises(MissionClosedError):
        mission_service.finish_mission(db_session, finished)

    # A new mission can start once the previous one is archived
    mission_service.start_mission(db_session, test_user, MissionCreate(name="Next"))


def test_get_mission_for_user_checks_owner(db_session, test_user, admin_user):
    mission = mission_service.start_mission(
        db_session, test_user, MissionCreate(name="Mine")
    )
    assert mission_service.get_mission_for_user(db_session, mission.id, admin_user.id) is None
    assert mission_service.get_missions(db_session, test_user.id) == [mission]


def test_mission_stats(db_session, test_user, admin_user):
    mission = mission_service.start_mission(
        db_session, test_user, MissionCreate(name="Audit")
    )
    db_session.add_all(
        [
            Expense(
                user_id=test_user.id,
                mission_id=mission.id,
                date=date(2025, 4, 3),
                category=ExpenseCategory.TRAVEL,
                amount=Decimal("300.00"),
                status=ExpenseStatus.APPROVED,
            ),
            Expense(
                user_id=test_user.id,
                mission_id=mission.id,
                date=date(2025, 4, 3),
                category=ExpenseCategory.CASH,
                amount=Decimal("1000.00"),
                status=ExpenseStatus.PENDING,
            ),
            Settlement(
                user_id=test_user.id,
                mission_id=mission.id,
                amount=Decimal("250.00"),
                proof_url="http://testserver/files/settlement-proofs/x.pdf",
                settled_by=admin_user.id,
            ),
        ]
    )
    db_session.commit()

    stats = balance_service.get_mission_stats(db_session, test_user.id, mission.id)
    assert stats.expense == Decimal("300.00")
    assert stats.cash == Decimal("1000.00")
    assert stats.received == Decimal("250.00")
