# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for settlement_service."""

import uuid
from decimal import Decimal

import pytest

from missionledger.schemas.settlement import SettlementCreate
from missionledger.services import settlement_service
from missionledger.services.auth_service import AuthorizationError
from missionledger.services.settlement_service import InvalidSettlementError

PROOF = "http://testserver/files/settlement-proofs/proof.png"


def test_insert_and_list(db_session, admin_user, test_user):
    settlement = settlement_service.insert_settlement(
        db_session,
        SettlementCreate(user_id=test_user.id, amount=Decimal("1500"), proof_url=PROOF),
        admin_user,
    )

    assert settlement.settled_by == admin_user.id
    assert settlement.user_acknowledged is False
    assert settlement_service.list_settlements(db_session, user_id=test_user.id) == [
        settlement
    ]
    assert settlement_service.list_settlements(db_session, user_id=admin_user.id) == []


def test_insert_requires_admin(db_session, test_user):
    data = SettlementCreate(user_id=test_user.id, amount=Decimal("10"), proof_url=PROOF)
    with pytest.raises(AuthorizationError):
        settlement_service.insert_settlement(db_session, data, test_user)


def test_insert_unknown_user(db_session, admin_user):
    data = SettlementCreate(user_id=uuid.uuid4(), amount=Decimal("10"), proof_url=PROOF)
    with pytest.raises(InvalidSettlementError):
        settlement_service.insert_settlement(db_session, data, admin_user)


def test_acknowledge_by_recipient_only(db_session, admin_user, test_user):
    settlement = settlement_service.insert_settlement(
        db_session,
        SettlementCreate(user_id=test_user.id, amount=Decimal("20"), proof_url=PROOF),
        admin_user,
    )

    with pytest.raises(InvalidSettlementError):
        settlement_service.acknowledge_settlement(db_session, settlement, admin_user)

    acknowledged = settlement_service.acknowledge_settlement(
        db_session, settlement, test_user
    )
    assert acknowledged.user_acknowledged is True
