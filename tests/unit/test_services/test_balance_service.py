# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for balance reconciliation."""

import random
import uuid
from datetime import date
from decimal import Decimal

from missionledger.models import Expense, Settlement
from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.services import balance_service
from missionledger.services.balance_service import (
    compute_balance,
    compute_mission_stats,
    compute_overview,
)

USER = uuid.uuid4()
OTHER = uuid.uuid4()
MISSION = uuid.uuid4()


def expense(amount, status="approved", category="travel", owner=USER, mission=None):
    return {
        "user_id": owner,
        "mission_id": mission,
        "amount": amount,
        "status": status,
        "category": category,
    }


def settlement(amount, owner=USER, mission=None):
    return {"user_id": owner, "mission_id": mission, "amount": amount}


def test_no_settlements_balance_is_minus_approved_total():
    expenses = [expense(1200), expense(300, category="meal"), expense(50, "pending")]
    result = compute_balance(expenses, [], USER)
    assert result.spent == Decimal("1500")
    assert result.balance == Decimal("-1500")
    assert result.owed_to_user == Decimal("1500")


def test_approved_minus_settled():
    expenses = [expense(2000)]
    settlements = [settlement(1000), settlement(500)]
    result = compute_balance(expenses, settlements, USER)
    assert result.spent == Decimal("2000")
    assert result.received == Decimal("1500")
    assert result.balance == Decimal("-500")


def test_cash_rejected_and_pending_do_not_count():
    expenses = [
        expense(100, category="cash"),
        expense(100, status="rejected"),
        expense(100, status="pending"),
        expense(100, status="settled"),
    ]
    result = compute_balance(expenses, [], USER)
    assert result.spent == Decimal("100")


def test_other_users_are_ignored():
    expenses = [expense(100), expense(900, owner=OTHER)]
    settlements = [settlement(40, owner=OTHER)]
    result = compute_balance(expenses, settlements, USER)
    assert result.spent == Decimal("100")
    assert result.received == Decimal("0")


def test_order_independent():
    expenses = [expense(a) for a in (10, "20.5", 30, None, "x")]
    settlements = [settlement(a) for a in (5, 7, "1.25")]
    expected = compute_balance(expenses, settlements, USER)
    for _ in range(5):
        random.shuffle(expenses)
        random.shuffle(settlements)
        assert compute_balance(expenses, settlements, USER) == expected


def test_positive_balance_is_an_advance():
    result = compute_balance([expense(100)], [settlement(300)], USER)
    assert result.balance == Decimal("200")
    assert result.owed_to_user == Decimal("0")


def test_mission_scope_narrows_settlements():
    settlements = [settlement(100, mission=MISSION), settlement(50)]
    result = compute_balance([], settlements, USER, mission_id=MISSION)
    assert result.received == Decimal("100")


def test_mission_stats():
    expenses = [
        expense(500, mission=MISSION),
        expense(200, category="cash", status="pending", mission=MISSION),
        expense(999),
    ]
    stats = compute_mission_stats(expenses, [settlement(300, mission=MISSION)], USER, MISSION)
    assert stats.expense == Decimal("500")
    assert stats.cash == Decimal("200")
    assert stats.received == Decimal("300")


def test_overview_excludes_cash():
    expenses = [
        expense(100),
        expense(40, status="pending", owner=OTHER),
        expense(500, category="cash"),
    ]
    overview = compute_overview(expenses, [settlement(60)])
    assert overview.total_expense == Decimal("140")
    assert overview.approved == Decimal("100")
    assert overview.pending == Decimal("40")
    assert overview.balance == Decimal("-40")
    assert overview.records == 3


def test_get_user_balance_reads_orm_rows(db_session, test_user, admin_user):
    db_session.add_all(
        [
            Expense(
                user_id=test_user.id,
                date=date(2025, 3, 1),
                category=ExpenseCategory.HOTEL,
                amount=Decimal("2000.00"),
                status=ExpenseStatus.APPROVED,
            ),
            Settlement(
                user_id=test_user.id,
                amount=Decimal("1500.00"),
                proof_url="http://testserver/files/settlement-proofs/p.png",
                settled_by=admin_user.id,
            ),
        ]
    )
    db_session.commit()

    result = balance_service.get_user_balance(db_session, test_user.id)
    assert result.spent == Decimal("2000.00")
    assert result.received == Decimal("1500.00")
    assert result.balance == Decimal("-500.00")
