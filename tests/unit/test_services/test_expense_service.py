# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for expense_service."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from missionledger.models import Expense, Mission
from missionledger.models.enums import ExpenseCategory, ExpenseStatus, MissionStatus
from missionledger.schemas.expense import ExpenseAdminUpdate, ExpenseOwnerUpdate
from missionledger.services import category_limit_service, expense_service
from missionledger.services.auth_service import AuthorizationError
from missionledger.services.expense_service import (
    EmptySubmissionError,
    ExpenseNotEditableError,
    InvalidDraftError,
    InvalidTransitionError,
    LimitExceededError,
    PersistenceError,
)
from missionledger.services.limit_validator import DraftGroup, DraftRow

DAY = date(2025, 6, 10)


def rows(*items) -> tuple[DraftRow, ...]:
    return tuple(DraftRow(description=d, amount=a) for d, a in items)


def set_limit(db_session, admin, category, amount):
    category_limit_service.update_category_limit(
        db_session, category, Decimal(str(amount)), admin
    )


def create_expense(
    db_session,
    user,
    amount="100.00",
    category=ExpenseCategory.MEAL,
    status=ExpenseStatus.PENDING,
    day=DAY,
) -> Expense:
    expense = Expense(
        user_id=user.id,
        date=day,
        category=category,
        description="lunch",
        amount=Decimal(amount),
        status=status,
    )
    db_session.add(expense)
    db_session.commit()
    db_session.refresh(expense)
    return expense


def test_submit_drops_blank_rows(db_session, test_user):
    drafts = [
        DraftGroup(
            category=ExpenseCategory.TRAVEL,
            rows=rows(("taxi", "120"), ("", ""), ("bus", 30)),
        )
    ]
    saved = expense_service.submit_batch(db_session, test_user, drafts, day=DAY)

    assert len(saved) == 2
    assert {e.description for e in saved} == {"taxi", "bus"}
    assert all(e.status == ExpenseStatus.PENDING for e in saved)
    assert db_session.query(Expense).count() == 2


def test_submit_ignores_groups_without_category(db_session, test_user):
    drafts = [
        DraftGroup(category=None, rows=rows(("mystery", 50))),
        DraftGroup(category=ExpenseCategory.MEAL, rows=rows(("dinner", 20))),
    ]
    saved = expense_service.submit_batch(db_session, test_user, drafts, day=DAY)
    assert [e.category for e in saved] == [ExpenseCategory.MEAL]


def test_submit_empty_raises(db_session, test_user):
    drafts = [DraftGroup(category=ExpenseCategory.MEAL, rows=rows((" ", None)))]
    with pytest.raises(EmptySubmissionError):
        expense_service.submit_batch(db_session, test_user, drafts, day=DAY)


def test_submit_negative_amount_raises(db_session, test_user):
    drafts = [DraftGroup(category=ExpenseCategory.MEAL, rows=rows(("refund", "-5")))]
    with pytest.raises(InvalidDraftError):
        expense_service.submit_batch(db_session, test_user, drafts, day=DAY)
    assert db_session.query(Expense).count() == 0


def test_submit_within_limit_then_over_limit(db_session, test_user, admin_user):
    set_limit(db_session, admin_user, ExpenseCategory.TRAVEL, 1000)
    create_expense(db_session, test_user, "700.00", ExpenseCategory.TRAVEL)

    ok = [DraftGroup(ExpenseCategory.TRAVEL, rows(("a", 100), ("b", 150)))]
    saved = expense_service.submit_batch(db_session, test_user, ok, day=DAY)
    assert len(saved) == 2

    over = [DraftGroup(ExpenseCategory.TRAVEL, rows(("c", 100)))]
    with pytest.raises(LimitExceededError) as exc_info:
        expense_service.submit_batch(db_session, test_user, over, day=DAY)

    assert exc_info.value.categories == [ExpenseCategory.TRAVEL]
    assert "TRAVEL" in str(exc_info.value)
    assert db_session.query(Expense).count() == 3


def test_limit_checks_amounts_as_stored(db_session, test_user, admin_user):
    set_limit(db_session, admin_user, ExpenseCategory.MEAL, 100)

    # 33.335 + 33.335 + 33.327 is under the cap, the cent-rounded 100.01 is not
    drafts = [
        DraftGroup(
            ExpenseCategory.MEAL,
            rows(("a", "33.335"), ("b", "33.335"), ("c", "33.327")),
        )
    ]
    with pytest.raises(LimitExceededError):
        expense_service.submit_batch(db_session, test_user, drafts, day=DAY)
    assert db_session.query(Expense).count() == 0

    drafts = [DraftGroup(ExpenseCategory.MEAL, rows(("a", "33.334"), ("b", "66.66")))]
    saved = expense_service.submit_batch(db_session, test_user, drafts, day=DAY)
    assert sum(e.amount for e in saved) == Decimal("99.99")


def test_limit_is_per_day(db_session, test_user, admin_user):
    set_limit(db_session, admin_user, ExpenseCategory.MEAL, 100)
    create_expense(db_session, test_user, "100.00", day=date(2025, 6, 9))

    drafts = [DraftGroup(ExpenseCategory.MEAL, rows(("lunch", 100)))]
    saved = expense_service.submit_batch(db_session, test_user, drafts, day=DAY)
    assert len(saved) == 1


def test_limit_counts_rejected_entries(db_session, test_user, admin_user):
    set_limit(db_session, admin_user, ExpenseCategory.MEAL, 100)
    create_expense(db_session, test_user, "80.00", status=ExpenseStatus.REJECTED)

    drafts = [DraftGroup(ExpenseCategory.MEAL, rows(("lunch", 30)))]
    with pytest.raises(LimitExceededError):
        expense_service.submit_batch(db_session, test_user, drafts, day=DAY)


def test_persistence_failure_saves_nothing(db_session, test_user, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(db_session, "commit", broken_commit)
    drafts = [DraftGroup(ExpenseCategory.HOTEL, rows(("room", 900)))]

    with pytest.raises(PersistenceError):
        expense_service.submit_batch(db_session, test_user, drafts, day=DAY)

    monkeypatch.undo()
    assert db_session.query(Expense).count() == 0


def test_batch_id_makes_resubmission_idempotent(db_session, test_user):
    batch_id = uuid.uuid4()
    drafts = [DraftGroup(ExpenseCategory.MEAL, rows(("breakfast", 15), ("tea", 2)))]

    first = expense_service.submit_batch(
        db_session, test_user, drafts, day=DAY, batch_id=batch_id
    )
    second = expense_service.submit_batch(
        db_session, test_user, drafts, day=DAY, batch_id=batch_id
    )

    assert {e.id for e in first} == {e.id for e in second}
    assert db_session.query(Expense).count() == 2


def test_submit_requires_open_mission(db_session, test_user):
    mission = Mission(
        user_id=test_user.id,
        name="Closed trip",
        status=MissionStatus.COMPLETED,
        start_date=date(2025, 6, 1),
    )
    db_session.add(mission)
    db_session.commit()

    drafts = [DraftGroup(ExpenseCategory.MEAL, rows(("lunch", 10)))]
    with pytest.raises(InvalidDraftError):
        expense_service.submit_batch(
            db_session, test_user, drafts, day=DAY, mission_id=mission.id
        )


def test_approve_with_corrected_amount(db_session, test_user, admin_user):
    expense = create_expense(db_session, test_user, "500.00")

    approved = expense_service.approve_expense(
        db_session, expense, admin_user, amount=Decimal("450.00"), note="receipt says 450"
    )

    assert approved.amount == Decimal("450.00")
    assert approved.status == ExpenseStatus.APPROVED
    assert approved.approved_by == admin_user.id
    assert approved.approved_at is not None
    assert approved.admin_note == "receipt says 450"


def test_reject_without_reason_is_noop(db_session, test_user, admin_user):
    expense = create_expense(db_session, test_user)

    assert expense_service.reject_expense(db_session, expense, admin_user, None) is None
    assert expense_service.reject_expense(db_session, expense, admin_user, "  ") is None

    db_session.refresh(expense)
    assert expense.status == ExpenseStatus.PENDING
    assert expense.rejection_reason is None


def test_reject_then_revert_to_approved(db_session, test_user, admin_user):
    expense = create_expense(db_session, test_user)

    rejected = expense_service.reject_expense(
        db_session, expense, admin_user, "No receipt"
    )
    assert rejected.status == ExpenseStatus.REJECTED
    assert rejected.rejection_reason == "No receipt"

    approved = expense_service.approve_expense(db_session, rejected, admin_user)
    assert approved.status == ExpenseStatus.APPROVED
    assert approved.rejection_reason is None


def test_settled_expenses_are_final(db_session, test_user, admin_user):
    expense = create_expense(db_session, test_user, status=ExpenseStatus.SETTLED)

    with pytest.raises(InvalidTransitionError):
        expense_service.approve_expense(db_session, expense, admin_user)
    with pytest.raises(InvalidTransitionError):
        expense_service.reject_expense(db_session, expense, admin_user, "late")


def test_review_requires_admin(db_session, test_user):
    expense = create_expense(db_session, test_user)
    with pytest.raises(AuthorizationError):
        expense_service.approve_expense(db_session, expense, test_user)


def test_mark_settled_only_moves_approved(db_session, test_user, admin_user):
    approved = create_expense(db_session, test_user, status=ExpenseStatus.APPROVED)
    pending = create_expense(db_session, test_user)

    count = expense_service.mark_settled(
        db_session, [approved.id, pending.id], admin_user
    )

    assert count == 1
    db_session.refresh(approved)
    db_session.refresh(pending)
    assert approved.status == ExpenseStatus.SETTLED
    assert approved.settled_at is not None
    assert pending.status == ExpenseStatus.PENDING


def test_owner_can_edit_pending_only(db_session, test_user):
    expense = create_expense(db_session, test_user)
    assert expense_service.is_editable(expense) is True

    updated = expense_service.update_own_expense(
        db_session, expense, test_user, ExpenseOwnerUpdate(description="team lunch")
    )
    assert updated.description == "team lunch"

    locked = create_expense(db_session, test_user, status=ExpenseStatus.APPROVED)
    assert expense_service.is_editable(locked) is False
    with pytest.raises(ExpenseNotEditableError):
        expense_service.update_own_expense(
            db_session, locked, test_user, ExpenseOwnerUpdate(description="x")
        )


def test_owner_edit_rechecks_limit(db_session, test_user, admin_user):
    set_limit(db_session, admin_user, ExpenseCategory.MEAL, 150)
    expense = create_expense(db_session, test_user, "100.00")

    with pytest.raises(LimitExceededError):
        expense_service.update_own_expense(
            db_session, expense, test_user, ExpenseOwnerUpdate(amount=Decimal("200"))
        )

    updated = expense_service.update_own_expense(
        db_session, expense, test_user, ExpenseOwnerUpdate(amount=Decimal("150"))
    )
    assert updated.amount == Decimal("150")


def test_admin_update_and_delete(db_session, test_user, admin_user):
    expense = create_expense(db_session, test_user)

    updated = expense_service.admin_update_expense(
        db_session,
        expense,
        admin_user,
        ExpenseAdminUpdate(amount=Decimal("80"), admin_note="rounded"),
    )
    assert updated.amount == Decimal("80")
    assert updated.admin_note == "rounded"

    expense_service.delete_expense(db_session, updated, admin_user)
    assert db_session.query(Expense).count() == 0


def test_list_expenses_filters(db_session, test_user, admin_user):
    create_expense(db_session, test_user, category=ExpenseCategory.MEAL)
    create_expense(
        db_session, test_user, category=ExpenseCategory.HOTEL, day=date(2025, 6, 1)
    )
    create_expense(db_session, admin_user, category=ExpenseCategory.MEAL)

    mine = expense_service.list_expenses(db_session, user_id=test_user.id)
    assert len(mine) == 2
    assert mine[0].date == DAY

    meals = expense_service.list_expenses(db_session, category=ExpenseCategory.MEAL)
    assert len(meals) == 2

    june_first = expense_service.list_expenses(
        db_session, date_from=date(2025, 6, 1), date_to=date(2025, 6, 5)
    )
    assert [e.category for e in june_first] == [ExpenseCategory.HOTEL]


def test_get_usage_reports_every_category(db_session, test_user, admin_user):
    set_limit(db_session, admin_user, ExpenseCategory.MEAL, 100)
    create_expense(db_session, test_user, "50.00")

    drafts = [DraftGroup(ExpenseCategory.MEAL, rows(("snack", 40)))]
    check, usages = expense_service.get_usage(db_session, test_user.id, drafts, day=DAY)

    assert check.ok is True
    by_category = {u.category: u for u in usages}
    assert len(by_category) == len(ExpenseCategory)
    assert by_category[ExpenseCategory.MEAL].total == Decimal("90.00")
    assert by_category[ExpenseCategory.MEAL].level == "near"
    assert by_category[ExpenseCategory.TRAVEL].level == "unlimited"
