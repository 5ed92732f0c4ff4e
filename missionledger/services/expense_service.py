# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Expense ledger service."""

import logging
import uuid
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from missionledger.amounts import ZERO
from missionledger.models import Expense, User
from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.schemas.expense import (
    DraftGroupIn,
    ExpenseAdminUpdate,
    ExpenseOwnerUpdate,
)
from missionledger.services import category_limit_service, mission_service
from missionledger.services.auth_service import require_admin
from missionledger.services.limit_validator import (
    CategoryUsage,
    DraftGroup,
    DraftRow,
    LimitValidator,
    SubmissionCheck,
)
from missionledger.timeutil import today

logger = logging.getLogger(__name__)


class ExpenseServiceError(Exception):
    """Base exception for expense ledger errors."""


class EmptySubmissionError(ExpenseServiceError):
    """The submission contains no filled-in rows."""


class InvalidDraftError(ExpenseServiceError):
    """A draft row or its mission is not acceptable."""


class LimitExceededError(ExpenseServiceError):
    """One or more categories would exceed their daily cap."""

    def __init__(self, categories: Iterable[ExpenseCategory]) -> None:
        self.categories = sorted(categories, key=lambda c: c.value)
        names = ", ".join(c.value.upper() for c in self.categories)
        super().__init__(
            f"Daily limit exceeded for: {names}. Reduce amounts or contact admin."
        )


class ExpenseNotEditableError(ExpenseServiceError):
    """The entry has left the pending state and is locked for its owner."""


class InvalidTransitionError(ExpenseServiceError):
    """The requested status change is not allowed from the current status."""


class PersistenceError(ExpenseServiceError):
    """The database rejected a write. Nothing was saved."""


def to_drafts(groups: Iterable[DraftGroupIn]) -> list[DraftGroup]:
    """Convert submitted form groups into immutable drafts."""
    return [
        DraftGroup(
            category=group.category,
            rows=tuple(
                DraftRow(
                    description=row.description,
                    amount=row.amount,
                    image_url=row.image_url,
                )
                for row in group.rows
            ),
        )
        for group in groups
    ]


def list_expenses(
    db: Session,
    user_id: uuid.UUID | None = None,
    mission_id: uuid.UUID | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    status: ExpenseStatus | None = None,
    category: ExpenseCategory | None = None,
) -> list[Expense]:
    """List expenses matching every given filter, newest day first."""
    query = db.query(Expense)
    if user_id:
        query = query.filter(Expense.user_id == user_id)
    if mission_id:
        query = query.filter(Expense.mission_id == mission_id)
    if date_from:
        query = query.filter(Expense.date >= date_from)
    if date_to:
        query = query.filter(Expense.date <= date_to)
    if status:
        query = query.filter(Expense.status == status)
    if category:
        query = query.filter(Expense.category == category)
    return query.order_by(Expense.date.desc(), Expense.created_at).all()


def get_expense(db: Session, expense_id: uuid.UUID) -> Expense | None:
    """Get an expense by ID."""
    return db.query(Expense).filter(Expense.id == expense_id).first()


def get_expense_for_user(
    db: Session,
    expense_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Expense | None:
    """Get an expense that belongs to a specific user."""
    return (
        db.query(Expense)
        .filter(Expense.id == expense_id, Expense.user_id == user_id)
        .first()
    )


def get_expenses_for_day(db: Session, user_id: uuid.UUID, day: date) -> list[Expense]:
    """All of a user's entries for one calendar day, regardless of status."""
    return (
        db.query(Expense)
        .filter(Expense.user_id == user_id, Expense.date == day)
        .all()
    )


def insert_expenses(db: Session, expenses: list[Expense]) -> list[Expense]:
    """Insert a batch of expenses in one transaction.

    Raises:
        PersistenceError: If the database rejects the batch. The session is
            rolled back, so either every row is saved or none is.
    """
    try:
        db.add_all(expenses)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to insert {len(expenses)} expenses: {e}")
        raise PersistenceError("Could not save expenses. Please try again.") from e

    for expense in expenses:
        db.refresh(expense)
    return expenses


def update_expense(db: Session, expense: Expense, fields: dict) -> Expense:
    """Apply a partial update. Last write wins."""
    for key, value in fields.items():
        setattr(expense, key, value)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update expense {expense.id}: {e}")
        raise PersistenceError("Could not update expense. Please try again.") from e
    db.refresh(expense)
    return expense


def delete_expense(db: Session, expense: Expense, admin: User) -> None:
    """Delete an expense. Admin only."""
    require_admin(admin)
    db.delete(expense)
    db.commit()
    logger.info(f"Expense {expense.id} deleted by {admin.username}")


def check_limits(
    db: Session,
    user_id: uuid.UUID,
    day: date,
    drafts: Iterable[DraftGroup],
    exclude_ids: Iterable[uuid.UUID] = (),
) -> LimitValidator:
    """Build a validator over the policy and the user's entries for ``day``."""
    excluded = set(exclude_ids)
    existing = [e for e in get_expenses_for_day(db, user_id, day) if e.id not in excluded]
    policy = category_limit_service.get_category_limits(db)
    return LimitValidator(policy, existing, drafts)


def get_usage(
    db: Session,
    user_id: uuid.UUID,
    drafts: Iterable[DraftGroup] = (),
    day: date | None = None,
) -> tuple[SubmissionCheck, list[CategoryUsage]]:
    """Usage of every category for the form's live feedback."""
    validator = check_limits(db, user_id, day or today(), drafts)
    return validator.validate_submission(), [
        validator.evaluate(category) for category in ExpenseCategory
    ]


def build_rows(
    owner: User,
    drafts: Iterable[DraftGroup],
    day: date,
    mission_id: uuid.UUID | None = None,
    batch_id: uuid.UUID | None = None,
) -> list[Expense]:
    """Turn non-empty draft rows into new pending Expense objects.

    Groups without a category and rows with neither description nor amount
    are dropped.
    """
    rows: list[Expense] = []
    for group in drafts:
        if group.category is None:
            continue
        for row in group.filled_rows():
            amount = row.parsed_amount
            if amount < ZERO:
                raise InvalidDraftError(
                    f"Amount for {group.category.value} must not be negative"
                )
            rows.append(
                Expense(
                    user_id=owner.id,
                    mission_id=mission_id,
                    date=day,
                    category=group.category,
                    description=(row.description or "").strip(),
                    amount=amount,
                    image_url=row.image_url or None,
                    status=ExpenseStatus.PENDING,
                    batch_id=batch_id,
                )
            )
    return rows


def submit_batch(
    db: Session,
    owner: User,
    drafts: list[DraftGroup],
    day: date | None = None,
    mission_id: uuid.UUID | None = None,
    batch_id: uuid.UUID | None = None,
) -> list[Expense]:
    """Validate a draft submission and persist it as pending expenses.

    Validation runs before anything is written and the batch is saved as a
    whole. A batch id that has already been saved returns the saved rows
    instead of inserting them again.

    Raises:
        EmptySubmissionError: No filled-in rows.
        InvalidDraftError: Negative amount, or the mission is not the
            owner's open mission.
        LimitExceededError: A category would exceed its daily cap.
        PersistenceError: The database rejected the insert.
    """
    day = day or today()

    if batch_id is not None:
        already_saved = (
            db.query(Expense)
            .filter(Expense.user_id == owner.id, Expense.batch_id == batch_id)
            .all()
        )
        if already_saved:
            logger.info(f"Batch {batch_id} already saved, skipping duplicate submit")
            return already_saved

    if mission_id is not None:
        mission = mission_service.get_mission_for_user(db, mission_id, owner.id)
        if mission is None or not mission.is_open:
            raise InvalidDraftError("Expenses can only be logged on an open mission")

    rows = build_rows(owner, drafts, day, mission_id, batch_id)
    if not rows:
        raise EmptySubmissionError("Add at least one expense entry")

    check = check_limits(db, owner.id, day, drafts).validate_submission()
    if not check.ok:
        raise LimitExceededError(check.violating_categories)

    saved = insert_expenses(db, rows)
    logger.info(f"Saved {len(saved)} expenses for {owner.username} on {day}")
    return saved


def is_editable(expense: Expense) -> bool:
    """Owners may only change an entry while it is pending review."""
    return expense.status == ExpenseStatus.PENDING


def update_own_expense(
    db: Session,
    expense: Expense,
    owner: User,
    data: ExpenseOwnerUpdate,
) -> Expense:
    """Owner edit of description, amount or receipt.

    A raised amount is checked against the day's cap like a new row.
    """
    if expense.user_id != owner.id:
        raise ExpenseNotEditableError("Only the owner can edit this expense")
    if not is_editable(expense):
        raise ExpenseNotEditableError(
            f"Expense is {expense.status.value} and can no longer be edited"
        )

    fields: dict = {}
    if data.description is not None:
        fields["description"] = data.description.strip()
    if data.image_url is not None:
        fields["image_url"] = data.image_url or None
    if data.amount is not None and data.amount != expense.amount:
        if data.amount > expense.amount:
            draft = DraftGroup(
                category=expense.category,
                rows=(DraftRow(description="edit", amount=data.amount),),
            )
            check = check_limits(
                db, owner.id, expense.date, [draft], exclude_ids=[expense.id]
            ).validate_submission()
            if not check.ok:
                raise LimitExceededError(check.violating_categories)
        fields["amount"] = data.amount

    if not fields:
        return expense
    return update_expense(db, expense, fields)


def admin_update_expense(
    db: Session,
    expense: Expense,
    admin: User,
    data: ExpenseAdminUpdate,
) -> Expense:
    """Admin correction of amount or note without a status change."""
    require_admin(admin)
    fields: dict = {}
    if data.amount is not None:
        fields["amount"] = data.amount
    if data.admin_note is not None:
        fields["admin_note"] = data.admin_note
    if not fields:
        return expense
    return update_expense(db, expense, fields)


def approve_expense(
    db: Session,
    expense: Expense,
    admin: User,
    amount: Decimal | None = None,
    note: str | None = None,
) -> Expense:
    """Approve an expense, optionally correcting its amount.

    Works from pending and from rejected (revert). Settled entries are final.
    """
    require_admin(admin)
    if expense.status == ExpenseStatus.SETTLED:
        raise InvalidTransitionError("Settled expenses cannot be re-approved")

    fields: dict = {
        "status": ExpenseStatus.APPROVED,
        "approved_by": admin.id,
        "approved_at": datetime.utcnow(),
        "admin_note": note,
        "rejection_reason": None,
    }
    if amount is not None and amount != expense.amount:
        if amount < ZERO:
            raise InvalidDraftError("Amount must not be negative")
        logger.info(
            f"Expense {expense.id} amount corrected {expense.amount} -> {amount}"
        )
        fields["amount"] = amount

    return update_expense(db, expense, fields)


def reject_expense(
    db: Session,
    expense: Expense,
    admin: User,
    reason: str | None,
) -> Expense | None:
    """Reject an expense with a mandatory reason.

    A missing or blank reason leaves the entry untouched and returns None.
    Works from pending and from approved (revert). Settled entries are final.
    """
    require_admin(admin)
    if reason is None or not reason.strip():
        return None
    if expense.status == ExpenseStatus.SETTLED:
        raise InvalidTransitionError("Settled expenses cannot be rejected")

    return update_expense(
        db,
        expense,
        {
            "status": ExpenseStatus.REJECTED,
            "rejection_reason": reason.strip(),
            "approved_by": admin.id,
            "approved_at": datetime.utcnow(),
        },
    )


def mark_settled(db: Session, expense_ids: list[uuid.UUID], admin: User) -> int:
    """Move approved expenses to settled. Returns count updated.

    Entries that are not approved are left as they are.
    """
    require_admin(admin)
    count = (
        db.query(Expense)
        .filter(
            Expense.id.in_(expense_ids),
            Expense.status == ExpenseStatus.APPROVED,
        )
        .update(
            {"status": ExpenseStatus.SETTLED, "settled_at": datetime.utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    return count
