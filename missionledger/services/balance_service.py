# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Reimbursement balance reconciliation.

Balances are recomputed from the full expense and settlement lists on
every call. Missing or non-numeric amounts count as zero.

Sign convention: ``balance = received - spent``. A negative balance is
money the organization still owes the user; a positive balance is an
advance the user holds.
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from missionledger.amounts import ZERO, enum_value, parse_amount, read_field
from missionledger.models import Expense, Settlement
from missionledger.models.enums import (
    APPROVED_EXPENSE_STATUSES,
    ExpenseCategory,
    ExpenseStatus,
)

_APPROVED = {s.value for s in APPROVED_EXPENSE_STATUSES}


@dataclass(frozen=True)
class Balance:
    spent: Decimal
    received: Decimal
    balance: Decimal

    @property
    def owed_to_user(self) -> Decimal:
        return -self.balance if self.balance < ZERO else ZERO


@dataclass(frozen=True)
class MissionStats:
    expense: Decimal
    received: Decimal
    cash: Decimal


@dataclass(frozen=True)
class Overview:
    """Organization-wide totals over a set of expenses and settlements."""

    total_expense: Decimal
    approved: Decimal
    pending: Decimal
    received: Decimal
    balance: Decimal
    records: int


def _same_id(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    return str(left) == str(right)


def _status(record: Any) -> str:
    return str(enum_value(read_field(record, "status", ""))).lower()


def _is_cash(record: Any) -> bool:
    category = read_field(record, "category")
    return str(enum_value(category)).lower() == ExpenseCategory.CASH.value


def _owner(record: Any) -> Any:
    return read_field(record, "user_id", read_field(record, "owner"))


def _total(records: Iterable[Any]) -> Decimal:
    return sum((parse_amount(read_field(r, "amount")) for r in records), ZERO)


def is_reimbursable(expense: Any) -> bool:
    """Approved (or settled) spend that is not a cash receipt."""
    return _status(expense) in _APPROVED and not _is_cash(expense)


def compute_balance(
    expenses: Iterable[Any],
    settlements: Iterable[Any],
    user_id: Any,
    mission_id: Any = None,
) -> Balance:
    """Compute a user's outstanding reimbursement position.

    When ``mission_id`` is given only settlements tied to that mission are
    counted as received.
    """
    spent = _total(
        e for e in expenses if _same_id(_owner(e), user_id) and is_reimbursable(e)
    )
    received = _total(
        s
        for s in settlements
        if _same_id(_owner(s), user_id)
        and (mission_id is None or _same_id(read_field(s, "mission_id"), mission_id))
    )
    return Balance(spent=spent, received=received, balance=received - spent)


def compute_mission_stats(
    expenses: Iterable[Any],
    settlements: Iterable[Any],
    user_id: Any,
    mission_id: Any,
) -> MissionStats:
    """Approved spend, settlements and cash received for one mission."""
    mission_expenses = [
        e
        for e in expenses
        if _same_id(_owner(e), user_id)
        and _same_id(read_field(e, "mission_id"), mission_id)
    ]
    received = _total(
        s
        for s in settlements
        if _same_id(_owner(s), user_id)
        and _same_id(read_field(s, "mission_id"), mission_id)
    )
    return MissionStats(
        expense=_total(e for e in mission_expenses if is_reimbursable(e)),
        received=received,
        cash=_total(e for e in mission_expenses if _is_cash(e)),
    )


def compute_overview(
    expenses: Iterable[Any], settlements: Iterable[Any]
) -> Overview:
    """Totals for a report view. Cash receipts are excluded from spend."""
    expenses = list(expenses)
    non_cash = [e for e in expenses if not _is_cash(e)]
    approved = _total(e for e in non_cash if _status(e) in _APPROVED)
    received = _total(settlements)
    return Overview(
        total_expense=_total(non_cash),
        approved=approved,
        pending=_total(
            e for e in non_cash if _status(e) == ExpenseStatus.PENDING.value
        ),
        received=received,
        balance=received - approved,
        records=len(expenses),
    )


def get_user_balance(
    db: Session,
    user_id: uuid.UUID,
    mission_id: uuid.UUID | None = None,
) -> Balance:
    """Load the user's ledger rows and reconcile them."""
    expenses = db.query(Expense).filter(Expense.user_id == user_id).all()
    settlements = db.query(Settlement).filter(Settlement.user_id == user_id).all()
    return compute_balance(expenses, settlements, user_id, mission_id)


def get_mission_stats(
    db: Session,
    user_id: uuid.UUID,
    mission_id: uuid.UUID,
) -> MissionStats:
    """Load one mission's ledger rows and summarize them."""
    expenses = (
        db.query(Expense)
        .filter(Expense.user_id == user_id, Expense.mission_id == mission_id)
        .all()
    )
    settlements = (
        db.query(Settlement)
        .filter(Settlement.user_id == user_id, Settlement.mission_id == mission_id)
        .all()
    )
    return compute_mission_stats(expenses, settlements, user_id, mission_id)
