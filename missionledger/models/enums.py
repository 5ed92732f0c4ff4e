# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class UserRole(str, Enum):
    """Account role enumeration."""

    ADMIN = "admin"
    USER = "user"


class ExpenseCategory(str, Enum):
    """Expense category enumeration.

    CASH is money received by the user (an advance), not money spent. It
    never counts toward daily limits or reimbursable cost.
    """

    TRAVEL = "travel"
    MEAL = "meal"
    HOTEL = "hotel"
    LUGGAGE = "luggage"
    CASH = "cash"
    OTHER = "other"


class ExpenseStatus(str, Enum):
    """Expense status enumeration.

    Status flow:
        PENDING → APPROVED → SETTLED
            ↓        ↑↓
            └──→ REJECTED
    """

    PENDING = "pending"  # Awaiting admin review
    APPROVED = "approved"  # Counts toward reimbursable spend
    REJECTED = "rejected"  # Carries a rejection reason
    SETTLED = "settled"  # Paid out, terminal


class MissionStatus(str, Enum):
    """Mission status enumeration.

    ACTIVE and PENDING are open; COMPLETED and FINISHED are archived.
    """

    ACTIVE = "active"
    PENDING = "pending"
    COMPLETED = "completed"
    FINISHED = "finished"


OPEN_MISSION_STATUSES = (MissionStatus.ACTIVE, MissionStatus.PENDING)
APPROVED_EXPENSE_STATUSES = (ExpenseStatus.APPROVED, ExpenseStatus.SETTLED)
