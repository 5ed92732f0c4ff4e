# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from missionledger.models.base import Base, TimestampMixin
from missionledger.models.category_limit import CategoryLimit
from missionledger.models.enums import (
    ExpenseCategory,
    ExpenseStatus,
    MissionStatus,
    UserRole,
)
from missionledger.models.expense import Expense
from missionledger.models.mission import Mission
from missionledger.models.session import Session
from missionledger.models.settlement import Settlement
from missionledger.models.user import User

__all__ = [
    "Base",
    "CategoryLimit",
    "Expense",
    "ExpenseCategory",
    "ExpenseStatus",
    "Mission",
    "MissionStatus",
    "Session",
    "Settlement",
    "TimestampMixin",
    "User",
    "UserRole",
]
