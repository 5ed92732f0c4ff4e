# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Services package."""
from missionledger.services import (
    auth_service,
    balance_service,
    category_limit_service,
    expense_service,
    limit_validator,
    mission_service,
    report_service,
    settlement_service,
    storage_service,
)

__all__ = [
    "auth_service",
    "balance_service",
    "category_limit_service",
    "expense_service",
    "limit_validator",
    "mission_service",
    "report_service",
    "settlement_service",
    "storage_service",
]
