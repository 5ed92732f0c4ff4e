# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Balance and report summary schemas."""

from decimal import Decimal

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Outstanding position. Negative balance means money owed to the user."""

    spent: Decimal
    received: Decimal
    balance: Decimal
    owed_to_user: Decimal

    model_config = {"from_attributes": True}


class MissionStatsResponse(BaseModel):
    """Approved spend, settlements and cash received for a mission."""

    expense: Decimal
    received: Decimal
    cash: Decimal

    model_config = {"from_attributes": True}


class OverviewResponse(BaseModel):
    """Report totals over the filtered expense set."""

    total_expense: Decimal
    approved: Decimal
    pending: Decimal
    received: Decimal
    balance: Decimal
    records: int

    model_config = {"from_attributes": True}
