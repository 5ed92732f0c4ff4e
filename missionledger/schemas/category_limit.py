# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Category limit schemas."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from missionledger.models.enums import ExpenseCategory


class CategoryLimitResponse(BaseModel):
    """Schema for category limit response."""

    category: ExpenseCategory
    daily_limit: Decimal
    updated_by: uuid.UUID | None
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}


class CategoryLimitUpdate(BaseModel):
    """Schema for updating a daily cap. Zero removes the limit."""

    daily_limit: Decimal = Field(..., ge=0, decimal_places=2)


class CategoryUsageResponse(BaseModel):
    """Projected usage of one category's daily cap."""

    category: ExpenseCategory
    existing_total: Decimal
    draft_total: Decimal
    total: Decimal
    cap: Decimal | None
    remaining: Decimal | None
    exceeded: bool
    percent_used: float | None
    level: str

    model_config = {"from_attributes": True}
