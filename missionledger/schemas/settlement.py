# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Settlement schemas."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field


class SettlementCreate(BaseModel):
    """Schema for recording a reimbursement payment."""

    user_id: uuid.UUID
    mission_id: uuid.UUID | None = None
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    proof_url: str = Field(..., min_length=1, max_length=500)
    note: str | None = None


class SettlementResponse(BaseModel):
    """Schema for settlement response."""

    id: uuid.UUID
    user_id: uuid.UUID
    mission_id: uuid.UUID | None
    amount: Decimal
    proof_url: str
    note: str | None
    settled_by: uuid.UUID | None
    user_acknowledged: bool
    created_at: datetime.datetime

    model_config = {"from_attributes": True}
