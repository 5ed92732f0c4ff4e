# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Expense schemas."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.schemas.category_limit import CategoryUsageResponse


class DraftRowIn(BaseModel):
    """A draft row as typed in the form. Amount is kept raw."""

    description: str = ""
    amount: str | float | None = None
    image_url: str | None = Field(None, max_length=500)


class DraftGroupIn(BaseModel):
    """A category card with its rows. Groups without a category are ignored."""

    category: ExpenseCategory | None = None
    rows: list[DraftRowIn] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def blank_category(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ExpenseBatchCreate(BaseModel):
    """Schema for submitting a batch of draft expenses."""

    date: datetime.date | None = None
    mission_id: uuid.UUID | None = None
    batch_id: uuid.UUID | None = None
    groups: list[DraftGroupIn] = Field(default_factory=list)


class LimitPreviewRequest(BaseModel):
    """Schema for a limit usage preview of the current form."""

    date: datetime.date | None = None
    groups: list[DraftGroupIn] = Field(default_factory=list)


class LimitPreviewResponse(BaseModel):
    """Usage for every category plus the submission verdict."""

    ok: bool
    violating_categories: list[ExpenseCategory]
    usages: list[CategoryUsageResponse]


class ExpenseOwnerUpdate(BaseModel):
    """Fields the owner may change while the entry is pending."""

    description: str | None = None
    amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    image_url: str | None = Field(None, max_length=500)


class ExpenseAdminUpdate(BaseModel):
    """Direct admin correction without a status change."""

    amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    admin_note: str | None = None


class ExpenseApprove(BaseModel):
    """Schema for approving an expense, optionally correcting the amount."""

    amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    note: str | None = None


class ExpenseReject(BaseModel):
    """Schema for rejecting an expense. A reason is required."""

    reason: str | None = None


class ExpenseSettle(BaseModel):
    """Schema for marking approved expenses as settled."""

    expense_ids: list[uuid.UUID]


class ExpenseResponse(BaseModel):
    """Schema for expense response."""

    id: uuid.UUID
    user_id: uuid.UUID
    mission_id: uuid.UUID | None
    date: datetime.date
    category: ExpenseCategory
    description: str
    amount: Decimal
    image_url: str | None
    status: ExpenseStatus
    admin_note: str | None
    rejection_reason: str | None
    approved_by: uuid.UUID | None
    approved_at: datetime.datetime | None
    settled_at: datetime.datetime | None
    batch_id: uuid.UUID | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}
