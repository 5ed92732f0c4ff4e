# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Category limit API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_admin, get_current_user, get_db
from missionledger.models import User
from missionledger.models.enums import ExpenseCategory
from missionledger.schemas.category_limit import (
    CategoryLimitResponse,
    CategoryLimitUpdate,
    CategoryUsageResponse,
)
from missionledger.schemas.expense import LimitPreviewRequest, LimitPreviewResponse
from missionledger.services import category_limit_service, expense_service

router = APIRouter()


@router.get("", response_model=list[CategoryLimitResponse])
def list_limits(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[CategoryLimitResponse]:
    """List the daily cap of every category. Zero means no limit."""
    rows = category_limit_service.list_category_limits(db)
    return [CategoryLimitResponse.model_validate(r) for r in rows]


@router.post("/usage", response_model=LimitPreviewResponse)
def preview_usage(
    data: LimitPreviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LimitPreviewResponse:
    """Project today's usage with the drafts currently in the form."""
    check, usages = expense_service.get_usage(
        db,
        current_user.id,
        expense_service.to_drafts(data.groups),
        day=data.date,
    )
    return LimitPreviewResponse(
        ok=check.ok,
        violating_categories=sorted(check.violating_categories, key=lambda c: c.value),
        usages=[CategoryUsageResponse.model_validate(u) for u in usages],
    )


@router.put("/{category}", response_model=CategoryLimitResponse)
def update_limit(
    category: ExpenseCategory,
    data: CategoryLimitUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> CategoryLimitResponse:
    """Set the daily cap for a category."""
    row = category_limit_service.update_category_limit(
        db, category, data.daily_limit, admin
    )
    return CategoryLimitResponse.model_validate(row)
