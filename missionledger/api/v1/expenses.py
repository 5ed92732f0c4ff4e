# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Expense API endpoints."""

import datetime
import logging
import uuid
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_admin, get_current_user, get_db
from missionledger.models import Expense, User
from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.schemas.common import MessageResponse
from missionledger.schemas.expense import (
    ExpenseAdminUpdate,
    ExpenseApprove,
    ExpenseBatchCreate,
    ExpenseOwnerUpdate,
    ExpenseReject,
    ExpenseResponse,
    ExpenseSettle,
)
from missionledger.services import expense_service
from missionledger.services.expense_service import (
    EmptySubmissionError,
    ExpenseNotEditableError,
    ExpenseServiceError,
    InvalidDraftError,
    InvalidTransitionError,
    LimitExceededError,
    PersistenceError,
)

router = APIRouter()
admin_router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_FOR_ERROR = {
    EmptySubmissionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidDraftError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    LimitExceededError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ExpenseNotEditableError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_service_error(e: ExpenseServiceError) -> NoReturn:
    """Translate an expense service error into an HTTP error."""
    code = _STATUS_FOR_ERROR.get(type(e), status.HTTP_400_BAD_REQUEST)
    logger.warning(f"Expense request failed: {e}")
    raise HTTPException(status_code=code, detail=str(e)) from e


def _get_expense_or_404(db: Session, expense_id: uuid.UUID) -> Expense:
    expense = expense_service.get_expense(db, expense_id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found",
        )
    return expense


@router.get("", response_model=list[ExpenseResponse])
def list_my_expenses(
    mission_id: uuid.UUID | None = None,
    date_from: datetime.date | None = None,
    date_to: datetime.date | None = None,
    expense_status: ExpenseStatus | None = None,
    category: ExpenseCategory | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ExpenseResponse]:
    """List the current user's expenses."""
    expenses = expense_service.list_expenses(
        db,
        user_id=current_user.id,
        mission_id=mission_id,
        date_from=date_from,
        date_to=date_to,
        status=expense_status,
        category=category,
    )
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.post(
    "",
    response_model=list[ExpenseResponse],
    status_code=status.HTTP_201_CREATED,
)
def submit_expenses(
    data: ExpenseBatchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ExpenseResponse]:
    """Submit a batch of draft rows as pending expenses."""
    try:
        saved = expense_service.submit_batch(
            db,
            current_user,
            expense_service.to_drafts(data.groups),
            day=data.date,
            mission_id=data.mission_id,
            batch_id=data.batch_id,
        )
    except ExpenseServiceError as e:
        raise_for_service_error(e)
    return [ExpenseResponse.model_validate(e) for e in saved]


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseResponse:
    """Get one of the current user's expenses."""
    expense = expense_service.get_expense_for_user(db, expense_id, current_user.id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found",
        )
    return ExpenseResponse.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_my_expense(
    expense_id: uuid.UUID,
    data: ExpenseOwnerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseResponse:
    """Edit a pending expense."""
    expense = expense_service.get_expense_for_user(db, expense_id, current_user.id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found",
        )
    try:
        expense = expense_service.update_own_expense(db, expense, current_user, data)
    except ExpenseServiceError as e:
        raise_for_service_error(e)
    return ExpenseResponse.model_validate(expense)


@admin_router.get("", response_model=list[ExpenseResponse])
def list_all_expenses(
    user_id: uuid.UUID | None = None,
    mission_id: uuid.UUID | None = None,
    date_from: datetime.date | None = None,
    date_to: datetime.date | None = None,
    expense_status: ExpenseStatus | None = None,
    category: ExpenseCategory | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[ExpenseResponse]:
    """List expenses of every user."""
    expenses = expense_service.list_expenses(
        db,
        user_id=user_id,
        mission_id=mission_id,
        date_from=date_from,
        date_to=date_to,
        status=expense_status,
        category=category,
    )
    return [ExpenseResponse.model_validate(e) for e in expenses]


@admin_router.post("/settle", response_model=MessageResponse)
def settle_expenses(
    data: ExpenseSettle,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> MessageResponse:
    """Mark approved expenses as settled."""
    count = expense_service.mark_settled(db, data.expense_ids, admin)
    return MessageResponse(message=f"{count} expenses settled")


@admin_router.post("/{expense_id}/approve", response_model=ExpenseResponse)
def approve_expense(
    expense_id: uuid.UUID,
    data: ExpenseApprove,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> ExpenseResponse:
    """Approve an expense, optionally correcting the amount."""
    expense = _get_expense_or_404(db, expense_id)
    try:
        expense = expense_service.approve_expense(
            db, expense, admin, amount=data.amount, note=data.note
        )
    except ExpenseServiceError as e:
        raise_for_service_error(e)
    return ExpenseResponse.model_validate(expense)


@admin_router.post("/{expense_id}/reject", response_model=ExpenseResponse)
def reject_expense(
    expense_id: uuid.UUID,
    data: ExpenseReject,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> ExpenseResponse:
    """Reject an expense. A reason is required."""
    expense = _get_expense_or_404(db, expense_id)
    try:
        rejected = expense_service.reject_expense(db, expense, admin, data.reason)
    except ExpenseServiceError as e:
        raise_for_service_error(e)
    if rejected is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="A rejection reason is required",
        )
    return ExpenseResponse.model_validate(rejected)


@admin_router.put("/{expense_id}", response_model=ExpenseResponse)
def admin_update_expense(
    expense_id: uuid.UUID,
    data: ExpenseAdminUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> ExpenseResponse:
    """Correct an expense's amount or note."""
    expense = _get_expense_or_404(db, expense_id)
    try:
        expense = expense_service.admin_update_expense(db, expense, admin, data)
    except ExpenseServiceError as e:
        raise_for_service_error(e)
    return ExpenseResponse.model_validate(expense)


@admin_router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: uuid.UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> None:
    """Delete an expense."""
    expense = _get_expense_or_404(db, expense_id)
    expense_service.delete_expense(db, expense, admin)
