# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Report API endpoints."""

import datetime
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from missionledger.api.deps import get_current_admin, get_db
from missionledger.models import User
from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.schemas.balance import OverviewResponse
from missionledger.services import report_service
from missionledger.services.report_service import ReportFilters
from missionledger.timeutil import today

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_report_filters(
    user_id: uuid.UUID | None = None,
    mission_id: uuid.UUID | None = None,
    category: ExpenseCategory | None = None,
    expense_status: ExpenseStatus | None = None,
    date_from: datetime.date | None = None,
    date_to: datetime.date | None = None,
) -> ReportFilters:
    """Collect report filters from query parameters."""
    return ReportFilters(
        user_id=user_id,
        mission_id=mission_id,
        category=category,
        status=expense_status,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/summary", response_model=OverviewResponse)
def get_summary(
    filters: ReportFilters = Depends(get_report_filters),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> OverviewResponse:
    """Totals over the filtered expenses."""
    return OverviewResponse.model_validate(report_service.summarize(db, filters))


@router.get("/export")
def export_report(
    filters: ReportFilters = Depends(get_report_filters),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Response:
    """Download the filtered expenses as an Excel workbook."""
    content = report_service.generate_report(db, filters)
    filename = report_service.report_filename(today())
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
