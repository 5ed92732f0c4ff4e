# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Expense reports and spreadsheet export."""

import io
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from slugify import slugify
from sqlalchemy.orm import Session

from missionledger.amounts import parse_amount
from missionledger.models import Expense, Settlement, User
from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.services import settlement_service
from missionledger.services.balance_service import Overview, compute_overview
from missionledger.timeutil import now, today


@dataclass(frozen=True)
class ReportFilters:
    """Predicates for a report. Unset fields match everything."""

    user_id: uuid.UUID | None = None
    mission_id: uuid.UUID | None = None
    category: ExpenseCategory | None = None
    status: ExpenseStatus | None = None
    date_from: date | None = None
    date_to: date | None = None

    def matches(self, expense: Expense) -> bool:
        if self.user_id and expense.user_id != self.user_id:
            return False
        if self.mission_id and expense.mission_id != self.mission_id:
            return False
        if self.category and expense.category != self.category:
            return False
        if self.status and expense.status != self.status:
            return False
        if self.date_from and expense.date < self.date_from:
            return False
        if self.date_to and expense.date > self.date_to:
            return False
        return True


def filter_expenses(expenses: Iterable[Expense], filters: ReportFilters) -> list[Expense]:
    """Expenses matching every set filter, newest day first."""
    matched = [e for e in expenses if filters.matches(e)]
    return sorted(matched, key=lambda e: e.date, reverse=True)


def report_filename(day: date | None = None, title: str | None = None) -> str:
    """``Report_<YYYY-MM-DD>.xlsx``, prefixed with a slug when titled."""
    stamp = (day or today()).strftime("%Y-%m-%d")
    if title:
        slug = slugify(title, lowercase=True, separator="_")[:50]
        if slug:
            return f"{slug}_Report_{stamp}.xlsx"
    return f"Report_{stamp}.xlsx"


def load_report(
    db: Session, filters: ReportFilters
) -> tuple[list[Expense], list[Settlement]]:
    """Load the filtered expenses and the matching settlements."""
    expenses = filter_expenses(db.query(Expense).all(), filters)
    settlements = settlement_service.list_settlements(
        db, user_id=filters.user_id, mission_id=filters.mission_id
    )
    return expenses, settlements


def summarize(db: Session, filters: ReportFilters) -> Overview:
    """Totals over the same filtered set the export uses."""
    expenses, settlements = load_report(db, filters)
    return compute_overview(expenses, settlements)


def export_xlsx(
    expenses: list[Expense],
    users: Mapping[uuid.UUID, User],
    title: str = "Expense Report",
) -> bytes:
    """Render expenses into an Excel workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Expenses"

    # Styles
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(
        start_color="4472C4", end_color="4472C4", fill_type="solid"
    )
    header_alignment = Alignment(horizontal="center", vertical="center")
    border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )
    amount_format = "#,##0.00"
    date_format = "YYYY-MM-DD"

    ws.merge_cells("A1:F1")
    title_cell = ws["A1"]
    title_cell.value = title
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal="center")
    ws["A2"] = f"Generated: {now().strftime('%Y-%m-%d %H:%M')}"

    headers = ["Date", "User", "Category", "Description", "Amount", "Status"]
    header_row = 4
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = border

    for idx, expense in enumerate(expenses, 1):
        row = header_row + idx
        owner = users.get(expense.user_id)

        date_cell = ws.cell(row=row, column=1, value=expense.date)
        date_cell.number_format = date_format
        date_cell.border = border

        name = owner.display_name if owner else "Unknown"
        ws.cell(row=row, column=2, value=name).border = border
        ws.cell(row=row, column=3, value=expense.category.value.upper()).border = border
        ws.cell(row=row, column=4, value=expense.description or "").border = border

        amount_cell = ws.cell(
            row=row, column=5, value=float(parse_amount(expense.amount))
        )
        amount_cell.number_format = amount_format
        amount_cell.border = border

        ws.cell(row=row, column=6, value=expense.status.value).border = border

    column_widths = [12, 20, 12, 40, 14, 12]
    for col, width in enumerate(column_widths, 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def generate_report(db: Session, filters: ReportFilters) -> bytes:
    """Export the filtered expenses of every user."""
    expenses, _ = load_report(db, filters)
    users = {u.id: u for u in db.query(User).all()}
    return export_xlsx(expenses, users)
