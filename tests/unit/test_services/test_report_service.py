# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for report_service."""

import io
from datetime import date
from decimal import Decimal

from openpyxl import load_workbook

from missionledger.models import Expense
from missionledger.models.enums import ExpenseCategory, ExpenseStatus
from missionledger.services import report_service
from missionledger.services.report_service import ReportFilters


def add_expense(db_session, user, day, category, amount, status=ExpenseStatus.APPROVED):
    expense = Expense(
        user_id=user.id,
        date=day,
        category=category,
        description=f"{category.value} on {day}",
        amount=Decimal(amount),
        status=status,
    )
    db_session.add(expense)
    db_session.commit()
    return expense


def test_report_filename():
    assert report_service.report_filename(date(2025, 7, 1)) == "Report_2025-07-01.xlsx"
    assert (
        report_service.report_filename(date(2025, 7, 1), "Q3 Field Team!")
        == "q3_field_team_Report_2025-07-01.xlsx"
    )


def test_report_filename_defaults_to_business_day(monkeypatch):
    monkeypatch.setattr(report_service, "today", lambda: date(2025, 12, 31))
    assert report_service.report_filename() == "Report_2025-12-31.xlsx"


def test_filter_expenses(db_session, test_user, admin_user):
    add_expense(db_session, test_user, date(2025, 7, 1), ExpenseCategory.MEAL, "10")
    add_expense(db_session, test_user, date(2025, 7, 3), ExpenseCategory.HOTEL, "90")
    add_expense(db_session, admin_user, date(2025, 7, 2), ExpenseCategory.MEAL, "5")
    expenses = db_session.query(Expense).all()

    mine = report_service.filter_expenses(expenses, ReportFilters(user_id=test_user.id))
    assert [e.date for e in mine] == [date(2025, 7, 3), date(2025, 7, 1)]

    meals = report_service.filter_expenses(
        expenses, ReportFilters(category=ExpenseCategory.MEAL, date_from=date(2025, 7, 2))
    )
    assert len(meals) == 1
    assert meals[0].user_id == admin_user.id


def test_summarize_uses_filtered_set(db_session, test_user):
    add_expense(db_session, test_user, date(2025, 7, 1), ExpenseCategory.MEAL, "10")
    add_expense(
        db_session,
        test_user,
        date(2025, 7, 1),
        ExpenseCategory.TRAVEL,
        "30",
        status=ExpenseStatus.PENDING,
    )
    add_expense(db_session, test_user, date(2025, 7, 1), ExpenseCategory.CASH, "500")

    overview = report_service.summarize(db_session, ReportFilters(user_id=test_user.id))

    assert overview.total_expense == Decimal("40")
    assert overview.approved == Decimal("10")
    assert overview.pending == Decimal("30")
    assert overview.records == 3


def test_export_xlsx(db_session, test_user):
    add_expense(db_session, test_user, date(2025, 7, 1), ExpenseCategory.LUGGAGE, "42.50")

    content = report_service.generate_report(db_session, ReportFilters())

    ws = load_workbook(io.BytesIO(content)).active
    assert ws.title == "Expenses"
    headers = [ws.cell(row=4, column=c).value for c in range(1, 7)]
    assert headers == ["Date", "User", "Category", "Description", "Amount", "Status"]
    assert ws.cell(row=5, column=2).value == "Testuser"
    assert ws.cell(row=5, column=3).value == "LUGGAGE"
    assert ws.cell(row=5, column=5).value == 42.5
    assert ws.cell(row=5, column=6).value == "approved"
