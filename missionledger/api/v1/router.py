# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from missionledger.api.v1 import (
    auth,
    balances,
    expenses,
    limits,
    missions,
    receipts,
    reports,
    settlements,
    users,
)

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# User management routes (admin)
api_router.include_router(users.router, prefix="/users", tags=["users"])

# Mission routes
api_router.include_router(missions.router, prefix="/missions", tags=["missions"])

# Expense routes
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(
    expenses.admin_router, prefix="/admin/expenses", tags=["expenses"]
)

# Category limit routes
api_router.include_router(limits.router, prefix="/limits", tags=["limits"])

# Settlement and balance routes
api_router.include_router(
    settlements.router, prefix="/settlements", tags=["settlements"]
)
api_router.include_router(balances.router, prefix="/balances", tags=["balances"])

# Upload routes
api_router.include_router(receipts.router, prefix="/uploads", tags=["uploads"])

# Report routes (admin)
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
