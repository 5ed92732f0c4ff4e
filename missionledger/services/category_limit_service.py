# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Category limit policy store."""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from missionledger.models import CategoryLimit, User
from missionledger.models.enums import ExpenseCategory
from missionledger.services.auth_service import require_admin

logger = logging.getLogger(__name__)


def seed_category_limits(db: Session) -> int:
    """Ensure one policy row exists per category. Returns count created.

    This function is idempotent; new rows start with no limit.
    """
    existing = {row.category for row in db.query(CategoryLimit).all()}
    created = 0
    for category in ExpenseCategory:
        if category in existing:
            continue
        db.add(CategoryLimit(category=category, daily_limit=Decimal("0")))
        created += 1
    if created:
        db.commit()
        logger.info(f"Seeded {created} category limit rows")
    return created


def list_category_limits(db: Session) -> list[CategoryLimit]:
    """Get all policy rows ordered by category."""
    return db.query(CategoryLimit).order_by(CategoryLimit.category).all()


def get_category_limits(db: Session) -> dict[ExpenseCategory, Decimal]:
    """Get the policy as a category to daily cap mapping."""
    return {row.category: row.daily_limit for row in list_category_limits(db)}


def update_category_limit(
    db: Session,
    category: ExpenseCategory,
    daily_limit: Decimal,
    admin: User,
) -> CategoryLimit:
    """Set the daily cap for a category. Last writer wins."""
    require_admin(admin)
    if daily_limit < 0:
        raise ValueError("Daily limit must not be negative")

    row = db.query(CategoryLimit).filter(CategoryLimit.category == category).first()
    if row is None:
        row = CategoryLimit(category=category)
        db.add(row)

    row.daily_limit = daily_limit
    row.updated_by = admin.id
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)

    logger.info(
        f"Daily limit for {category.value} set to {daily_limit} by {admin.username}"
    )
    return row
