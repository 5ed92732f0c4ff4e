# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Daily per-category spending limit validation.

Everything in this module is a pure computation over the inputs it is
given: the limit policy, the entries already persisted for the day, and
the draft rows a user is about to submit. Nothing here reads the database
or mutates its arguments.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from missionledger.amounts import (
    ZERO,
    enum_value,
    parse_amount,
    quantize,
    read_field,
)
from missionledger.models.enums import ExpenseCategory

# Share of the cap at which usage is reported as "near"
NEAR_LIMIT_RATIO = Decimal("0.8")


@dataclass(frozen=True)
class DraftRow:
    """An unsaved expense row as typed by the user."""

    description: str = ""
    amount: Any = None
    image_url: str | None = None

    @property
    def parsed_amount(self) -> Decimal:
        """The amount as it will be stored, rounded to cents."""
        return quantize(parse_amount(self.amount))

    def is_empty(self) -> bool:
        """Rows with no description and no amount are incomplete and dropped."""
        return not (self.description or "").strip() and self.parsed_amount == ZERO


@dataclass(frozen=True)
class DraftGroup:
    """A group of draft rows sharing one category."""

    category: ExpenseCategory | None
    rows: tuple[DraftRow, ...] = ()

    def filled_rows(self) -> tuple[DraftRow, ...]:
        return tuple(row for row in self.rows if not row.is_empty())


@dataclass(frozen=True)
class CategoryUsage:
    """Projected usage of one category's daily cap."""

    category: ExpenseCategory
    existing_total: Decimal
    draft_total: Decimal
    cap: Decimal | None
    total: Decimal = field(init=False)
    remaining: Decimal | None = field(init=False)
    exceeded: bool = field(init=False)
    percent_used: float | None = field(init=False)

    def __post_init__(self) -> None:
        total = self.existing_total + self.draft_total
        object.__setattr__(self, "total", total)
        if self.cap is None:
            object.__setattr__(self, "remaining", None)
            object.__setattr__(self, "exceeded", False)
            object.__setattr__(self, "percent_used", None)
            return
        object.__setattr__(self, "remaining", self.cap - total)
        object.__setattr__(self, "exceeded", total > self.cap)
        object.__setattr__(self, "percent_used", min(float(total / self.cap), 1.0))

    @property
    def level(self) -> str:
        """Feedback level: unlimited, ok, near or exceeded."""
        if self.cap is None:
            return "unlimited"
        if self.exceeded:
            return "exceeded"
        if self.total >= self.cap * NEAR_LIMIT_RATIO:
            return "near"
        return "ok"


@dataclass(frozen=True)
class SubmissionCheck:
    """Outcome of validating a whole draft submission."""

    ok: bool
    violating_categories: frozenset[ExpenseCategory] = frozenset()
    usages: tuple[CategoryUsage, ...] = ()


def coerce_category(value: Any) -> ExpenseCategory | None:
    """Map a stored or submitted category to the enum, None if unknown."""
    if value is None:
        return None
    if isinstance(value, ExpenseCategory):
        return value
    try:
        return ExpenseCategory(str(enum_value(value)).lower())
    except ValueError:
        return None


def effective_cap(
    policy: Mapping[Any, Any], category: ExpenseCategory
) -> Decimal | None:
    """Return the cap for ``category`` or None when it is unlimited.

    Cash is never limited; a missing, zero, negative or unparseable cap
    means no limit.
    """
    if category == ExpenseCategory.CASH:
        return None
    raw = policy.get(category)
    if raw is None:
        raw = policy.get(category.value)
    cap = parse_amount(raw)
    if cap <= ZERO:
        return None
    return cap


class LimitValidator:
    """Check draft submissions against per-category daily caps.

    Args:
        policy: Mapping of category (enum or value) to daily cap.
        existing: The user's persisted entries for the day, any status.
            Items may be ORM rows, schema objects or plain mappings with
            ``category`` and ``amount``.
        drafts: Draft groups about to be submitted.
    """

    def __init__(
        self,
        policy: Mapping[Any, Any],
        existing: Iterable[Any],
        drafts: Iterable[DraftGroup],
    ) -> None:
        self._policy = dict(policy)
        self._existing = tuple(existing)
        self._drafts = tuple(drafts)

    def existing_total(self, category: ExpenseCategory) -> Decimal:
        return sum(
            (
                parse_amount(read_field(entry, "amount"))
                for entry in self._existing
                if coerce_category(read_field(entry, "category")) == category
            ),
            ZERO,
        )

    def draft_total(self, category: ExpenseCategory) -> Decimal:
        # Several open groups may share a category; all of them count
        return sum(
            (
                row.parsed_amount
                for group in self._drafts
                if group.category == category
                for row in group.filled_rows()
            ),
            ZERO,
        )

    def evaluate(self, category: ExpenseCategory) -> CategoryUsage:
        """Project today's usage of ``category`` including the drafts."""
        return CategoryUsage(
            category=category,
            existing_total=self.existing_total(category),
            draft_total=self.draft_total(category),
            cap=effective_cap(self._policy, category),
        )

    def submitted_categories(self) -> list[ExpenseCategory]:
        """Categories that have at least one non-empty draft row, in order."""
        seen: list[ExpenseCategory] = []
        for group in self._drafts:
            if group.category is None or not group.filled_rows():
                continue
            if group.category not in seen:
                seen.append(group.category)
        return seen

    def validate_submission(self) -> SubmissionCheck:
        """Accept or reject the drafts as a whole.

        The submission is rejected if any category with at least one
        non-empty row would end the day above its cap.
        """
        usages = tuple(self.evaluate(c) for c in self.submitted_categories())
        violating = frozenset(u.category for u in usages if u.exceeded)
        return SubmissionCheck(
            ok=not violating,
            violating_categories=violating,
            usages=usages,
        )


def validate_submission(
    policy: Mapping[Any, Any],
    existing: Iterable[Any],
    drafts: Iterable[DraftGroup],
) -> SubmissionCheck:
    """Shortcut for ``LimitValidator(...).validate_submission()``."""
    return LimitValidator(policy, existing, drafts).validate_submission()
