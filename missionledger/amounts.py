# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Defensive numeric coercion shared by the ledger computations."""

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

NUMBER_PREFIX = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_amount(value: Any) -> Decimal:
    """Coerce user or database input into a Decimal amount.

    None, blank strings, booleans, non-numeric text, NaN and infinities all
    normalize to zero. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int | float):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return ZERO
    else:
        # Leading numeric prefix only, so "12.50 INR" reads as 12.50
        match = NUMBER_PREFIX.match(str(value))
        if not match:
            return ZERO
        try:
            result = Decimal(match.group(0))
        except InvalidOperation:
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def quantize(value: Decimal) -> Decimal:
    """Round to two decimal places for storage and display."""
    return value.quantize(CENT)


def read_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from an ORM row, schema object or plain mapping."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def enum_value(value: Any) -> Any:
    """Return the raw value of an Enum member, or the value unchanged."""
    return getattr(value, "value", value)
