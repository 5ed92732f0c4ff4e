# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Calendar helpers."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from missionledger.config import settings


def today() -> date:
    """Current calendar day in the configured business timezone."""
    return datetime.now(ZoneInfo(settings.timezone)).date()


def now() -> datetime:
    """Current wall-clock time in the configured business timezone."""
    return datetime.now(ZoneInfo(settings.timezone))
