# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Mission model."""

from __future__ import annotations

import uuid as uuid_lib
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from missionledger.models.base import Base, TimestampMixin
from missionledger.models.enums import OPEN_MISSION_STATUSES, MissionStatus

if TYPE_CHECKING:
    from missionledger.models.expense import Expense
    from missionledger.models.user import User


class Mission(Base, TimestampMixin):
    """A bounded trip or assignment during which a user logs expenses."""

    __tablename__ = "missions"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    user_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[MissionStatus] = mapped_column(
        Enum(MissionStatus),
        default=MissionStatus.ACTIVE,
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    companions: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="missions")
    expenses: Mapped[list[Expense]] = relationship(
        "Expense",
        back_populates="mission",
    )

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_MISSION_STATUSES
