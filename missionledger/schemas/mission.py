# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Mission schemas."""

import datetime
import uuid

from pydantic import BaseModel, Field, field_validator

from missionledger.models.enums import MissionStatus


class MissionCreate(BaseModel):
    """Schema for starting a mission."""

    name: str = Field(..., min_length=1, max_length=200)
    start_date: datetime.date | None = None
    address: str | None = Field(None, max_length=500)
    companions: str | None = None
    details: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Mission name is required")
        return v.strip()


class MissionResponse(BaseModel):
    """Schema for mission response."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    status: MissionStatus
    start_date: datetime.date
    end_date: datetime.date | None
    address: str | None
    companions: str | None
    details: str | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}
