# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User schemas."""

import datetime
import uuid

from pydantic import BaseModel

from missionledger.models.enums import UserRole


class UserResponse(BaseModel):
    """Schema for user response."""

    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None
    role: UserRole
    is_approved: bool
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}


class UserRoleUpdate(BaseModel):
    """Schema for changing a user's role (admin use)."""

    role: UserRole
