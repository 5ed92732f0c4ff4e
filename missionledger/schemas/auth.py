# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from missionledger.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Schema for login credentials."""

    username: str
    password: str


class RegisterRequest(BaseModel):
    """Schema for self-registration."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str | None = Field(None, max_length=200)


class AuthResponse(BaseModel):
    """Schema returned after login or registration."""

    user: UserResponse
    message: str = "ok"


class AuthStatusResponse(BaseModel):
    """Schema for the unauthenticated status probe."""

    first_run: bool
