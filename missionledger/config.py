# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration.

    Every field can be overridden by the upper-cased environment variable
    of the same name (e.g. ``DATABASE_URL``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./missionledger.db"
    log_level: str = "INFO"

    # Calendar day boundaries for daily limits are computed in this zone
    timezone: str = "Asia/Kolkata"

    # Local object storage for receipts and settlement proofs
    storage_dir: str = "storage"
    public_base_url: str = "http://localhost:8000"

    cors_origins: list[str] = ["http://localhost:5173"]
    session_cookie_secure: bool = False


settings = Settings()
