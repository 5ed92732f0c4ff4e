# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Upload schemas."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Stored object path and its public URL."""

    path: str
    url: str
