# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Receipt and payment proof upload endpoints."""

import os

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    Form,
    HTTPException,
    UploadFile,
    status,
)

from missionledger.api.deps import get_current_admin, get_current_user, get_storage
from missionledger.models import User
from missionledger.schemas.storage import UploadResponse
from missionledger.services import storage_service
from missionledger.services.storage_service import (
    PROOFS_BUCKET,
    RECEIPTS_BUCKET,
    StorageBackend,
    StorageError,
)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".pdf"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

router = APIRouter()


async def _store(
    file: UploadFile,
    bucket: str,
    owner: User,
    replaces: str | None,
    storage: StorageBackend,
    background_tasks: BackgroundTasks,
) -> UploadResponse:
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file provided",
        )

    ext = os.path.splitext(file.filename)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"File type not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            ),
        )

    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Max size: {MAX_FILE_SIZE // (1024 * 1024)}MB",
        )

    if replaces and not storage_service.owns_object(
        storage, bucket, replaces, owner.id
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Can only replace your own uploads",
        )

    path = storage_service.build_object_key(owner.id, file.filename)
    content_type = file.content_type or storage_service.guess_content_type(
        file.filename
    )
    try:
        storage.upload(bucket, path, content, content_type)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Upload failed. The entry can still be saved without an image.",
        ) from e

    if replaces:
        background_tasks.add_task(
            storage_service.remove_quietly, storage, bucket, replaces
        )

    return UploadResponse(path=path, url=storage.get_public_url(bucket, path))


@router.post(
    "/receipts", response_model=UploadResponse, status_code=status.HTTP_201_CREATED
)
async def upload_receipt(
    file: UploadFile,
    background_tasks: BackgroundTasks,
    replaces: str | None = Form(default=None),
    current_user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
) -> UploadResponse:
    """Upload a receipt image.

    Pass the URL of a previous image in ``replaces`` to have it removed
    once the new one is stored.
    """
    return await _store(
        file, RECEIPTS_BUCKET, current_user, replaces, storage, background_tasks
    )


@router.post(
    "/proofs", response_model=UploadResponse, status_code=status.HTTP_201_CREATED
)
async def upload_proof(
    file: UploadFile,
    background_tasks: BackgroundTasks,
    replaces: str | None = Form(default=None),
    admin: User = Depends(get_current_admin),
    storage: StorageBackend = Depends(get_storage),
) -> UploadResponse:
    """Upload a payment proof for a settlement."""
    return await _store(file, PROOFS_BUCKET, admin, replaces, storage, background_tasks)
