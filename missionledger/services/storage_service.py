# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Object storage for receipt images and settlement proofs."""

import logging
import mimetypes
import secrets
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from missionledger.config import settings

logger = logging.getLogger(__name__)

RECEIPTS_BUCKET = "expense-receipts"
PROOFS_BUCKET = "settlement-proofs"
BUCKETS = (RECEIPTS_BUCKET, PROOFS_BUCKET)

# Mount point of the local backend in main.py
PUBLIC_PREFIX = "/files"


class StorageError(Exception):
    """Base exception for storage failures."""


def build_object_key(owner_id: uuid.UUID, filename: str | None) -> str:
    """Return ``<owner>/<epoch-millis>-<random hex>.<ext>``."""
    suffix = Path(filename or "").suffix.lower().lstrip(".")
    if not suffix or not suffix.isalnum():
        suffix = "bin"
    millis = int(time.time() * 1000)
    return f"{owner_id}/{millis}-{secrets.token_hex(4)}.{suffix}"


class StorageBackend(ABC):
    """Interface for object stores."""

    @abstractmethod
    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``path``. Returns the stored path."""
        ...

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        """Public URL for a stored object."""
        ...

    @abstractmethod
    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        """Delete stored objects. Missing objects are ignored."""
        ...

    @abstractmethod
    def path_from_url(self, bucket: str, url: str) -> str | None:
        """Recover the object path from a public URL, None if foreign."""
        ...


class LocalStorage(StorageBackend):
    """Filesystem storage under ``root``, served by the app at /files."""

    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        bucket_root = (self.root / bucket).resolve()
        target = (bucket_root / path).resolve()
        if bucket_root not in target.parents:
            raise StorageError(f"Invalid object path: {path}")
        return target

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        target = self._resolve(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to store {bucket}/{path}: {e}")
            raise StorageError("Upload failed") from e
        logger.debug(f"Stored {bucket}/{path} ({content_type}, {len(content)} bytes)")
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}{PUBLIC_PREFIX}/{bucket}/{path}"

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        for path in paths:
            target = self._resolve(bucket, path)
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Could not delete {bucket}/{path}") from e

    def path_from_url(self, bucket: str, url: str) -> str | None:
        marker = f"{PUBLIC_PREFIX}/{bucket}/"
        _, found, path = url.partition(marker)
        if not found or not path:
            return None
        return path.split("?", 1)[0]


def owns_object(
    storage: StorageBackend, bucket: str, url: str, owner_id: uuid.UUID
) -> bool:
    """Whether ``url`` points at an object stored under ``owner_id``."""
    path = storage.path_from_url(bucket, url)
    if path is None or ".." in PurePosixPath(path).parts:
        return False
    return path.startswith(f"{owner_id}/")


def get_storage() -> StorageBackend:
    """Storage backend configured for this process."""
    return LocalStorage(settings.storage_dir, settings.public_base_url)


def guess_content_type(filename: str | None) -> str:
    content_type, _ = mimetypes.guess_type(filename or "")
    return content_type or "application/octet-stream"


def remove_quietly(storage: StorageBackend, bucket: str, url: str | None) -> None:
    """Best-effort delete of a replaced object. Failures are only logged."""
    if not url:
        return
    path = storage.path_from_url(bucket, url)
    if path is None:
        return
    try:
        storage.remove(bucket, [path])
        logger.info(f"Removed replaced object {bucket}/{path}")
    except StorageError as e:
        logger.warning(f"Failed to remove replaced object {bucket}/{path}: {e}")
