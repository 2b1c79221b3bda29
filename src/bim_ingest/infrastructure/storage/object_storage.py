"""Local filesystem object storage.

Raw source files are stored content-addressed: the object reference is
the SHA-256 hex digest of the bytes, sharded by its first two characters.
"""
from __future__ import annotations

import asyncio
import hashlib
import re
from pathlib import Path

from bim_ingest.domain import EntityNotFoundError, ObjectStorageError
from bim_ingest.shared.config import get_settings
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

_REF_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class LocalObjectStorage:
    """IObjectStorage implementation on a local directory."""

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root or get_settings().object_storage_dir)

    @property
    def root(self) -> Path:
        return self._root

    async def upload_raw_file(self, data: bytes) -> str:
        """Store bytes and return their object reference.

        Uploading identical content twice yields the same reference.
        """
        object_ref = hashlib.sha256(data).hexdigest()
        path = self._path(object_ref)
        if path.exists():
            return object_ref

        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            raise ObjectStorageError(object_ref, str(e)) from e

        logger.info("Raw file stored", object_ref=object_ref, size_bytes=len(data))
        return object_ref

    async def get_file(self, object_ref: str) -> bytes:
        """Read a stored file.

        Raises:
            EntityNotFoundError: If nothing is stored under the reference
            ObjectStorageError: On read failure
        """
        path = self._path(object_ref)
        if not path.exists():
            raise EntityNotFoundError("Object", object_ref)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ObjectStorageError(object_ref, str(e)) from e

    async def head_file(self, object_ref: str) -> bool:
        return self._path(object_ref).exists()

    def _path(self, object_ref: str) -> Path:
        if not _REF_PATTERN.match(object_ref):
            raise ObjectStorageError(object_ref, "malformed object reference")
        return self._root / object_ref[:2] / object_ref

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".part")
        tmp.write_bytes(data)
        tmp.replace(path)
