"""LocalBlobStore — blobs as flat files in one directory."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import re
import tempfile
import uuid
from pathlib import Path

from .exceptions import RecordNotFoundError, StorageError
from .types import StoredBlob

logger = logging.getLogger(__name__)

_BLOB_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class LocalBlobStore:
    """Blob store on the local filesystem.

    Blob ids are uuid4 hex strings generated on create.  Every id coming
    back in is validated so a crafted id cannot address a path outside
    ``root``.  Disk I/O runs in a worker thread.
    """

    def __init__(self, root: Path | str, *, create: bool = True) -> None:
        self.root = Path(root).resolve()
        if create:
            self.root.mkdir(parents=True, exist_ok=True)
        if not self.root.is_dir():
            raise NotADirectoryError(f"Blob root is not a directory: {self.root}")

    def _resolve(self, blob_id: str) -> Path:
        if not _BLOB_ID_RE.match(blob_id):
            raise ValueError(f"Invalid blob id: {blob_id!r}")
        return self.root / blob_id

    # ------------------------------------------------------------------
    # BlobStore protocol
    # ------------------------------------------------------------------

    async def create(self, data: bytes, name: str) -> StoredBlob:
        """Write *data* under a new blob id."""
        blob_id = uuid.uuid4().hex
        target = self._resolve(blob_id)
        try:
            await asyncio.to_thread(self._write_atomic, target, data)
        except OSError as exc:
            raise StorageError(f"Failed to write blob for {name!r}: {exc}") from exc
        logger.debug("Wrote blob %s (%d bytes) for %s", blob_id, len(data), name)
        return StoredBlob(blob_id=blob_id, name=name, size_bytes=len(data))

    async def read(self, blob_id: str) -> bytes:
        target = self._resolve(blob_id)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError:
            raise RecordNotFoundError(f"Blob not found: {blob_id}") from None
        except OSError as exc:
            raise StorageError(f"Failed to read blob {blob_id}: {exc}") from exc

    async def delete(self, blob_id: str) -> None:
        target = self._resolve(blob_id)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            raise RecordNotFoundError(f"Blob not found: {blob_id}") from None
        except OSError as exc:
            raise StorageError(f"Failed to delete blob {blob_id}: {exc}") from exc

    async def exists(self, blob_id: str) -> bool:
        return await asyncio.to_thread(self._resolve(blob_id).is_file)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _write_atomic(self, target: Path, data: bytes) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=str(self.root), suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            Path(tmp_path).replace(target)
        except Exception:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
