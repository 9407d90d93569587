"""DocShareConfig — settings for the facade and the file service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

_DEFAULT_DATA_DIR = Path.home() / ".docshare"

ENV_PREFIX = "DOCSHARE_"

GIB = 1024 * 1024 * 1024
MIB = 1024 * 1024


def _default_database_url() -> str:
    return f"sqlite+aiosqlite:///{_DEFAULT_DATA_DIR / 'docshare.db'}"


@dataclass(frozen=True)
class DocShareConfig:
    """Immutable settings.

    Attributes:
        database_url: Async SQLAlchemy URL of the document store.
        blob_dir: Directory for ``LocalBlobStore``.
        public_base_url: Base URL under which blobs are served.
        storage_quota_bytes: Storage each user may fill (reported, not enforced).
        max_upload_bytes: Uploads larger than this are rejected.
    """

    database_url: str = field(default_factory=_default_database_url)
    blob_dir: Path = _DEFAULT_DATA_DIR / "blobs"
    public_base_url: str = "http://localhost:8000"
    storage_quota_bytes: int = 2 * GIB
    max_upload_bytes: int = 50 * MIB

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DocShareConfig:
        """Build a config from ``DOCSHARE_*`` variables, defaulting the rest.

        Recognised: ``DOCSHARE_DATABASE_URL``, ``DOCSHARE_BLOB_DIR``,
        ``DOCSHARE_PUBLIC_BASE_URL``, ``DOCSHARE_STORAGE_QUOTA_BYTES``,
        ``DOCSHARE_MAX_UPLOAD_BYTES``.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if url := env.get(f"{ENV_PREFIX}DATABASE_URL"):
            kwargs["database_url"] = url
        if blob_dir := env.get(f"{ENV_PREFIX}BLOB_DIR"):
            kwargs["blob_dir"] = Path(blob_dir).expanduser()
        if base_url := env.get(f"{ENV_PREFIX}PUBLIC_BASE_URL"):
            kwargs["public_base_url"] = base_url
        for name in ("storage_quota_bytes", "max_upload_bytes"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                try:
                    kwargs[name] = int(raw)
                except ValueError:
                    raise ValueError(
                        f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}"
                    ) from None

        return cls(**kwargs)  # type: ignore[arg-type]

    def file_url(self, blob_id: str) -> str:
        """Public URL that renders the blob inline."""
        return f"{self.public_base_url.rstrip('/')}/files/{blob_id}/view"

    def download_url(self, blob_id: str) -> str:
        """Public URL that downloads the blob as an attachment."""
        return f"{self.public_base_url.rstrip('/')}/files/{blob_id}/download"
