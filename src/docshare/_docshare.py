"""DocShare — async facade wiring stores, event bus and file service."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy.engine import make_url

from docshare.config import DocShareConfig
from docshare.events import EventBus
from docshare.fs.blobs import LocalBlobStore
from docshare.fs.database import DatabaseDocumentStore
from docshare.fs.identity import AccountIdentityResolver
from docshare.fs.service import FileService
from docshare.menu import ActionMenu

if TYPE_CHECKING:
    from collections.abc import Callable

    from docshare.fs.protocol import BlobStore
    from docshare.fs.types import FileInfo, UserInfo

logger = logging.getLogger(__name__)


def _ensure_sqlite_dir(url: str) -> None:
    """Create the directory holding a file-based SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class DocShare:
    """Entry point for applications.

    Builds the document store, blob store, event bus and service from a
    ``DocShareConfig``::

        async with DocShare(DocShareConfig.from_env()) as ds:
            ds.on_refresh(invalidate_view)
            user = await ds.identity(session_account_id).get_current_user()
            files = await ds.files.list_files(user, types=["documents"])

    Pass *documents* / *blobs* to substitute other store implementations.
    """

    def __init__(
        self,
        config: DocShareConfig | None = None,
        *,
        documents: DatabaseDocumentStore | None = None,
        blobs: BlobStore | None = None,
    ) -> None:
        self.config = config or DocShareConfig()
        self._owns_documents = documents is None
        self.documents = documents or DatabaseDocumentStore.from_url(self.config.database_url)
        self.blobs = blobs or LocalBlobStore(self.config.blob_dir)
        self.events = EventBus()
        self.files = FileService(
            self.documents,
            self.blobs,
            events=self.events,
            config=self.config,
        )
        self._opened = False

    async def open(self) -> None:
        if self._opened:
            return
        if self._owns_documents:
            await asyncio.to_thread(_ensure_sqlite_dir, self.config.database_url)
        await self.documents.open()
        self._opened = True
        logger.debug("DocShare opened (%s)", self.config.database_url)

    async def close(self) -> None:
        if not self._opened:
            return
        await self.documents.close()
        self._opened = False

    async def __aenter__(self) -> DocShare:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def on_refresh(self, refresh: Callable[[str], Any]) -> None:
        """Register the view-refresh signal, called with the path after each mutation.

        Subscriptions outlive ``close()``; a reopened facade keeps refreshing.
        """
        self.events.subscribe_refresh(refresh)

    def identity(self, account_id: str | None) -> AccountIdentityResolver:
        """Identity resolver for a session bound to *account_id*."""
        return AccountIdentityResolver(self.documents, account_id)

    def action_menu(
        self,
        file: FileInfo,
        current_user: UserInfo | None,
        path: str = "/",
    ) -> ActionMenu:
        """A fresh action menu controller for one rendered file."""
        return ActionMenu(self.files, file, current_user, path)
