"""Store protocols — runtime-checkable interfaces for external collaborators.

``FileService`` depends only on these.  ``DatabaseDocumentStore`` and
``LocalBlobStore`` are the bundled implementations; other backends
implement the protocols directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .types import FileInfo, FileQuery, StoredBlob, UserInfo


@runtime_checkable
class DocumentStore(Protocol):
    """File records and users.

    Each call is its own unit of work.  Concurrent updates to the same
    record are last-write-wins on the fields touched.
    """

    async def open(self) -> None:
        """Prepare the store (create tables, etc.).  No-op if not needed."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...

    async def get_user(self, user_id: str) -> UserInfo | None: ...

    async def get_user_by_account(self, account_id: str) -> UserInfo | None: ...

    async def create_file(
        self,
        *,
        name: str,
        type: str,
        extension: str,
        size_bytes: int,
        url: str,
        owner_id: str,
        account_id: str,
        blob_id: str,
    ) -> FileInfo: ...

    async def get_file(self, file_id: str) -> FileInfo | None: ...

    async def rename_file(self, file_id: str, name: str) -> FileInfo | None: ...

    async def set_authorized_users(
        self, file_id: str, emails: Sequence[str]
    ) -> FileInfo | None: ...

    async def delete_file(self, file_id: str) -> bool: ...

    async def list_files(self, query: FileQuery) -> list[FileInfo]: ...


@runtime_checkable
class BlobStore(Protocol):
    """Opaque binary storage addressed by blob id."""

    async def create(self, data: bytes, name: str) -> StoredBlob: ...

    async def read(self, blob_id: str) -> bytes: ...

    async def delete(self, blob_id: str) -> None: ...


@runtime_checkable
class IdentityResolver(Protocol):
    """Resolves the user behind the current session, or ``None``."""

    async def get_current_user(self) -> UserInfo | None: ...
