"""FileService — upload, list, rename, share and delete with access control.

Every operation takes the acting user explicitly and fails with
``AuthenticationRequiredError`` when there is none.  Mutations reload
the record from the document store and check permissions against that
fresh copy, never against a snapshot supplied by the caller.

Uploads and deletes touch two stores with no transaction spanning
them, so ordering is the consistency guarantee:

- upload writes the blob first, then the record; if the record cannot
  be created the blob is removed again (best effort).
- delete removes the record first, then the blob; if the blob cannot be
  removed the record stays deleted and the failure is reported as a
  warning on the result.

Successful mutations emit a ``FileEvent`` carrying the caller's path so
the presentation layer can refresh that view.  No-ops emit nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docshare.config import DocShareConfig
from docshare.events import EventType, FileEvent

from .exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    FileTooLargeError,
    RecordNotFoundError,
)
from .permissions import Action, can_view, require_permission
from .query import DEFAULT_SORT, build_file_query
from .sharing import ShareMode, reconcile
from .types import (
    DeleteResult,
    FileQuery,
    RenameResult,
    ShareResult,
    TypeUsage,
    UsageSummary,
)
from .utils import FILE_TYPES, apply_extension, get_file_type, normalize_emails

if TYPE_CHECKING:
    from collections.abc import Iterable

    from docshare.events import EventBus

    from .protocol import BlobStore, DocumentStore
    from .types import FileInfo, UserInfo

logger = logging.getLogger(__name__)


class FileService:
    """Access-controlled file operations over a document and a blob store."""

    def __init__(
        self,
        documents: DocumentStore,
        blobs: BlobStore,
        *,
        events: EventBus | None = None,
        config: DocShareConfig | None = None,
    ) -> None:
        self._documents = documents
        self._blobs = blobs
        self._events = events
        self._config = config or DocShareConfig()

    @property
    def config(self) -> DocShareConfig:
        return self._config

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_actor(actor: UserInfo | None) -> UserInfo:
        if actor is None:
            raise AuthenticationRequiredError("User not found: sign in to continue")
        return actor

    async def _load(self, file_id: str) -> FileInfo:
        record = await self._documents.get_file(file_id)
        if record is None:
            raise RecordNotFoundError(f"File not found: {file_id}")
        return record

    async def _emit(
        self, event_type: EventType, file_id: str, path: str, actor: UserInfo
    ) -> None:
        if self._events is None:
            return
        await self._events.emit(
            FileEvent(event_type=event_type, file_id=file_id, path=path, user_id=actor.id)
        )

    async def _discard_blob(self, blob_id: str, reason: str) -> bool:
        """Best-effort blob delete. Returns False (and logs) on failure."""
        try:
            await self._blobs.delete(blob_id)
        except Exception:
            logger.warning("Could not delete blob %s after %s", blob_id, reason, exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload(
        self,
        actor: UserInfo | None,
        data: bytes,
        filename: str,
        *,
        owner_id: str | None = None,
        account_id: str | None = None,
        path: str = "/",
    ) -> FileInfo:
        """Store *data* as a new file owned by *actor*.

        *owner_id* defaults to the actor; naming anyone else is refused.
        """
        actor = self._require_actor(actor)
        if owner_id is not None and owner_id != actor.id:
            raise AccessDeniedError("Access denied: files can only be uploaded for yourself")
        filename = filename.strip()
        if not filename:
            raise ValueError("File name cannot be empty")
        if len(data) > self._config.max_upload_bytes:
            raise FileTooLargeError(
                f"{filename} is too large: {len(data)} bytes "
                f"(limit {self._config.max_upload_bytes})"
            )

        blob = await self._blobs.create(data, filename)
        file_type, extension = get_file_type(blob.name)
        try:
            record = await self._documents.create_file(
                name=blob.name,
                type=file_type,
                extension=extension,
                size_bytes=blob.size_bytes,
                url=self._config.file_url(blob.blob_id),
                owner_id=actor.id,
                account_id=account_id if account_id is not None else actor.account_id,
                blob_id=blob.blob_id,
            )
        except Exception:
            await self._discard_blob(blob.blob_id, "failed record creation")
            raise

        logger.info("Uploaded %s as %s (%d bytes)", record.name, record.id, record.size_bytes)
        await self._emit(EventType.FILE_UPLOADED, record.id, path, actor)
        return record

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_files(
        self,
        actor: UserInfo | None,
        *,
        types: Iterable[str] = (),
        search_text: str = "",
        sort: str = DEFAULT_SORT,
        limit: int | None = None,
    ) -> list[FileInfo]:
        """Files the actor owns or has been given access to.

        Store failures propagate so callers can tell an empty listing
        from a failed one.
        """
        actor = self._require_actor(actor)
        query = build_file_query(actor, types, search_text, sort, limit)
        return await self._documents.list_files(query)

    async def get_file(self, actor: UserInfo | None, file_id: str) -> FileInfo:
        actor = self._require_actor(actor)
        record = await self._load(file_id)
        if not can_view(record, actor):
            raise AccessDeniedError(f"Access denied: {actor.email!r} cannot see this file")
        return record

    async def download(self, actor: UserInfo | None, file_id: str) -> bytes:
        record = await self.get_file(actor, file_id)
        return await self._blobs.read(record.blob_id)

    def download_url(self, file: FileInfo) -> str:
        return self._config.download_url(file.blob_id)

    async def total_space_used(self, actor: UserInfo | None) -> UsageSummary:
        """Bytes used by the actor's own files, per type, against the quota."""
        actor = self._require_actor(actor)
        owned = await self._documents.list_files(
            FileQuery(user_id=actor.id, email=actor.email, owned_only=True)
        )
        summary = UsageSummary(
            by_type={t: TypeUsage() for t in FILE_TYPES},
            total=self._config.storage_quota_bytes,
        )
        for file in owned:
            usage = summary.by_type.setdefault(file.type, TypeUsage())
            usage.size_bytes += file.size_bytes
            stamp = file.updated_at
            if stamp is not None and (usage.latest is None or stamp > usage.latest):
                usage.latest = stamp
            summary.used += file.size_bytes
        return summary

    # ------------------------------------------------------------------
    # Rename
    # ------------------------------------------------------------------

    async def rename(
        self,
        actor: UserInfo | None,
        file_id: str,
        name: str,
        extension: str | None = None,
        *,
        path: str = "/",
    ) -> RenameResult:
        """Rename a file.  Owner only.

        ``.extension`` (the record's own extension by default) is appended
        unless *name* already ends with it.
        """
        actor = self._require_actor(actor)
        record = await self._load(file_id)
        require_permission(Action.RENAME, record, actor)

        base = name.strip()
        if not base:
            raise ValueError("File name cannot be empty")
        new_name = apply_extension(base, record.extension if extension is None else extension)

        if new_name == record.name:
            return RenameResult(success=True, message="Name unchanged", file=record)

        updated = await self._documents.rename_file(file_id, new_name)
        if updated is None:
            raise RecordNotFoundError(f"File not found: {file_id}")

        logger.info("Renamed %s to %s", file_id, new_name)
        await self._emit(EventType.FILE_RENAMED, file_id, path, actor)
        return RenameResult(success=True, message=f"Renamed to {new_name}", file=updated)

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def update_sharing(
        self,
        actor: UserInfo | None,
        file_id: str,
        emails: Iterable[str],
        *,
        mode: ShareMode | str = ShareMode.APPEND,
        path: str = "/",
    ) -> ShareResult:
        """Change a file's authorized-user list.

        The owner may set any list.  Anyone else who is listed may only
        remove themself.  A request that leaves the list unchanged is a
        no-op: nothing is written and ``changed`` is False.
        """
        actor = self._require_actor(actor)
        record = await self._load(file_id)
        return await self._apply_sharing(
            actor, record, normalize_emails(emails), ShareMode(mode), path
        )

    async def remove_self(
        self,
        actor: UserInfo | None,
        file_id: str,
        *,
        path: str = "/",
    ) -> ShareResult:
        """Take the actor off a file that was shared with them."""
        actor = self._require_actor(actor)
        record = await self._load(file_id)
        require_permission(Action.REMOVE_SELF, record, actor)
        remaining = [email for email in record.authorized_users if email != actor.email]
        return await self._apply_sharing(actor, record, remaining, ShareMode.OVERWRITE, path)

    async def _apply_sharing(
        self,
        actor: UserInfo,
        record: FileInfo,
        emails: list[str],
        mode: ShareMode,
        path: str,
    ) -> ShareResult:
        result = reconcile(
            record.authorized_users,
            emails,
            record.owner.email,
            actor.email,
            mode,
        )
        if not result.changed:
            logger.debug("Sharing for %s unchanged; skipping write", record.id)
            return ShareResult(success=True, message="No changes", file=record, changed=False)

        updated = await self._documents.set_authorized_users(record.id, result.users)
        if updated is None:
            raise RecordNotFoundError(f"File not found: {record.id}")

        logger.info(
            "Updated sharing for %s: %d user(s) by %s",
            record.id,
            len(result.users),
            actor.email,
        )
        await self._emit(EventType.FILE_SHARED, record.id, path, actor)
        return ShareResult(
            success=True,
            message=f"Shared with {len(result.users)} user(s)",
            file=updated,
            changed=True,
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(
        self,
        actor: UserInfo | None,
        file_id: str,
        blob_id: str | None = None,
        *,
        path: str = "/",
    ) -> DeleteResult:
        """Delete a file record, then its blob.  Owner only.

        *blob_id*, when given, must be the record's own blob.
        """
        actor = self._require_actor(actor)
        record = await self._load(file_id)
        require_permission(Action.DELETE, record, actor)
        if blob_id is not None and blob_id != record.blob_id:
            raise AccessDeniedError("Access denied: blob does not belong to this file")

        if not await self._documents.delete_file(file_id):
            raise RecordNotFoundError(f"File not found: {file_id}")

        warnings: list[str] = []
        blob_deleted = False
        if record.blob_id:
            blob_deleted = await self._discard_blob(record.blob_id, f"deleting file {file_id}")
            if not blob_deleted:
                warnings.append(f"Blob {record.blob_id} could not be deleted")

        logger.info("Deleted %s (%s)", record.name, file_id)
        await self._emit(EventType.FILE_DELETED, file_id, path, actor)
        return DeleteResult(
            success=True,
            message=f"Deleted: {record.name}",
            file_id=file_id,
            blob_deleted=blob_deleted,
            warnings=warnings,
        )
