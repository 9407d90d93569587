"""Value types passed between the stores, the service, and callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserInfo:
    """A resolved user identity. ``email`` is the authorization key."""

    id: str
    email: str
    full_name: str = ""
    avatar: str = ""
    account_id: str = ""


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Snapshot of a file record together with its owner and access list."""

    id: str
    name: str
    type: str
    extension: str
    size_bytes: int
    owner: UserInfo
    blob_id: str
    authorized_users: tuple[str, ...] = ()
    url: str = ""
    account_id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class StoredBlob:
    """Result of writing a blob."""

    blob_id: str
    name: str
    size_bytes: int


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Ordering for a file listing."""

    key: str = "created_at"
    descending: bool = True


@dataclass(frozen=True, slots=True)
class FileQuery:
    """A composed listing query, executed by a ``DocumentStore``.

    Attributes:
        user_id: Files owned by this user are visible.
        email: Files listing this email are visible.
        types: Restrict to these file types (empty means all).
        search_text: Substring the file name must contain.
        sort: Ordering of the result.
        limit: Maximum number of rows, or ``None`` for all.
        owned_only: Ignore the access list and match owned files only.
    """

    user_id: str
    email: str
    types: tuple[str, ...] = ()
    search_text: str = ""
    sort: SortSpec = field(default_factory=SortSpec)
    limit: int | None = None
    owned_only: bool = False


@dataclass
class RenameResult:
    """Result of a rename operation."""

    success: bool
    message: str
    file: FileInfo | None = None


@dataclass
class ShareResult:
    """Result of a sharing update. ``changed`` is False for a no-op."""

    success: bool
    message: str
    file: FileInfo | None = None
    changed: bool = False


@dataclass
class DeleteResult:
    """Result of a delete operation."""

    success: bool
    message: str
    file_id: str | None = None
    blob_deleted: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass
class TypeUsage:
    """Bytes used by one file type."""

    size_bytes: int = 0
    latest: datetime | None = None


@dataclass
class UsageSummary:
    """Storage used by a user's own files, grouped by file type."""

    by_type: dict[str, TypeUsage] = field(default_factory=dict)
    used: int = 0
    total: int = 0

    @property
    def available(self) -> int:
        return max(self.total - self.used, 0)
