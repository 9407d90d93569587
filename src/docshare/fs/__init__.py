"""File access control, sharing reconciliation, stores and the file service."""

from docshare.fs.blobs import LocalBlobStore
from docshare.fs.database import DatabaseDocumentStore
from docshare.fs.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    DocShareError,
    FileTooLargeError,
    MenuStateError,
    RecordNotFoundError,
    StorageError,
)
from docshare.fs.identity import AccountIdentityResolver
from docshare.fs.permissions import Action, allowed_actions, can_perform, can_view, require_permission
from docshare.fs.protocol import BlobStore, DocumentStore, IdentityResolver
from docshare.fs.query import build_file_query, parse_sort
from docshare.fs.service import FileService
from docshare.fs.sharing import ReconcileResult, ShareMode, reconcile
from docshare.fs.types import (
    DeleteResult,
    FileInfo,
    FileQuery,
    RenameResult,
    ShareResult,
    SortSpec,
    StoredBlob,
    TypeUsage,
    UsageSummary,
    UserInfo,
)

__all__ = [
    "AccessDeniedError",
    "AccountIdentityResolver",
    "Action",
    "AuthenticationRequiredError",
    "BlobStore",
    "DatabaseDocumentStore",
    "DeleteResult",
    "DocShareError",
    "DocumentStore",
    "FileInfo",
    "FileQuery",
    "FileService",
    "FileTooLargeError",
    "IdentityResolver",
    "LocalBlobStore",
    "MenuStateError",
    "ReconcileResult",
    "RecordNotFoundError",
    "RenameResult",
    "ShareMode",
    "ShareResult",
    "SortSpec",
    "StorageError",
    "StoredBlob",
    "TypeUsage",
    "UsageSummary",
    "UserInfo",
    "allowed_actions",
    "build_file_query",
    "can_perform",
    "can_view",
    "parse_sort",
    "reconcile",
    "require_permission",
]
