"""docshare: a shared document store with per-file, email-based access control.

Owners upload files, rename and delete them, and share them with other
users by email.  Users a file was shared with can remove themselves.
"""

__version__ = "0.1.0"

from docshare._docshare import DocShare
from docshare.config import DocShareConfig
from docshare.events import EventBus, EventType, FileEvent
from docshare.fs.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    DocShareError,
    FileTooLargeError,
    MenuStateError,
    RecordNotFoundError,
    StorageError,
)
from docshare.fs.permissions import Action, allowed_actions, can_perform
from docshare.fs.service import FileService
from docshare.fs.sharing import ReconcileResult, ShareMode, reconcile
from docshare.fs.types import (
    DeleteResult,
    FileInfo,
    RenameResult,
    ShareResult,
    UsageSummary,
    UserInfo,
)
from docshare.menu import ActionIntent, ActionMenu, MenuState, user_message

__all__ = [
    "AccessDeniedError",
    "Action",
    "ActionIntent",
    "ActionMenu",
    "AuthenticationRequiredError",
    "DeleteResult",
    "DocShare",
    "DocShareConfig",
    "DocShareError",
    "EventBus",
    "EventType",
    "FileEvent",
    "FileInfo",
    "FileService",
    "FileTooLargeError",
    "MenuState",
    "MenuStateError",
    "ReconcileResult",
    "RecordNotFoundError",
    "RenameResult",
    "ShareMode",
    "ShareResult",
    "StorageError",
    "UsageSummary",
    "UserInfo",
    "__version__",
    "allowed_actions",
    "can_perform",
    "reconcile",
    "user_message",
]
