"""SQLModel database models for docshare."""

from docshare.models.files import FileAccess, FileAccessBase, FileRecord, FileRecordBase
from docshare.models.users import User, UserBase

__all__ = [
    "FileAccess",
    "FileAccessBase",
    "FileRecord",
    "FileRecordBase",
    "User",
    "UserBase",
]
