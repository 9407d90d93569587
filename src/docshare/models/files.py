"""FileRecord and FileAccess models.

A ``FileRecord`` describes one uploaded file and points at its blob.
Its authorized-user list is stored as ``FileAccess`` rows, one per
email, ordered by ``position``.  The owner is never listed there.

Subclass the ``*Base`` classes with ``table=True`` and a custom
``__tablename__`` to use different table names.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class FileRecordBase(SQLModel):
    """Base fields for a stored file. Subclass with ``table=True`` for a concrete table."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(index=True)
    type: str = Field(default="other", index=True)
    extension: str = Field(default="")
    size_bytes: int = Field(default=0)
    url: str = Field(default="")
    owner_id: str = Field(index=True)
    account_id: str = Field(default="")
    blob_id: str = Field(default="")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class FileRecord(FileRecordBase, table=True):
    """Default file table — ``docshare_files``."""

    __tablename__ = "docshare_files"


class FileAccessBase(SQLModel):
    """One email on a file's authorized-user list."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    file_id: str = Field(index=True)
    email: str = Field(index=True)
    position: int = Field(default=0)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class FileAccess(FileAccessBase, table=True):
    """Default access table — ``docshare_file_access``."""

    __tablename__ = "docshare_file_access"
