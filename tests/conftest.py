"""Shared fixtures for docshare tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import docshare.models  # noqa: F401  (registers tables on SQLModel.metadata)
from docshare.config import DocShareConfig
from docshare.events import EventBus
from docshare.fs.blobs import LocalBlobStore
from docshare.fs.database import DatabaseDocumentStore
from docshare.fs.exceptions import StorageError
from docshare.fs.service import FileService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

    from docshare.fs.types import UserInfo


class FailingDeleteBlobStore(LocalBlobStore):
    """Blob store whose deletes always fail, as an unreachable bucket would."""

    async def delete(self, blob_id: str) -> None:
        raise StorageError(f"bucket unavailable while deleting {blob_id}")


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine with all tables created."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def documents(async_engine: AsyncEngine) -> DatabaseDocumentStore:
    return DatabaseDocumentStore(async_engine)


@pytest.fixture
def blob_dir(tmp_path: Path) -> Path:
    return tmp_path / "blobs"


@pytest.fixture
def blobs(blob_dir: Path) -> LocalBlobStore:
    return LocalBlobStore(blob_dir)


@pytest.fixture
def config(blob_dir: Path) -> DocShareConfig:
    return DocShareConfig(
        database_url="sqlite+aiosqlite://",
        blob_dir=blob_dir,
        public_base_url="https://files.test",
        max_upload_bytes=1024,
    )


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def refreshed(events: EventBus) -> list[str]:
    """Paths passed to the view-refresh signal, in order."""
    paths: list[str] = []
    events.subscribe_refresh(paths.append)
    return paths


@pytest.fixture
def service(
    documents: DatabaseDocumentStore,
    blobs: LocalBlobStore,
    events: EventBus,
    config: DocShareConfig,
) -> FileService:
    return FileService(documents, blobs, events=events, config=config)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture
async def owner(documents: DatabaseDocumentStore) -> UserInfo:
    return await documents.create_user("o@x.com", full_name="Olive Owner", account_id="acct-o")


@pytest.fixture
async def alice(documents: DatabaseDocumentStore) -> UserInfo:
    return await documents.create_user("a@x.com", full_name="Alice", account_id="acct-a")


@pytest.fixture
async def bob(documents: DatabaseDocumentStore) -> UserInfo:
    return await documents.create_user("b@x.com", full_name="Bob", account_id="acct-b")


@pytest.fixture
async def carol(documents: DatabaseDocumentStore) -> UserInfo:
    return await documents.create_user("c@x.com", full_name="Carol", account_id="acct-c")


@pytest.fixture
def failing_blobs(blob_dir: Path) -> FailingDeleteBlobStore:
    return FailingDeleteBlobStore(blob_dir)
