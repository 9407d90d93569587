"""DatabaseDocumentStore — file records, access lists and users in SQL."""

from __future__ import annotations

import contextlib
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete as sa_delete
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from .exceptions import RecordNotFoundError, StorageError
from .types import FileInfo, UserInfo

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sqlalchemy.ext.asyncio import AsyncEngine

    from docshare.models.files import FileAccessBase, FileRecordBase
    from docshare.models.users import UserBase

    from .types import FileQuery

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"Failed to {action}: {exc}") from exc


def _user_info(user: UserBase) -> UserInfo:
    return UserInfo(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        avatar=user.avatar,
        account_id=user.account_id,
    )


def _file_info(
    record: FileRecordBase,
    owner: UserInfo,
    emails: Sequence[str],
) -> FileInfo:
    return FileInfo(
        id=record.id,
        name=record.name,
        type=record.type,
        extension=record.extension,
        size_bytes=record.size_bytes,
        owner=owner,
        blob_id=record.blob_id,
        authorized_users=tuple(emails),
        url=record.url,
        account_id=record.account_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class DatabaseDocumentStore:
    """SQL-backed ``DocumentStore``.

    Every public method opens its own session and commits before
    returning, so each call is one document-level write.  Works with any
    async SQLAlchemy dialect; tests use ``sqlite+aiosqlite``.

    Model classes can be swapped for custom ``table=True`` subclasses of
    the base models.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        file_model: type[FileRecordBase] | None = None,
        access_model: type[FileAccessBase] | None = None,
        user_model: type[UserBase] | None = None,
        owns_engine: bool = False,
    ) -> None:
        from docshare.models.files import FileAccess, FileRecord
        from docshare.models.users import User

        self._engine = engine
        self._owns_engine = owns_engine
        self._file_model: type[FileRecordBase] = file_model or FileRecord  # type: ignore[assignment]
        self._access_model: type[FileAccessBase] = access_model or FileAccess  # type: ignore[assignment]
        self._user_model: type[UserBase] = user_model or User  # type: ignore[assignment]
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str, **kwargs: object) -> DatabaseDocumentStore:
        """Create a store that owns a new engine for *url*."""
        return cls(create_async_engine(url), owns_engine=True, **kwargs)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Create tables that do not exist yet."""
        with _storage_errors("create tables"):
            async with self._engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine if this store created it."""
        if self._owns_engine:
            await self._engine.dispose()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(
        self,
        email: str,
        *,
        full_name: str = "",
        avatar: str = "",
        account_id: str = "",
    ) -> UserInfo:
        user = self._user_model(
            email=email,
            full_name=full_name,
            avatar=avatar,
            account_id=account_id,
        )
        with _storage_errors("create user"):
            async with self._session_factory() as session:
                session.add(user)
                await session.commit()
        return _user_info(user)

    async def get_user(self, user_id: str) -> UserInfo | None:
        with _storage_errors("get user"):
            async with self._session_factory() as session:
                user = await session.get(self._user_model, user_id)
        return _user_info(user) if user is not None else None

    async def get_user_by_account(self, account_id: str) -> UserInfo | None:
        model = self._user_model
        with _storage_errors("get user"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(model).where(model.account_id == account_id)
                )
                user = result.scalars().first()
        return _user_info(user) if user is not None else None

    async def get_user_by_email(self, email: str) -> UserInfo | None:
        model = self._user_model
        with _storage_errors("get user"):
            async with self._session_factory() as session:
                result = await session.execute(select(model).where(model.email == email))
                user = result.scalar_one_or_none()
        return _user_info(user) if user is not None else None

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

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
    ) -> FileInfo:
        """Insert a file record.  Raises ``RecordNotFoundError`` for an unknown owner."""
        with _storage_errors("create file record"):
            async with self._session_factory() as session:
                owner = await session.get(self._user_model, owner_id)
                if owner is None:
                    raise RecordNotFoundError(f"Owner not found: {owner_id}")
                record = self._file_model(
                    name=name,
                    type=type,
                    extension=extension,
                    size_bytes=size_bytes,
                    url=url,
                    owner_id=owner_id,
                    account_id=account_id,
                    blob_id=blob_id,
                )
                session.add(record)
                await session.commit()
        return _file_info(record, _user_info(owner), [])

    async def get_file(self, file_id: str) -> FileInfo | None:
        with _storage_errors("get file record"):
            async with self._session_factory() as session:
                record = await session.get(self._file_model, file_id)
                if record is None:
                    return None
                return await self._load_info(session, record)

    async def rename_file(self, file_id: str, name: str) -> FileInfo | None:
        with _storage_errors("rename file record"):
            async with self._session_factory() as session:
                record = await session.get(self._file_model, file_id)
                if record is None:
                    return None
                record.name = name
                record.updated_at = datetime.now(UTC)
                await session.commit()
                return await self._load_info(session, record)

    async def set_authorized_users(
        self, file_id: str, emails: Sequence[str]
    ) -> FileInfo | None:
        """Replace the authorized-user list of *file_id* with *emails*."""
        am = self._access_model
        with _storage_errors("update authorized users"):
            async with self._session_factory() as session:
                record = await session.get(self._file_model, file_id)
                if record is None:
                    return None
                await session.execute(
                    sa_delete(am).where(am.file_id == file_id)  # type: ignore[arg-type]
                )
                for position, email in enumerate(emails):
                    session.add(am(file_id=file_id, email=email, position=position))
                record.updated_at = datetime.now(UTC)
                await session.commit()
                return await self._load_info(session, record)

    async def delete_file(self, file_id: str) -> bool:
        """Delete a record and its access rows. Returns True if it existed."""
        am = self._access_model
        with _storage_errors("delete file record"):
            async with self._session_factory() as session:
                record = await session.get(self._file_model, file_id)
                if record is None:
                    return False
                await session.execute(
                    sa_delete(am).where(am.file_id == file_id)  # type: ignore[arg-type]
                )
                await session.delete(record)
                await session.commit()
        return True

    async def list_files(self, query: FileQuery) -> list[FileInfo]:
        fm = self._file_model
        am = self._access_model

        if query.owned_only:
            visible = fm.owner_id == query.user_id
        else:
            shared_ids = select(am.file_id).where(am.email == query.email)
            visible = or_(
                fm.owner_id == query.user_id,  # type: ignore[arg-type]
                fm.id.in_(shared_ids),  # type: ignore[union-attr]
            )

        stmt = select(fm).where(visible)
        if query.types:
            stmt = stmt.where(fm.type.in_(query.types))  # type: ignore[union-attr]
        if query.search_text:
            stmt = stmt.where(
                fm.name.contains(query.search_text, autoescape=True)  # type: ignore[union-attr]
            )

        column = getattr(fm, query.sort.key)
        stmt = stmt.order_by(column.desc() if query.sort.descending else column.asc(), fm.id)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        with _storage_errors("list files"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
                if not records:
                    return []
                owners = await self._owners_by_id(session, {r.owner_id for r in records})
                emails = await self._emails_by_file(session, [r.id for r in records])

        return [
            _file_info(
                record,
                owners.get(record.owner_id) or UserInfo(id=record.owner_id, email=""),
                emails.get(record.id, []),
            )
            for record in records
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_info(self, session: AsyncSession, record: FileRecordBase) -> FileInfo:
        owners = await self._owners_by_id(session, {record.owner_id})
        emails = await self._emails_by_file(session, [record.id])
        owner = owners.get(record.owner_id)
        if owner is None:
            logger.warning("File %s references missing owner %s", record.id, record.owner_id)
            owner = UserInfo(id=record.owner_id, email="")
        return _file_info(record, owner, emails.get(record.id, []))

    async def _owners_by_id(
        self, session: AsyncSession, owner_ids: set[str]
    ) -> dict[str, UserInfo]:
        um = self._user_model
        result = await session.execute(
            select(um).where(um.id.in_(owner_ids))  # type: ignore[union-attr]
        )
        return {u.id: _user_info(u) for u in result.scalars().all()}

    async def _emails_by_file(
        self, session: AsyncSession, file_ids: list[str]
    ) -> dict[str, list[str]]:
        am = self._access_model
        result = await session.execute(
            select(am)
            .where(am.file_id.in_(file_ids))  # type: ignore[union-attr]
            .order_by(am.file_id, am.position)
        )
        grouped: dict[str, list[str]] = {}
        for row in result.scalars().all():
            grouped.setdefault(row.file_id, []).append(row.email)
        return grouped
