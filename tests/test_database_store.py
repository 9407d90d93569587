"""Tests for DatabaseDocumentStore."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docshare.fs.database import DatabaseDocumentStore
from docshare.fs.exceptions import RecordNotFoundError, StorageError
from docshare.fs.protocol import DocumentStore
from docshare.fs.types import FileQuery, SortSpec

if TYPE_CHECKING:
    from docshare.fs.types import FileInfo, UserInfo


async def add_file(
    documents: DatabaseDocumentStore,
    owner: UserInfo,
    name: str,
    *,
    type: str = "document",
    size_bytes: int = 10,
) -> FileInfo:
    return await documents.create_file(
        name=name,
        type=type,
        extension=name.rpartition(".")[2],
        size_bytes=size_bytes,
        url=f"https://files.test/{name}",
        owner_id=owner.id,
        account_id=owner.account_id,
        blob_id=f"blob-{name}",
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class TestUsers:
    def test_satisfies_protocol(self, documents: DatabaseDocumentStore):
        assert isinstance(documents, DocumentStore)

    async def test_create_and_get(self, documents: DatabaseDocumentStore, owner: UserInfo):
        assert owner.id
        assert await documents.get_user(owner.id) == owner

    async def test_lookup_by_account_and_email(
        self, documents: DatabaseDocumentStore, owner: UserInfo
    ):
        assert await documents.get_user_by_account("acct-o") == owner
        assert await documents.get_user_by_email("o@x.com") == owner

    async def test_missing_user(self, documents: DatabaseDocumentStore):
        assert await documents.get_user("nope") is None
        assert await documents.get_user_by_account("nope") is None
        assert await documents.get_user_by_email("nope@x.com") is None

    async def test_duplicate_email_is_storage_error(
        self, documents: DatabaseDocumentStore, owner: UserInfo
    ):
        with pytest.raises(StorageError, match="create user"):
            await documents.create_user("o@x.com")


# ---------------------------------------------------------------------------
# File records
# ---------------------------------------------------------------------------


class TestFileRecords:
    async def test_create_and_get(self, documents: DatabaseDocumentStore, owner: UserInfo):
        created = await add_file(documents, owner, "report.pdf")
        assert created.owner == owner
        assert created.authorized_users == ()
        assert created.created_at is not None

        fetched = await documents.get_file(created.id)
        assert fetched is not None
        assert fetched.name == "report.pdf"
        assert fetched.blob_id == "blob-report.pdf"
        assert fetched.owner.email == "o@x.com"

    async def test_create_with_unknown_owner(self, documents: DatabaseDocumentStore):
        with pytest.raises(RecordNotFoundError, match="Owner not found"):
            await documents.create_file(
                name="x.pdf",
                type="document",
                extension="pdf",
                size_bytes=1,
                url="",
                owner_id="ghost",
                account_id="",
                blob_id="b",
            )

    async def test_get_missing(self, documents: DatabaseDocumentStore):
        assert await documents.get_file("missing") is None

    async def test_rename(self, documents: DatabaseDocumentStore, owner: UserInfo):
        created = await add_file(documents, owner, "draft.pdf")
        renamed = await documents.rename_file(created.id, "final.pdf")
        assert renamed is not None
        assert renamed.name == "final.pdf"
        assert await documents.rename_file("missing", "x") is None

    async def test_authorized_users_keep_order(
        self, documents: DatabaseDocumentStore, owner: UserInfo
    ):
        created = await add_file(documents, owner, "report.pdf")
        updated = await documents.set_authorized_users(created.id, ["z@x.com", "a@x.com"])
        assert updated is not None
        assert updated.authorized_users == ("z@x.com", "a@x.com")

        replaced = await documents.set_authorized_users(created.id, ["a@x.com"])
        assert replaced is not None
        assert replaced.authorized_users == ("a@x.com",)

    async def test_set_authorized_users_missing(self, documents: DatabaseDocumentStore):
        assert await documents.set_authorized_users("missing", ["a@x.com"]) is None

    async def test_delete_removes_access_rows(
        self, documents: DatabaseDocumentStore, owner: UserInfo, alice: UserInfo
    ):
        created = await add_file(documents, owner, "report.pdf")
        await documents.set_authorized_users(created.id, [alice.email])

        assert await documents.delete_file(created.id) is True
        assert await documents.get_file(created.id) is None
        assert await documents.list_files(FileQuery(user_id=alice.id, email=alice.email)) == []
        assert await documents.delete_file(created.id) is False


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@pytest.fixture
async def seeded(
    documents: DatabaseDocumentStore, owner: UserInfo, alice: UserInfo
) -> dict[str, FileInfo]:
    files = {
        "report": await add_file(documents, owner, "report.pdf", size_bytes=300),
        "photo": await add_file(documents, owner, "photo.png", type="image", size_bytes=100),
        "song": await add_file(documents, alice, "song.mp3", type="audio", size_bytes=200),
    }
    await documents.set_authorized_users(files["report"].id, [alice.email])
    return files


class TestListFiles:
    async def test_owner_or_listed(
        self, documents: DatabaseDocumentStore, seeded: dict[str, FileInfo], alice: UserInfo
    ):
        result = await documents.list_files(
            FileQuery(user_id=alice.id, email=alice.email, sort=SortSpec("name", False))
        )
        assert [f.name for f in result] == ["report.pdf", "song.mp3"]
        shared = result[0]
        assert shared.owner.email == "o@x.com"
        assert shared.authorized_users == ("a@x.com",)

    async def test_stranger_sees_nothing(
        self, documents: DatabaseDocumentStore, seeded: dict[str, FileInfo], bob: UserInfo
    ):
        assert await documents.list_files(FileQuery(user_id=bob.id, email=bob.email)) == []

    async def test_owned_only(
        self, documents: DatabaseDocumentStore, seeded: dict[str, FileInfo], alice: UserInfo
    ):
        result = await documents.list_files(
            FileQuery(user_id=alice.id, email=alice.email, owned_only=True)
        )
        assert [f.name for f in result] == ["song.mp3"]

    async def test_type_filter(
        self, documents: DatabaseDocumentStore, seeded: dict[str, FileInfo], owner: UserInfo
    ):
        result = await documents.list_files(
            FileQuery(user_id=owner.id, email=owner.email, types=("image",))
        )
        assert [f.name for f in result] == ["photo.png"]

    async def test_sort_by_size(
        self, documents: DatabaseDocumentStore, seeded: dict[str, FileInfo], owner: UserInfo
    ):
        asc = await documents.list_files(
            FileQuery(user_id=owner.id, email=owner.email, sort=SortSpec("size_bytes", False))
        )
        desc = await documents.list_files(
            FileQuery(user_id=owner.id, email=owner.email, sort=SortSpec("size_bytes", True))
        )
        assert [f.name for f in asc] == ["photo.png", "report.pdf"]
        assert [f.name for f in desc] == ["report.pdf", "photo.png"]

    async def test_limit(
        self, documents: DatabaseDocumentStore, seeded: dict[str, FileInfo], owner: UserInfo
    ):
        result = await documents.list_files(
            FileQuery(
                user_id=owner.id, email=owner.email, sort=SortSpec("name", False), limit=1
            )
        )
        assert [f.name for f in result] == ["photo.png"]

    async def test_search_escapes_wildcards(
        self, documents: DatabaseDocumentStore, owner: UserInfo
    ):
        await add_file(documents, owner, "100%_done.txt")
        await add_file(documents, owner, "1000 done.txt")
        result = await documents.list_files(
            FileQuery(user_id=owner.id, email=owner.email, search_text="100%_")
        )
        assert [f.name for f in result] == ["100%_done.txt"]
