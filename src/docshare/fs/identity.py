"""Identity resolution backed by the document store's user table."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .database import DatabaseDocumentStore
    from .types import UserInfo


class AccountIdentityResolver:
    """Resolves the user bound to a session's account id.

    The session mechanism that produced *account_id* lives upstream;
    ``None`` means the session carries no account.
    """

    def __init__(self, store: DatabaseDocumentStore, account_id: str | None) -> None:
        self._store = store
        self._account_id = account_id

    async def get_current_user(self) -> UserInfo | None:
        if not self._account_id:
            return None
        return await self._store.get_user_by_account(self._account_id)
