"""Listing query composition.

Turns listing parameters into a ``FileQuery``.  Executing it is the
document store's job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import FileQuery, SortSpec
from .utils import resolve_types

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import UserInfo

DEFAULT_SORT = "created_at-desc"

# Public sort field -> FileRecord column
SORT_KEYS: dict[str, str] = {
    "created_at": "created_at",
    "$createdAt": "created_at",
    "updated_at": "updated_at",
    "name": "name",
    "size": "size_bytes",
}


def parse_sort(token: str) -> SortSpec:
    """Parse a ``field-direction`` token such as ``name-asc``.

    An empty token gives the default ordering (newest first).
    """
    if not token:
        token = DEFAULT_SORT
    key, sep, direction = token.rpartition("-")
    if not sep:
        key, direction = token, "desc"
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort field: {key!r}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction!r}")
    return SortSpec(key=SORT_KEYS[key], descending=direction == "desc")


def build_file_query(
    actor: UserInfo,
    types: Iterable[str] = (),
    search_text: str = "",
    sort: str = DEFAULT_SORT,
    limit: int | None = None,
) -> FileQuery:
    """Files *actor* owns or is listed on, filtered, ordered and bounded."""
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")
    return FileQuery(
        user_id=actor.id,
        email=actor.email,
        types=resolve_types(types),
        search_text=search_text.strip(),
        sort=parse_sort(sort),
        limit=limit,
    )
