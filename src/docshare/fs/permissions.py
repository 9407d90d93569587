"""Action enum and per-file permission rules.

Rules are evaluated against a file snapshot and the acting user only.
Callers that mutate must evaluate against a freshly loaded record, not
a snapshot the client handed them.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, assert_never

from .exceptions import AccessDeniedError

if TYPE_CHECKING:
    from .types import FileInfo, UserInfo


class Action(str, Enum):
    """Actions offered on a single file, in menu order."""

    RENAME = "rename"
    VIEW_DETAILS = "view-details"
    SHARE = "share"
    REMOVE_SELF = "remove-self"
    DOWNLOAD = "download"
    DELETE = "delete"

    @property
    def requires_confirmation(self) -> bool:
        """Everything except download opens a dialog first."""
        return self is not Action.DOWNLOAD

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS: dict[Action, str] = {
    Action.RENAME: "Rename",
    Action.VIEW_DETAILS: "Details",
    Action.SHARE: "Share",
    Action.REMOVE_SELF: "Remove",
    Action.DOWNLOAD: "Download",
    Action.DELETE: "Delete",
}


def is_owner(file: FileInfo, actor: UserInfo) -> bool:
    return actor.email == file.owner.email


def can_view(file: FileInfo, actor: UserInfo) -> bool:
    """True if *actor* owns *file* or is on its authorized-user list."""
    return is_owner(file, actor) or actor.email in file.authorized_users


def can_perform(action: Action | str, file: FileInfo, actor: UserInfo) -> bool:
    """Decide whether *actor* may perform *action* on *file*.

    *action* may be given as its tag, e.g. ``"remove-self"``; unknown
    tags raise ``ValueError``.
    """
    action = Action(action)
    if action is Action.RENAME or action is Action.DELETE or action is Action.SHARE:
        return is_owner(file, actor)
    if action is Action.REMOVE_SELF:
        return not is_owner(file, actor) and actor.email in file.authorized_users
    if action is Action.DOWNLOAD or action is Action.VIEW_DETAILS:
        return True
    assert_never(action)


def allowed_actions(file: FileInfo, actor: UserInfo) -> list[Action]:
    """Actions *actor* may perform on *file*, in menu order."""
    return [action for action in Action if can_perform(action, file, actor)]


def require_permission(action: Action | str, file: FileInfo, actor: UserInfo) -> None:
    """Raise ``AccessDeniedError`` unless *actor* may perform *action*."""
    action = Action(action)
    if not can_perform(action, file, actor):
        raise AccessDeniedError(
            f"Access denied: {actor.email!r} may not {action.value} {file.name!r}"
        )
