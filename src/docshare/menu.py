"""ActionMenu — per-file action menu and confirmation dialog controller.

A pure state machine with no rendering.  The presentation layer reads
its attributes, calls its handlers, and re-renders from ``subscribe``
notifications::

    idle --choose--> selecting --menu_closed--> confirming
    confirming --confirm--> executing --ok--> idle
                                      --error--> confirming
    selecting/confirming --cancel--> idle

``download`` never opens the dialog: ``choose`` returns its URL and the
menu stays idle.  ``menu_closed`` is the presentation layer's signal
that the menu's closing animation finished, so the dialog never opens
on top of it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, assert_never

from docshare.fs.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    DocShareError,
    FileTooLargeError,
    MenuStateError,
    RecordNotFoundError,
    StorageError,
)
from docshare.fs.permissions import Action, allowed_actions
from docshare.fs.sharing import ShareMode
from docshare.fs.utils import normalize_emails, split_emails

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from docshare.fs.service import FileService
    from docshare.fs.types import FileInfo, UserInfo

logger = logging.getLogger(__name__)


class MenuState(Enum):
    """Where the menu/dialog pair currently is."""

    IDLE = "idle"
    SELECTING = "selecting"
    CONFIRMING = "confirming"
    EXECUTING = "executing"


@dataclass(frozen=True, slots=True)
class ActionIntent:
    """An action chosen from the menu, bound to who chose it and on what."""

    action: Action
    actor: UserInfo
    file: FileInfo


_MESSAGES: dict[type[BaseException], str] = {
    AuthenticationRequiredError: "Your session has expired. Please sign in again.",
    RecordNotFoundError: "This file no longer exists.",
    AccessDeniedError: "You don't have permission to do that.",
    FileTooLargeError: "This file is too large.",
    StorageError: "Something went wrong on our side. Please try again.",
    ValueError: "Please check your input and try again.",
}

_FALLBACK_MESSAGE = "Something went wrong. Please try again."


def user_message(exc: BaseException) -> str:
    """Generic, human-readable message for a failure kind."""
    for cls in type(exc).__mro__:
        if cls in _MESSAGES:
            return _MESSAGES[cls]
    return _FALLBACK_MESSAGE


class ActionMenu:
    """Controller for one file's action menu.

    Attributes:
        file: The file as last known; replaced by the service's result
            after each successful mutation.
        state: Current ``MenuState``.
        intent: The action being confirmed or executed, if any.
        menu_open: Whether the trigger menu is shown.
        dialog_open: Whether the confirmation dialog is shown.
        name: Pending rename input.
        emails: Pending share input.
        error: Message for the last failure, shown in the open dialog.
        deleted: True once the file was deleted through this menu.
    """

    def __init__(
        self,
        service: FileService,
        file: FileInfo,
        current_user: UserInfo | None,
        path: str = "/",
    ) -> None:
        self._service = service
        self.file = file
        self.current_user = current_user
        self.path = path

        self.state = MenuState.IDLE
        self.intent: ActionIntent | None = None
        self.menu_open = False
        self.dialog_open = False
        self.name = file.name
        self.emails: list[str] = []
        self.error: str | None = None
        self.deleted = False

        self._listeners: list[Callable[[ActionMenu], None]] = []
        self._disposed = False

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def visible_actions(self) -> list[Action]:
        """Menu items worth offering.  The service re-checks regardless."""
        if self.current_user is None or self.deleted:
            return []
        return allowed_actions(self.file, self.current_user)

    @property
    def is_loading(self) -> bool:
        return self.state is MenuState.EXECUTING

    @property
    def confirm_enabled(self) -> bool:
        return (
            self.state is MenuState.CONFIRMING
            and self.intent is not None
            and self.intent.action is not Action.VIEW_DETAILS
        )

    # ------------------------------------------------------------------
    # Adapter hook
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[[ActionMenu], None]) -> Callable[[], None]:
        """Call *listener* after every transition. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def open_menu(self) -> None:
        if self.state is not MenuState.IDLE:
            raise MenuStateError(f"Cannot open the menu while {self.state.value}")
        self.menu_open = True
        self._notify()

    def choose(self, action: Action | str) -> str | None:
        """Pick a menu item, by ``Action`` or by its tag.

        Returns the download URL for ``download``, otherwise ``None``.
        """
        action = Action(action)
        if self.state is not MenuState.IDLE:
            raise MenuStateError(f"Cannot choose an action while {self.state.value}")
        if self.current_user is None:
            raise AuthenticationRequiredError("User not found: sign in to continue")
        if action not in self.visible_actions:
            raise AccessDeniedError(f"Action not available: {action.value}")

        self.menu_open = False
        if not action.requires_confirmation:
            url = self._service.download_url(self.file)
            self._notify()
            return url

        self.intent = ActionIntent(action=action, actor=self.current_user, file=self.file)
        self.state = MenuState.SELECTING
        self.error = None
        self._notify()
        return None

    def menu_closed(self) -> None:
        """Menu close animation finished; open the dialog if one is pending."""
        if self.state is not MenuState.SELECTING:
            return
        self.state = MenuState.CONFIRMING
        self.dialog_open = True
        self._notify()

    def set_name(self, name: str) -> None:
        self._require_editable()
        self.name = name
        self._notify()

    def set_emails(self, emails: Iterable[str] | str) -> None:
        """Set the share input from a list or a comma separated string."""
        self._require_editable()
        if isinstance(emails, str):
            self.emails = split_emails(emails)
        else:
            self.emails = normalize_emails(emails)
        self._notify()

    def cancel(self) -> None:
        """Dismiss the dialog (or menu) and drop any pending input."""
        if self.state is MenuState.EXECUTING:
            raise MenuStateError("Cannot cancel while executing")
        self._reset()

    def dispose(self) -> None:
        """The widget went away.  Results still in flight are discarded."""
        self._disposed = True
        self._listeners.clear()

    async def confirm(self) -> bool:
        """Run the pending action.

        Returns True on success.  On a ``DocShareError`` (or invalid
        input) the dialog stays open with its input and ``error`` set,
        and False is returned.  Anything else propagates after the
        dialog is re-enabled.
        """
        if not self.confirm_enabled or self.intent is None:
            raise MenuStateError(f"Nothing to confirm while {self.state.value}")

        intent = self.intent
        self.state = MenuState.EXECUTING
        self.error = None
        self._notify()

        try:
            updated = await self._execute(intent)
        except (DocShareError, ValueError) as exc:
            logger.info("%s on %s failed: %s", intent.action.value, intent.file.id, exc)
            if not self._disposed:
                self.state = MenuState.CONFIRMING
                self.error = user_message(exc)
                self._notify()
            return False
        except BaseException:
            if not self._disposed:
                self.state = MenuState.CONFIRMING
                self._notify()
            raise

        if self._disposed:
            logger.debug("Menu for %s disposed; discarding result", intent.file.id)
            return True

        if intent.action is Action.DELETE:
            self.deleted = True
        elif updated is not None:
            self.file = updated
        self._reset()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _execute(self, intent: ActionIntent) -> FileInfo | None:
        service = self._service
        action = intent.action
        file = intent.file

        if action is Action.RENAME:
            renamed = await service.rename(
                intent.actor, file.id, self.name, file.extension, path=self.path
            )
            return renamed.file
        if action is Action.SHARE:
            shared = await service.update_sharing(
                intent.actor, file.id, self.emails, mode=ShareMode.APPEND, path=self.path
            )
            return shared.file
        if action is Action.REMOVE_SELF:
            removed = await service.remove_self(intent.actor, file.id, path=self.path)
            return removed.file
        if action is Action.DELETE:
            await service.delete(intent.actor, file.id, file.blob_id, path=self.path)
            return None
        if action is Action.VIEW_DETAILS or action is Action.DOWNLOAD:
            raise MenuStateError(f"{action.value} has no confirmation step")
        assert_never(action)

    def _require_editable(self) -> None:
        if self.state is MenuState.EXECUTING:
            raise MenuStateError("Input is locked while executing")

    def _reset(self) -> None:
        self.state = MenuState.IDLE
        self.intent = None
        self.menu_open = False
        self.dialog_open = False
        self.name = self.file.name
        self.emails = []
        self.error = None
        self._notify()
