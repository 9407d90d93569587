"""EventBus and event types for post-mutation view refresh."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Kinds of successful file mutations."""

    FILE_UPLOADED = "file_uploaded"
    FILE_RENAMED = "file_renamed"
    FILE_SHARED = "file_shared"
    FILE_DELETED = "file_deleted"


@dataclass(frozen=True, slots=True)
class FileEvent:
    """Immutable record of a completed mutation.

    Attributes:
        event_type: The kind of mutation that occurred.
        file_id: The affected file record.
        path: Navigational path whose rendered view is now stale.
        user_id: The acting user.
    """

    event_type: EventType
    file_id: str
    path: str
    user_id: str | None = None


class EventBus:
    """Dispatches mutation events to registered handlers.

    Handlers are called sequentially in registration order and may be
    plain callables or coroutine functions.  Exceptions are logged but
    never propagated: a failed refresh leaves a stale view, it does not
    fail the mutation that already happened.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[Callable[..., Any]]] = {et: [] for et in EventType}

    def register(self, event_type: EventType, handler: Callable[..., Any]) -> None:
        """Append *handler* to the list for *event_type*."""
        self._handlers[event_type].append(handler)

    def unregister(self, event_type: EventType, handler: Callable[..., Any]) -> bool:
        """Remove first occurrence of *handler*. Return True if found."""
        handlers = self._handlers[event_type]
        try:
            handlers.remove(handler)
            return True
        except ValueError:
            return False

    def subscribe_refresh(self, refresh: Callable[[str], Any]) -> None:
        """Call ``refresh(path)`` after every mutation, whatever its type."""

        def _handler(event: FileEvent) -> Any:
            return refresh(event.path)

        for event_type in EventType:
            self.register(event_type, _handler)

    async def emit(self, event: FileEvent) -> None:
        """Dispatch *event* to all registered handlers for its type."""
        for handler in self._handlers[event.event_type]:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning(
                    "Handler %r failed for %s on %s",
                    handler,
                    event.event_type.value,
                    event.path,
                    exc_info=True,
                )

    @property
    def handler_count(self) -> int:
        """Total number of registered handlers across all event types."""
        return sum(len(h) for h in self._handlers.values())

    def clear(self) -> None:
        """Remove all registered handlers."""
        for handlers in self._handlers.values():
            handlers.clear()
