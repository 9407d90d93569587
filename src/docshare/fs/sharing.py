"""Sharing set reconciliation.

Computes a file's next authorized-user list from the current list and a
proposed one.  Pure: no I/O, no session.  ``FileService`` persists the
result only when ``changed`` is true.

Rules:

- The owner's email is never listed; it is stripped from every proposal.
- ``append`` unions the proposal into the existing list, ``overwrite``
  replaces it.
- The owner may produce any list.  Anyone else must already be listed
  and may only remove themself: no additions, no removal of others.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .exceptions import AccessDeniedError


class ShareMode(str, Enum):
    """How a proposed email list is combined with the existing one."""

    APPEND = "append"
    OVERWRITE = "overwrite"


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of a reconciliation.

    Attributes:
        users: The resulting authorized-user list, in stable order.
        changed: False when ``users`` equals the existing list as a set.
    """

    users: tuple[str, ...]
    changed: bool


def reconcile(
    existing: Iterable[str],
    proposed: Iterable[str],
    owner_email: str,
    acting_email: str,
    mode: ShareMode = ShareMode.APPEND,
) -> ReconcileResult:
    """Reconcile *proposed* against *existing* for *acting_email*.

    Raises ``AccessDeniedError`` when a non-owner is not listed, or when
    the change is anything other than the non-owner removing themself.
    """
    current = list(dict.fromkeys(existing))
    stripped = [email for email in dict.fromkeys(proposed) if email != owner_email]

    if mode is ShareMode.OVERWRITE:
        candidate = stripped
    else:
        candidate = current + [email for email in stripped if email not in current]

    current_set = set(current)
    candidate_set = set(candidate)

    if acting_email != owner_email:
        if acting_email not in current_set:
            raise AccessDeniedError(
                f"Access denied: {acting_email!r} is not allowed to modify this file"
            )
        removed = current_set - candidate_set
        added = candidate_set - current_set
        if added or (removed and removed != {acting_email}):
            raise AccessDeniedError(
                f"Access denied: {acting_email!r} can only remove themself"
            )

    if candidate_set == current_set:
        return ReconcileResult(users=tuple(current), changed=False)
    return ReconcileResult(users=tuple(candidate), changed=True)
