"""Tests for sharing set reconciliation."""

from __future__ import annotations

import pytest

from docshare.fs.exceptions import AccessDeniedError
from docshare.fs.sharing import ReconcileResult, ShareMode, reconcile

OWNER = "o@x.com"


# ---------------------------------------------------------------------------
# Owner edits
# ---------------------------------------------------------------------------


class TestOwner:
    def test_append_strips_owner(self):
        result = reconcile([], ["a@x.com", OWNER], OWNER, OWNER, ShareMode.APPEND)
        assert result == ReconcileResult(users=("a@x.com",), changed=True)

    def test_append_keeps_existing_order(self):
        result = reconcile(
            ["b@x.com", "a@x.com"], ["c@x.com", "a@x.com"], OWNER, OWNER, ShareMode.APPEND
        )
        assert result.users == ("b@x.com", "a@x.com", "c@x.com")
        assert result.changed

    def test_overwrite_replaces(self):
        result = reconcile(["a@x.com", "b@x.com"], ["c@x.com"], OWNER, OWNER, ShareMode.OVERWRITE)
        assert result.users == ("c@x.com",)

    def test_overwrite_to_empty(self):
        result = reconcile(["a@x.com"], [], OWNER, OWNER, ShareMode.OVERWRITE)
        assert result == ReconcileResult(users=(), changed=True)

    def test_adding_only_self_is_silent_noop(self):
        result = reconcile(["a@x.com"], [OWNER], OWNER, OWNER, ShareMode.APPEND)
        assert result == ReconcileResult(users=("a@x.com",), changed=False)

    @pytest.mark.parametrize("mode", list(ShareMode))
    def test_owner_never_in_result(self, mode: ShareMode):
        result = reconcile(["a@x.com"], [OWNER, "b@x.com", OWNER], OWNER, OWNER, mode)
        assert OWNER not in result.users

    def test_duplicates_collapsed(self):
        result = reconcile([], ["a@x.com", "a@x.com"], OWNER, OWNER)
        assert result.users == ("a@x.com",)


# ---------------------------------------------------------------------------
# Idempotence
# ---------------------------------------------------------------------------


class TestNoOp:
    @pytest.mark.parametrize("actor", [OWNER, "a@x.com", "b@x.com"])
    def test_same_list_append_is_noop(self, actor: str):
        existing = ["a@x.com", "b@x.com"]
        result = reconcile(existing, existing, OWNER, actor, ShareMode.APPEND)
        assert result == ReconcileResult(users=("a@x.com", "b@x.com"), changed=False)

    def test_reordered_overwrite_is_noop(self):
        result = reconcile(
            ["a@x.com", "b@x.com"], ["b@x.com", "a@x.com"], OWNER, OWNER, ShareMode.OVERWRITE
        )
        assert not result.changed
        assert result.users == ("a@x.com", "b@x.com")

    def test_empty_append_is_noop(self):
        assert not reconcile(["a@x.com"], [], OWNER, OWNER, ShareMode.APPEND).changed


# ---------------------------------------------------------------------------
# Non-owner edits
# ---------------------------------------------------------------------------


class TestNonOwner:
    def test_remove_self(self):
        result = reconcile(
            ["a@x.com", "b@x.com"], ["b@x.com"], OWNER, "a@x.com", ShareMode.OVERWRITE
        )
        assert result == ReconcileResult(users=("b@x.com",), changed=True)

    def test_remove_self_with_owner_in_proposal(self):
        result = reconcile(
            ["a@x.com", "b@x.com"], ["b@x.com", OWNER], OWNER, "a@x.com", ShareMode.OVERWRITE
        )
        assert result.users == ("b@x.com",)

    def test_removing_other_forbidden(self):
        with pytest.raises(AccessDeniedError, match="only remove themself"):
            reconcile(
                ["a@x.com", "b@x.com"], ["c@x.com"], OWNER, "a@x.com", ShareMode.OVERWRITE
            )

    def test_removing_other_but_keeping_self_forbidden(self):
        with pytest.raises(AccessDeniedError):
            reconcile(
                ["a@x.com", "b@x.com"], ["a@x.com"], OWNER, "a@x.com", ShareMode.OVERWRITE
            )

    def test_adding_other_forbidden(self):
        with pytest.raises(AccessDeniedError):
            reconcile(["a@x.com"], ["c@x.com"], OWNER, "a@x.com", ShareMode.APPEND)

    def test_unlisted_actor_forbidden(self):
        with pytest.raises(AccessDeniedError, match="not allowed to modify"):
            reconcile(["a@x.com"], ["a@x.com"], OWNER, "z@x.com", ShareMode.APPEND)


class TestShareMode:
    def test_from_string(self):
        assert ShareMode("append") is ShareMode.APPEND
        assert ShareMode("overwrite") is ShareMode.OVERWRITE
