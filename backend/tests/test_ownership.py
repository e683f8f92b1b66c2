"""
ScanPlant Backend — Ownership Guard Unit Tests
================================================
"""

import pytest

from app.services.ownership import Caller, can_access


class TestCanAccess:

    def test_owner_has_access(self):
        assert can_access("alice", "alice", False) is True

    def test_other_user_denied(self):
        assert can_access("alice", "bob", False) is False

    def test_admin_has_access_to_anything(self):
        assert can_access("alice", "root", True) is True

    def test_admin_with_missing_owner(self):
        assert can_access(None, "root", True) is True

    def test_missing_owner_denied_for_regular_user(self):
        assert can_access(None, "bob", False) is False


class TestCaller:

    def test_delegates_to_guard(self):
        caller = Caller(user_id="bob")
        assert caller.can_access("bob")
        assert not caller.can_access("alice")

    def test_admin_caller(self):
        assert Caller(user_id="root", is_admin=True).can_access("alice")

    def test_caller_is_immutable(self):
        caller = Caller(user_id="bob")
        with pytest.raises(Exception):
            caller.user_id = "alice"
