"""
Tests for the role-based access gate.
"""
import pytest

from clubhq.access import Operation, is_allowed, require
from clubhq.errors import AuthorizationError
from clubhq.models.enums import UserRole

ALL_ROLES = [None, "applicant", "member", "admin", "super_admin"]


class TestIsAllowed:
    """Pure allow/deny decisions."""

    @pytest.mark.parametrize("role", ALL_ROLES + ["bogus"])
    def test_read_public_always_allowed(self, role):
        assert is_allowed(role, Operation.READ_PUBLIC)

    @pytest.mark.parametrize("role", ["admin", "super_admin", UserRole.ADMIN])
    def test_moderators_may_moderate_and_read_all(self, role):
        assert is_allowed(role, Operation.MODERATE, "project")
        assert is_allowed(role, Operation.READ_ALL, "project")

    @pytest.mark.parametrize("role", [None, "applicant", "member", "bogus"])
    def test_others_may_not_moderate(self, role):
        assert not is_allowed(role, Operation.MODERATE, "project")
        assert not is_allowed(role, Operation.READ_ALL, "project")

    def test_manage_users_is_super_admin_only(self):
        assert is_allowed("super_admin", Operation.MANAGE_USERS)
        for role in [None, "applicant", "member", "admin"]:
            assert not is_allowed(role, Operation.MANAGE_USERS)

    @pytest.mark.parametrize("role", ["applicant", "member", "admin", "super_admin"])
    def test_signed_in_roles_may_create_and_read_own(self, role):
        assert is_allowed(role, Operation.CREATE, "gallery")
        assert is_allowed(role, Operation.READ_OWN, "gallery")

    def test_anonymous_create_limited_to_public_forms(self):
        assert is_allowed(None, Operation.CREATE, "registration")
        assert is_allowed(None, Operation.CREATE, "contact")
        assert not is_allowed(None, Operation.CREATE, "project")
        assert not is_allowed(None, Operation.CREATE, "gallery")
        assert not is_allowed(None, Operation.READ_OWN, "gallery")

    def test_anonymous_may_sign_up_for_events(self):
        assert is_allowed(None, Operation.CREATE, "event_registration")

    @pytest.mark.parametrize("kind", ["event", "notice"])
    def test_events_and_notices_created_by_moderators_only(self, kind):
        assert is_allowed("admin", Operation.CREATE, kind)
        assert is_allowed("super_admin", Operation.CREATE, kind)
        for role in [None, "applicant", "member", "bogus"]:
            assert not is_allowed(role, Operation.CREATE, kind)

    def test_unknown_role_denied(self):
        assert not is_allowed("moderator", Operation.CREATE, "registration")
        assert not is_allowed("moderator", Operation.READ_OWN)

    def test_unknown_operation_denied(self):
        assert not is_allowed("super_admin", "publish")


class TestRequire:

    def test_require_passes(self):
        assert require("admin", Operation.MODERATE, "news") is None

    def test_require_raises_with_details(self):
        with pytest.raises(AuthorizationError) as exc_info:
            require("member", Operation.MODERATE, "news")
        err = exc_info.value
        assert err.status_code == 403
        assert err.details == {"operation": "moderate", "role": "member", "kind": "news"}
