"""
Unit tests for the resolver access policy
"""

import uuid

import pytest

from userhub.auth.context import AuthContext
from userhub.errors import ForbiddenError, UnauthenticatedError
from userhub.graphql.access_control import (
    ensure_not_self,
    parse_user_id,
    require_authenticated,
    require_elevated,
)
from userhub.repository import Role


class TestRequireAuthenticated:
    def test_anonymous_is_rejected(self):
        with pytest.raises(UnauthenticatedError, match="You must be logged in"):
            require_authenticated(AuthContext.anonymous())

    @pytest.mark.parametrize("role", list(Role))
    def test_any_role_passes(self, role, make_record):
        user = make_record(role=role)

        assert require_authenticated(AuthContext(user=user)) is user


class TestRequireElevated:
    def test_admin_passes(self, make_record):
        admin = make_record(role=Role.ADMIN)

        assert require_elevated(AuthContext(user=admin)) is admin

    @pytest.mark.parametrize("role", [Role.USER, Role.MODERATOR])
    def test_other_roles_are_forbidden(self, role, make_record):
        with pytest.raises(ForbiddenError, match="You must be an admin"):
            require_elevated(AuthContext(user=make_record(role=role)))

    def test_anonymous_is_unauthenticated_not_forbidden(self):
        with pytest.raises(UnauthenticatedError):
            require_elevated(AuthContext.anonymous())


class TestEnsureNotSelf:
    def test_self_target_is_forbidden(self, make_record):
        admin = make_record(role=Role.ADMIN)

        with pytest.raises(ForbiddenError, match="no touching"):
            ensure_not_self(admin, admin.id, "no touching")

    def test_other_target_passes(self, make_record):
        ensure_not_self(make_record(role=Role.ADMIN), uuid.uuid4(), "no touching")

    def test_unparseable_target_passes(self, make_record):
        ensure_not_self(make_record(role=Role.ADMIN), None, "no touching")


class TestParseUserId:
    def test_parses_uuid(self):
        value = uuid.uuid4()

        assert parse_user_id(str(value)) == value

    @pytest.mark.parametrize("raw", ["", "42", "not-a-uuid", "507f1f77bcf86cd799439011"])
    def test_malformed_ids_parse_to_none(self, raw):
        assert parse_user_id(raw) is None
