"""
Tests for the user listing, lookup, search and stats queries
"""

import asyncio
import uuid

import pytest

from userhub.errors import ForbiddenError, NotFoundError, UnauthenticatedError, UserInputError
from userhub.repository import Role

USERS = """
query Users($filter: UserFilterInput, $sort: UserSortInput, $limit: Int, $offset: Int) {
  users(filter: $filter, sort: $sort, limit: $limit, offset: $offset) {
    users { username age }
    totalCount
    hasNextPage
    hasPreviousPage
  }
}
"""

USER = "query User($id: ID!) { user(id: $id) { id username email fullName } }"

SEARCH = "query Search($q: String!) { searchUsers(query: $q) { username } }"

STATS = """
query {
  userStats {
    totalUsers activeUsers inactiveUsers adminUsers moderatorUsers regularUsers
  }
}
"""


@pytest.fixture
def populate(create_user):
    async def _populate(count: int, **overrides):
        created = []
        for i in range(count):
            created.append(await create_user(f"member{i:02d}", **overrides))
            await asyncio.sleep(0.002)
        return created

    return _populate


class TestUsers:
    @pytest.mark.asyncio
    async def test_anonymous_is_unauthenticated(self, execute):
        result = await execute(USERS)

        assert isinstance(result.errors[0].original_error, UnauthenticatedError)

    @pytest.mark.asyncio
    async def test_defaults_to_ten_newest_first(self, execute, populate):
        created = await populate(12)

        result = await execute(USERS, as_user=created[0])

        page = result.data["users"]
        assert [u["username"] for u in page["users"]] == [
            f"member{i:02d}" for i in range(11, 1, -1)
        ]
        assert page["totalCount"] == 12
        assert page["hasNextPage"] is True
        assert page["hasPreviousPage"] is False

    @pytest.mark.asyncio
    async def test_offset_window(self, execute, populate):
        created = await populate(12)

        result = await execute(USERS, {"limit": 5, "offset": 10}, as_user=created[0])

        page = result.data["users"]
        assert [u["username"] for u in page["users"]] == ["member01", "member00"]
        assert page["hasNextPage"] is False
        assert page["hasPreviousPage"] is True

    @pytest.mark.parametrize("field", ["username", "firstName", "first_name"])
    @pytest.mark.asyncio
    async def test_sort_accepts_camel_and_snake_case(self, execute, populate, field):
        created = await populate(3)

        result = await execute(
            USERS, {"sort": {"field": field, "order": "ASC"}}, as_user=created[0]
        )

        assert result.errors is None
        assert [u["username"] for u in result.data["users"]["users"]] == [
            "member00",
            "member01",
            "member02",
        ]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_is_bad_input(self, execute, alice):
        result = await execute(
            USERS, {"sort": {"field": "passwordHash", "order": "ASC"}}, as_user=alice
        )

        error = result.errors[0]
        assert isinstance(error.original_error, UserInputError)
        assert error.extensions == {"code": "BAD_USER_INPUT"}

    @pytest.mark.parametrize("variables", [{"offset": -1}, {"limit": -5}])
    @pytest.mark.asyncio
    async def test_negative_window_is_bad_input(self, execute, alice, variables):
        result = await execute(USERS, variables, as_user=alice)

        assert isinstance(result.errors[0].original_error, UserInputError)

    @pytest.mark.asyncio
    async def test_filter_by_role_and_age(self, execute, create_user, alice, admin):
        await create_user("teen", age=15)

        by_role = await execute(USERS, {"filter": {"role": "ADMIN"}}, as_user=alice)
        by_age = await execute(
            USERS, {"filter": {"ageMin": 18, "ageMax": 40}}, as_user=alice
        )

        assert [u["username"] for u in by_role.data["users"]["users"]] == ["admin"]
        assert [u["username"] for u in by_age.data["users"]["users"]] == ["alice"]

    @pytest.mark.asyncio
    async def test_empty_text_filter_is_ignored(self, execute, alice, admin):
        result = await execute(USERS, {"filter": {"username": ""}}, as_user=alice)

        assert result.data["users"]["totalCount"] == 2


class TestUser:
    @pytest.mark.asyncio
    async def test_returns_user(self, execute, alice, admin):
        result = await execute(USER, {"id": str(admin.id)}, as_user=alice)

        assert result.data["user"] == {
            "id": str(admin.id),
            "username": "admin",
            "email": "admin@example.com",
            "fullName": "Admin Tester",
        }

    @pytest.mark.parametrize("make_id", [lambda: str(uuid.uuid4()), lambda: "not-an-id"])
    @pytest.mark.asyncio
    async def test_unknown_or_malformed_id_is_not_found(self, execute, alice, make_id):
        result = await execute(USER, {"id": make_id()}, as_user=alice)

        error = result.errors[0]
        assert isinstance(error.original_error, NotFoundError)
        assert error.message == "User not found"
        assert error.extensions == {"code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_full_name_reflects_latest_names(self, execute, repository, alice):
        from userhub.repository import UserChanges

        await repository.update_by_id(alice.id, UserChanges(last_name="Liddell"))

        result = await execute(USER, {"id": str(alice.id)}, as_user=alice)

        assert result.data["user"]["fullName"] == "Alice Liddell"


class TestSearchUsers:
    @pytest.mark.asyncio
    async def test_matches_names_and_emails(self, execute, create_user, alice):
        await create_user("bob", first_name="Smithers")
        await create_user("carol", email="carol.smith@example.com")

        result = await execute(SEARCH, {"q": "smith"}, as_user=alice)

        assert sorted(u["username"] for u in result.data["searchUsers"]) == ["bob", "carol"]

    @pytest.mark.asyncio
    async def test_capped_at_twenty(self, execute, populate):
        created = await populate(25)

        result = await execute(SEARCH, {"q": "member"}, as_user=created[0])

        assert len(result.data["searchUsers"]) == 20

    @pytest.mark.asyncio
    async def test_anonymous_is_unauthenticated(self, execute):
        result = await execute(SEARCH, {"q": "a"})

        assert isinstance(result.errors[0].original_error, UnauthenticatedError)


class TestUserStats:
    @pytest.mark.asyncio
    async def test_counts(self, execute, create_user, admin, moderator, populate):
        await populate(3)
        for name in ("idle1", "idle2"):
            await create_user(name, is_active=False)

        result = await execute(STATS, as_user=admin)

        assert result.errors is None
        assert result.data["userStats"] == {
            "totalUsers": 7,
            "activeUsers": 5,
            "inactiveUsers": 2,
            "adminUsers": 1,
            "moderatorUsers": 1,
            "regularUsers": 5,
        }

    @pytest.mark.parametrize("role", [Role.USER, Role.MODERATOR])
    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self, execute, create_user, role):
        caller = await create_user("caller", role=role)

        result = await execute(STATS, as_user=caller)

        error = result.errors[0]
        assert isinstance(error.original_error, ForbiddenError)
        assert error.message == "You must be an admin to perform this action"
        assert error.extensions == {"code": "FORBIDDEN"}
