"""
Root GraphQL query definitions
"""

import strawberry

from ...repository.base import Role
from ..access_control import SortOrder
from ..types.user import User, UserConnection, UserStats


@strawberry.input
class UserFilterInput:
    """Predicates for listing users. Username and email match as substrings."""

    username: str | None = None
    email: str | None = None
    role: Role | None = None
    is_active: bool | None = None
    age_min: int | None = None
    age_max: int | None = None


@strawberry.input
class UserSortInput:
    """Sort key, e.g. ``createdAt`` or ``username``."""

    field: str = "createdAt"
    order: SortOrder = SortOrder.DESC


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.auth import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def users(
        self,
        info: strawberry.Info,
        filter: UserFilterInput | None = None,
        sort: UserSortInput | None = None,
        limit: int | None = 10,
        offset: int | None = 0,
    ) -> UserConnection:
        """List users one page at a time."""
        from ...config import settings
        from ..resolvers.user import resolve_users

        return await resolve_users(
            info,
            filter,
            sort,
            limit if limit is not None else settings.default_page_size,
            offset if offset is not None else 0,
        )

    @strawberry.field
    async def user(self, info: strawberry.Info, id: strawberry.ID) -> User | None:
        """Get a user by ID."""
        from ..resolvers.user import resolve_user_by_id

        return await resolve_user_by_id(info, id)

    @strawberry.field(name="searchUsers")
    async def search_users(self, info: strawberry.Info, query: str) -> list[User]:
        """Search usernames, emails and names."""
        from ..resolvers.user import resolve_search_users

        return await resolve_search_users(info, query)

    @strawberry.field(name="userStats")
    async def user_stats(self, info: strawberry.Info) -> UserStats:
        """Counts of users by state and role."""
        from ..resolvers.user import resolve_user_stats

        return await resolve_user_stats(info)
