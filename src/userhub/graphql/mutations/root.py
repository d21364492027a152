"""
Root GraphQL mutation definitions
"""

import strawberry

from ...repository.base import Role
from ..types.user import AuthPayload, DeleteResponse, User


# Input types for mutations
@strawberry.input
class RegisterInput:
    """Input for creating an account."""

    username: str
    email: str
    password: str
    first_name: str
    last_name: str
    age: int | None = None


@strawberry.input
class LoginInput:
    email: str
    password: str


@strawberry.input
class UpdateUserInput:
    """Input for updating a user. Omitted fields are left unchanged."""

    username: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None
    role: Role | None = None
    is_active: bool | None = None


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Auth mutations
    @strawberry.mutation
    async def register(self, info: strawberry.Info, input: RegisterInput) -> AuthPayload:
        """Create an account and return a token for it."""
        from ..resolvers.auth import register

        return await register(info, input)

    @strawberry.mutation
    async def login(self, info: strawberry.Info, input: LoginInput) -> AuthPayload:
        """Exchange an email and password for a token."""
        from ..resolvers.auth import login

        return await login(info, input)

    # User mutations
    @strawberry.mutation(name="updateProfile")
    async def update_profile(self, info: strawberry.Info, input: UpdateUserInput) -> User:
        """Update the current user's own profile."""
        from ..resolvers.user import update_profile

        return await update_profile(info, input)

    @strawberry.mutation(name="updateUser")
    async def update_user(
        self, info: strawberry.Info, id: strawberry.ID, input: UpdateUserInput
    ) -> User:
        """Update any user (admin only)."""
        from ..resolvers.user import update_user

        return await update_user(info, id, input)

    @strawberry.mutation(name="deleteUser")
    async def delete_user(self, info: strawberry.Info, id: strawberry.ID) -> DeleteResponse:
        """Delete a user (admin only)."""
        from ..resolvers.user import delete_user

        return await delete_user(info, id)

    @strawberry.mutation(name="activateUser")
    async def activate_user(self, info: strawberry.Info, id: strawberry.ID) -> User:
        from ..resolvers.user import activate_user

        return await activate_user(info, id)

    @strawberry.mutation(name="deactivateUser")
    async def deactivate_user(self, info: strawberry.Info, id: strawberry.ID) -> User:
        from ..resolvers.user import deactivate_user

        return await deactivate_user(info, id)

    @strawberry.mutation(name="changeUserRole")
    async def change_user_role(self, info: strawberry.Info, id: strawberry.ID, role: Role) -> User:
        """Set a user's role (admin only)."""
        from ..resolvers.user import change_user_role

        return await change_user_role(info, id, role)
