"""
User GraphQL type definitions
"""

from __future__ import annotations

from datetime import datetime

import strawberry

from ...repository.base import Role, UserRecord

strawberry.enum(Role, description="Role held by a user.")


@strawberry.type
class User:
    """User type for GraphQL API. The password hash is never part of it."""

    id: strawberry.ID
    username: str
    email: str
    first_name: str
    last_name: str
    age: int | None
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    def full_name(self) -> str:
        """First and last name, derived from the stored names on every read."""
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_record(cls, record: UserRecord) -> User:
        return cls(
            id=strawberry.ID(str(record.id)),
            username=record.username,
            email=record.email,
            first_name=record.first_name,
            last_name=record.last_name,
            age=record.age,
            role=record.role,
            is_active=record.is_active,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@strawberry.type
class AuthPayload:
    token: str
    user: User


@strawberry.type
class UserConnection:
    """One page of a user listing."""

    users: list[User]
    total_count: int
    has_next_page: bool
    has_previous_page: bool


@strawberry.type
class DeleteResponse:
    success: bool
    message: str


@strawberry.type
class UserStats:
    total_users: int
    active_users: int
    inactive_users: int
    admin_users: int
    moderator_users: int
    regular_users: int
